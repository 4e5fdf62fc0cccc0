import pytest

from xmlskim import (
    CHILD,
    DESCENDANT,
    AttributePredicate,
    CompoundSelector,
    SelectorChain,
    SelectorSyntaxError,
    compile_selector,
)
from xmlskim.selector import SelectorTokenizer, TokenType


def test_single_tag():
    chain = compile_selector("item")
    assert chain.parts == ((None, CompoundSelector("item")),)
    assert chain.source == "item"
    assert len(chain) == 1


def test_descendant_and_child_combinators():
    chain = compile_selector("a b > c")
    assert chain.parts == (
        (None, CompoundSelector("a")),
        (DESCENDANT, CompoundSelector("b")),
        (CHILD, CompoundSelector("c")),
    )


@pytest.mark.parametrize("selector", ["a>b", "a > b", "a  >\tb", "a\n>b"])
def test_child_combinator_whitespace_is_insignificant(selector):
    assert compile_selector(selector) == compile_selector("a > b")


def test_leading_and_trailing_whitespace_ignored():
    assert compile_selector("  a b  ") == compile_selector("a b")


def test_attribute_predicates():
    chain = compile_selector('item[id][type="book"]')
    compound = chain.parts[0][1]
    assert compound.tag == "item"
    assert compound.predicates == (AttributePredicate("id"), AttributePredicate("type", "book"))


@pytest.mark.parametrize(
    "selector",
    ['[type="a b"]', "[type='a b']", '[ type = "a b" ]'],
)
def test_quoted_values(selector):
    assert compile_selector(selector).parts[0][1].predicates == (AttributePredicate("type", "a b"),)


def test_unquoted_value():
    assert compile_selector("record[status=active]").parts[0][1].predicates == (
        AttributePredicate("status", "active"),
    )


def test_empty_quoted_value_is_kept():
    assert compile_selector('[x=""]').parts[0][1].predicates == (AttributePredicate("x", ""),)


def test_escaped_quote_in_value():
    assert compile_selector(r'[t="say \"hi\""]').parts[0][1].predicates == (AttributePredicate("t", 'say "hi"'),)


def test_attribute_only_and_universal_compounds():
    chain = compile_selector("* > [id]")
    assert chain.parts[0][1].is_wildcard
    assert chain.parts[1] == (CHILD, CompoundSelector(None, (AttributePredicate("id"),)))


def test_escaped_name_characters():
    assert compile_selector(r"soap\:Body").parts[0][1].tag == "soap:Body"


def test_names_keep_case_digits_and_dashes():
    assert compile_selector("Item-2").parts[0][1].tag == "Item-2"


def test_specificity_orders_predicates_before_tags_before_length():
    assert compile_selector("a[x]").specificity == (1, 1, 1)
    assert compile_selector("r a b").specificity == (0, 3, 3)
    assert compile_selector("* *").specificity == (0, 0, 2)
    assert compile_selector("a[x]").specificity > compile_selector("r a b").specificity


def test_chains_are_hashable_by_structure():
    assert len({compile_selector("a>b"), compile_selector("a > b")}) == 1
    assert isinstance(compile_selector("a"), SelectorChain)


def test_tokenizer_emits_descendant_only_between_compounds():
    types = [t.type for t in SelectorTokenizer(" a  b ").tokenize()]
    assert types == [TokenType.TAG, TokenType.COMBINATOR, TokenType.TAG, TokenType.EOF]


@pytest.mark.parametrize(
    "selector, code, offset",
    [
        ("", "empty-selector", 0),
        ("   ", "empty-selector", 0),
        ("a.b", "unsupported-selector", 1),
        ("#id", "unsupported-selector", 0),
        ("a:first-child", "unsupported-selector", 1),
        ("a, b", "unsupported-selector", 1),
        ("a + b", "unsupported-selector", 2),
        ("a ~ b", "unsupported-selector", 2),
        ("> a", "unsupported-selector", 0),
        ("a >", "dangling-combinator", 2),
        ("a > > b", "dangling-combinator", 2),
        ("[", "expected-attribute-name", 1),
        ("a[]", "expected-attribute-name", 2),
        ("a[x", "expected-closing-bracket", 3),
        ('a[x="1"', "expected-closing-bracket", 7),
        ('a[x="1', "unterminated-string", 4),
        ("a[x~=1]", "unsupported-attribute-operator", 3),
        ("a[x^=1]", "unsupported-attribute-operator", 3),
        ("a[x=]", "unsupported-selector", 4),
    ],
)
def test_invalid_selectors(selector, code, offset):
    with pytest.raises(SelectorSyntaxError) as excinfo:
        compile_selector(selector)
    assert excinfo.value.code == code
    assert excinfo.value.offset == offset
    assert excinfo.value.selector == selector


def test_selector_error_is_a_value_error():
    with pytest.raises(ValueError, match="in selector 'a.b'"):
        compile_selector("a.b")
