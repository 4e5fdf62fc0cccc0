import pytest

from xmlskim import Attributes, Node, SelectorMatcher, compile_selector, matches, skim


def _stack(*names, **attrs_by_name):
    nodes = []
    for depth, name in enumerate(names):
        attrs = Attributes(attrs_by_name.get(name, {}))
        nodes.append(Node(name, attrs, depth=depth))
    return nodes


def _fired(xml, selector):
    hits = []
    skim(xml, {selector: lambda node: hits.append(node.name)})
    return hits


DOC = "<a><b><c/></b></a>"


def test_descendant_fires_once():
    assert _fired(DOC, "a c") == ["c"]


def test_child_requires_direct_parent():
    assert _fired(DOC, "a > c") == []


def test_full_child_chain_fires_once():
    assert _fired(DOC, "a > b > c") == ["c"]


def test_descendant_fires_for_each_matching_node():
    assert _fired("<r><x><i/></x><i/><y><z><i/></z></y></r>", "r i") == ["i", "i", "i"]


def test_node_matches_regardless_of_how_many_ancestors_match():
    assert _fired("<a><a><c/></a></a>", "a c") == ["c"]


def test_mixed_chain_backtracks_past_nearest_ancestor():
    # The nearest b is not a child of a, a further one is
    stack = _stack("a", "b", "x", "b", "c")
    assert matches(stack, "a > b c")


def test_mixed_chain_without_valid_assignment():
    stack = _stack("a", "x", "b", "c")
    assert not matches(stack, "a > b c")


def test_child_then_descendant_needs_separate_ancestors():
    assert not matches(_stack("b", "c"), "b b c")
    assert matches(_stack("b", "b", "c"), "b b c")


def test_chain_longer_than_stack_fails():
    assert not matches(_stack("c"), "a b c")


def test_empty_stack_never_matches():
    assert not matches([], "a")


def test_attribute_presence_and_value():
    stack = _stack("item", item={"id": "7", "flag": None})
    assert matches(stack, "item[id]")
    assert matches(stack, "item[id=7]")
    assert matches(stack, '[id="7"][flag]')
    assert not matches(stack, "item[id=8]")
    assert not matches(stack, "item[missing]")


def test_value_comparison_is_exact():
    stack = _stack("item", item={"type": "Book "})
    assert not matches(stack, "item[type=book]")
    assert not matches(stack, 'item[type="Book"]')
    assert matches(stack, 'item[type="Book "]')


def test_boolean_attribute_does_not_equal_empty_string():
    stack = _stack("item", item={"flag": None})
    assert matches(stack, "[flag]")
    assert not matches(stack, '[flag=""]')


def test_empty_value_matches_empty_attribute():
    assert matches(_stack("item", item={"flag": ""}), '[flag=""]')


def test_tag_names_are_case_sensitive():
    assert not matches(_stack("Item"), "item")
    assert matches(_stack("Item"), "Item")


def test_universal_matches_any_tag():
    assert matches(_stack("r", "q"), "r > *")
    assert not matches(_stack("q"), "r > *")


@pytest.mark.parametrize(
    "selector, expected",
    [
        ("feed entry link[rel=alternate]", True),
        ("feed > entry > link", True),
        ("feed > link", False),
        ("entry link[rel=self]", False),
    ],
)
def test_compiled_chains_are_reusable(selector, expected):
    stack = _stack("feed", "entry", "link", link={"rel": "alternate"})
    matcher = SelectorMatcher()
    chain = compile_selector(selector)
    assert matcher.matches(chain, stack) is expected
    assert matcher.matches(chain, stack) is expected


class _CountingMatcher(SelectorMatcher):
    def __init__(self):
        self.compound_checks = 0

    def matches_compound(self, node, compound):
        self.compound_checks += 1
        return super().matches_compound(node, compound)


def test_failing_descendant_chain_on_deep_stack_is_bounded():
    stack = _stack(*(["n"] * 40), "x")
    chain = compile_selector("q " + "n " * 6 + "x")
    matcher = _CountingMatcher()
    assert not matcher.matches(chain, stack)
    # Every (chain position, ancestor) pair is tried at most once
    assert matcher.compound_checks <= len(chain) * len(stack) * len(stack)


def test_deep_descendant_chain_still_matches():
    stack = _stack("q", *(["n"] * 40), "x")
    assert matches(stack, "q " + "n " * 6 + "x")
    assert matches(stack, "q > n " + "n " * 5 + "n > x")
