# Selector compiler for xmlskim
# Supports tag names, the universal selector, [attr] and [attr=value]
# predicates, and the descendant (whitespace) and child (>) combinators.

from __future__ import annotations

from .errors import SelectorSyntaxError

DESCENDANT = " "
CHILD = ">"

_WHITESPACE = " \t\n\r\f"


# Token types for the selector lexer
class TokenType:
    TAG: str = "TAG"  # item, ns\:item
    UNIVERSAL: str = "UNIVERSAL"  # *
    ATTR_START: str = "ATTR_START"  # [
    ATTR_END: str = "ATTR_END"  # ]
    ATTR_OP: str = "ATTR_OP"  # =
    STRING: str = "STRING"  # "value" or 'value' or unquoted
    COMBINATOR: str = "COMBINATOR"  # > or whitespace (descendant)
    EOF: str = "EOF"


class Token:
    __slots__ = ("pos", "type", "value")

    type: str
    value: str | None
    pos: int

    def __init__(self, token_type: str, value: str | None = None, pos: int = 0) -> None:
        self.type = token_type
        self.value = value
        self.pos = pos

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value!r})"


class SelectorTokenizer:
    """Tokenizes a selector string into tokens."""

    __slots__ = ("length", "pos", "selector")

    selector: str
    pos: int
    length: int

    def __init__(self, selector: str) -> None:
        self.selector = selector
        self.pos = 0
        self.length = len(selector)

    def _error(self, code: str, pos: int, message: str | None = None) -> SelectorSyntaxError:
        return SelectorSyntaxError(code, pos, selector=self.selector, message=message)

    def _peek(self, offset: int = 0) -> str:
        pos = self.pos + offset
        if pos < self.length:
            return self.selector[pos]
        return ""

    def _skip_whitespace(self) -> None:
        while self.pos < self.length and self.selector[self.pos] in _WHITESPACE:
            self.pos += 1

    def _is_name_start(self, ch: str) -> bool:
        # Identifier start: letter, underscore, escape, or non-ASCII
        return ch.isalpha() or ch == "_" or ch == "\\" or ord(ch) > 127

    def _is_name_char(self, ch: str) -> bool:
        return self._is_name_start(ch) or ch.isdigit() or ch == "-"

    def _read_name(self) -> str:
        # A backslash escapes the next character, so names such as ns\:item
        # can target tags containing selector punctuation.
        parts: list[str] = []
        while self.pos < self.length:
            ch = self.selector[self.pos]
            if ch == "\\":
                if self.pos + 1 >= self.length:
                    raise self._error("unsupported-selector", self.pos, "Dangling escape at end of selector")
                parts.append(self.selector[self.pos + 1])
                self.pos += 2
                continue
            if not self._is_name_char(ch):
                break
            parts.append(ch)
            self.pos += 1
        return "".join(parts)

    def _read_string(self, quote: str) -> str:
        # Skip opening quote
        string_start = self.pos
        self.pos += 1
        start = self.pos
        parts: list[str] = []

        while self.pos < self.length:
            ch = self.selector[self.pos]
            if ch == quote:
                # Append any remaining text before the closing quote
                if self.pos > start:
                    parts.append(self.selector[start : self.pos])
                self.pos += 1
                return "".join(parts)
            if ch == "\\":
                # Append text before the backslash
                if self.pos > start:
                    parts.append(self.selector[start : self.pos])
                self.pos += 1
                if self.pos < self.length:
                    # Append the escaped character
                    parts.append(self.selector[self.pos])
                    self.pos += 1
                start = self.pos
            else:
                self.pos += 1

        raise self._error("unterminated-string", string_start)

    def _read_unquoted_attr_value(self) -> str:
        start = self.pos
        while self.pos < self.length:
            ch = self.selector[self.pos]
            if ch in _WHITESPACE or ch in "]\"'[":
                break
            self.pos += 1
        return self.selector[start : self.pos]

    def tokenize(self) -> list[Token]:
        tokens: list[Token] = []
        pending_whitespace = False

        while self.pos < self.length:
            ch = self.selector[self.pos]

            # Skip whitespace but remember it for combinator detection
            if ch in _WHITESPACE:
                pending_whitespace = True
                self._skip_whitespace()
                continue

            if ch == ">":
                pending_whitespace = False
                tokens.append(Token(TokenType.COMBINATOR, CHILD, self.pos))
                self.pos += 1
                self._skip_whitespace()
                continue

            # Whitespace followed by anything but '>' is a descendant combinator.
            # '>' consumes trailing whitespace, so pending_whitespace is always
            # False right after it.
            if pending_whitespace and tokens:
                tokens.append(Token(TokenType.COMBINATOR, DESCENDANT, self.pos))
            pending_whitespace = False

            if ch == "*":
                tokens.append(Token(TokenType.UNIVERSAL, None, self.pos))
                self.pos += 1
                continue

            if ch == "[":
                tokens.append(Token(TokenType.ATTR_START, None, self.pos))
                self.pos += 1
                self._skip_whitespace()

                name_pos = self.pos
                attr_name = self._read_name()
                if not attr_name:
                    raise self._error("expected-attribute-name", name_pos)
                tokens.append(Token(TokenType.TAG, attr_name, name_pos))  # Reuse TAG for attr name
                self._skip_whitespace()

                ch2 = self._peek()
                if ch2 == "]":
                    tokens.append(Token(TokenType.ATTR_END, None, self.pos))
                    self.pos += 1
                    continue

                if ch2 == "=":
                    tokens.append(Token(TokenType.ATTR_OP, "=", self.pos))
                    self.pos += 1
                elif ch2 in ("~", "|", "^", "$", "*"):
                    raise self._error("unsupported-attribute-operator", self.pos)
                elif ch2 == "":
                    raise self._error("expected-closing-bracket", self.pos)
                else:
                    raise self._error(
                        "unsupported-selector",
                        self.pos,
                        f"Unexpected character in attribute selector: {ch2!r}",
                    )

                self._skip_whitespace()

                value_pos = self.pos
                ch3 = self._peek()
                if ch3 == '"' or ch3 == "'":
                    value = self._read_string(ch3)
                else:
                    value = self._read_unquoted_attr_value()
                    if not value:
                        raise self._error("unsupported-selector", value_pos, "Expected attribute value after =")
                tokens.append(Token(TokenType.STRING, value, value_pos))

                self._skip_whitespace()
                if self._peek() != "]":
                    raise self._error("expected-closing-bracket", self.pos)
                tokens.append(Token(TokenType.ATTR_END, None, self.pos))
                self.pos += 1
                continue

            if self._is_name_start(ch):
                name_pos = self.pos
                tokens.append(Token(TokenType.TAG, self._read_name(), name_pos))
                continue

            # Classes, ids, pseudo-classes, sibling combinators and selector
            # lists all land here.
            raise self._error("unsupported-selector", self.pos, f"Unsupported character {ch!r}")

        tokens.append(Token(TokenType.EOF, None, self.length))
        return tokens


# Compiled selector types. All of them are immutable once built.


class AttributePredicate:
    """[name] when ``value`` is None, otherwise [name=value] (exact match)."""

    __slots__ = ("name", "value")

    name: str
    value: str | None

    def __init__(self, name: str, value: str | None = None) -> None:
        self.name = name
        self.value = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttributePredicate):
            return NotImplemented
        return self.name == other.name and self.value == other.value

    def __hash__(self) -> int:
        return hash((self.name, self.value))

    def __repr__(self) -> str:
        if self.value is None:
            return f"AttributePredicate({self.name!r})"
        return f"AttributePredicate({self.name!r}, {self.value!r})"


class CompoundSelector:
    """A tag name (None for any tag) plus attribute predicates, all tested on one node."""

    __slots__ = ("predicates", "tag")

    tag: str | None
    predicates: tuple[AttributePredicate, ...]

    def __init__(self, tag: str | None = None, predicates: tuple[AttributePredicate, ...] = ()) -> None:
        self.tag = tag
        self.predicates = tuple(predicates)

    @property
    def is_wildcard(self) -> bool:
        return self.tag is None and not self.predicates

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CompoundSelector):
            return NotImplemented
        return self.tag == other.tag and self.predicates == other.predicates

    def __hash__(self) -> int:
        return hash((self.tag, self.predicates))

    def __repr__(self) -> str:
        return f"CompoundSelector({self.tag!r}, {self.predicates!r})"


class SelectorChain:
    """Compound selectors joined by combinators, root-most first.

    ``parts`` is a tuple of (combinator, compound) pairs where the combinator
    joins the compound to the part before it; the first combinator is None.
    The last compound is tested against the current node.
    """

    __slots__ = ("parts", "source")

    parts: tuple[tuple[str | None, CompoundSelector], ...]
    source: str

    def __init__(self, parts: tuple[tuple[str | None, CompoundSelector], ...] = (), source: str = "") -> None:
        self.parts = tuple(parts)
        self.source = source

    def __len__(self) -> int:
        return len(self.parts)

    @property
    def specificity(self) -> tuple[int, int, int]:
        """(attribute predicates, named tags, chain length); larger is more specific."""
        predicates = sum(len(compound.predicates) for _, compound in self.parts)
        tags = sum(1 for _, compound in self.parts if compound.tag is not None)
        return (predicates, tags, len(self.parts))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SelectorChain):
            return NotImplemented
        return self.parts == other.parts

    def __hash__(self) -> int:
        return hash(self.parts)

    def __repr__(self) -> str:
        return f"SelectorChain({self.source!r})"


class SelectorParser:
    """Parses a list of tokens into a SelectorChain."""

    __slots__ = ("pos", "selector", "tokens")

    tokens: list[Token]
    pos: int
    selector: str

    def __init__(self, tokens: list[Token], selector: str = "") -> None:
        self.tokens = tokens
        self.pos = 0
        self.selector = selector

    def _peek(self) -> Token:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return Token(TokenType.EOF, None, len(self.selector))

    def _advance(self) -> Token:
        token = self._peek()
        self.pos += 1
        return token

    def _error(self, code: str, token: Token, message: str | None = None) -> SelectorSyntaxError:
        return SelectorSyntaxError(code, token.pos, selector=self.selector, message=message)

    def _expect(self, token_type: str) -> Token:
        token = self._peek()
        if token.type != token_type:
            raise self._error("unsupported-selector", token, f"Expected {token_type}, got {token.type}")
        return self._advance()

    def parse(self) -> SelectorChain:
        """Parse a complete selector chain."""
        parts: list[tuple[str | None, CompoundSelector]] = []

        first = self._parse_compound_selector()
        if first is None:
            raise self._error("unsupported-selector", self._peek(), "Selector cannot start with a combinator")
        parts.append((None, first))

        while self._peek().type == TokenType.COMBINATOR:
            combinator_token = self._advance()
            compound = self._parse_compound_selector()
            if compound is None:
                raise self._error("dangling-combinator", combinator_token)
            parts.append((combinator_token.value, compound))

        if self._peek().type != TokenType.EOF:
            token = self._peek()
            raise self._error("unsupported-selector", token, f"Unexpected token: {token}")

        return SelectorChain(tuple(parts), self.selector)

    def _parse_compound_selector(self) -> CompoundSelector | None:
        """Parse an optional tag name (or *) followed by attribute predicates."""
        tag: str | None = None
        seen_tag = False
        predicates: list[AttributePredicate] = []

        token = self._peek()
        if token.type == TokenType.TAG:
            self._advance()
            tag = token.value
            seen_tag = True
        elif token.type == TokenType.UNIVERSAL:
            self._advance()
            seen_tag = True

        while self._peek().type == TokenType.ATTR_START:
            predicates.append(self._parse_attribute_selector())

        if not seen_tag and not predicates:
            return None
        return CompoundSelector(tag, tuple(predicates))

    def _parse_attribute_selector(self) -> AttributePredicate:
        """Parse an attribute selector [attr] or [attr=value]."""
        self._expect(TokenType.ATTR_START)

        attr_name = self._expect(TokenType.TAG).value or ""

        token = self._peek()
        if token.type == TokenType.ATTR_END:
            self._advance()
            return AttributePredicate(attr_name)

        self._expect(TokenType.ATTR_OP)
        value = self._expect(TokenType.STRING).value or ""
        self._expect(TokenType.ATTR_END)

        return AttributePredicate(attr_name, value)


def compile_selector(selector_string: str) -> SelectorChain:
    """Compile a selector string into an immutable SelectorChain."""
    if not selector_string or not selector_string.strip():
        raise SelectorSyntaxError("empty-selector", 0, selector=selector_string)

    # Leading and trailing whitespace never produce a combinator, so the
    # string is tokenized as given and error offsets point into it.
    tokens = SelectorTokenizer(selector_string).tokenize()
    return SelectorParser(tokens, selector_string).parse()
