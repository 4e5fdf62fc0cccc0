"""Error types and human-readable messages for skimming errors.

Every error carries a kebab-case code, a message produced by
``generate_error_message`` and the position in the source where it was
detected. Positions are 0-based character offsets, with 1-based line and
column derived from them when the source text is available.
"""

from __future__ import annotations


def generate_error_message(code: str, tag_name: str | None = None) -> str:
    """Generate human-readable error message from error code.

    Args:
        code: The error code string (kebab-case format)
        tag_name: Optional tag name to include in the message for context

    Returns:
        Human-readable error message string
    """
    messages = {
        # ================================================================
        # TOKENIZER ERRORS
        # ================================================================
        # Tag errors
        "eof-in-tag": "Unexpected end of input in tag",
        "missing-tag-name": "Expected a tag name after <",
        "empty-end-tag": "Empty end tag </> is not allowed",
        "unexpected-character-in-end-tag": f"Unexpected character in </{tag_name}> end tag",
        # Attribute errors
        "eof-in-attribute-value": "Unexpected end of input in quoted attribute value",
        "missing-attribute-value": "Missing attribute value after =",
        "unexpected-equals-sign-before-attribute-name": "Unexpected = before attribute name",
        # Opaque spans
        "eof-in-comment": "Unexpected end of input in comment",
        "eof-in-processing-instruction": "Unexpected end of input in <?...?> processing instruction",
        "eof-in-declaration": "Unexpected end of input in <!...> declaration",
        # ================================================================
        # STRUCTURE ERRORS
        # ================================================================
        "unexpected-end-tag": f"Unexpected </{tag_name}> end tag",
        "end-tag-without-open-node": f"</{tag_name}> end tag with no open node",
        "expected-closing-tag-but-got-eof": f"Expected </{tag_name}> closing tag but reached end of input",
        # ================================================================
        # SELECTOR ERRORS
        # ================================================================
        "empty-selector": "Empty selector",
        "unsupported-selector": "Unsupported selector syntax",
        "expected-attribute-name": "Expected attribute name",
        "expected-closing-bracket": "Expected ] to close attribute selector",
        "unterminated-string": "Unterminated string in selector",
        "unsupported-attribute-operator": "Only = is supported in attribute selectors",
        "dangling-combinator": "Expected selector after combinator",
    }

    # Return message or fall back to the code itself if not found
    return messages.get(code, code)


def _line_and_column(source: str, offset: int) -> tuple[int, int]:
    line = source.count("\n", 0, offset) + 1
    last_newline = source.rfind("\n", 0, offset)
    return line, offset - last_newline


class SkimError(Exception):
    """Base class for every error raised while compiling selectors or skimming."""

    code: str
    message: str
    offset: int | None
    line: int | None
    column: int | None
    source: str | None

    def __init__(
        self,
        code: str,
        offset: int | None = None,
        *,
        source: str | None = None,
        tag_name: str | None = None,
        message: str | None = None,
    ) -> None:
        self.code = code
        self.message = message or generate_error_message(code, tag_name)
        self.offset = offset
        self.source = source
        if offset is not None and source is not None:
            self.line, self.column = _line_and_column(source, offset)
        else:
            self.line = None
            self.column = None
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.line is not None and self.column is not None:
            return f"({self.line},{self.column}): {self.code} - {self.message}"
        if self.offset is not None:
            return f"(offset {self.offset}): {self.code} - {self.message}"
        return f"{self.code} - {self.message}"

    def as_exception(self) -> SyntaxError:
        """Convert to a SyntaxError for Python's source-highlighting display."""
        exc = SyntaxError(self.message)
        exc.msg = self.message
        if self.line is None or self.column is None or self.source is None:
            return exc
        lines = self.source.split("\n")
        exc.filename = "<xml>"
        exc.lineno = self.line
        exc.offset = self.column
        exc.text = lines[self.line - 1]
        return exc


class MarkupSyntaxError(SkimError):
    """Malformed tag, attribute or comment/prolog span in the document."""


class StructureError(SkimError):
    """Mismatched or unterminated tags."""

    expected: str | None
    found: str | None

    def __init__(
        self,
        code: str,
        offset: int | None = None,
        *,
        source: str | None = None,
        expected: str | None = None,
        found: str | None = None,
    ) -> None:
        self.expected = expected
        self.found = found
        if code == "unexpected-end-tag":
            message = f"Unexpected </{found}> end tag, expected </{expected}>"
        else:
            message = None
        super().__init__(code, offset, source=source, tag_name=found or expected, message=message)


class SelectorSyntaxError(SkimError, ValueError):
    """Raised when a selector string is malformed or uses unsupported syntax."""

    selector: str | None

    def __init__(
        self,
        code: str,
        offset: int | None = None,
        *,
        selector: str | None = None,
        message: str | None = None,
    ) -> None:
        self.selector = selector
        super().__init__(code, offset, message=message)

    def __str__(self) -> str:
        base = super().__str__()
        if self.selector is not None:
            return f"{base} in selector {self.selector!r}"
        return base
