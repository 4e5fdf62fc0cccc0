from __future__ import annotations

import re
from collections.abc import Generator
from typing import Any, NoReturn

from .attributes import Attributes
from .encoding import decode_xml
from .errors import MarkupSyntaxError
from .tokens import (
    CommentToken,
    DeclarationToken,
    EOFToken,
    ProcessingInstructionToken,
    Tag,
    Token,
)

# Tag and attribute names: maximal runs of anything but whitespace, '=', '/' and '>'
_NAME_RUN_PATTERN = re.compile(r"[^ \t\n\r\f=/>]+")
_WHITESPACE_PATTERN = re.compile(r"[ \t\n\r\f]+")
_UNQUOTED_VALUE_RUN_PATTERN = re.compile(r"[^ \t\n\r\f/>]+")


class TokenizerOpts:
    __slots__ = ("discard_bom",)

    discard_bom: bool

    def __init__(self, discard_bom: bool = True) -> None:
        self.discard_bom = bool(discard_bom)


class Tokenizer:
    """Incremental tokenizer for permissive XML markup.

    Each call to ``step()`` advances the cursor past exactly one lexical
    event and hands it to ``sink.process_token()``. Character data between
    tags is skipped. Comments, processing instructions and ``<!...>``
    declarations are emitted as opaque tokens whose content is never
    tokenized.

    The emitted ``Tag`` object is reused between steps; sinks must copy
    whatever they keep. The attribute table is fresh for every tag.
    """

    DATA = 0
    TAG_OPEN = 1
    END_TAG_OPEN = 2
    TAG_NAME = 3
    BEFORE_ATTRIBUTE_NAME = 4
    ATTRIBUTE_NAME = 5
    AFTER_ATTRIBUTE_NAME = 6
    BEFORE_ATTRIBUTE_VALUE = 7
    ATTRIBUTE_VALUE_QUOTED = 8
    ATTRIBUTE_VALUE_UNQUOTED = 9
    SELF_CLOSING_START_TAG = 10
    AFTER_END_TAG_NAME = 11
    COMMENT = 12
    PROCESSING_INSTRUCTION = 13
    DECLARATION = 14

    __slots__ = (
        "_tag_token",
        "buffer",
        "current_attr_name",
        "current_tag_attrs",
        "current_tag_kind",
        "current_tag_name",
        "current_tag_self_closing",
        "done",
        "length",
        "opts",
        "pos",
        "quote_char",
        "sink",
        "state",
        "tag_start",
        "value_start",
    )

    # _STATE_HANDLERS is defined at the end of the file

    def __init__(self, sink: Any, opts: TokenizerOpts | None = None) -> None:
        self.sink = sink
        self.opts = opts or TokenizerOpts()
        self.buffer = ""
        self.length = 0
        self.pos = 0
        self.state = self.DATA
        self.done = False
        self.tag_start = 0
        self.value_start = 0
        self.quote_char = '"'
        self.current_tag_kind = Tag.START
        self.current_tag_name = ""
        self.current_tag_attrs = Attributes()
        self.current_tag_self_closing = False
        self.current_attr_name = ""
        self._tag_token = Tag(Tag.START, "", None)

    def initialize(self, xml: str) -> None:
        if xml and xml[0] == "\ufeff" and self.opts.discard_bom:
            xml = xml[1:]

        self.buffer = xml or ""
        self.length = len(self.buffer)
        self.pos = 0
        self.state = self.DATA
        self.done = False
        self.tag_start = 0
        self.value_start = 0
        self._start_tag(Tag.START)

    def step(self) -> bool:
        """Advance past one lexical event. Returns True once end of input has been emitted."""
        if self.done:
            return True
        handlers = self._STATE_HANDLERS
        while not handlers[self.state](self):
            pass
        return self.done

    def run(self, xml: str) -> None:
        self.initialize(xml)
        while True:
            if self.step():
                break

    # ---------------------
    # State handlers
    #
    # Each handler returns True when it has emitted a token, False when it
    # only moved to another state.
    # ---------------------

    def _state_data(self) -> bool:
        next_lt = self.buffer.find("<", self.pos)
        if next_lt == -1:
            self.pos = self.length
            self.done = True
            self._emit_token(EOFToken(self.length))
            return True
        self.tag_start = next_lt
        self.pos = next_lt + 1
        self.state = self.TAG_OPEN
        return False

    def _state_tag_open(self) -> bool:
        buffer = self.buffer
        pos = self.pos
        if buffer.startswith("!--", pos):
            self.pos = pos + 3
            self.state = self.COMMENT
            return False

        c = self._peek_char(0)
        if c is None:
            self._raise_error("eof-in-tag", self.tag_start)
        if c == "?":
            self.pos += 1
            self.state = self.PROCESSING_INSTRUCTION
            return False
        if c == "!":
            self.pos += 1
            self.state = self.DECLARATION
            return False
        if c == "/":
            self.pos += 1
            self._start_tag(Tag.END)
            self.state = self.END_TAG_OPEN
            return False

        self._start_tag(Tag.START)
        self.state = self.TAG_NAME
        return False

    def _state_tag_name(self) -> bool:
        match = _NAME_RUN_PATTERN.match(self.buffer, self.pos)
        if match is None:
            if self.pos >= self.length:
                self._raise_error("eof-in-tag", self.tag_start)
            self._raise_error("missing-tag-name", self.pos)
        self.current_tag_name = match.group(0)
        self.pos = match.end()
        self.state = self.BEFORE_ATTRIBUTE_NAME
        return False

    def _state_end_tag_open(self) -> bool:
        match = _NAME_RUN_PATTERN.match(self.buffer, self.pos)
        if match is None:
            c = self._peek_char(0)
            if c is None:
                self._raise_error("eof-in-tag", self.tag_start)
            if c == ">":
                self._raise_error("empty-end-tag", self.tag_start)
            self._raise_error("missing-tag-name", self.pos)
        self.current_tag_name = match.group(0)
        self.pos = match.end()
        self.state = self.AFTER_END_TAG_NAME
        return False

    def _state_after_end_tag_name(self) -> bool:
        self._skip_whitespace()
        c = self._peek_char(0)
        if c is None:
            self._raise_error("eof-in-tag", self.tag_start)
        if c == ">":
            self.pos += 1
            self._emit_current_tag()
            self.state = self.DATA
            return True
        self._raise_error("unexpected-character-in-end-tag", self.pos, self.current_tag_name)

    def _state_before_attribute_name(self) -> bool:
        self._skip_whitespace()
        c = self._peek_char(0)
        if c is None:
            self._raise_error("eof-in-tag", self.tag_start)
        if c == ">":
            self.pos += 1
            self._emit_current_tag()
            self.state = self.DATA
            return True
        if c == "/":
            self.pos += 1
            self.state = self.SELF_CLOSING_START_TAG
            return False
        if c == "=":
            self._raise_error("unexpected-equals-sign-before-attribute-name", self.pos)
        self.state = self.ATTRIBUTE_NAME
        return False

    def _state_attribute_name(self) -> bool:
        # Entered only on a character the name run accepts
        match = _NAME_RUN_PATTERN.match(self.buffer, self.pos)
        self.current_attr_name = match.group(0)
        self.pos = match.end()
        self.state = self.AFTER_ATTRIBUTE_NAME
        return False

    def _state_after_attribute_name(self) -> bool:
        self._skip_whitespace()
        c = self._peek_char(0)
        if c is None:
            self._raise_error("eof-in-tag", self.tag_start)
        if c == "=":
            self.pos += 1
            self.state = self.BEFORE_ATTRIBUTE_VALUE
            return False
        # No '=': a boolean attribute. Reconsume c as the start of whatever follows.
        self._finish_attribute(None)
        self.state = self.BEFORE_ATTRIBUTE_NAME
        return False

    def _state_before_attribute_value(self) -> bool:
        self._skip_whitespace()
        c = self._peek_char(0)
        if c is None:
            self._raise_error("eof-in-tag", self.tag_start)
        if c == '"' or c == "'":
            self.quote_char = c
            self.value_start = self.pos
            self.pos += 1
            self.state = self.ATTRIBUTE_VALUE_QUOTED
            return False
        if c == ">":
            self._raise_error("missing-attribute-value", self.pos)
        self.value_start = self.pos
        self.state = self.ATTRIBUTE_VALUE_UNQUOTED
        return False

    def _state_attribute_value_quoted(self) -> bool:
        # The other quote character is literal content
        end = self.buffer.find(self.quote_char, self.pos)
        if end == -1:
            self._raise_error("eof-in-attribute-value", self.value_start)
        self._finish_attribute(self.buffer[self.pos : end])
        self.pos = end + 1
        # No whitespace is required before the next attribute
        self.state = self.BEFORE_ATTRIBUTE_NAME
        return False

    def _state_attribute_value_unquoted(self) -> bool:
        buffer = self.buffer
        start = pos = self.pos
        while True:
            match = _UNQUOTED_VALUE_RUN_PATTERN.match(buffer, pos)
            if match:
                pos = match.end()
            # A '/' only ends the value when it starts '/>'
            if pos < self.length and buffer[pos] == "/" and not buffer.startswith("/>", pos):
                pos += 1
                continue
            break
        if pos == start:
            self._raise_error("missing-attribute-value", start)
        self._finish_attribute(buffer[start:pos])
        self.pos = pos
        self.state = self.BEFORE_ATTRIBUTE_NAME
        return False

    def _state_self_closing_start_tag(self) -> bool:
        c = self._peek_char(0)
        if c is None:
            self._raise_error("eof-in-tag", self.tag_start)
        if c == ">":
            self.pos += 1
            self.current_tag_self_closing = True
            self._emit_current_tag()
            self.state = self.DATA
            return True
        # A stray '/' inside the tag separates attributes
        self.state = self.BEFORE_ATTRIBUTE_NAME
        return False

    def _state_comment(self) -> bool:
        return self._consume_opaque_span("-->", "eof-in-comment", CommentToken)

    def _state_processing_instruction(self) -> bool:
        return self._consume_opaque_span("?>", "eof-in-processing-instruction", ProcessingInstructionToken)

    def _state_declaration(self) -> bool:
        return self._consume_opaque_span(">", "eof-in-declaration", DeclarationToken)

    # ---------------------
    # Helpers
    # ---------------------

    def _peek_char(self, offset: int) -> str | None:
        """Peek ahead at character at current position + offset without consuming"""
        peek_pos = self.pos + offset
        if peek_pos < self.length:
            return self.buffer[peek_pos]
        return None

    def _skip_whitespace(self) -> None:
        match = _WHITESPACE_PATTERN.match(self.buffer, self.pos)
        if match:
            self.pos = match.end()

    def _start_tag(self, kind: int) -> None:
        self.current_tag_kind = kind
        self.current_tag_name = ""
        self.current_tag_attrs = Attributes()
        self.current_tag_self_closing = False
        self.current_attr_name = ""

    def _finish_attribute(self, value: str | None) -> None:
        # Duplicates overwrite: the last occurrence wins
        self.current_tag_attrs.set(self.current_attr_name, value)
        self.current_attr_name = ""

    def _consume_opaque_span(self, terminator: str, error_code: str, token_class: type) -> bool:
        end = self.buffer.find(terminator, self.pos)
        if end == -1:
            self._raise_error(error_code, self.tag_start)
        data = self.buffer[self.pos : end]
        self.pos = end + len(terminator)
        self.state = self.DATA
        self._emit_token(token_class(data, self.tag_start))
        return True

    def _emit_current_tag(self) -> None:
        tag = self._tag_token
        tag.kind = self.current_tag_kind
        tag.name = self.current_tag_name
        tag.attrs = self.current_tag_attrs
        tag.self_closing = self.current_tag_self_closing
        tag.offset = self.tag_start
        self._start_tag(Tag.START)
        self._emit_token(tag)

    def _emit_token(self, token: Token) -> None:
        self.sink.process_token(token)

    def _raise_error(self, code: str, offset: int, tag_name: str | None = None) -> NoReturn:
        raise MarkupSyntaxError(code, offset, source=self.buffer, tag_name=tag_name)


Tokenizer._STATE_HANDLERS = [  # type: ignore[attr-defined]
    Tokenizer._state_data,
    Tokenizer._state_tag_open,
    Tokenizer._state_end_tag_open,
    Tokenizer._state_tag_name,
    Tokenizer._state_before_attribute_name,
    Tokenizer._state_attribute_name,
    Tokenizer._state_after_attribute_name,
    Tokenizer._state_before_attribute_value,
    Tokenizer._state_attribute_value_quoted,
    Tokenizer._state_attribute_value_unquoted,
    Tokenizer._state_self_closing_start_tag,
    Tokenizer._state_after_end_tag_name,
    Tokenizer._state_comment,
    Tokenizer._state_processing_instruction,
    Tokenizer._state_declaration,
]


class _TokenBuffer:
    """A sink that buffers copies of tokens for the generator API."""

    tokens: list[Token]

    def __init__(self) -> None:
        self.tokens = []

    def process_token(self, token: Token) -> None:
        # Tokenizer reuses Tag objects, so we must copy them
        if isinstance(token, Tag):
            token = Tag(token.kind, token.name, token.attrs, token.self_closing, token.offset)
        self.tokens.append(token)


def tokenize(
    xml: str | bytes | bytearray | memoryview,
    *,
    encoding: str | None = None,
    opts: TokenizerOpts | None = None,
) -> Generator[Token, None, None]:
    """
    Lazily tokenize the given XML, yielding one token per lexical event.
    The last token is always an EOFToken.
    """
    xml_str: str
    if isinstance(xml, (bytes, bytearray, memoryview)):
        xml_str, _ = decode_xml(bytes(xml), transport_encoding=encoding)
    else:
        xml_str = xml
    sink = _TokenBuffer()
    tokenizer = Tokenizer(sink, opts)
    tokenizer.initialize(xml_str)

    while True:
        is_eof = tokenizer.step()
        yield from sink.tokens
        sink.tokens.clear()
        if is_eof:
            break
