from __future__ import annotations

import logging
from collections.abc import Generator
from typing import TYPE_CHECKING, Any

from .encoding import decode_xml
from .errors import StructureError
from .node import Node
from .tokenizer import Tokenizer, TokenizerOpts
from .tokens import EOFToken, Tag

if TYPE_CHECKING:
    from .tokens import Token

logger = logging.getLogger(__name__)

_INDENT = "    "


class NodeOpened:
    """A node's start tag was read. ``stack`` runs root-most first and ends with ``node``."""

    __slots__ = ("node", "stack")

    node: Node
    stack: tuple[Node, ...]

    def __init__(self, node: Node, stack: tuple[Node, ...]) -> None:
        self.node = node
        self.stack = stack

    def __repr__(self) -> str:
        return f"NodeOpened({self.node.name!r}, depth={self.node.depth})"


class NodeClosed:
    __slots__ = ("node",)

    node: Node

    def __init__(self, node: Node) -> None:
        self.node = node

    def __repr__(self) -> str:
        return f"NodeClosed({self.node.name!r}, depth={self.node.depth})"


StructuralEvent = NodeOpened | NodeClosed


class TreeWalker:
    """Token sink that maintains the ancestor stack.

    Start tags become nodes pushed onto ``open_elements``; end tags pop them.
    The listener's ``node_opened(node, stack)`` runs while the node is on top
    of the stack, and ``node_closed(node, stack)`` runs after it was popped.
    Self-closing nodes are opened and closed within the same token, so they
    are never an ancestor of anything.
    """

    __slots__ = ("closed", "listener", "open_elements", "opened", "tokenizer")

    listener: Any
    open_elements: list[Node]
    opened: int
    closed: int
    tokenizer: Tokenizer | None

    def __init__(self, listener: Any = None) -> None:
        self.listener = listener
        self.open_elements = []
        self.opened = 0
        self.closed = 0
        self.tokenizer = None

    def reset(self) -> None:
        self.open_elements = []
        self.opened = 0
        self.closed = 0

    def process_token(self, token: Token) -> None:
        if isinstance(token, Tag):
            if token.kind == Tag.START:
                self._open(token)
            else:
                self._close(token)
        elif isinstance(token, EOFToken):
            self._finish(token)
        elif logger.isEnabledFor(logging.DEBUG):
            logger.debug("Skipped %s at offset %d", type(token).__name__, token.offset)

    def _open(self, tag: Tag) -> None:
        stack = self.open_elements
        node = Node(tag.name, tag.attrs, tag.self_closing, depth=len(stack), offset=tag.offset)
        stack.append(node)
        self.opened += 1
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s%s", _INDENT * node.depth, node.to_xml())
        if self.listener is not None:
            self.listener.node_opened(node, stack)

        if node.self_closing:
            stack.pop()
            self.closed += 1
            if self.listener is not None:
                self.listener.node_closed(node, stack)

    def _close(self, tag: Tag) -> None:
        stack = self.open_elements
        if not stack:
            raise StructureError(
                "end-tag-without-open-node",
                tag.offset,
                source=self._source(),
                found=tag.name,
            )
        top = stack[-1]
        if top.name != tag.name:
            raise StructureError(
                "unexpected-end-tag",
                tag.offset,
                source=self._source(),
                expected=top.name,
                found=tag.name,
            )
        stack.pop()
        self.closed += 1
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s</%s>", _INDENT * top.depth, top.name)
        if self.listener is not None:
            self.listener.node_closed(top, stack)

    def _finish(self, token: EOFToken) -> None:
        if self.open_elements:
            unclosed = " > ".join(node.name for node in self.open_elements)
            logger.debug("Unclosed nodes at end of input: %s", unclosed)
            raise StructureError(
                "expected-closing-tag-but-got-eof",
                token.offset,
                source=self._source(),
                expected=self.open_elements[-1].name,
            )

    def _source(self) -> str | None:
        return self.tokenizer.buffer if self.tokenizer is not None else None


class _EventBuffer:
    """A listener that buffers structural events for the generator API."""

    events: list[StructuralEvent]

    def __init__(self) -> None:
        self.events = []

    def node_opened(self, node: Node, stack: list[Node]) -> None:
        self.events.append(NodeOpened(node, tuple(stack)))

    def node_closed(self, node: Node, stack: list[Node]) -> None:
        self.events.append(NodeClosed(node))


def walk(
    xml: str | bytes | bytearray | memoryview,
    *,
    encoding: str | None = None,
    opts: TokenizerOpts | None = None,
) -> Generator[StructuralEvent, None, None]:
    """
    Stream structural events from the given XML.
    Yields NodeOpened and NodeClosed in document order.
    """
    xml_str: str
    if isinstance(xml, (bytes, bytearray, memoryview)):
        xml_str, _ = decode_xml(bytes(xml), transport_encoding=encoding)
    else:
        xml_str = xml
    listener = _EventBuffer()
    walker = TreeWalker(listener)
    tokenizer = Tokenizer(walker, opts)
    walker.tokenizer = tokenizer
    tokenizer.initialize(xml_str)

    while True:
        # Run one step of the tokenizer
        is_eof = tokenizer.step()

        # Yield any events produced by this step
        if listener.events:
            yield from listener.events
            listener.events.clear()

        if is_eof:
            break
