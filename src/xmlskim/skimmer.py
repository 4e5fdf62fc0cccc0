"""Scan entry points: run registered handlers over one pass of a document."""

from __future__ import annotations

import logging

from .dispatcher import STOP, Dispatcher, HandlerSpec, HandlerTable, SkimOpts
from .encoding import decode_xml
from .node import Node
from .selector import SelectorChain
from .tokenizer import Tokenizer
from .walker import TreeWalker

logger = logging.getLogger(__name__)


class ScanStats:
    __slots__ = ("encoding", "handler_calls", "nodes_closed", "nodes_opened", "stopped")

    nodes_opened: int
    nodes_closed: int
    handler_calls: int
    stopped: bool
    encoding: str | None

    def __init__(
        self,
        nodes_opened: int = 0,
        nodes_closed: int = 0,
        handler_calls: int = 0,
        stopped: bool = False,
        encoding: str | None = None,
    ) -> None:
        self.nodes_opened = nodes_opened
        self.nodes_closed = nodes_closed
        self.handler_calls = handler_calls
        self.stopped = stopped
        self.encoding = encoding

    def __repr__(self) -> str:
        return (
            f"ScanStats(nodes_opened={self.nodes_opened}, nodes_closed={self.nodes_closed}, "
            f"handler_calls={self.handler_calls}, stopped={self.stopped})"
        )


class Skimmer:
    """Runs a fixed set of (selector, handler) registrations over documents.

    Selectors are compiled once, when the skimmer is built. Every call to
    ``scan()`` is an independent single pass with its own ancestor stack
    and dispatcher, so one skimmer can scan many documents.
    """

    __slots__ = ("opts", "table")

    opts: SkimOpts
    table: HandlerTable

    def __init__(self, handlers: HandlerSpec | HandlerTable, *, opts: SkimOpts | None = None) -> None:
        self.opts = opts or SkimOpts()
        if isinstance(handlers, HandlerTable):
            self.table = handlers
        else:
            self.table = HandlerTable.build(handlers, self.opts)

    def scan(self, xml: str | bytes | bytearray | memoryview, *, encoding: str | None = None) -> ScanStats:
        """Scan ``xml`` once, calling handlers as matching nodes open.

        Raises MarkupSyntaxError or StructureError at the first malformed
        construct. Handlers already called for earlier nodes are not undone.
        """
        chosen: str | None = None
        xml_str: str
        if isinstance(xml, (bytes, bytearray, memoryview)):
            xml_str, chosen = decode_xml(bytes(xml), transport_encoding=encoding)
        else:
            xml_str = xml

        dispatcher = Dispatcher(self.table)
        walker = TreeWalker(dispatcher)
        tokenizer = Tokenizer(walker, self.opts.tokenizer_opts)
        # Link walker to tokenizer for error positions
        walker.tokenizer = tokenizer
        tokenizer.initialize(xml_str)

        logger.debug("Scan started: %d registrations, %d characters", len(self.table), tokenizer.length)
        stopped = False
        while not tokenizer.step():
            if dispatcher.stop_requested:
                stopped = True
                logger.info("Scan stopped by handler request at offset %d", tokenizer.pos)
                break

        stats = ScanStats(
            nodes_opened=walker.opened,
            nodes_closed=walker.closed,
            handler_calls=dispatcher.handler_calls,
            stopped=stopped,
            encoding=chosen,
        )
        logger.debug("Scan finished: %r", stats)
        return stats


def skim(
    xml: str | bytes | bytearray | memoryview,
    handlers: HandlerSpec | HandlerTable,
    *,
    opts: SkimOpts | None = None,
    encoding: str | None = None,
) -> ScanStats:
    """
    Scan ``xml`` once and call each handler for every node its selector matches.

    Args:
        xml: The document, as text or bytes
        handlers: A mapping or iterable of (selector, handler) pairs, or a
            prebuilt HandlerTable. Handlers receive the Node and may return
            STOP to end the scan early.
        opts: Dispatch order and invalid-selector policy
        encoding: Encoding label overriding detection for byte input

    Returns:
        Counters describing the scan
    """
    return Skimmer(handlers, opts=opts).scan(xml, encoding=encoding)


def select(
    xml: str | bytes | bytearray | memoryview,
    selector: str | SelectorChain,
    *,
    limit: int | None = None,
    encoding: str | None = None,
) -> list[Node]:
    """
    Return copies of every node matching ``selector``, in document order.

    Scanning stops as soon as ``limit`` nodes have been found; the rest of
    the document is then not checked for well-formedness.
    """
    results: list[Node] = []

    def collect(node: Node) -> object:
        results.append(node.copy())
        if limit is not None and len(results) >= limit:
            return STOP
        return None

    if limit is not None and limit <= 0:
        return results
    skim(xml, [(selector, collect)], encoding=encoding)
    return results
