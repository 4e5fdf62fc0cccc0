from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

from .errors import SelectorSyntaxError
from .matcher import SelectorMatcher
from .node import Node
from .selector import SelectorChain, compile_selector
from .tokenizer import TokenizerOpts

logger = logging.getLogger(__name__)


class _Stop:
    __slots__ = ()

    def __repr__(self) -> str:
        return "STOP"


# Returned by a handler to end the scan once the current node has been dispatched
STOP = _Stop()

Handler = Callable[[Node], Any]
HandlerSpec = Mapping[str | SelectorChain, Handler] | Iterable[tuple[str | SelectorChain, Handler]]


class SkimOpts:
    __slots__ = ("dispatch_order", "on_invalid_selector", "tokenizer_opts")

    DISPATCH_ORDERS = ("registration", "specificity")
    INVALID_SELECTOR_POLICIES = ("raise", "skip")

    dispatch_order: str
    on_invalid_selector: str
    tokenizer_opts: TokenizerOpts | None

    def __init__(
        self,
        dispatch_order: str = "registration",
        on_invalid_selector: str = "raise",
        tokenizer_opts: TokenizerOpts | None = None,
    ) -> None:
        if dispatch_order not in self.DISPATCH_ORDERS:
            raise ValueError(f"dispatch_order must be one of {self.DISPATCH_ORDERS}, got {dispatch_order!r}")
        if on_invalid_selector not in self.INVALID_SELECTOR_POLICIES:
            raise ValueError(
                f"on_invalid_selector must be one of {self.INVALID_SELECTOR_POLICIES}, got {on_invalid_selector!r}"
            )
        self.dispatch_order = dispatch_order
        self.on_invalid_selector = on_invalid_selector
        self.tokenizer_opts = tokenizer_opts


class Registration:
    """A compiled selector paired with the handler to call for its matches."""

    __slots__ = ("chain", "handler", "index")

    chain: SelectorChain
    handler: Handler
    index: int

    def __init__(self, chain: SelectorChain, handler: Handler, index: int = 0) -> None:
        self.chain = chain
        self.handler = handler
        self.index = index

    def __repr__(self) -> str:
        return f"Registration({self.chain.source!r}, index={self.index})"


class HandlerTable:
    """The read-only table of registrations consulted during a scan.

    Build it once with ``HandlerTable.build()``; every selector is compiled
    up front so a malformed one is reported before any scanning starts.
    """

    __slots__ = ("errors", "registrations")

    registrations: tuple[Registration, ...]
    errors: tuple[SelectorSyntaxError, ...]

    def __init__(
        self,
        registrations: Iterable[Registration] = (),
        errors: Iterable[SelectorSyntaxError] = (),
    ) -> None:
        self.registrations = tuple(registrations)
        self.errors = tuple(errors)

    @classmethod
    def build(cls, handlers: HandlerSpec, opts: SkimOpts | None = None) -> HandlerTable:
        opts = opts or SkimOpts()
        pairs = handlers.items() if isinstance(handlers, Mapping) else handlers

        registrations: list[Registration] = []
        errors: list[SelectorSyntaxError] = []
        for index, (selector, handler) in enumerate(pairs):
            if not callable(handler):
                raise TypeError(f"Handler for selector {selector!r} is not callable")
            try:
                chain = selector if isinstance(selector, SelectorChain) else compile_selector(selector)
            except SelectorSyntaxError as e:
                if opts.on_invalid_selector == "raise":
                    raise
                logger.warning("Dropping registration for invalid selector: %s", e)
                errors.append(e)
                continue
            registrations.append(Registration(chain, handler, index))

        if opts.dispatch_order == "specificity":
            # sort() is stable, so equally specific chains keep registration order
            registrations.sort(key=lambda reg: reg.chain.specificity, reverse=True)

        return cls(registrations, errors)

    def __len__(self) -> int:
        return len(self.registrations)

    def __iter__(self) -> Iterator[Registration]:
        return iter(self.registrations)


class Dispatcher:
    """Tree walker listener that runs matching handlers as nodes open.

    One dispatcher serves one scan. Handlers run synchronously, in table
    order, and receive only the node; the ancestor stack stays private.
    """

    __slots__ = ("handler_calls", "matcher", "stop_requested", "table")

    table: HandlerTable
    matcher: SelectorMatcher
    handler_calls: int
    stop_requested: bool

    def __init__(self, table: HandlerTable) -> None:
        self.table = table
        self.matcher = SelectorMatcher()
        self.handler_calls = 0
        self.stop_requested = False

    def node_opened(self, node: Node, stack: list[Node]) -> None:
        matcher = self.matcher
        for registration in self.table.registrations:
            if not matcher.matches(registration.chain, stack):
                continue
            self.handler_calls += 1
            if registration.handler(node) is STOP:
                logger.debug("Stop requested by handler for %r on <%s>", registration.chain.source, node.name)
                self.stop_requested = True

    def node_closed(self, node: Node, stack: list[Node]) -> None:
        pass
