"""Match engine: decides whether a selector chain holds for the node on top of the stack."""

from __future__ import annotations

from collections.abc import Sequence

from .node import Node
from .selector import CHILD, CompoundSelector, SelectorChain, compile_selector


class SelectorMatcher:
    """Matches selector chains against the live ancestor stack.

    Evaluation runs right to left: the last compound must hold for the
    current node (``stack[-1]``), then earlier compounds are satisfied by
    walking up the stack. Nothing is remembered between nodes, so the cost
    per node is bounded by the stack depth, not by the document size.
    """

    __slots__ = ()

    def matches(self, chain: SelectorChain, stack: Sequence[Node]) -> bool:
        """Check if the node on top of ``stack`` matches ``chain``."""
        parts = chain.parts
        # An empty chain never matches
        if not parts or not stack:
            return False

        if not self.matches_compound(stack[-1], parts[-1][1]):
            return False

        return self._matches_ancestors(parts, len(parts) - 1, stack, len(stack) - 1, set())

    def _matches_ancestors(
        self,
        parts: tuple[tuple[str | None, CompoundSelector], ...],
        part_index: int,
        stack: Sequence[Node],
        node_index: int,
        failed: set[tuple[int, int]],
    ) -> bool:
        """parts[part_index] holds for stack[node_index]; satisfy every earlier part above it.

        ``failed`` holds the (part_index, node_index) starting points already
        known not to match, so each one is explored at most once per call to
        ``matches()``.
        """
        start = (part_index, node_index)
        if start in failed:
            return False

        while part_index > 0:
            # Each remaining part needs its own ancestor
            if node_index < part_index:
                break

            combinator = parts[part_index][0]
            compound = parts[part_index - 1][1]

            if combinator == CHILD:
                node_index -= 1
                if not self.matches_compound(stack[node_index], compound):
                    break
                part_index -= 1
                continue

            # Descendant: nearest matching ancestor first. If the rest of the
            # chain fails from there, keep looking further up; a child
            # combinator higher in the chain may need a different ancestor.
            for ancestor_index in range(node_index - 1, part_index - 2, -1):
                if self.matches_compound(stack[ancestor_index], compound) and self._matches_ancestors(
                    parts, part_index - 1, stack, ancestor_index, failed
                ):
                    return True
            break
        else:
            return True

        failed.add(start)
        return False

    def matches_compound(self, node: Node, compound: CompoundSelector) -> bool:
        """Match a compound selector (tag and every predicate must hold)."""
        if compound.tag is not None and node.name != compound.tag:
            return False

        attrs = node.attrs
        for predicate in compound.predicates:
            if predicate.name not in attrs:
                return False
            # Exact string equality; a boolean attribute has no value to compare
            if predicate.value is not None and attrs[predicate.name] != predicate.value:
                return False
        return True


# Global matcher instance
_matcher: SelectorMatcher = SelectorMatcher()


def matches(stack: Sequence[Node], selector: str | SelectorChain) -> bool:
    """
    Check if the last node of ``stack`` matches a selector.

    Args:
        stack: Open nodes, root-most first, ending with the node to test
        selector: A selector string or a compiled SelectorChain

    Returns:
        True if the node matches, False otherwise
    """
    chain = compile_selector(selector) if isinstance(selector, str) else selector
    return _matcher.matches(chain, stack)
