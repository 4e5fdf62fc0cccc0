from __future__ import annotations

from .attributes import Attributes
from .serialize import serialize_start_tag


class Node:
    """One element seen during a scan.

    A node is live from the moment its start tag is read until its end tag
    (or, when self-closing, until dispatch for it has finished). Handlers
    that want to keep a node past their own call should keep ``copy()``.
    """

    __slots__ = ("attrs", "depth", "name", "offset", "self_closing")

    name: str
    attrs: Attributes
    self_closing: bool
    depth: int
    offset: int

    def __init__(
        self,
        name: str,
        attrs: Attributes | None = None,
        self_closing: bool = False,
        depth: int = 0,
        offset: int = 0,
    ) -> None:
        self.name = name
        self.attrs = attrs if attrs is not None else Attributes()
        self.self_closing = bool(self_closing)
        self.depth = depth
        self.offset = offset

    def copy(self) -> Node:
        return Node(self.name, self.attrs.copy(), self.self_closing, self.depth, self.offset)

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.attrs.get(name, default)

    def to_xml(self) -> str:
        """Serialize the node's start tag."""
        return serialize_start_tag(self.name, self.attrs, self_closing=self.self_closing)

    def __repr__(self) -> str:
        return f"<Node {self.name} depth={self.depth} attrs={dict(self.attrs)!r}>"
