from __future__ import annotations

from typing import Literal

from .attributes import Attributes


class Tag:
    __slots__ = ("attrs", "kind", "name", "offset", "self_closing")

    START: Literal[0] = 0
    END: Literal[1] = 1

    kind: int
    name: str
    attrs: Attributes
    self_closing: bool
    offset: int

    def __init__(
        self,
        kind: int,
        name: str,
        attrs: Attributes | None,
        self_closing: bool = False,
        offset: int = 0,
    ) -> None:
        self.kind = kind
        self.name = name
        self.attrs = attrs if attrs is not None else Attributes()
        self.self_closing = bool(self_closing)
        self.offset = offset

    def __repr__(self) -> str:
        if self.kind == Tag.END:
            return f"Tag(END, {self.name!r}, offset={self.offset})"
        return f"Tag(START, {self.name!r}, {dict(self.attrs)!r}, self_closing={self.self_closing}, offset={self.offset})"


class CommentToken:
    """A skipped ``<!--...-->`` span. ``data`` is the raw content."""

    __slots__ = ("data", "offset")

    data: str
    offset: int

    def __init__(self, data: str, offset: int = 0) -> None:
        self.data = data
        self.offset = offset


class ProcessingInstructionToken:
    """A skipped ``<?...?>`` span, such as the ``<?xml ...?>`` prolog."""

    __slots__ = ("data", "offset")

    data: str
    offset: int

    def __init__(self, data: str, offset: int = 0) -> None:
        self.data = data
        self.offset = offset


class DeclarationToken:
    """A skipped ``<!...>`` span other than a comment (e.g. ``<!DOCTYPE ...>``)."""

    __slots__ = ("data", "offset")

    data: str
    offset: int

    def __init__(self, data: str, offset: int = 0) -> None:
        self.data = data
        self.offset = offset


class EOFToken:
    __slots__ = ("offset",)

    offset: int

    def __init__(self, offset: int = 0) -> None:
        self.offset = offset


Token = Tag | CommentToken | ProcessingInstructionToken | DeclarationToken | EOFToken
