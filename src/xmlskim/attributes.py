from __future__ import annotations


class Attributes(dict[str, str | None]):
    """Attribute table of a single tag.

    Insertion-ordered, one effective value per name. Setting a name that is
    already present overwrites its value (the last occurrence in the markup
    wins). Boolean attributes, written without ``=value``, are stored with a
    value of ``None`` so they stay distinguishable from ``attr=""``.
    """

    __slots__ = ()

    def set(self, name: str, value: str | None) -> None:
        self[name] = value

    def is_boolean(self, name: str) -> bool:
        """True if ``name`` is present without a value."""
        return name in self and self[name] is None

    def copy(self) -> Attributes:
        return Attributes(self)

    def __repr__(self) -> str:
        return f"Attributes({dict.__repr__(self)})"
