"""Start-tag serialization for skimmed nodes."""

from __future__ import annotations

from collections.abc import Mapping


def _choose_attr_quote(value: str) -> str:
    if '"' in value and "'" not in value:
        return "'"
    return '"'


def _quote_attr_value(value: str) -> str:
    # Values are kept exactly as written (entities are not decoded), so only
    # the delimiter itself needs escaping.
    quote = _choose_attr_quote(value)
    if quote == '"':
        value = value.replace('"', "&quot;")
    return f"{quote}{value}{quote}"


def serialize_start_tag(
    name: str,
    attrs: Mapping[str, str | None] | None,
    *,
    self_closing: bool = False,
) -> str:
    attrs = attrs or {}
    parts: list[str] = ["<", name]
    for key, value in attrs.items():
        if value is None:
            parts.extend([" ", key])
        else:
            parts.extend([" ", key, "=", _quote_attr_value(value)])
    parts.append("/>" if self_closing else ">")
    return "".join(parts)
