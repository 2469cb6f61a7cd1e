from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class TagSpec(BaseModel):
    """
    One requested tag.

    - constant: attach `(key, value)` verbatim
    - field reference: look `key` up on the record value and attach its text form
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Tag key; also the field name for non-constant tags.")
    is_constant: bool = Field(default=False)
    value: Optional[str] = Field(default=None, description="Only meaningful when is_constant.")

    @field_validator("key")
    @classmethod
    def _key_not_blank(cls, v: str) -> str:
        if not str(v).strip():
            raise ValueError("tag key must be non-empty")
        return v

    @model_validator(mode="after")
    def _constant_has_value(self) -> "TagSpec":
        if self.is_constant and self.value is None:
            raise ValueError(f"constant tag {self.key!r} requires a value")
        return self

    @staticmethod
    def constant(key: str, value: str) -> "TagSpec":
        return TagSpec(key=key, is_constant=True, value=value)

    @staticmethod
    def field(key: str) -> "TagSpec":
        return TagSpec(key=key)


def _unquote(s: str) -> str:
    if len(s) >= 2 and s[0] == s[-1] and s[0] in {"'", '"'}:
        return s[1:-1]
    return s


def _split_elements(raw: str, clause: str) -> List[str]:
    elements: List[str] = []
    current: List[str] = []
    quote: Optional[str] = None
    for ch in raw:
        if quote is not None:
            if ch == quote:
                quote = None
        elif ch in {"'", '"'}:
            quote = ch
        elif ch == ",":
            elements.append("".join(current))
            current = []
            continue
        current.append(ch)
    if quote is not None:
        raise ValueError(f"Unbalanced {quote} quote in tag declaration: {clause!r}")
    elements.append("".join(current))
    return elements


def parse_tag_clause(clause: str) -> List[TagSpec]:
    """
    Parse a WITHTAG-style element list into tag specs, preserving order.

    Commas inside single or double quotes belong to the value.

    Example: "region, env=prod, dc='eu, 1'" ->
      [field("region"), constant("env", "prod"), constant("dc", "eu, 1")]
    """
    raw = str(clause or "").strip()
    if raw.startswith("(") and raw.endswith(")"):
        raw = raw[1:-1].strip()
    if not raw:
        return []

    out: List[TagSpec] = []
    for i, element in enumerate(_split_elements(raw, clause)):
        item = element.strip()
        if not item:
            raise ValueError(f"Empty tag declaration at position {i} in: {clause!r}")
        if "=" in item:
            key, _, value = item.partition("=")
            out.append(TagSpec.constant(key.strip(), _unquote(value.strip())))
        else:
            out.append(TagSpec.field(item))
    return out


__all__ = ["TagSpec", "parse_tag_clause"]
