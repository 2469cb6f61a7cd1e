from __future__ import annotations

import pytest
from pydantic import ValidationError

from influx_sink.tag_spec import TagSpec, parse_tag_clause


def test_constant_and_field_constructors() -> None:
    c = TagSpec.constant("env", "prod")
    assert (c.key, c.is_constant, c.value) == ("env", True, "prod")
    f = TagSpec.field("region")
    assert (f.key, f.is_constant, f.value) == ("region", False, None)


def test_blank_key_rejected() -> None:
    with pytest.raises(ValidationError):
        TagSpec.field("  ")


def test_constant_requires_value() -> None:
    with pytest.raises(ValidationError):
        TagSpec(key="env", is_constant=True)


def test_tag_spec_is_frozen() -> None:
    t = TagSpec.field("a")
    with pytest.raises(ValidationError):
        t.key = "b"  # type: ignore[misc]


def test_parse_tag_clause_mixed() -> None:
    tags = parse_tag_clause("region, env=prod, dc = 'eu 1'")
    assert tags == [
        TagSpec.field("region"),
        TagSpec.constant("env", "prod"),
        TagSpec.constant("dc", "eu 1"),
    ]


def test_parse_tag_clause_parenthesized() -> None:
    assert parse_tag_clause('(host, team="core")') == [TagSpec.field("host"), TagSpec.constant("team", "core")]


@pytest.mark.parametrize("clause", ["", "   ", "()"])
def test_parse_tag_clause_empty(clause: str) -> None:
    assert parse_tag_clause(clause) == []


def test_parse_tag_clause_rejects_empty_element() -> None:
    with pytest.raises(ValueError):
        parse_tag_clause("a,,b")


def test_parse_tag_clause_keeps_commas_inside_quotes() -> None:
    assert parse_tag_clause("dc='eu,1', host") == [TagSpec.constant("dc", "eu,1"), TagSpec.field("host")]
    assert parse_tag_clause('label="a, b, c",env=prod') == [
        TagSpec.constant("label", "a, b, c"),
        TagSpec.constant("env", "prod"),
    ]


def test_parse_tag_clause_other_quote_kind_is_literal() -> None:
    assert parse_tag_clause('note="it\'s, fine"') == [TagSpec.constant("note", "it's, fine")]


@pytest.mark.parametrize("clause", ["dc='eu, host", 'a="x'])
def test_parse_tag_clause_rejects_unbalanced_quote(clause: str) -> None:
    with pytest.raises(ValueError):
        parse_tag_clause(clause)
