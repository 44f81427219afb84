from __future__ import annotations

import pytest
from pydantic import Field

from configdoc.categories import Category
from configdoc.errors import MalformedAnnotationError
from configdoc.schema import doc
from configdoc.tags import doc_tag, field_name, parse_doc_tag, read_annotations


def test_parse_doc_tag_reads_keys_and_values() -> None:
    parsed = parse_doc_tag("required|nocli|default=<hostname>|description=a=b")
    assert parsed == {
        "required": "",
        "nocli": "",
        "default": "<hostname>",
        "description": "a=b",
    }


def test_parse_doc_tag_empty() -> None:
    assert parse_doc_tag("") == {}
    assert parse_doc_tag(None) == {}


@pytest.mark.parametrize("tag", ["|hidden", "=value", "hidden||nocli", 42])
def test_parse_doc_tag_rejects_malformed_tags(tag: object) -> None:
    with pytest.raises(MalformedAnnotationError):
        parse_doc_tag(tag)


def test_doc_tag_tolerates_malformed_tags() -> None:
    field = Field(default="", json_schema_extra={"doc": "hidden||nocli"})
    assert doc_tag(field, "server.name") == {}


def test_field_name_prefers_alias() -> None:
    assert field_name("listen_port", Field(default=0)) == "listen_port"
    assert field_name("listen_port", Field(default=0, alias="port")) == "port"
    assert field_name("cache", Field(default=None, alias="-")) == ""
    assert field_name("cache", Field(default=None, exclude=True)) == ""


def test_read_annotations_combines_tag_and_extra() -> None:
    field = Field(
        default="",
        description="Fallback description.",
        json_schema_extra=doc("required|default=<hostname>", category="advanced"),
    )
    annotations = read_annotations("node_name", field, "memberlist.node_name")
    assert annotations.name == "node_name"
    assert annotations.required
    assert not annotations.hidden
    assert not annotations.nocli
    assert annotations.default == "<hostname>"
    assert annotations.description == "Fallback description."
    assert annotations.category == "advanced"


def test_tag_description_wins_over_field_description() -> None:
    field = Field(
        default=0,
        description="From the field.",
        json_schema_extra=doc("description=From the tag."),
    )
    assert read_annotations("port", field, "port").description == "From the tag."


def test_category_enum_is_normalized() -> None:
    field = Field(default=0, json_schema_extra={"category": Category.EXPERIMENTAL})
    assert read_annotations("port", field, "port").category == "experimental"


def test_inline_marker() -> None:
    field = Field(default=None, json_schema_extra=doc(inline=True))
    assert read_annotations("limits", field, "limits").inline


def test_category_parse() -> None:
    assert Category.parse(" Advanced ") is Category.ADVANCED
    with pytest.raises(ValueError, match="unknown field category"):
        Category.parse("beta")
