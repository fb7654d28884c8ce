"""
Tests for the tag index builder and record introspection.
"""

from dataclasses import dataclass, field
from typing import Optional

import pytest
from pydantic import BaseModel, Field

from records import (
    ArticleSearchModel,
    ArticleSearchRequest,
    ArticleSearchRequestOptional,
    PartiallyTagged,
)
from tagextract.exceptions import MalformedTagError, TypeMismatchError
from tagextract.index import TagIndex, build_tag_index
from tagextract.introspection import (
    describe_fields,
    field_annotations,
    is_nilable,
    resolve_record_type,
)
from tagextract.tags import tagged


class TestBuildTagIndex:
    """Tests for build_tag_index()."""

    def test_indexes_every_field_in_order(self):
        """All fields appear, in declaration order."""
        tag_index = build_tag_index(ArticleSearchRequest)

        assert isinstance(tag_index, TagIndex)
        assert tag_index.record_type is ArticleSearchRequest
        assert [d.name for d in tag_index] == [
            "article_number",
            "title",
            "author_id",
            "published_date_from",
            "published_date_to",
        ]
        assert len(tag_index) == 5

    def test_accepts_instance(self, populated_request):
        """An instance indexes the same as its class."""
        from_instance = build_tag_index(populated_request)
        from_class = build_tag_index(ArticleSearchRequest)

        assert from_instance.record_type is from_class.record_type
        assert dict(from_instance.fields) == dict(from_class.fields)

    def test_lookup_per_namespace(self):
        """Declarations are looked up per namespace."""
        tag_index = build_tag_index(ArticleSearchRequest)

        search = tag_index.lookup("article_number", "search")
        query = tag_index.lookup("article_number", "query")

        assert search.key == "article_number"
        assert search.has_modifier("omitempty")
        assert query.key == "articleNumber"
        assert not query.has_modifier("omitempty")
        assert tag_index.lookup("article_number", "json") is None

    def test_untagged_field_present_with_no_namespaces(self):
        """Untagged fields are in the index, with an empty tag set."""
        tag_index = build_tag_index(PartiallyTagged)

        assert "internal_note" in tag_index
        assert tag_index.fields["internal_note"].namespaces == []
        assert tag_index.lookup("internal_note", "search") is None

    def test_lookup_unknown_field(self):
        tag_index = build_tag_index(PartiallyTagged)

        assert tag_index.lookup("missing", "search") is None

    def test_namespaces(self):
        """Namespaces are reported in first-seen order."""
        assert build_tag_index(PartiallyTagged).namespaces == ["search", "query"]

    def test_index_is_read_only(self):
        """The field mapping cannot be modified after the build."""
        tag_index = build_tag_index(ArticleSearchRequest)

        with pytest.raises(TypeError):
            tag_index.fields["title"] = None

    def test_malformed_tag_aborts_build(self):
        """One malformed field fails the whole build."""

        @dataclass
        class Broken:
            good: str = tagged('search:"good"', default="")
            bad: str = tagged('search:"bad" query', default="")

        with pytest.raises(MalformedTagError) as exc_info:
            build_tag_index(Broken)

        assert exc_info.value.field_name == "bad"
        assert exc_info.value.record_type is Broken

    def test_rejects_non_record(self):
        """Plain objects are not record types."""
        with pytest.raises(TypeMismatchError):
            build_tag_index(42)

        with pytest.raises(TypeMismatchError):
            build_tag_index(dict)

    def test_custom_metadata_key(self):
        """Tags may be stored under a different metadata key."""

        @dataclass
        class Request:
            title: str = field(default="", metadata={"tags": 'search:"title"'})

        assert build_tag_index(Request).lookup("title", "search") is None
        assert (
            build_tag_index(Request, metadata_key="tags").lookup("title", "search").key
            == "title"
        )

    def test_metadata_key_from_settings(self, monkeypatch):
        """The default metadata key comes from settings."""
        from tagextract.config import settings

        @dataclass
        class Request:
            title: str = field(default="", metadata={"labels": 'search:"title"'})

        monkeypatch.setattr(settings, "metadata_key", "labels")

        assert build_tag_index(Request).lookup("title", "search").key == "title"

    def test_pydantic_model(self):
        """Pydantic models are indexed from json_schema_extra."""
        tag_index = build_tag_index(ArticleSearchModel)

        assert [d.name for d in tag_index] == [
            "article_number",
            "title",
            "author_id",
            "published_at",
            "notes",
        ]
        assert tag_index.lookup("author_id", "query").key == "authorId"
        assert tag_index.fields["notes"].namespaces == []


class TestDescribeFields:
    """Tests for record introspection."""

    def test_nilable_fields(self):
        """Optional and `X | None` annotations are nilable."""
        descriptors = describe_fields(ArticleSearchRequestOptional)

        assert all(d.nilable for d in descriptors)

    def test_value_fields_not_nilable(self):
        descriptors = describe_fields(ArticleSearchRequest)

        assert not any(d.nilable for d in descriptors)

    def test_raw_tag(self):
        descriptors = {d.name: d for d in describe_fields(PartiallyTagged)}

        assert descriptors["name"].raw_tag == 'search:"name"'
        assert descriptors["internal_note"].raw_tag is None

    def test_pydantic_nilable(self):
        descriptors = {d.name: d for d in describe_fields(ArticleSearchModel)}

        assert descriptors["author_id"].nilable is True
        assert descriptors["title"].nilable is False

    def test_pydantic_callable_schema_extra_ignored(self):
        """Only dict-valued json_schema_extra can carry a tag."""

        class Model(BaseModel):
            title: str = Field("", json_schema_extra=lambda schema: None)

        (descriptor,) = describe_fields(Model)
        assert descriptor.raw_tag is None

    def test_resolve_record_type(self, populated_request):
        assert resolve_record_type(populated_request) is ArticleSearchRequest
        assert resolve_record_type(ArticleSearchRequest) is ArticleSearchRequest

    def test_resolve_rejects_plain_class(self):
        class Plain:
            pass

        with pytest.raises(TypeMismatchError):
            resolve_record_type(Plain())


class TestIsNilable:
    """Tests for is_nilable()."""

    @pytest.mark.parametrize(
        "annotation",
        [
            Optional[int],
            int | None,
            Optional["Date"],
            "Optional[int]",
            "int | None",
            "typing.Optional[int]",
            "Union[int, None]",
            "typing.Union[Ledger, None]",
        ],
    )
    def test_nilable(self, annotation):
        assert is_nilable(annotation) is True

    @pytest.mark.parametrize(
        "annotation", [int, str, "int", list[int], int | str, "Union[int, str]"]
    )
    def test_not_nilable(self, annotation):
        assert is_nilable(annotation) is False


class TestFieldAnnotations:
    """Resolution of string annotations on dataclass fields."""

    def test_resolves_each_field_when_class_fails(self):
        """One unresolvable annotation does not block the other fields."""
        from deferred_records import LedgerQuery

        annotations = field_annotations(LedgerQuery)

        assert annotations["title"] is str
        assert annotations["count"] == Optional[int]
        assert annotations["ledger"] == "Optional[Ledger]"

    def test_unresolvable_optional_forms_are_nilable(self):
        from deferred_records import LedgerQuery

        descriptors = {d.name: d for d in describe_fields(LedgerQuery)}

        assert descriptors["title"].nilable is False
        assert all(
            descriptors[name].nilable
            for name in ("count", "ledger", "backup", "archive")
        )

    def test_resolves_whole_class(self):
        from datetime import datetime

        from deferred_records import Window

        annotations = field_annotations(Window)

        assert annotations["start"] is datetime
        assert annotations["end"] == Optional[datetime]
