"""
tagextract - Build flat key/value mappings from tagged record fields.

Usage:
    from dataclasses import dataclass
    from tagextract import ObjectParser, tagged

    @dataclass
    class SearchRequest:
        title: str = tagged('query:"title" search:"title,omitempty"', default="")
        page: int = tagged('query:"page" search:"page"', default=0)

    parser = ObjectParser(SearchRequest(title="python"))
    parser.tag_value_map("search")   # {"title": "python", "page": 0}
    parser.tag_value_map("query")    # {"title": "python", "page": 0}
"""

from tagextract.exceptions import MalformedTagError, TagExtractError, TypeMismatchError
from tagextract.extractor import FieldValueExtractor, ObjectParser, tag_value_map
from tagextract.index import TagIndex, build_tag_index
from tagextract.introspection import FieldDescriptor, describe_fields
from tagextract.tags import (
    FieldTag,
    TagDeclaration,
    format_tag_string,
    parse_tag_string,
    tagged,
)
from tagextract.values import Convertible, convert_value, is_zero

__version__ = "0.1.0"

__all__ = [
    # Extraction
    "ObjectParser",
    "FieldValueExtractor",
    "tag_value_map",
    # Index
    "TagIndex",
    "build_tag_index",
    "FieldDescriptor",
    "describe_fields",
    # Tags
    "FieldTag",
    "TagDeclaration",
    "parse_tag_string",
    "format_tag_string",
    "tagged",
    # Values
    "Convertible",
    "convert_value",
    "is_zero",
    # Errors
    "TagExtractError",
    "MalformedTagError",
    "TypeMismatchError",
]
