"""
Field value extraction.

Walks a record's fields in declaration order and builds a flat
``{output_key: value}`` dictionary for one tag namespace.

A field is left out when:
    1. it is Optional and currently None,
    2. it has no tag in the requested namespace,
    3. its tag carries ``omitempty`` and its value is the zero value of its type.

A value implementing ``convert()`` is replaced by the result of that call.
"""

import logging
from typing import Any, Optional

from tagextract.config import settings
from tagextract.exceptions import TypeMismatchError
from tagextract.index import TagIndex, build_tag_index
from tagextract.introspection import FieldDescriptor, read_field
from tagextract.tags import TagDeclaration
from tagextract.values import convert_value, is_zero

logger = logging.getLogger(__name__)

# Marker for skipped fields; None is a legitimate emitted value
_SKIP = object()


class FieldValueExtractor:
    """
    Extracts tagged field values from records of one type.

    Example:
        >>> extractor = FieldValueExtractor(build_tag_index(SearchRequest))
        >>> extractor.extract(SearchRequest(title="go"), "search")
        {'title': 'go'}
    """

    def __init__(self, index: TagIndex, omitempty_modifier: Optional[str] = None):
        self.index = index
        self.omitempty_modifier = omitempty_modifier or settings.omitempty_modifier

    def extract(self, record: Any, namespace: str) -> dict[str, Any]:
        """
        Build the output-key to value mapping for one namespace.

        Args:
            record: Instance of the index's record type
            namespace: Tag namespace to read (e.g. 'search')

        Returns:
            A new dictionary; empty when nothing is tagged in the namespace

        Raises:
            TypeMismatchError: If the record is not an instance of the index's type
            ValueError: If namespace is empty
        """
        if type(record) is not self.index.record_type:
            raise TypeMismatchError(
                expected=self.index.record_type, actual=type(record)
            )
        if not namespace:
            raise ValueError("Tag namespace cannot be empty")

        result: dict[str, Any] = {}
        for descriptor in self.index:
            declaration = self.index.lookup(descriptor.name, namespace)
            value = self._field_value(record, descriptor, declaration)
            if value is _SKIP:
                continue

            result[declaration.key] = value

        return result

    def _field_value(
        self,
        record: Any,
        descriptor: FieldDescriptor,
        declaration: Optional[TagDeclaration],
    ) -> Any:
        value = read_field(record, descriptor.name)

        if descriptor.nilable and value is None:
            return _SKIP

        if declaration is None:
            return _SKIP

        if declaration.has_modifier(self.omitempty_modifier) and is_zero(value):
            logger.debug(
                f"Omitting empty field {descriptor.name!r} ({declaration.namespace})"
            )
            return _SKIP

        return convert_value(value)


class ObjectParser:
    """
    Reads tagged fields of a single record.

    The tag index is built once, at construction; each call to
    tag_value_map() reads the record's current field values.

    Example:
        >>> parser = ObjectParser(request)
        >>> parser.tag_value_map("search")
        {'article_number': 1, 'title': 't'}
        >>> parser.tag_value_map("query")
        {'articleNumber': 1, 'title': 't'}
    """

    def __init__(self, record: Any, metadata_key: Optional[str] = None):
        """
        Capture a record and index its type's tags.

        Raises:
            MalformedTagError: If a field of the record's type has a malformed tag
            TypeMismatchError: If the record is not a dataclass or pydantic model
        """
        self.record = record
        self.tag_index = build_tag_index(record, metadata_key=metadata_key)
        self._extractor = FieldValueExtractor(self.tag_index)

    @property
    def record_type(self) -> type:
        return self.tag_index.record_type

    def tag_value_map(self, namespace: str) -> dict[str, Any]:
        """Extract the captured record's values for one tag namespace."""
        return self._extractor.extract(self.record, namespace)

    extract = tag_value_map


def tag_value_map(
    record: Any, namespace: str, metadata_key: Optional[str] = None
) -> dict[str, Any]:
    """One-shot extraction; builds a fresh tag index for every call."""
    return ObjectParser(record, metadata_key=metadata_key).tag_value_map(namespace)
