"""
Tag index builder.

Reads a record type's field metadata once and keeps every field's tag
declarations, keyed by field name, for the lifetime of a parser.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional

from tagextract.introspection import (
    FieldDescriptor,
    describe_fields,
    resolve_record_type,
)
from tagextract.tags import FieldTag, TagDeclaration, parse_tag_string

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TagIndex:
    """
    Per-field tag declarations of one record type.

    Every field of the type is present, in declaration order; an untagged
    field maps to a FieldTag with no namespaces.

    Attributes:
        record_type: The record type the index was built from
        descriptors: Field descriptors in declaration order
        fields: Mapping from field name to FieldTag
    """

    record_type: type
    descriptors: tuple[FieldDescriptor, ...] = ()
    fields: Mapping[str, FieldTag] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self.descriptors)

    def __len__(self) -> int:
        return len(self.descriptors)

    def __contains__(self, field_name: object) -> bool:
        return field_name in self.fields

    def lookup(self, field_name: str, namespace: str) -> Optional[TagDeclaration]:
        """Return a field's declaration in one namespace, or None."""
        field_tag = self.fields.get(field_name)
        if field_tag is None:
            return None
        return field_tag.get(namespace)

    @property
    def namespaces(self) -> list[str]:
        """All namespaces declared by at least one field, in first-seen order."""
        seen: dict[str, None] = {}
        for field_tag in self.fields.values():
            for namespace in field_tag.tags:
                seen.setdefault(namespace, None)
        return list(seen)


def build_tag_index(record: Any, metadata_key: Optional[str] = None) -> TagIndex:
    """
    Build the tag index for a record type.

    Args:
        record: A record instance or record class (dataclass or pydantic model)
        metadata_key: Key holding tag strings; defaults to settings.metadata_key

    Returns:
        Immutable TagIndex covering every field of the type

    Raises:
        MalformedTagError: If any field carries a malformed tag string. No
            partial index is returned.
        TypeMismatchError: If the object is not a supported record type
    """
    record_type = resolve_record_type(record)
    descriptors = tuple(describe_fields(record_type, metadata_key=metadata_key))

    fields: dict[str, FieldTag] = {}
    for descriptor in descriptors:
        tags = parse_tag_string(
            descriptor.raw_tag,
            field_name=descriptor.name,
            record_type=record_type,
        )
        fields[descriptor.name] = FieldTag(
            field_name=descriptor.name, tags=MappingProxyType(tags)
        )

    logger.debug(
        f"Built tag index for {record_type.__qualname__}: "
        f"{len(descriptors)} field(s), "
        f"{sum(1 for t in fields.values() if t.tags)} tagged"
    )

    return TagIndex(
        record_type=record_type,
        descriptors=descriptors,
        fields=MappingProxyType(fields),
    )
