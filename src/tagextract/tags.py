"""
Tag string parsing.

A field's tag string holds one segment per namespace, separated by spaces:

    query:"articleNumber" search:"article_number,omitempty"

The first comma-separated token of a segment's value is the output key; the
remaining tokens are modifiers.
"""

import dataclasses
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from tagextract.config import settings
from tagextract.exceptions import MalformedTagError


@dataclass(frozen=True)
class TagDeclaration:
    """
    One namespace's tag on one field.

    Attributes:
        namespace: Tag namespace (e.g. 'search', 'query')
        key: Output key emitted for the field
        modifiers: Remaining tokens of the tag value (e.g. ('omitempty',))
    """

    namespace: str
    key: str
    modifiers: tuple[str, ...] = ()

    def has_modifier(self, modifier: str) -> bool:
        return modifier in self.modifiers

    def render(self) -> str:
        """Render back into `namespace:"key,modifier"` form."""
        values = ",".join((self.key, *self.modifiers))
        return f'{self.namespace}:"{values}"'


@dataclass(frozen=True)
class FieldTag:
    """All tag declarations of a single field, keyed by namespace."""

    field_name: str
    tags: Mapping[str, TagDeclaration] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def get(self, namespace: str) -> Optional[TagDeclaration]:
        return self.tags.get(namespace)

    @property
    def namespaces(self) -> list[str]:
        return list(self.tags)


def parse_tag_string(
    raw: Optional[str],
    field_name: Optional[str] = None,
    record_type: Optional[type] = None,
) -> dict[str, TagDeclaration]:
    """
    Parse a raw tag string into declarations keyed by namespace.

    Args:
        raw: Tag string, or None/empty for an untagged field
        field_name: Field the string belongs to (for error messages)
        record_type: Record type the field belongs to (for error messages)

    Returns:
        Dictionary mapping namespace to TagDeclaration. A namespace declared
        twice keeps its last declaration.

    Raises:
        MalformedTagError: If a segment has no ':' separator or no namespace
    """
    declarations: dict[str, TagDeclaration] = {}
    if not raw:
        return declarations

    for segment in raw.split(" "):
        if segment == "":
            continue

        namespace, sep, value = segment.partition(":")
        if not sep or not namespace:
            raise MalformedTagError(
                segment, field_name=field_name, record_type=record_type
            )

        key, *modifiers = value.strip('"').split(",")
        declarations[namespace] = TagDeclaration(
            namespace=namespace, key=key, modifiers=tuple(modifiers)
        )

    return declarations


def format_tag_string(declarations: Iterable[TagDeclaration]) -> str:
    """Render declarations as a tag string accepted by parse_tag_string()."""
    return " ".join(declaration.render() for declaration in declarations)


def tagged(tag: str, *, metadata_key: Optional[str] = None, **kwargs: Any) -> Any:
    """
    Declare a dataclass field carrying a tag string.

    Example:
        >>> @dataclass
        ... class SearchRequest:
        ...     title: str = tagged('search:"title,omitempty"', default="")

    Any other keyword (default, default_factory, repr, ...) is passed through
    to dataclasses.field().
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[metadata_key or settings.metadata_key] = tag
    return dataclasses.field(metadata=metadata, **kwargs)
