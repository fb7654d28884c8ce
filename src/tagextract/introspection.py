"""
Record type introspection.

Records are dataclass instances or pydantic models. This module hides the
difference: it resolves a record's type and lists its fields in declaration
order together with their raw tag strings.
"""

import dataclasses
import sys
import types
import typing
from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import BaseModel

from tagextract.config import settings
from tagextract.exceptions import TypeMismatchError

NoneType = type(None)


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Static description of one record field.

    Attributes:
        name: Attribute name on the record
        annotation: Resolved type annotation (may be a string if unresolvable)
        nilable: True if the annotation admits None (Optional[X], X | None)
        raw_tag: Raw tag string, or None if the field is untagged
    """

    name: str
    annotation: Any
    nilable: bool
    raw_tag: Optional[str] = None


def is_record_type(tp: Any) -> bool:
    if not isinstance(tp, type):
        return False
    return dataclasses.is_dataclass(tp) or issubclass(tp, BaseModel)


def resolve_record_type(record_or_type: Any) -> type:
    """
    Return the record type for a record instance or a record class.

    Raises:
        TypeMismatchError: If the object is neither a dataclass nor a pydantic model
    """
    tp = record_or_type if isinstance(record_or_type, type) else type(record_or_type)
    if not is_record_type(tp):
        raise TypeMismatchError(expected=None, actual=tp)
    return tp


def is_nilable(annotation: Any) -> bool:
    """Check whether an annotation admits None."""
    if isinstance(annotation, str):
        # Unresolved forward reference; read the source text
        text = annotation.replace(" ", "")
        if text.startswith(("Optional[", "typing.Optional[")):
            return True
        if text.startswith(("Union[", "typing.Union[")) and text.endswith("]"):
            members = text[text.index("[") + 1 : -1].split(",")
            return "None" in members or "NoneType" in members
        return "None" in text.split("|")

    if annotation is None or annotation is NoneType:
        return True

    origin = typing.get_origin(annotation)
    if origin is typing.Annotated:
        return is_nilable(typing.get_args(annotation)[0])
    if origin is Union or origin is types.UnionType:
        return NoneType in typing.get_args(annotation)
    return False


def describe_fields(
    record_type: type, metadata_key: Optional[str] = None
) -> list[FieldDescriptor]:
    """
    List a record type's fields in declaration order.

    Args:
        record_type: A dataclass or pydantic model class
        metadata_key: Key holding the tag string; defaults to settings.metadata_key

    Returns:
        One FieldDescriptor per field
    """
    key = metadata_key or settings.metadata_key

    if dataclasses.is_dataclass(record_type):
        annotations = field_annotations(record_type)
        return [
            FieldDescriptor(
                name=f.name,
                annotation=annotations[f.name],
                nilable=is_nilable(annotations[f.name]),
                raw_tag=f.metadata.get(key),
            )
            for f in dataclasses.fields(record_type)
        ]

    if isinstance(record_type, type) and issubclass(record_type, BaseModel):
        descriptors = []
        for name, info in record_type.model_fields.items():
            extra = info.json_schema_extra
            raw_tag = extra.get(key) if isinstance(extra, dict) else None
            descriptors.append(
                FieldDescriptor(
                    name=name,
                    annotation=info.annotation,
                    nilable=is_nilable(info.annotation),
                    raw_tag=raw_tag,
                )
            )
        return descriptors

    raise TypeMismatchError(expected=None, actual=record_type)


def read_field(record: Any, name: str) -> Any:
    """Read a field's live value from a record."""
    return getattr(record, name)


def field_annotations(record_type: type) -> dict[str, Any]:
    """
    Resolve the annotations of a dataclass's fields.

    String annotations (``from __future__ import annotations``) are evaluated
    in the defining module. When the class as a whole cannot be resolved, each
    field is resolved on its own; a field that still fails keeps its string.
    """
    fields = dataclasses.fields(record_type)
    try:
        hints = typing.get_type_hints(record_type)
    except (NameError, TypeError, SyntaxError):
        hints = {}

    return {
        f.name: hints[f.name]
        if f.name in hints
        else _resolve_annotation(f.type, record_type)
        for f in fields
    }


def _resolve_annotation(annotation: Any, record_type: type) -> Any:
    if not isinstance(annotation, str):
        return annotation

    module = sys.modules.get(record_type.__module__)
    holder = type("_FieldAnnotation", (), {"__annotations__": {"value": annotation}})
    try:
        return typing.get_type_hints(
            holder,
            globalns=dict(vars(module)) if module is not None else {},
            localns=dict(vars(record_type)),
        )["value"]
    except (NameError, TypeError, SyntaxError):
        return annotation
