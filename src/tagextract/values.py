"""
Value helpers used during extraction: zero-value detection and conversion.
"""

import dataclasses
import enum
import typing
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel

from tagextract.introspection import field_annotations, is_nilable

# Types whose no-argument constructor fails or does not give the zero value
_ZERO_VALUES: dict[type, Any] = {
    datetime: datetime.min,
    date: date.min,
    time: time(),
    timedelta: timedelta(),
    Decimal: Decimal(),
}


@runtime_checkable
class Convertible(Protocol):
    """
    A field value that replaces itself with another value when extracted.

    Example:
        >>> @dataclass(frozen=True)
        ... class Date:
        ...     moment: datetime = datetime.min
        ...
        ...     def convert(self) -> datetime:
        ...         return self.moment
    """

    def convert(self) -> Any: ...


def convert_value(value: Any) -> Any:
    """Return value.convert() for Convertible values, else value unchanged."""
    if isinstance(value, Convertible) and callable(value.convert):
        return value.convert()
    return value


def is_zero(value: Any) -> bool:
    """
    Check whether a value equals the zero value of its own type.

    None, 0, 0.0, False, "", b"", a default-constructed dataclass or model,
    datetime.min and friends are all zero. Enum members and values of types
    that cannot be built without arguments are never zero.
    """
    if value is None:
        return True

    tp = type(value)
    if isinstance(value, enum.Enum):
        return False

    for base, zero in _ZERO_VALUES.items():
        if isinstance(value, base):
            return value == zero

    if dataclasses.is_dataclass(value):
        return _is_zero_dataclass(value)

    if isinstance(value, BaseModel):
        return _is_zero_model(value)

    try:
        zero = tp()
    except TypeError:
        return False
    return value == zero


def zero_value(tp: type) -> Any:
    """
    Build the zero value of a type.

    Raises:
        TypeError: If the type has no zero value
    """
    if tp in _ZERO_VALUES:
        return _ZERO_VALUES[tp]
    if dataclasses.is_dataclass(tp):
        return _zero_dataclass(tp)
    if issubclass(tp, BaseModel):
        return _zero_model(tp)
    return tp()


def _is_zero_dataclass(value: Any) -> bool:
    try:
        zero = _zero_dataclass(type(value))
    except TypeError:
        return False
    return value == zero


def _zero_dataclass(tp: type) -> Any:
    annotations = field_annotations(tp)
    kwargs = {}
    for f in dataclasses.fields(tp):
        if not f.init:
            continue
        if (
            f.default is not dataclasses.MISSING
            or f.default_factory is not dataclasses.MISSING
        ):
            continue
        kwargs[f.name] = _zero_for_annotation(annotations[f.name], f.name)
    return tp(**kwargs)


def _is_zero_model(value: BaseModel) -> bool:
    try:
        zero = _zero_model(type(value))
    except TypeError:
        return False
    return value == zero


def _zero_model(tp: type[BaseModel]) -> BaseModel:
    kwargs = {
        name: _zero_for_annotation(info.annotation, name)
        for name, info in tp.model_fields.items()
        if info.is_required()
    }
    return tp.model_construct(**kwargs)


def _zero_for_annotation(annotation: Any, field_name: str) -> Any:
    if is_nilable(annotation):
        return None
    if typing.get_origin(annotation) is typing.Annotated:
        annotation = typing.get_args(annotation)[0]
    # list[int] and friends take the zero value of their origin
    tp = annotation if isinstance(annotation, type) else typing.get_origin(annotation)
    if not isinstance(tp, type):
        raise TypeError(f"Cannot build zero value for field {field_name!r}")
    return zero_value(tp)
