"""Custom exceptions for tagextract."""

from typing import Any


class TagExtractError(Exception):
    """Base exception for all tagextract errors."""

    pass


class MalformedTagError(TagExtractError):
    """Raised when a field's tag string does not follow `ns:"key,modifier"` form."""

    def __init__(
        self,
        segment: str,
        field_name: str | None = None,
        record_type: type | None = None,
    ):
        self.segment = segment
        self.field_name = field_name
        self.record_type = record_type
        message = f"Malformed tag segment {segment!r}"
        if field_name:
            message += f" on field {field_name!r}"
        if record_type is not None:
            message += f" of {record_type.__qualname__}"
        super().__init__(message)


class TypeMismatchError(TagExtractError):
    """Raised when a record does not match the type its tag index was built for."""

    def __init__(self, expected: Any, actual: Any):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Expected a {_type_name(expected)} record, got {_type_name(actual)}"
        )


def _type_name(tp: Any) -> str:
    if tp is None:
        return "supported"
    return getattr(tp, "__qualname__", repr(tp))
