"""Errors raised while building an API document.

Every failure aborts the whole build. They are configuration defects,
so callers should fix the declarations rather than retry.
"""

from enum import Enum


class ErrorKind(str, Enum):
    REFERENCE_CONFLICT = "reference_conflict"
    UNCLASSIFIABLE_TYPE = "unclassifiable_type"
    INVALID_PATH = "invalid_path"


class DocBuildError(Exception):
    """Base class for all document build failures."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ReferenceConflictError(DocBuildError):
    """A reference name is bound to two distinct descriptors."""

    kind = ErrorKind.REFERENCE_CONFLICT

    def __init__(self, section: str, ref_name: str):
        super().__init__(f"{section} reference {ref_name!r} is bound to two different declarations")
        self.section = section
        self.ref_name = ref_name


class UnclassifiableTypeError(DocBuildError):
    """A type (or sample value) cannot be mapped where a primitive is required."""

    kind = ErrorKind.UNCLASSIFIABLE_TYPE


class InvalidPathError(DocBuildError):
    """A path template has unbalanced or nested braces."""

    kind = ErrorKind.INVALID_PATH

    def __init__(self, template: str, reason: str):
        super().__init__(f"invalid path template {template!r}: {reason}")
        self.template = template
