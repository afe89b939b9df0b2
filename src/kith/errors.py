"""Error types raised by the registry and its collaborators."""

from __future__ import annotations


class KithError(Exception):
    """Base class for all kith errors."""


class InvalidArgumentError(KithError, ValueError):
    """A supplied value violates a precondition."""


class MissingArgumentError(InvalidArgumentError):
    """A required value was not supplied (``None``)."""


class InvalidStateError(KithError):
    """The target exists but is not in the state the operation requires."""


class SnapshotError(KithError):
    """A snapshot or snapshot file is malformed or inconsistent."""


def require(**values: object) -> None:
    """Raise MissingArgumentError naming the first argument that is None."""
    for name, value in values.items():
        if value is None:
            raise MissingArgumentError(f"'{name}' must not be None")
