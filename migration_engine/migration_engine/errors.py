"""Exception hierarchy for the migration engine.

Well-formed input never raises.  These exceptions signal malformed schema
models or a baseline differ result that breaks the single-operation
contracts the PostgreSQL overlay relies on.
"""

from __future__ import annotations


class MigrationEngineError(Exception):
    """Base exception for all migration engine errors."""


class SchemaModelError(MigrationEngineError, ValueError):
    """A schema model references unknown properties or is otherwise malformed.

    Subclasses ``ValueError`` so that pydantic validators can raise it and
    have it reported as a ``ValidationError``.
    """


class TypeMappingError(MigrationEngineError):
    """A logical property type has no PostgreSQL store type."""


class DiffInvariantError(MigrationEngineError):
    """A baseline diff result is missing, or duplicates, an expected operation."""

    def __init__(self, message: str, *, expected: str, found: int) -> None:
        super().__init__(message)
        self.expected = expected
        self.found = found
