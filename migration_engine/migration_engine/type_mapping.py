"""Logical-to-PostgreSQL store type mapping.

Properties declare warehouse-agnostic logical types (``int``, ``string``,
``datetime`` ...).  Column operations need the PostgreSQL store type, which is
either the property's explicit ``store_type`` or the mapped default below.
"""

from __future__ import annotations

from migration_engine.errors import TypeMappingError
from migration_engine.models.schema import Property

# Canonical logical type aliases, normalised before lookup.
_TYPE_ALIASES: dict[str, str] = {
    "int32": "int",
    "integer": "int",
    "int64": "long",
    "bigint": "long",
    "int16": "short",
    "smallint": "short",
    "uint8": "byte",
    "sbyte": "byte",
    "boolean": "bool",
    "str": "string",
    "text": "string",
    "single": "float",
    "real": "float",
    "numeric": "decimal",
    "timestamp": "datetime",
    "uuid": "guid",
    "bytea": "bytes",
    "binary": "bytes",
}

_STORE_TYPES: dict[str, str] = {
    "int": "integer",
    "long": "bigint",
    "short": "smallint",
    "byte": "smallint",
    "uint": "bigint",
    "ulong": "numeric(20,0)",
    "ushort": "integer",
    "bool": "boolean",
    "string": "text",
    "char": "character(1)",
    "decimal": "numeric",
    "float": "real",
    "double": "double precision",
    "datetime": "timestamp",
    "datetimeoffset": "timestamp with time zone",
    "date": "date",
    "time": "time",
    "timespan": "interval",
    "guid": "uuid",
    "bytes": "bytea",
}

_INTEGER_TYPES: frozenset[str] = frozenset({"int", "long", "short", "byte", "uint", "ulong", "ushort"})


def normalize_type(property_type: str) -> str:
    """Lower-case *property_type*, strip a nullable ``?`` suffix, apply aliases."""
    normalized = property_type.strip().lower().rstrip("?")
    return _TYPE_ALIASES.get(normalized, normalized)


def is_integer_type(property_type: str) -> bool:
    return normalize_type(property_type) in _INTEGER_TYPES


class TypeMapper:
    """Resolve the PostgreSQL store type of a property.

    Parameters
    ----------
    overrides:
        Optional ``logical_type -> store_type`` entries that take precedence
        over the built-in mapping.
    """

    def __init__(self, overrides: dict[str, str] | None = None) -> None:
        self._store_types = dict(_STORE_TYPES)
        for logical, store in (overrides or {}).items():
            self._store_types[normalize_type(logical)] = store

    def get_store_type(self, prop: Property) -> str:
        """Return the store type for *prop*.

        Raises
        ------
        TypeMappingError
            If the logical type is unknown and no ``store_type`` is declared.
        """
        if prop.store_type:
            return prop.store_type

        store_type = self._store_types.get(normalize_type(prop.property_type))
        if store_type is None:
            raise TypeMappingError(
                f"No PostgreSQL store type for property '{prop.name}' of type '{prop.property_type}'."
            )
        return store_type
