"""
Name -> attribute lookup tables for mapped entities.

Filter property names, sort fields and projected field names all arrive
as free-form strings (``ItemName``, ``itemName``, ``item_name``).  Each
entity gets two tables, built once from the SQLAlchemy mapper and cached:
one for scalar columns and one for many-to-one relationships.  Keys are
normalised (lower-cased, underscores dropped) so that every spelling of a
name resolves to the same attribute.
"""
from functools import lru_cache

from sqlalchemy import String, inspect
from sqlalchemy.orm import InstrumentedAttribute, RelationshipDirection


def normalize(name: str) -> str:
    return name.replace("_", "").strip().lower()


@lru_cache(maxsize=None)
def column_table(model) -> dict[str, str]:
    """Return ``{normalised name: column attribute key}`` for *model*."""
    mapper = inspect(model)
    return {normalize(attr.key): attr.key for attr in mapper.column_attrs}


@lru_cache(maxsize=None)
def relation_table(model) -> dict[str, str]:
    """Return ``{normalised name: relationship key}`` for many-to-one relations."""
    mapper = inspect(model)
    return {
        normalize(rel.key): rel.key
        for rel in mapper.relationships
        if rel.direction is RelationshipDirection.MANYTOONE
    }


@lru_cache(maxsize=None)
def string_columns(model) -> tuple[str, ...]:
    """Keys of the text columns searched by a free-text search term."""
    mapper = inspect(model)
    return tuple(
        attr.key
        for attr in mapper.column_attrs
        if isinstance(attr.columns[0].type, String)
    )


def resolve_column(model, name: str) -> InstrumentedAttribute | None:
    key = column_table(model).get(normalize(name))
    if key is None:
        return None
    return getattr(model, key)


def resolve_relation(model, name: str) -> str | None:
    return relation_table(model).get(normalize(name))
