"""
Field projection: reduce an entity to ``id`` plus a caller-selected set
of fields.

Field lists are comma-separated (``"first_name,lastName,comorbidity.name"``).
A dotted name walks one many-to-one relation; ``relations_to_load``
tells the service which relations it must eager-load for a given list.
Names that resolve to nothing are ignored.
"""
from emr.fields import resolve_column, resolve_relation


def split_fields(fields: str | None) -> list[str]:
    if not fields:
        return []
    return [name.strip() for name in fields.split(",") if name.strip()]


def relations_to_load(model, fields: str | None) -> list[str]:
    """Relationship keys referenced by a dotted name in *fields*."""
    keys: list[str] = []
    for name in split_fields(fields):
        head, sep, _ = name.partition(".")
        if not sep:
            continue
        key = resolve_relation(model, head)
        if key is not None and key not in keys:
            keys.append(key)
    return keys


def _project_one(entity, name: str, out: dict) -> None:
    model = type(entity)
    head, sep, rest = name.partition(".")
    if not sep:
        column = resolve_column(model, name)
        if column is not None:
            out[column.key] = getattr(entity, column.key)
        return

    rel_key = resolve_relation(model, head)
    if rel_key is None:
        return
    related = getattr(entity, rel_key)
    nested = out.get(rel_key)
    if related is None:
        out[rel_key] = None
        return
    if not isinstance(nested, dict):
        nested = {"id": related.id}
        out[rel_key] = nested
    column = resolve_column(type(related), rest)
    if column is not None:
        nested[column.key] = getattr(related, column.key)


def map_to_fields(entity, fields: str | None) -> dict | None:
    """
    Return ``{"id": ..., <requested fields>...}`` for *entity*, or None
    when *entity* is None.
    """
    if entity is None:
        return None
    data = {"id": entity.id}
    for name in split_fields(fields):
        _project_one(entity, name, data)
    return data
