"""
JSON Patch (RFC 6902) support for partial entity updates.

The entity is dumped through its pydantic schema, the patch is applied to
that JSON document with ``jsonpatch``, and the result is validated back
through the schema so a patch can never leave a column holding a value of
the wrong type.  Operations addressing ``id``, the audit columns or a
field the schema does not know are rejected.
"""
import jsonpatch
from pydantic import BaseModel, ValidationError

from emr.exceptions import PATCH_INVALID, PATCH_MISSING, ApplicationError
from emr.models import SYSTEM_COLUMNS


def _target_field(pointer) -> str:
    if not isinstance(pointer, str) or not pointer.startswith("/"):
        raise ApplicationError(PATCH_INVALID)
    return pointer[1:].split("/", 1)[0].replace("~1", "/").replace("~0", "~")


def check_operations(document: list, schema: type[BaseModel]) -> None:
    """Reject operations outside the writable fields of *schema*."""
    if not isinstance(document, list):
        raise ApplicationError(PATCH_INVALID)
    writable = set(schema.model_fields) - SYSTEM_COLUMNS
    for operation in document:
        if not isinstance(operation, dict):
            raise ApplicationError(PATCH_INVALID)
        pointers = [operation.get("path")]
        if "from" in operation:
            pointers.append(operation["from"])
        for pointer in pointers:
            if _target_field(pointer) not in writable:
                raise ApplicationError(PATCH_INVALID)


def apply_patch(entity, document: list | None, schema: type[BaseModel]) -> dict:
    """
    Apply *document* to *entity* and return the new values of the
    writable fields, ready to be assigned onto the ORM instance.
    """
    if document is None:
        raise ApplicationError(PATCH_MISSING)
    check_operations(document, schema)

    current = schema.model_validate(entity).model_dump(mode="json")
    try:
        patched = jsonpatch.apply_patch(current, document)
    except (jsonpatch.JsonPatchException, jsonpatch.JsonPointerException):
        raise ApplicationError(PATCH_INVALID)

    try:
        validated = schema.model_validate(patched)
    except ValidationError:
        raise ApplicationError(PATCH_INVALID)

    writable = set(schema.model_fields) - SYSTEM_COLUMNS
    return validated.model_dump(include=writable)
