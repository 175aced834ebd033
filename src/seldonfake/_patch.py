"""Application of patch payloads to serialized objects."""

from __future__ import annotations

import copy
import json
from typing import Any

from ._exceptions import BadRequestError, UnsupportedPatchTypeError
from ._models import PatchType

__all__ = [
    "apply_json_patch",
    "apply_merge_patch",
    "apply_patch",
]


def _parse_pointer(pointer: str) -> list[str]:
    """Split a JSON pointer into unescaped reference tokens."""
    if pointer == "":
        return []
    if not pointer.startswith("/"):
        raise BadRequestError(f"Invalid JSON pointer {pointer!r}")
    return [
        t.replace("~1", "/").replace("~0", "~")
        for t in pointer[1:].split("/")
    ]


def _list_index(container: list[Any], token: str, *, insert: bool) -> int:
    """Convert a reference token into an index into a list."""
    if insert and token == "-":
        return len(container)
    digits = token.isascii() and token.isdigit()
    if not digits or (token != "0" and token.startswith("0")):
        raise BadRequestError(f"Invalid list index {token!r}")
    index = int(token)
    limit = len(container) if insert else len(container) - 1
    if index > limit:
        raise BadRequestError(f"List index {index} out of range")
    return index


def _resolve_parent(document: Any, tokens: list[str]) -> Any:
    """Walk to the container holding the last token of a pointer."""
    current = document
    for token in tokens[:-1]:
        if isinstance(current, dict):
            if token not in current:
                raise BadRequestError(f"Path component {token!r} not found")
            current = current[token]
        elif isinstance(current, list):
            current = current[_list_index(current, token, insert=False)]
        else:
            raise BadRequestError(f"Cannot descend into {token!r}")
    return current


def _get(document: Any, pointer: str) -> Any:
    tokens = _parse_pointer(pointer)
    if not tokens:
        return document
    parent = _resolve_parent(document, tokens)
    token = tokens[-1]
    if isinstance(parent, dict):
        if token not in parent:
            raise BadRequestError(f"Path {pointer!r} not found")
        return parent[token]
    if isinstance(parent, list):
        return parent[_list_index(parent, token, insert=False)]
    raise BadRequestError(f"Path {pointer!r} not found")


def _add(document: Any, pointer: str, value: Any) -> Any:
    tokens = _parse_pointer(pointer)
    if not tokens:
        return value
    parent = _resolve_parent(document, tokens)
    token = tokens[-1]
    if isinstance(parent, dict):
        parent[token] = value
    elif isinstance(parent, list):
        parent.insert(_list_index(parent, token, insert=True), value)
    else:
        raise BadRequestError(f"Cannot add at {pointer!r}")
    return document


def _remove(document: Any, pointer: str) -> Any:
    tokens = _parse_pointer(pointer)
    if not tokens:
        raise BadRequestError("Cannot remove the whole document")
    parent = _resolve_parent(document, tokens)
    token = tokens[-1]
    if isinstance(parent, dict):
        if token not in parent:
            raise BadRequestError(f"Path {pointer!r} not found")
        del parent[token]
    elif isinstance(parent, list):
        del parent[_list_index(parent, token, insert=False)]
    else:
        raise BadRequestError(f"Cannot remove {pointer!r}")
    return document


def apply_json_patch(
    document: dict[str, Any], operations: list[dict[str, Any]]
) -> dict[str, Any]:
    """Apply a JSON patch (RFC 6902).

    Parameters
    ----------
    document
        Serialized object to patch. It is not modified.
    operations
        Patch operations.

    Returns
    -------
    dict
        Patched copy of the document.

    Raises
    ------
    BadRequestError
        Raised if an operation is malformed, refers to a missing path, or a
        ``test`` operation fails.
    """
    result: Any = copy.deepcopy(document)
    for operation in operations:
        if not isinstance(operation, dict) or "path" not in operation:
            raise BadRequestError(f"Invalid patch operation {operation!r}")
        op = operation.get("op")
        path = operation["path"]
        if not isinstance(path, str) or not isinstance(
            operation.get("from", ""), str
        ):
            raise BadRequestError(f"Invalid JSON pointer in {operation!r}")
        match op:
            case "add":
                result = _add(result, path, copy.deepcopy(operation["value"]))
            case "remove":
                result = _remove(result, path)
            case "replace":
                _get(result, path)
                result = _remove(result, path) if path else result
                result = _add(result, path, copy.deepcopy(operation["value"]))
            case "move":
                value = _get(result, operation["from"])
                result = _remove(result, operation["from"])
                result = _add(result, path, value)
            case "copy":
                value = copy.deepcopy(_get(result, operation["from"]))
                result = _add(result, path, value)
            case "test":
                if _get(result, path) != operation["value"]:
                    raise BadRequestError(f"Test of {path!r} failed")
            case _:
                raise BadRequestError(f"Unknown patch operation {op!r}")
    if not isinstance(result, dict):
        raise BadRequestError("Patch did not produce an object")
    return result


def apply_merge_patch(target: Any, patch: Any) -> Any:
    """Apply a JSON merge patch (RFC 7386).

    Parameters
    ----------
    target
        Serialized object to patch. It is not modified.
    patch
        Merge patch. `None` values delete keys.

    Returns
    -------
    Any
        Patched copy of the target.
    """
    if not isinstance(patch, dict):
        return copy.deepcopy(patch)
    result = copy.deepcopy(target) if isinstance(target, dict) else {}
    for key, value in patch.items():
        if value is None:
            result.pop(key, None)
        else:
            result[key] = apply_merge_patch(result.get(key), value)
    return result


def apply_patch(
    document: dict[str, Any], patch_type: PatchType, data: bytes
) -> dict[str, Any]:
    """Apply a patch payload of the given type.

    Strategic merge patches are applied as plain merge patches, since the
    list merge strategies they rely on come from schema information the fake
    does not have.

    Parameters
    ----------
    document
        Serialized object to patch. It is not modified.
    patch_type
        Content type of the payload.
    data
        Raw patch payload.

    Returns
    -------
    dict
        Patched copy of the document.

    Raises
    ------
    BadRequestError
        Raised if the payload is not valid JSON or cannot be applied.
    UnsupportedPatchTypeError
        Raised for server-side apply patches.
    """
    if patch_type == PatchType.apply:
        raise UnsupportedPatchTypeError("Apply patches are not supported")
    try:
        patch = json.loads(data)
    except ValueError as e:
        raise BadRequestError(f"Invalid patch payload: {e!s}") from e

    if patch_type == PatchType.json:
        if not isinstance(patch, list):
            raise BadRequestError("JSON patch must be a list of operations")
        try:
            return apply_json_patch(document, patch)
        except KeyError as e:
            msg = f"Patch operation missing field {e.args[0]!r}"
            raise BadRequestError(msg) from e

    if not isinstance(patch, dict):
        raise BadRequestError("Merge patch must be an object")
    return apply_merge_patch(document, patch)
