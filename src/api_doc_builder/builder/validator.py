"""Consistency checks for a built document."""

import re
from typing import Any

from api_doc_builder.spec.models import HTTP_METHODS, Document

_PLACEHOLDER_RE = re.compile(r"\{([^}/]+)\}")
_SECTIONS = ("definitions", "parameters", "responses")


def _escape(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def _unescape(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def _as_dict(document: Document | dict[str, Any]) -> dict[str, Any]:
    if isinstance(document, Document):
        return document.to_dict()
    return document


def _resolve(data: dict[str, Any], ref: str) -> Any:
    if not ref.startswith("#/"):
        return None
    section, _, name = ref[2:].partition("/")
    if section not in _SECTIONS or not name:
        return None
    return (data.get(section) or {}).get(_unescape(name))


def validate_references(document: Document | dict[str, Any]) -> dict[str, str]:
    """Check that every ``$ref`` points at an existing shared entry.

    Returns dict of {json pointer of referring node: error_message}.
    """
    data = _as_dict(document)
    errors = {}

    def walk(node: Any, pointer: str) -> None:
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str) and _resolve(data, ref) is None:
                errors[pointer] = f"unresolved reference {ref}"
            for key, value in node.items():
                walk(value, f"{pointer}/{_escape(str(key))}")
        elif isinstance(node, list):
            for index, value in enumerate(node):
                walk(value, f"{pointer}/{index}")

    walk(data, "#")
    return errors


def validate_path_parameters(document: Document | dict[str, Any]) -> dict[str, str]:
    """Check that every ``{name}`` placeholder has a matching path parameter.

    Returns dict of {json pointer of operation: error_message}.
    """
    data = _as_dict(document)
    errors = {}
    for path, item in (data.get("paths") or {}).items():
        expected = _PLACEHOLDER_RE.findall(path)
        for method in HTTP_METHODS:
            operation = item.get(method)
            if operation is None:
                continue
            declared = set()
            for param in operation.get("parameters") or []:
                if "$ref" in param:
                    param = _resolve(data, param["$ref"]) or {}
                if param.get("in") == "path":
                    declared.add(param.get("name"))
            missing = [name for name in expected if name not in declared]
            if missing:
                pointer = f"#/paths/{_escape(path)}/{method}"
                errors[pointer] = "undeclared path parameters: " + ", ".join(missing)
    return errors


def validate_document(document: Document | dict[str, Any]) -> dict[str, str]:
    """Run all checks. Returns dict of {json pointer: error_message}."""
    errors = {}
    errors.update(validate_references(document))
    errors.update(validate_path_parameters(document))
    return errors
