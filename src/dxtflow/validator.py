from __future__ import annotations
import json
from collections import Counter
from pathlib import Path
from typing import Any, Callable, Dict, List, NamedTuple, Tuple, Union

from .ir import Diagram
from .schemas import DIAGRAM_SCHEMA, PALETTE_SCHEMA, Schema


class ValidationIssue(NamedTuple):
    path: str       # e.g. "nodes[2].properties.inputs"; "" for the document root
    message: str
    value: Any = None


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _check_object(value: Any, schema: Schema, path: str) -> List[ValidationIssue]:
    if not isinstance(value, dict):
        return [ValidationIssue(path, f"Expected object, got {_type_name(value)}", value)]

    issues: List[ValidationIssue] = []
    for key in schema.get("required", []):
        if key not in value:
            issues.append(ValidationIssue(_join(path, key), f"Missing required property '{key}'"))

    props: Dict[str, Schema] = schema.get("properties", {})
    for key, item in value.items():
        if key in props:
            issues.extend(_check(item, props[key], _join(path, key)))
        elif schema.get("additionalProperties") is False:
            issues.append(ValidationIssue(_join(path, key), f"Additional property '{key}' is not allowed"))
    return issues


def _check_array(value: Any, schema: Schema, path: str) -> List[ValidationIssue]:
    if not isinstance(value, list):
        return [ValidationIssue(path, f"Expected array, got {_type_name(value)}", value)]

    issues: List[ValidationIssue] = []
    items = schema.get("items")
    if items is not None:
        for i, item in enumerate(value):
            issues.extend(_check(item, items, f"{path}[{i}]"))
    return issues


def _check_string(value: Any, schema: Schema, path: str) -> List[ValidationIssue]:
    if not isinstance(value, str):
        return [ValidationIssue(path, f"Expected string, got {_type_name(value)}", value)]
    min_length = schema.get("minLength")
    if min_length is not None and len(value) < min_length:
        return [ValidationIssue(path, f"String length {len(value)} is less than minimum {min_length}", value)]
    return []


def _check_number(value: Any, schema: Schema, path: str) -> List[ValidationIssue]:
    if not _is_number(value):
        return [ValidationIssue(path, f"Expected number, got {_type_name(value)}", value)]
    minimum = schema.get("minimum")
    if minimum is not None and value < minimum:
        return [ValidationIssue(path, f"Number {value} is less than minimum {minimum}", value)]
    return []


def _check_integer(value: Any, schema: Schema, path: str) -> List[ValidationIssue]:
    # 3.0 counts as an integer, as it does in JSON
    if not _is_number(value) or (isinstance(value, float) and not value.is_integer()):
        return [ValidationIssue(path, f"Expected integer, got {_type_name(value)}", value)]
    minimum = schema.get("minimum")
    if minimum is not None and value < minimum:
        return [ValidationIssue(path, f"Integer {value} is less than minimum {minimum}", value)]
    return []


def _check_boolean(value: Any, schema: Schema, path: str) -> List[ValidationIssue]:
    if not isinstance(value, bool):
        return [ValidationIssue(path, f"Expected boolean, got {_type_name(value)}", value)]
    return []


_CHECKS: Dict[str, Callable[[Any, Schema, str], List[ValidationIssue]]] = {
    "object": _check_object,
    "array": _check_array,
    "string": _check_string,
    "number": _check_number,
    "integer": _check_integer,
    "boolean": _check_boolean,
}


def _check(value: Any, schema: Schema, path: str) -> List[ValidationIssue]:
    expected = schema.get("type")
    check = _CHECKS.get(expected)
    if check is None:
        raise ValueError(f"Unsupported schema type '{expected}' at '{path}'")
    return check(value, schema, path)


def validate(data: Any, schema: Schema) -> List[ValidationIssue]:
    """Every violation of ``schema`` in ``data``, in document order."""
    return _check(data, schema, "")


def validate_diagram(data: Any) -> List[ValidationIssue]:
    return validate(data, DIAGRAM_SCHEMA)


def validate_palette(data: Any) -> List[ValidationIssue]:
    return validate(data, PALETTE_SCHEMA)


def format_validation_errors(issues: List[ValidationIssue]) -> str:
    if not issues:
        return ""
    lines = [f"{i.path}: {i.message}" if i.path else i.message for i in issues]
    return "Validation errors:\n" + "\n".join(lines)


def check_integrity(diagram: Diagram) -> List[str]:
    """Referential problems the schema cannot see.

    Loading does not depend on these; they are reported by the CLI.
    """
    problems: List[str] = []

    counts = Counter(n.id for n in diagram.nodes)
    for node_id, count in counts.items():
        if count > 1:
            problems.append(f"Node id '{node_id}' is used by {count} nodes.")

    for w in diagram.wires:
        missing = [nid for nid in (w.from_node_id, w.to_node_id) if nid not in counts]
        if missing:
            problems.append(f"Wire {w.id} references missing node(s): {', '.join(missing)}.")

    targets = Counter(w.target for w in diagram.wires)
    for (node_id, port_idx), count in targets.items():
        if count > 1:
            problems.append(f"Input {node_id}[{port_idx}] has {count} incoming wires.")

    wire_counts = Counter(w.id for w in diagram.wires)
    for wire_id, count in wire_counts.items():
        if count > 1:
            problems.append(f"Wire id '{wire_id}' is used by {count} wires.")
    return problems


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a JSON value")


def strict_json_loads(raw: Union[str, bytes]) -> Any:
    """``json.loads`` minus the Python extensions: no NaN/Infinity, bytes must be UTF-8."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    return json.loads(raw, parse_constant=_reject_constant)


def _read_json(path: Path) -> Tuple[bool, Any, str]:
    try:
        return True, strict_json_loads(path.read_bytes()), ""
    except json.JSONDecodeError as e:
        return False, None, f"ERR: Not valid JSON (line {e.lineno}, column {e.colno}): {e.msg}."
    except UnicodeDecodeError as e:
        return False, None, f"ERR: Not UTF-8 text (byte {e.start})."
    except ValueError as e:
        return False, None, f"ERR: Not valid JSON: {e}."


def validate_diagram_file(path: Path) -> Tuple[bool, List[str]]:
    messages: List[str] = []
    parsed, data, err = _read_json(path)
    if not parsed:
        return False, [err]

    # 1) Schema
    issues = validate_diagram(data)
    if issues:
        messages.extend(f"ERR: {i.path or '<root>'}: {i.message}" for i in issues)
        return False, messages
    messages.append("OK: Document matches the diagram schema.")

    # 2) Node and wire references
    problems = check_integrity(Diagram.model_validate(data))
    if problems:
        messages.extend(f"ERR: {p}" for p in problems)
        return False, messages
    messages.append("OK: Ids are unique, wires reference existing nodes, inputs have at most one wire.")
    return True, messages


def validate_palette_file(path: Path) -> Tuple[bool, List[str]]:
    parsed, data, err = _read_json(path)
    if not parsed:
        return False, [err]

    issues = validate_palette(data)
    if issues:
        return False, [f"ERR: {i.path or '<root>'}: {i.message}" for i in issues]

    messages = ["OK: Document matches the palette schema."]
    counts = Counter(item["name"] for item in data)
    dupes = sorted(name for name, count in counts.items() if count > 1)
    if dupes:
        # Not fatal: import renames them.
        messages.append(f"OK: Duplicate names will be renamed on import: {', '.join(dupes)}.")
    return True, messages
