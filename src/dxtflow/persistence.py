"""Diagram and palette files.

Text goes through three gates before anything is returned: JSON parse,
schema validation, model construction. Callers only ever see a complete
Diagram (or palette) or an exception.
"""
from __future__ import annotations
import json
import re
from logging import getLogger
from pathlib import Path
from typing import Any, Iterable, List, Union

from pydantic import ValidationError

from .errors import DiagramParseError, StructuralValidationError
from .ir import Diagram, PaletteDef
from .palette import exportable_defs
from .validator import ValidationIssue, strict_json_loads, validate_diagram, validate_palette

logger = getLogger(__name__)

_UNSAFE = re.compile(r"[^a-zA-Z0-9_-]+")


def safe_filename(name: str) -> str:
    """'My Diagram: v2!' -> 'My_Diagram_v2_.json'"""
    stem = _UNSAFE.sub("_", name)
    return f"{stem or 'diagram'}.json"


def parse_json(text: Union[str, bytes]) -> Any:
    try:
        return strict_json_loads(text)
    except json.JSONDecodeError as e:
        logger.warning("Rejected file: not valid JSON (%s)", e)
        raise DiagramParseError(f"Invalid JSON file: {e.msg} (line {e.lineno}, column {e.colno})", e.lineno, e.colno) from e
    except UnicodeDecodeError as e:
        logger.warning("Rejected file: not UTF-8 (%s)", e)
        raise DiagramParseError(f"Invalid JSON file: not UTF-8 text (byte {e.start})") from e
    except ValueError as e:
        logger.warning("Rejected file: %s", e)
        raise DiagramParseError(f"Invalid JSON file: {e}") from e


def _model_issues(e: ValidationError) -> List[ValidationIssue]:
    issues = []
    for err in e.errors():
        path = ""
        for part in err["loc"]:
            path = f"{path}[{part}]" if isinstance(part, int) else (f"{path}.{part}" if path else str(part))
        issues.append(ValidationIssue(path, err["msg"], err.get("input")))
    return issues


def load_diagram_text(text: Union[str, bytes]) -> Diagram:
    data = parse_json(text)
    issues = validate_diagram(data)
    if issues:
        logger.warning("Rejected diagram: %d schema violation(s)", len(issues))
        raise StructuralValidationError(issues, kind="diagram")
    try:
        return Diagram.model_validate(data)
    except ValidationError as e:
        raise StructuralValidationError(_model_issues(e), kind="diagram") from e


def load_palette_text(text: Union[str, bytes]) -> List[PaletteDef]:
    data = parse_json(text)
    issues = validate_palette(data)
    if issues:
        logger.warning("Rejected palette: %d schema violation(s)", len(issues))
        raise StructuralValidationError(issues, kind="palette")
    return [PaletteDef.model_validate(item) for item in data]


def dump_diagram(diagram: Diagram, indent: int = 2) -> str:
    return json.dumps(diagram.to_json(), indent=indent)


def dump_palette(defs: Iterable[PaletteDef], indent: int = 2) -> str:
    return json.dumps([d.model_dump(mode="json") for d in exportable_defs(defs)], indent=indent)


def read_diagram(path: Path) -> Diagram:
    return load_diagram_text(Path(path).read_bytes())


def write_diagram(diagram: Diagram, path: Path, indent: int = 2) -> Path:
    path = Path(path)
    path.write_text(dump_diagram(diagram, indent=indent), encoding="utf-8")
    return path


def read_palette(path: Path) -> List[PaletteDef]:
    return load_palette_text(Path(path).read_bytes())


def write_palette(defs: Iterable[PaletteDef], path: Path, indent: int = 2) -> Path:
    path = Path(path)
    path.write_text(dump_palette(defs, indent=indent), encoding="utf-8")
    return path
