from importlib.resources import files
from pathlib import Path
from typing import Optional
import yaml

from .errors import StructuralValidationError
from .ir import Diagram
from .persistence import write_diagram
from .validator import validate_diagram

TEMPLATES = ("blank", "source-sink")


def _load_template_yaml(name: str) -> str:
    pkg = files('dxtflow.templates')
    return (pkg / f"{name}.yaml").read_text()


def generate_diagram_from_template(template: str, name: Optional[str] = None) -> Diagram:
    template = template.lower()
    if template not in TEMPLATES:
        raise ValueError(f"Unknown template '{template}'. Use one of: {', '.join(TEMPLATES)}")
    data = yaml.safe_load(_load_template_yaml(template.replace('-', '_')))
    if name:
        data["name"] = name
    issues = validate_diagram(data)
    if issues:
        raise StructuralValidationError(issues)
    return Diagram.model_validate(data)


def save_diagram_json(diagram: Diagram, path: Path, indent: int = 2) -> Path:
    return write_diagram(diagram, path, indent=indent)
