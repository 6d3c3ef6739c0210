from __future__ import annotations
from typing import Iterable, List, Set

from .ir import PaletteDef

# Always available, never saved into a palette file.
BUILTIN_DEFS = (
    PaletteDef(name="Source", inputs=(), outputs=("out",)),
    PaletteDef(name="Sink", inputs=("in",), outputs=()),
)

DEFAULT_DEF_NAME = "Custom Node"


def is_builtin(name: str) -> bool:
    return any(d.name == name for d in BUILTIN_DEFS)


def parse_port_list(text: str) -> List[str]:
    """'a, b,,c ' -> ['a', 'b', 'c']"""
    return [s.strip() for s in text.split(",") if s.strip()]


def make_palette_def(name: str, inputs_text: str = "", outputs_text: str = "") -> PaletteDef:
    """Build a definition from the "new node" form fields."""
    return PaletteDef(
        name=name.strip() or DEFAULT_DEF_NAME,
        inputs=tuple(parse_port_list(inputs_text)),
        outputs=tuple(parse_port_list(outputs_text)),
    )


def unique_def_name(name: str, taken: Set[str]) -> str:
    if name not in taken:
        return name
    i = 1
    while f"{name}{i}" in taken:
        i += 1
    return f"{name}{i}"


def merge_palette_defs(existing: Iterable[PaletteDef], incoming: Iterable[PaletteDef]) -> List[PaletteDef]:
    """Return ``incoming`` renamed so no name clashes with built-ins,
    ``existing`` or an earlier incoming def."""
    taken = {d.name for d in BUILTIN_DEFS} | {d.name for d in existing}
    merged: List[PaletteDef] = []
    for d in incoming:
        name = unique_def_name(d.name, taken)
        taken.add(name)
        merged.append(d if name == d.name else d.model_copy(update={"name": name}))
    return merged


def exportable_defs(defs: Iterable[PaletteDef]) -> List[PaletteDef]:
    return [d for d in defs if not is_builtin(d.name)]
