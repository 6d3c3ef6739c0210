from __future__ import annotations
from logging import getLogger
from pathlib import Path
from typing import Any, Collection, Iterable, List, Optional, Tuple, Union

from .clipboard import Clipboard, PasteResult
from .config import Settings, get_settings
from .geometry import Point, Rect
from .graph import GraphModel, PropertiesLike
from .ids import IdFactory, make_id_factory
from .ir import Diagram, Node, PaletteDef, Wire, WireDraft
from .palette import make_palette_def, merge_palette_defs
from . import persistence
from .selection import Selection, lasso_select
from .wiring import WireDraftSession

logger = getLogger(__name__)


def common_value(nodes: Iterable[Node], key: str) -> str:
    """The string all ``nodes`` share for property ``key``, else ''.

    Used to prefill a batch property editor.
    """
    values = [n.properties.get(key) for n in nodes]
    if not values or not isinstance(values[0], str):
        return ""
    return values[0] if all(v == values[0] for v in values) else ""


class Document:
    """One open diagram and the interactive state around it.

    All mutation goes through these methods; the graph, selection, wire
    draft and clipboard are never changed from outside.
    """

    def __init__(
        self,
        name: Optional[str] = None,
        settings: Optional[Settings] = None,
        id_factory: Optional[IdFactory] = None,
    ):
        self.settings = settings or get_settings()
        self._id_factory = id_factory or make_id_factory(self.settings.id_strategy)
        self.name = name or self.settings.default_diagram_name
        self.graph = GraphModel(id_factory=self._id_factory)
        self.selection = Selection()
        self.wiring = WireDraftSession(self.graph)
        self.clipboard = Clipboard()

    # --- read accessors ---

    @property
    def nodes(self) -> List[Node]:
        return self.graph.nodes

    @property
    def wires(self) -> List[Wire]:
        return self.graph.wires

    @property
    def palette_defs(self) -> List[PaletteDef]:
        return self.graph.all_defs

    @property
    def selected_ids(self) -> List[str]:
        return self.selection.ids

    @property
    def selected_nodes(self) -> List[Node]:
        return [n for n in self.graph.nodes if n.id in self.selection]

    @property
    def wire_draft(self) -> Optional[WireDraft]:
        return self.wiring.draft

    # --- nodes ---

    def add_node(self, type: str, x: float, y: float) -> Node:
        return self.graph.add_node(type, x, y)

    def update_node_properties(self, node_id: str, properties: PropertiesLike) -> None:
        self.graph.update_node_properties(node_id, properties)

    def set_property(self, node_ids: Collection[str], key: str, value: Any) -> None:
        """Set one property on several nodes, as a batch editor does."""
        for node_id in node_ids:
            node = self.graph.get_node(node_id)
            if node is not None:
                self.graph.update_node_properties(node_id, node.properties.with_value(key, value))

    def move_node(self, node_id: str, x: float, y: float) -> None:
        self.graph.move_node(node_id, x, y)

    def delete_nodes(self, node_ids: Collection[str]) -> None:
        doomed = set(node_ids)
        self.graph.delete_nodes(doomed)
        self.selection.discard(doomed)
        draft = self.wiring.draft
        if draft is not None and draft.from_node_id in doomed:
            self.wiring.cancel()

    def delete_selected(self) -> None:
        if len(self.selection) == 0:
            return
        self.delete_nodes(self.selection.ids)
        self.selection.clear()

    def delete_wires(self, wire_ids: Collection[str]) -> None:
        self.graph.delete_wires(wire_ids)

    def context_targets(self, node_id: str) -> List[str]:
        """Nodes a context-menu action on ``node_id`` applies to."""
        return self.selection.ids if node_id in self.selection else [node_id]

    def clear(self) -> None:
        """Remove every node and wire; keep the name and palette."""
        self.graph.clear()
        self.selection.clear()
        self.wiring.cancel()

    # --- wiring ---

    def start_wire(self, from_node_id: str, from_port_idx: int, start: Point) -> bool:
        return self.wiring.start_wire(from_node_id, from_port_idx, start)

    def move_wire_to(self, point: Point) -> None:
        self.wiring.move_to(point)

    def complete_wire(self, to_node_id: str, to_port_idx: int) -> Optional[Wire]:
        return self.wiring.complete_at(to_node_id, to_port_idx)

    def cancel_wire(self) -> None:
        self.wiring.cancel()

    # --- selection ---

    def select(self, node_id: str, additive: bool = False) -> None:
        self.selection.select(node_id, additive)

    def set_selection(self, node_ids: Iterable[str]) -> None:
        self.selection.set_selection(node_ids)

    def select_all(self) -> None:
        self.selection.set_selection(n.id for n in self.graph.nodes)

    def clear_selection(self) -> None:
        self.selection.clear()

    def lasso(self, start: Point, end: Point, boxes: Iterable[Tuple[str, Rect]]) -> List[str]:
        hits = lasso_select(start, end, boxes)
        self.selection.set_selection(hits)
        return hits

    # --- clipboard ---

    def copy(self) -> int:
        return self.clipboard.copy(self.graph, self.selection.ids)

    def paste(self, offset: Optional[Point] = None) -> PasteResult:
        if offset is None:
            offset = Point(self.settings.paste_offset, self.settings.paste_offset)
        result = self.clipboard.paste(self.graph, offset)
        if result.nodes:
            self.selection.set_selection(n.id for n in result.nodes)
            logger.debug("Pasted %d node(s), %d wire(s)", len(result.nodes), len(result.wires))
        return result

    # --- palette ---

    def add_palette_def(self, d: PaletteDef) -> None:
        self.graph.add_palette_def(d)

    def create_palette_def(self, name: str, inputs_text: str = "", outputs_text: str = "") -> PaletteDef:
        """Add a definition from the "new node" form, renamed if the name is taken."""
        (d,) = merge_palette_defs(self.graph.palette_defs, [make_palette_def(name, inputs_text, outputs_text)])
        self.graph.add_palette_def(d)
        return d

    def import_palette(self, defs: Iterable[PaletteDef]) -> List[PaletteDef]:
        merged = merge_palette_defs(self.graph.palette_defs, defs)
        for d in merged:
            self.graph.add_palette_def(d)
        return merged

    def import_palette_text(self, text: str) -> List[PaletteDef]:
        return self.import_palette(persistence.load_palette_text(text))

    def export_palette_text(self) -> str:
        return persistence.dump_palette(self.graph.palette_defs, indent=self.settings.json_indent)

    # --- persistence ---

    def to_diagram(self) -> Diagram:
        return self.graph.to_diagram(self.name)

    def to_json(self) -> str:
        return persistence.dump_diagram(self.to_diagram(), indent=self.settings.json_indent)

    def replace_with(self, diagram: Diagram) -> None:
        self.graph = GraphModel.from_diagram(diagram, id_factory=self._id_factory)
        self.wiring = WireDraftSession(self.graph)
        self.name = diagram.name
        self.selection.clear()

    def load_json(self, text: Union[str, bytes]) -> None:
        """Replace the document with ``text``.

        Raises DiagramParseError or StructuralValidationError and leaves
        the current document untouched when the text is rejected.
        """
        self.replace_with(persistence.load_diagram_text(text))

    def load(self, path: Path) -> None:
        self.load_json(Path(path).read_bytes())

    def save(self, directory: Path) -> Path:
        path = Path(directory) / persistence.safe_filename(self.name)
        return persistence.write_diagram(self.to_diagram(), path, indent=self.settings.json_indent)
