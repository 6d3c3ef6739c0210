from __future__ import annotations
from typing import Collection, Dict, List, NamedTuple

from .geometry import Point
from .graph import GraphModel
from .ir import Node, Wire


class PasteResult(NamedTuple):
    nodes: List[Node]
    wires: List[Wire]


class Clipboard:
    """Snapshot of copied nodes.

    Wires are not stored: on paste, the wires of the *current* graph
    whose ends are both among the copied ids are re-created between the
    new copies.
    """

    def __init__(self):
        self._nodes: List[Node] = []

    @property
    def nodes(self) -> List[Node]:
        return [n.model_copy(deep=True) for n in self._nodes]

    @property
    def is_empty(self) -> bool:
        return not self._nodes

    def copy(self, graph: GraphModel, selected_ids: Collection[str]) -> int:
        """Snapshot the selected nodes. An empty selection leaves the clipboard as it was."""
        if not selected_ids:
            return 0
        wanted = set(selected_ids)
        self._nodes = [n.model_copy(deep=True) for n in graph.nodes if n.id in wanted]
        return len(self._nodes)

    def paste(self, graph: GraphModel, offset: Point) -> PasteResult:
        """Insert copies displaced by ``offset`` from where they were copied."""
        if not self._nodes:
            return PasteResult([], [])

        remap: Dict[str, str] = {}
        new_nodes: List[Node] = []
        for n in self._nodes:
            node = graph.insert_node(n, n.x + offset.x, n.y + offset.y)
            remap[n.id] = node.id
            new_nodes.append(node)

        new_wires: List[Wire] = []
        for w in graph.wires:
            if w.from_node_id in remap and w.to_node_id in remap:
                wire = graph.add_wire(remap[w.from_node_id], w.from_port_idx, remap[w.to_node_id], w.to_port_idx)
                if wire is not None:
                    new_wires.append(wire)
        return PasteResult(new_nodes, new_wires)
