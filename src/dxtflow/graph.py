from __future__ import annotations
from logging import getLogger
from typing import Any, Collection, Iterable, List, Mapping, Optional, Set, Union

from .ids import IdFactory, uuid_ids
from .ir import Diagram, Node, NodeProperties, PaletteDef, Wire
from .palette import BUILTIN_DEFS

logger = getLogger(__name__)

PropertiesLike = Union[NodeProperties, Mapping[str, Any]]


class GraphModel:
    """Nodes, wires and custom palette definitions of one diagram.

    Lookups by an unknown id are no-ops. Invariants kept here:
      - node ids are unique, wire ids are unique
      - an input port has at most one incoming wire
      - no wire outlives either of its endpoint nodes
    """

    def __init__(
        self,
        nodes: Iterable[Node] = (),
        wires: Iterable[Wire] = (),
        palette_defs: Iterable[PaletteDef] = (),
        id_factory: Optional[IdFactory] = None,
    ):
        self._nodes: List[Node] = list(nodes)
        self._wires: List[Wire] = list(wires)
        self._defs: List[PaletteDef] = list(palette_defs)
        self._new_id = id_factory or uuid_ids

    @classmethod
    def from_diagram(cls, diagram: Diagram, id_factory: Optional[IdFactory] = None) -> "GraphModel":
        copy = diagram.model_copy(deep=True)
        return cls(copy.nodes, copy.wires, copy.custom_node_defs, id_factory=id_factory)

    def to_diagram(self, name: str) -> Diagram:
        return Diagram(
            name=name,
            nodes=[n.model_copy(deep=True) for n in self._nodes],
            custom_node_defs=list(self._defs),
            wires=[w.model_copy() for w in self._wires],
        )

    # --- read accessors ---

    @property
    def nodes(self) -> List[Node]:
        return list(self._nodes)

    @property
    def wires(self) -> List[Wire]:
        return list(self._wires)

    @property
    def palette_defs(self) -> List[PaletteDef]:
        return list(self._defs)

    @property
    def all_defs(self) -> List[PaletteDef]:
        return list(BUILTIN_DEFS) + self._defs

    def get_node(self, node_id: str) -> Optional[Node]:
        return next((n for n in self._nodes if n.id == node_id), None)

    def node_ids(self) -> Set[str]:
        return {n.id for n in self._nodes}

    def find_def(self, name: str) -> Optional[PaletteDef]:
        # built-ins win over a custom def of the same name
        return next((d for d in self.all_defs if d.name == name), None)

    def wire_into(self, node_id: str, port_idx: int) -> Optional[Wire]:
        return next((w for w in self._wires if w.target == (node_id, port_idx)), None)

    def is_input_connected(self, node_id: str, port_idx: int) -> bool:
        return self.wire_into(node_id, port_idx) is not None

    def is_output_connected(self, node_id: str, port_idx: int) -> bool:
        return any(w.from_node_id == node_id and w.from_port_idx == port_idx for w in self._wires)

    # --- ids ---

    def _fresh_id(self, prefix: str, taken: Collection[str]) -> str:
        new_id = self._new_id(prefix)
        while new_id in taken:
            new_id = self._new_id(prefix)
        return new_id

    def fresh_node_id(self) -> str:
        return self._fresh_id("node", self.node_ids())

    def fresh_wire_id(self) -> str:
        return self._fresh_id("wire", {w.id for w in self._wires})

    # --- nodes ---

    def add_node(self, type: str, x: float, y: float) -> Node:
        """Create a node of palette type ``type`` at (x, y).

        Unregistered types are accepted and get no ports.
        """
        d = self.find_def(type)
        if d is not None:
            props = NodeProperties(name=type, inputs=list(d.inputs), outputs=list(d.outputs))
        else:
            props = NodeProperties(name=type)
        node = Node(id=self.fresh_node_id(), type=type, x=x, y=y, properties=props)
        self._nodes.append(node)
        logger.debug("Added node %s [%s] at (%s, %s)", node.id, type, x, y)
        return node

    def insert_node(self, template: Node, x: float, y: float) -> Node:
        """Append a deep copy of ``template`` under a fresh id at (x, y)."""
        node = template.model_copy(deep=True, update={"id": self.fresh_node_id(), "x": x, "y": y})
        self._nodes.append(node)
        return node

    def update_node_properties(self, node_id: str, properties: PropertiesLike) -> None:
        """Replace a node's properties wholesale.

        Port lists can be renamed here but not grown or shrunk; a
        replacement that omits a port list, or changes its length, keeps
        the current one.
        """
        node = self.get_node(node_id)
        if node is None:
            return
        if isinstance(properties, NodeProperties):
            new = properties.model_copy(deep=True)
        else:
            new = NodeProperties.model_validate(dict(properties))
        old = node.properties
        if new.inputs is None or new.input_count != old.input_count:
            new.inputs = None if old.inputs is None else list(old.inputs)
        if new.outputs is None or new.output_count != old.output_count:
            new.outputs = None if old.outputs is None else list(old.outputs)
        node.properties = new

    def move_node(self, node_id: str, x: float, y: float) -> None:
        node = self.get_node(node_id)
        if node is None:
            return
        node.x = x
        node.y = y

    def delete_nodes(self, node_ids: Collection[str]) -> None:
        """Remove the nodes and every wire attached to them."""
        doomed = set(node_ids)
        if not doomed:
            return
        nodes = [n for n in self._nodes if n.id not in doomed]
        wires = [w for w in self._wires if not w.touches(doomed)]
        logger.debug(
            "Deleted %d node(s) and %d wire(s)",
            len(self._nodes) - len(nodes),
            len(self._wires) - len(wires),
        )
        self._nodes, self._wires = nodes, wires

    def clear(self) -> None:
        self._nodes, self._wires = [], []

    # --- wires ---

    def add_wire(self, from_node_id: str, from_port_idx: int, to_node_id: str, to_port_idx: int) -> Optional[Wire]:
        """Connect an output to an input.

        Returns None when either node is missing or the input already has
        a wire. Port existence and port types are not checked.
        """
        missing = [nid for nid in (from_node_id, to_node_id) if self.get_node(nid) is None]
        if missing:
            logger.debug("Rejected wire: unknown node(s) %s", ", ".join(missing))
            return None
        if self.is_input_connected(to_node_id, to_port_idx):
            logger.debug("Rejected wire into %s[%d]: input already connected", to_node_id, to_port_idx)
            return None
        wire = Wire(
            id=self.fresh_wire_id(),
            from_node_id=from_node_id,
            from_port_idx=from_port_idx,
            to_node_id=to_node_id,
            to_port_idx=to_port_idx,
        )
        self._wires.append(wire)
        logger.debug("Added wire %s: %s[%d] -> %s[%d]", wire.id, from_node_id, from_port_idx, to_node_id, to_port_idx)
        return wire

    def delete_wires(self, wire_ids: Collection[str]) -> None:
        doomed = set(wire_ids)
        self._wires = [w for w in self._wires if w.id not in doomed]

    # --- palette ---

    def add_palette_def(self, d: PaletteDef) -> None:
        self._defs.append(d)
