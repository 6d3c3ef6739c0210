from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional, Tuple

from .geometry import Point

# JSON keys that map onto named NodeProperties fields
_NAMED_KEYS = {
    "name": "name",
    "inputs": "inputs",
    "outputs": "outputs",
    "pythonFile": "python_file",
    "description": "description",
    "metadata": "metadata",
}


class NodeProperties(BaseModel):
    """Property bag of a node.

    The conventional keys have named accessors; anything else the user
    (or a loaded file) puts on a node is kept in the extension bag and
    written back out unchanged.
    """
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    inputs: Optional[List[str]] = None     # input port names, by index
    outputs: Optional[List[str]] = None    # output port names, by index
    python_file: Optional[str] = Field(default=None, alias="pythonFile")
    description: Optional[str] = None
    metadata: Optional[str] = None         # opaque, usually a JSON string

    @property
    def extras(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})

    @property
    def input_count(self) -> int:
        return len(self.inputs or [])

    @property
    def output_count(self) -> int:
        return len(self.outputs or [])

    def get(self, key: str, default: Any = None) -> Any:
        if key in _NAMED_KEYS:
            value = getattr(self, _NAMED_KEYS[key])
            return default if value is None else value
        return self.extras.get(key, default)

    def with_value(self, key: str, value: Any) -> "NodeProperties":
        data = self.to_json()
        data[key] = value
        return NodeProperties.model_validate(data)

    def to_json(self) -> Dict[str, Any]:
        # unset named keys are omitted; extension keys go out as loaded, nulls included
        data = {key: getattr(self, field) for key, field in _NAMED_KEYS.items()}
        data = {key: value for key, value in data.items() if value is not None}
        data.update(self.extras)
        return data


class Node(BaseModel):
    id: str
    type: str
    x: float
    y: float
    properties: NodeProperties = Field(default_factory=NodeProperties)


class PaletteDef(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    inputs: Tuple[str, ...] = ()
    outputs: Tuple[str, ...] = ()


class Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    from_node_id: str = Field(alias="fromNodeId")
    from_port_idx: int = Field(alias="fromPortIdx", ge=0)
    to_node_id: str = Field(alias="toNodeId")
    to_port_idx: int = Field(alias="toPortIdx", ge=0)

    @property
    def target(self) -> Tuple[str, int]:
        return (self.to_node_id, self.to_port_idx)

    def touches(self, node_ids) -> bool:
        return self.from_node_id in node_ids or self.to_node_id in node_ids


class WireDraft(BaseModel):
    # The origin never changes during a drag; moves produce a copy.
    model_config = ConfigDict(frozen=True)

    from_node_id: str
    from_port_idx: int
    start: Point
    end: Point


class Diagram(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    nodes: List[Node] = Field(default_factory=list)
    custom_node_defs: List[PaletteDef] = Field(default_factory=list, alias="customNodeDefs")
    wires: List[Wire] = Field(default_factory=list)

    def node_map(self) -> Dict[str, Node]:
        return {n.id: n for n in self.nodes}

    def to_json(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "nodes": [
                {"id": n.id, "type": n.type, "x": n.x, "y": n.y, "properties": n.properties.to_json()}
                for n in self.nodes
            ],
            "customNodeDefs": [d.model_dump(mode="json") for d in self.custom_node_defs],
            "wires": [w.model_dump(mode="json", by_alias=True) for w in self.wires],
        }
