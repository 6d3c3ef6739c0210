from __future__ import annotations
from logging import getLogger
from typing import List, Optional

from .geometry import Point, wire_route
from .graph import GraphModel
from .ir import Wire, WireDraft

logger = getLogger(__name__)


class WireDraftSession:
    """The in-progress wire of a connect gesture.

    Idle while ``draft`` is None, dragging otherwise. Every gesture ends
    back in idle, whether the wire was accepted, rejected or cancelled.
    """

    def __init__(self, graph: GraphModel):
        self.graph = graph
        self._draft: Optional[WireDraft] = None

    @property
    def draft(self) -> Optional[WireDraft]:
        return self._draft

    @property
    def is_dragging(self) -> bool:
        return self._draft is not None

    def start_wire(self, from_node_id: str, from_port_idx: int, start: Point) -> bool:
        """Begin dragging from an output port. Returns False if there is no such port."""
        node = self.graph.get_node(from_node_id)
        if node is None or not 0 <= from_port_idx < node.properties.output_count:
            logger.debug("No output port %s[%d] to start a wire from", from_node_id, from_port_idx)
            return False
        start = Point(*start)
        self._draft = WireDraft(from_node_id=from_node_id, from_port_idx=from_port_idx, start=start, end=start)
        return True

    def move_to(self, point: Point) -> None:
        if self._draft is None:
            return
        self._draft = self._draft.model_copy(update={"end": Point(*point)})

    def complete_at(self, to_node_id: str, to_port_idx: int) -> Optional[Wire]:
        """Drop onto an input port. None if idle, the node is unknown or the input is taken."""
        draft, self._draft = self._draft, None
        if draft is None:
            return None
        return self.graph.add_wire(draft.from_node_id, draft.from_port_idx, to_node_id, to_port_idx)

    def cancel(self) -> None:
        self._draft = None

    def route(self) -> List[Point]:
        """Polyline for the provisional line; empty when idle."""
        if self._draft is None:
            return []
        return wire_route(self._draft.start, self._draft.end)
