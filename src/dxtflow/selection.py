from __future__ import annotations
from typing import Collection, Iterable, Iterator, List, Tuple

from .geometry import Point, Rect


class Selection:
    """Selected node ids. A set, kept in selection order for stable iteration."""

    def __init__(self, ids: Iterable[str] = ()):
        self._ids: List[str] = []
        self.set_selection(ids)

    @property
    def ids(self) -> List[str]:
        return list(self._ids)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._ids))

    def __len__(self) -> int:
        return len(self._ids)

    def select(self, node_id: str, additive: bool = False) -> None:
        if not additive:
            self._ids = [node_id]
        elif node_id not in self._ids:
            self._ids.append(node_id)

    def set_selection(self, ids: Iterable[str]) -> None:
        self._ids = list(dict.fromkeys(ids))

    def clear(self) -> None:
        self._ids = []

    def discard(self, ids: Collection[str]) -> None:
        gone = set(ids)
        self._ids = [i for i in self._ids if i not in gone]


def lasso_select(start: Point, end: Point, boxes: Iterable[Tuple[str, Rect]]) -> List[str]:
    """Ids whose on-screen box intersects the lasso dragged from start to end.

    ``boxes`` are (node id, bounding box) pairs from the rendering layer,
    in the same coordinate space as the lasso corners.
    """
    region = Rect.from_corners(start, end)
    return [node_id for node_id, box in boxes if box.intersects(region)]
