import json

import pytest

from dxtflow.config import Settings
from dxtflow.document import Document, common_value
from dxtflow.errors import DiagramParseError, StructuralValidationError
from dxtflow.geometry import Point, Rect
from dxtflow.ids import SequentialIds


@pytest.fixture
def doc():
    return Document(name="Doc", settings=Settings(), id_factory=SequentialIds())


def _wired(doc):
    src = doc.add_node("Source", 0, 0)
    sink = doc.add_node("Sink", 100, 0)
    doc.start_wire(src.id, 0, Point(0, 0))
    doc.complete_wire(sink.id, 0)
    return src, sink


def test_defaults_from_settings():
    d = Document(settings=Settings(default_diagram_name="Fresh"))
    assert d.name == "Fresh"
    assert d.nodes == [] and d.wires == [] and d.wire_draft is None
    assert [p.name for p in d.palette_defs] == ["Source", "Sink"]


def test_wire_gesture(doc):
    src, sink = _wired(doc)
    assert len(doc.wires) == 1
    assert doc.wire_draft is None
    doc.start_wire(src.id, 0, Point(0, 0))
    doc.move_wire_to(Point(30, 30))
    assert doc.wire_draft.end == Point(30, 30)
    assert doc.complete_wire(sink.id, 0) is None
    assert len(doc.wires) == 1


def test_copy_paste_selects_new_nodes(doc):
    src, sink = _wired(doc)
    doc.select(src.id)
    doc.select(sink.id, additive=True)
    assert doc.copy() == 2
    result = doc.paste()
    assert doc.selected_ids == [n.id for n in result.nodes]
    assert [(n.x, n.y) for n in result.nodes] == [(40, 40), (140, 40)]
    assert len(result.wires) == 1
    assert len(doc.wires) == 2


def test_paste_offset_from_settings():
    d = Document(settings=Settings(paste_offset=10), id_factory=SequentialIds())
    n = d.add_node("Sink", 5, 5)
    d.select(n.id)
    d.copy()
    assert [(p.x, p.y) for p in d.paste().nodes] == [(15, 15)]


def test_copy_with_empty_selection_keeps_clipboard(doc):
    n = doc.add_node("Sink", 0, 0)
    doc.select(n.id)
    doc.copy()
    doc.clear_selection()
    assert doc.copy() == 0
    assert len(doc.paste().nodes) == 1


def test_lasso_replaces_selection(doc):
    a = doc.add_node("Source", 0, 0)
    b = doc.add_node("Sink", 300, 0)
    doc.select(b.id)
    boxes = [(a.id, Rect.from_xywh(0, 0, 80, 40)), (b.id, Rect.from_xywh(300, 0, 80, 40))]
    assert doc.lasso(Point(-5, -5), Point(50, 50), boxes) == [a.id]
    assert doc.selected_ids == [a.id]
    doc.select_all()
    assert doc.selected_ids == [a.id, b.id]


def test_delete_selected_cascades_and_clears(doc):
    src, sink = _wired(doc)
    doc.select(sink.id)
    doc.delete_selected()
    assert [n.id for n in doc.nodes] == [src.id]
    assert doc.wires == []
    assert doc.selected_ids == []


def test_delete_prunes_selection_and_draft(doc):
    src, sink = _wired(doc)
    doc.set_selection([src.id, sink.id])
    doc.start_wire(src.id, 0, Point(0, 0))
    doc.delete_nodes([src.id])
    assert doc.selected_ids == [sink.id]
    assert doc.wire_draft is None


def test_context_targets(doc):
    a = doc.add_node("Source", 0, 0)
    b = doc.add_node("Sink", 0, 0)
    c = doc.add_node("Sink", 0, 0)
    doc.set_selection([a.id, b.id])
    assert doc.context_targets(a.id) == [a.id, b.id]
    assert doc.context_targets(c.id) == [c.id]


def test_batch_property_edit(doc):
    a = doc.add_node("Sink", 0, 0)
    b = doc.add_node("Sink", 0, 0)
    assert common_value([a, b], "name") == "Sink"
    doc.set_property([a.id, b.id], "description", "drain")
    nodes = doc.nodes
    assert common_value(nodes, "description") == "drain"
    assert all(n.properties.inputs == ["in"] for n in nodes)
    doc.set_property([a.id], "name", "Left")
    assert common_value(doc.nodes, "name") == ""
    assert common_value(doc.nodes, "pythonFile") == ""
    doc.set_property([a.id], "pythonFile", "sink.py")
    assert doc.nodes[0].properties.python_file == "sink.py"


def test_create_palette_def_and_drop(doc):
    d1 = doc.create_palette_def("Map", "x", "y, z")
    d2 = doc.create_palette_def("Map")
    assert (d1.name, d2.name) == ("Map", "Map1")
    n = doc.add_node("Map", 0, 0)
    assert n.properties.inputs == ["x"]
    assert n.properties.outputs == ["y", "z"]


def test_palette_import_export(doc):
    doc.create_palette_def("Map", "x", "y")
    added = doc.import_palette_text('[{"name": "Map", "inputs": [], "outputs": ["o"]}, {"name": "Sink", "inputs": [], "outputs": []}]')
    assert [d.name for d in added] == ["Map1", "Sink1"]
    exported = json.loads(doc.export_palette_text())
    assert [d["name"] for d in exported] == ["Map", "Map1", "Sink1"]


def test_clear_keeps_name_and_palette(doc):
    doc.create_palette_def("Map")
    _wired(doc)
    doc.select_all()
    doc.clear()
    assert doc.nodes == [] and doc.wires == [] and doc.selected_ids == []
    assert doc.name == "Doc"
    assert [d.name for d in doc.graph.palette_defs] == ["Map"]


def test_save_and_load_round_trip(doc, tmp_path):
    _wired(doc)
    doc.create_palette_def("Map", "x", "y")
    doc.name = "My Diagram: v1"
    path = doc.save(tmp_path)
    assert path.name == "My_Diagram_v1.json"

    other = Document(settings=Settings(), id_factory=SequentialIds())
    other.load(path)
    assert other.name == "My Diagram: v1"
    assert other.to_diagram() == doc.to_diagram()


def test_failed_load_leaves_document_intact(doc):
    src, sink = _wired(doc)
    doc.select(src.id)
    before = doc.to_json()

    with pytest.raises(DiagramParseError):
        doc.load_json("not json at all")
    bad = {"name": "T", "nodes": [{"id": "n1", "type": "Source"}], "customNodeDefs": [], "wires": []}
    with pytest.raises(StructuralValidationError) as exc:
        doc.load_json(json.dumps(bad))
    paths = [i.path for i in exc.value.issues]
    assert {"nodes[0].x", "nodes[0].y", "nodes[0].properties"} <= set(paths)

    assert doc.to_json() == before
    assert doc.selected_ids == [src.id]


def test_load_replaces_everything(doc):
    _wired(doc)
    doc.select_all()
    doc.load_json(json.dumps({"name": "Other", "nodes": [], "customNodeDefs": [], "wires": []}))
    assert doc.name == "Other"
    assert doc.nodes == [] and doc.wires == [] and doc.selected_ids == []
    # the graph was replaced, wiring must follow it
    n = doc.add_node("Source", 0, 0)
    m = doc.add_node("Sink", 0, 0)
    assert doc.start_wire(n.id, 0, Point(0, 0))
    assert doc.complete_wire(m.id, 0) is not None


def test_delete_wires_keeps_nodes(doc):
    src, sink = _wired(doc)
    doc.delete_wires([w.id for w in doc.wires])
    assert doc.wires == []
    assert [n.id for n in doc.nodes] == [src.id, sink.id]
    assert not doc.graph.is_input_connected(sink.id, 0)


def test_load_rejects_non_utf8_file(doc, tmp_path):
    _wired(doc)
    before = doc.to_json()
    path = tmp_path / "bad.json"
    path.write_bytes(b'{"name": "\xff\xfe"}')
    with pytest.raises(DiagramParseError):
        doc.load(path)
    assert doc.to_json() == before
