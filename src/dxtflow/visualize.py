from typing import Dict, List
from .ir import Diagram, Node


def _port(names: List[str], idx: int) -> str:
    return names[idx] if 0 <= idx < len(names) else f"#{idx}"


def ascii_outline(diagram: Diagram) -> str:
    """Nodes in document order, each followed by the wires leaving it."""
    nodes: Dict[str, Node] = diagram.node_map()
    lines = [f"# {diagram.name} ({len(diagram.nodes)} nodes, {len(diagram.wires)} wires)"]
    for i, node in enumerate(diagram.nodes, 1):
        props = node.properties
        label = props.name or node.type
        ins = ", ".join(props.inputs or []) or "none"
        outs = ", ".join(props.outputs or []) or "none"
        lines.append(f"{i:02d}. {node.id} [{node.type}] \"{label}\"  in: {ins} | out: {outs}")
        for w in diagram.wires:
            if w.from_node_id != node.id:
                continue
            target = nodes.get(w.to_node_id)
            in_names = (target.properties.inputs or []) if target else []
            out_port = _port(props.outputs or [], w.from_port_idx)
            lines.append(f"    └─▶ {w.to_node_id}.{_port(in_names, w.to_port_idx)}  ({out_port})")
    if diagram.custom_node_defs:
        lines.append("# Palette")
        for d in diagram.custom_node_defs:
            lines.append(f"  - {d.name}: in [{', '.join(d.inputs)}] out [{', '.join(d.outputs)}]")
    return "\n".join(lines)
