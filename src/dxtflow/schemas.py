"""Structural contracts for diagram and palette files.

A small JSON-Schema subset, understood by ``dxtflow.validator``.
"""
from __future__ import annotations
from typing import Any, Dict

Schema = Dict[str, Any]

PORT_NAMES: Schema = {
    "type": "array",
    "description": "Port names, in index order",
    "items": {"type": "string", "minLength": 1},
}

NODE_DEF: Schema = {
    "type": "object",
    "description": "A custom node type definition",
    "required": ["name", "inputs", "outputs"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "inputs": PORT_NAMES,
        "outputs": PORT_NAMES,
    },
    "additionalProperties": False,
}

NODE: Schema = {
    "type": "object",
    "required": ["id", "type", "x", "y", "properties"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "type": {"type": "string", "minLength": 1},
        "x": {"type": "number"},
        "y": {"type": "number"},
        "properties": {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "pythonFile": {"type": "string"},
                "description": {"type": "string"},
                "metadata": {"type": "string"},
                "inputs": PORT_NAMES,
                "outputs": PORT_NAMES,
            },
            "additionalProperties": True,
        },
    },
    "additionalProperties": False,
}

WIRE: Schema = {
    "type": "object",
    "required": ["id", "fromNodeId", "fromPortIdx", "toNodeId", "toPortIdx"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "fromNodeId": {"type": "string", "minLength": 1},
        "fromPortIdx": {"type": "integer", "minimum": 0},
        "toNodeId": {"type": "string", "minLength": 1},
        "toPortIdx": {"type": "integer", "minimum": 0},
    },
    "additionalProperties": False,
}

DIAGRAM_SCHEMA: Schema = {
    "type": "object",
    "title": "DxT Diagram Schema",
    "required": ["name", "nodes", "customNodeDefs", "wires"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "nodes": {"type": "array", "items": NODE},
        "customNodeDefs": {"type": "array", "items": NODE_DEF},
        "wires": {"type": "array", "items": WIRE},
    },
    "additionalProperties": False,
}

PALETTE_SCHEMA: Schema = {
    "type": "array",
    "title": "DxT Palette Schema",
    "items": NODE_DEF,
}
