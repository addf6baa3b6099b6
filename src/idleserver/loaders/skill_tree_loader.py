"""Skill tree loader — parses config/skill_trees.yaml into SkillTree models.

File layout (one section per specialization)::

    mining:
      mining:                       # path id
        name: Mining Path
        description: ...
        nodes:
          - name: Stone Mastery
            type: normal
            position: [100, 100]    # optional, grid layout otherwise
            connections: [Efficient Quarrying]
            level: 1
            skill_points: 1
            effects:
              - {type: production_speed, value: 10, target: stone}

Connections name nodes of the same path; ``other_path/Node Name`` reaches
into another path of the same specialization. Connections are undirected:
the loader adds the reverse edge to the connected node.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from idleserver.models.skill_tree import (
    Effect,
    NodeType,
    Position,
    SkillNode,
    SkillPath,
    SkillTree,
    calculate_node_position,
    generate_node_id,
)
from idleserver.models.specialization import Specialization
from idleserver.util.effects import EffectType

log = logging.getLogger(__name__)

DEFAULT_SKILL_TREES_PATH = "config/skill_trees.yaml"


def _connection_id(spec: Specialization, path_id: str, ref: str) -> str:
    if "/" in ref:
        other_path, name = ref.split("/", 1)
        return generate_node_id(spec, other_path.strip(), name)
    return generate_node_id(spec, path_id, ref)


def _parse_effect(raw: dict) -> Effect:
    target = raw.get("target")
    return Effect(
        effect_type=EffectType(raw["type"]),
        value=float(raw["value"]),
        target=str(target) if target is not None else None,
        description=raw.get("description", ""),
    )


def _parse_node(spec: Specialization, path_id: str, path_index: int,
                node_index: int, raw: dict) -> SkillNode:
    name = raw["name"]
    pos = raw.get("position")
    position = Position(float(pos[0]), float(pos[1])) if pos else calculate_node_position(path_index, node_index)
    return SkillNode(
        node_id=generate_node_id(spec, path_id, name),
        name=name,
        path=path_id,
        specialization=spec,
        position=position,
        node_type=NodeType(raw.get("type", "normal")),
        connections=[_connection_id(spec, path_id, ref) for ref in raw.get("connections", [])],
        level_requirement=int(raw.get("level", 1)),
        skill_points=int(raw.get("skill_points", 1)),
        effects=[_parse_effect(e) for e in raw.get("effects", [])],
        description=raw.get("description", ""),
    )


def _parse_tree(spec: Specialization, section: dict) -> SkillTree:
    tree = SkillTree(specialization=spec)
    for path_index, (path_id, attrs) in enumerate((section or {}).items()):
        attrs = attrs or {}
        path = SkillPath(
            path_id=path_id,
            name=attrs.get("name", path_id),
            specialization=spec,
            description=attrs.get("description", ""),
        )
        for node_index, raw in enumerate(attrs.get("nodes", [])):
            path.nodes.append(_parse_node(spec, path_id, path_index, node_index, raw))
        tree.paths.append(path)

    nodes = {node.node_id: node for node in tree.iter_nodes()}
    for node in nodes.values():
        for conn in node.connections:
            other = nodes.get(conn)
            if other is None:
                raise ValueError(f"Node {node.node_id} connects to unknown node {conn}")
            if node.node_id not in other.connections:
                other.connections.append(node.node_id)
    return tree


def load_skill_trees(path: str | Path = DEFAULT_SKILL_TREES_PATH) -> dict[Specialization, SkillTree]:
    """Load skill tree templates for every specialization.

    Specializations without a section get an empty tree.

    Raises:
        FileNotFoundError: If the catalog file does not exist.
        ValueError: If a node connects to a node that is not defined.
    """
    path = Path(path)
    with path.open() as f:
        data = yaml.safe_load(f) or {}

    trees: dict[Specialization, SkillTree] = {}
    for key, section in data.items():
        spec = Specialization.parse(key)
        trees[spec] = _parse_tree(spec, section)
    for spec in Specialization:
        if spec not in trees:
            log.warning("No skill tree defined for %s — using an empty tree", spec.value)
            trees[spec] = SkillTree(specialization=spec)
    return trees
