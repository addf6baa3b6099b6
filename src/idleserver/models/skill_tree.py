"""Skill tree model — paths of allocatable nodes per specialization.

Trees are loaded from config/skill_trees.yaml via the skill_tree_loader.
Node ids are derived from specialization, path and node name so they are
stable across restarts.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from idleserver.models.specialization import Specialization
from idleserver.util.effects import EffectType

# Layout grid, used by the loader when a node has no explicit position.
GRID_SIZE = 80
PATH_SPACING = 200
INITIAL_X_OFFSET = 300
INITIAL_Y_OFFSET = 100


class NodeType(Enum):
    """Tier marker of a node. Does not change its allocation cost."""

    NORMAL = "normal"
    NOTABLE = "notable"
    KEYSTONE = "keystone"


@dataclass(frozen=True)
class Effect:
    """A percentage modifier granted by an allocated node."""

    effect_type: EffectType
    value: float
    target: Optional[str] = None
    description: str = ""


@dataclass(frozen=True)
class Position:
    x: float
    y: float


@dataclass
class SkillNode:
    """A single allocatable node.

    Attributes:
        node_id: ``{specialization}-{path}-{slug}``.
        name: Display name.
        node_type: Tier marker (normal, notable, keystone).
        path: Id of the path this node belongs to.
        specialization: Owning specialization.
        position: Layout position; ``y`` also marks the root row.
        connections: Ids of neighbouring nodes.
        level_requirement: Specialization level needed to allocate.
        skill_points: Listed point cost. Informational, allocation always
            spends exactly one point.
        effects: Modifiers granted once allocated.
        description: Human-readable description.
    """

    node_id: str
    name: str
    path: str
    specialization: Specialization
    position: Position
    node_type: NodeType = NodeType.NORMAL
    connections: list[str] = field(default_factory=list)
    level_requirement: int = 1
    skill_points: int = 1
    effects: list[Effect] = field(default_factory=list)
    description: str = ""


@dataclass
class SkillPath:
    path_id: str
    name: str
    specialization: Specialization
    description: str = ""
    nodes: list[SkillNode] = field(default_factory=list)


@dataclass
class SkillTree:
    """All paths of one specialization plus its allocation state."""

    specialization: Specialization
    paths: list[SkillPath] = field(default_factory=list)
    available_points: int = 0
    allocated_nodes: set[str] = field(default_factory=set)

    def iter_nodes(self) -> Iterator[SkillNode]:
        for path in self.paths:
            yield from path.nodes

    def find_node(self, node_id: str) -> Optional[SkillNode]:
        for node in self.iter_nodes():
            if node.node_id == node_id:
                return node
        return None


def generate_node_id(specialization: Specialization, path: str, name: str) -> str:
    """Derive a node id, e.g. ``mining-mining-stone-mastery``."""
    slug = re.sub(r"\s+", "-", name.strip().lower())
    return f"{specialization.value}-{path}-{slug}"


def calculate_node_position(path_index: int, node_index: int) -> Position:
    """Default layout: paths side by side, nodes stepping down and zig-zagging."""
    return Position(
        x=INITIAL_X_OFFSET + path_index * PATH_SPACING + (0 if node_index % 2 == 0 else GRID_SIZE / 2),
        y=INITIAL_Y_OFFSET + node_index * GRID_SIZE,
    )
