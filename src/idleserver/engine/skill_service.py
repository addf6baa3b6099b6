"""Skill service — skill point allocation and effect aggregation.

Responsibilities:
- Allocation rules (existence, points, level requirement, connectivity)
- Spending skill points
- Summing the effects of allocated nodes for the active specialization

All methods operate on GameState objects. No network I/O.
"""

from __future__ import annotations

import logging
from typing import Optional

from idleserver.models.game_state import GameState
from idleserver.models.skill_tree import SkillNode, SkillTree
from idleserver.util.constants import ROOT_ROW_Y
from idleserver.util.effects import EffectType, target_matches
from idleserver.util.errors import NotFoundError

log = logging.getLogger(__name__)


class SkillService:
    """Allocation and effect lookup over the skill trees of a GameState.

    Args:
        root_row_y: Layout row whose nodes may start an empty tree.
    """

    def __init__(self, root_row_y: float = ROOT_ROW_Y) -> None:
        self._root_row_y = root_row_y

    # -- Lookup ----------------------------------------------------------

    @staticmethod
    def find(state: GameState, node_id: str) -> Optional[tuple[SkillTree, SkillNode]]:
        """Locate a node and the tree holding it."""
        for tree in state.skill_trees.values():
            node = tree.find_node(node_id)
            if node is not None:
                return tree, node
        return None

    # -- Allocation ------------------------------------------------------

    def can_allocate_node(self, state: GameState, node_id: str) -> bool:
        return self._rejection(state, node_id) is None

    def allocate(self, state: GameState, node_id: str) -> Optional[str]:
        """Spend one skill point on a node. Returns error message or None.

        The node's listed ``skill_points`` is not charged; every allocation
        costs exactly one point.

        Raises:
            NotFoundError: If no tree contains *node_id*.
        """
        found = self.find(state, node_id)
        if found is None:
            raise NotFoundError(f"Unknown skill node: {node_id}")
        tree, node = found

        reason = self._rejection(state, node_id)
        if reason is not None:
            log.debug("Allocation of %s rejected: %s", node_id, reason)
            return reason

        tree.allocated_nodes.add(node.node_id)
        tree.available_points -= 1
        log.info("Allocated %s (%s), %d point(s) left",
                 node.name, tree.specialization.value, tree.available_points)
        return None

    def _rejection(self, state: GameState, node_id: str) -> Optional[str]:
        """Return why a node cannot be allocated, or None if it can."""
        found = self.find(state, node_id)
        if found is None:
            return f"Unknown skill node: {node_id}"
        tree, node = found

        if node.node_id in tree.allocated_nodes:
            return f"{node.name} is already allocated"
        if tree.available_points < 1:
            return "No skill points available"

        level = state.level_of(tree.specialization)
        if level < node.level_requirement:
            return f"{node.name} requires level {node.level_requirement} (have {level})"

        if not tree.allocated_nodes and node.position.y == self._root_row_y:
            return None
        if any(conn in tree.allocated_nodes for conn in node.connections):
            return None
        return f"{node.name} is not connected to an allocated node"

    # -- Effects ---------------------------------------------------------

    def get_node_effect(self, state: GameState, effect_type: EffectType,
                        target: Optional[str] = None) -> float:
        """Sum the matching effect values of the active specialization's tree.

        An effect matches when its type equals *effect_type* and its target
        is absent, the wildcard, or equal to *target*. With ``target=None``
        every effect of the type counts. Returns 0 without an active
        specialization.
        """
        if state.active_specialization is None:
            return 0.0

        tree = state.skill_trees[state.active_specialization]
        total = 0.0
        for node in tree.iter_nodes():
            if node.node_id not in tree.allocated_nodes:
                continue
            for effect in node.effects:
                if effect.effect_type is effect_type and target_matches(effect.target, target):
                    total += effect.value
        return total
