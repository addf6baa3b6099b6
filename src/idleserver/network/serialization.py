"""Serialization — engine snapshots to JSON-ready dicts.

Enum keys become their string values; everything else is plain numbers,
strings and lists.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from idleserver.models.production import ProductionLine
from idleserver.models.resources import Resource
from idleserver.models.skill_tree import SkillNode, SkillTree
from idleserver.models.specialization import Specialization, SpecializationInfo, SpecializationProgress


def resources_to_dict(ledger: Mapping[Resource, float]) -> dict[str, float]:
    return {res.value: amount for res, amount in ledger.items()}


def progress_to_dict(progress: Mapping[Specialization, SpecializationProgress]) -> dict[str, Any]:
    return {
        spec.value: {"level": p.level, "xp": p.xp, "xp_to_next": p.xp_to_next}
        for spec, p in progress.items()
    }


def production_to_dict(line: ProductionLine) -> dict[str, Any]:
    return {
        "line_id": line.line_id,
        "specialization": line.specialization.value,
        "output_resource": line.output_resource.value,
        "output_amount": line.output_amount,
        "description": line.description,
        "requirements": [
            {"resource": req.resource.value, "amount": req.amount} for req in line.requirements
        ],
        "min_specialization_level": line.min_specialization_level,
        "level": line.level,
        "base_output": line.base_output,
        "upgrade_cost": line.upgrade_cost,
        "last_collected": line.last_collected,
    }


def specialization_info_to_dict(info: SpecializationInfo, progress: SpecializationProgress,
                                active: bool) -> dict[str, Any]:
    return {
        "specialization": info.specialization.value,
        "description": info.description,
        "active": active,
        "level": progress.level,
        "level_unlocks": {str(lvl): text for lvl, text in info.level_unlocks.items()},
        "unlocked": sorted(info.unlocks_up_to(progress.level)),
        "chains": {"basic": list(info.basic_lines), "advanced": list(info.advanced_lines)},
    }


def node_to_dict(node: SkillNode, allocated: bool) -> dict[str, Any]:
    return {
        "id": node.node_id,
        "name": node.name,
        "type": node.node_type.value,
        "path": node.path,
        "description": node.description,
        "position": {"x": node.position.x, "y": node.position.y},
        "connections": list(node.connections),
        "requirements": {"level": node.level_requirement, "skill_points": node.skill_points},
        "effects": [
            {
                "type": e.effect_type.value,
                "value": e.value,
                "target": e.target,
                "description": e.description,
            }
            for e in node.effects
        ],
        "allocated": allocated,
    }


def skill_tree_to_dict(tree: SkillTree) -> dict[str, Any]:
    return {
        "specialization": tree.specialization.value,
        "available_points": tree.available_points,
        "allocated_nodes": sorted(tree.allocated_nodes),
        "paths": [
            {
                "id": path.path_id,
                "name": path.name,
                "description": path.description,
                "nodes": [node_to_dict(n, n.node_id in tree.allocated_nodes) for n in path.nodes],
            }
            for path in tree.paths
        ],
    }


def state_to_dict(
    resources: Mapping[Resource, float],
    prices: Mapping[Resource, float],
    progress: Mapping[Specialization, SpecializationProgress],
    productions: Mapping[str, ProductionLine],
    skill_trees: Mapping[Specialization, SkillTree],
    active_specialization: Optional[Specialization],
) -> dict[str, Any]:
    """Bundle every snapshot into one response body."""
    return {
        "active_specialization": active_specialization.value if active_specialization else None,
        "resources": resources_to_dict(resources),
        "market": resources_to_dict(prices),
        "progress": progress_to_dict(progress),
        "productions": {lid: production_to_dict(line) for lid, line in productions.items()},
        "skill_trees": {spec.value: skill_tree_to_dict(t) for spec, t in skill_trees.items()},
    }
