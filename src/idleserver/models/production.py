"""Production line model — one recipe per producible resource.

Lines are loaded from config/productions.yaml via the production_loader.
Each game receives its own copy so upgrades never touch the catalog.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from idleserver.models.resources import Resource
from idleserver.models.specialization import Specialization


@dataclass(frozen=True)
class ResourceRequirement:
    """Input consumed per unit of output."""

    resource: Resource
    amount: float


@dataclass
class ProductionLine:
    """A recipe converting optional inputs into one output resource.

    Attributes:
        line_id: Unique identifier (e.g. ``stone_mining``).
        specialization: Industry that owns and runs this line.
        output_resource: Resource produced.
        output_amount: Units of output per produced unit.
        description: Human-readable description.
        requirements: Inputs consumed per produced unit.
        min_specialization_level: Owning specialization level needed to run.

        level: Upgrade level, starts at 1.
        base_output: Output rate per second per level, x1.5 per upgrade.
        upgrade_cost: Money needed for the next upgrade.
        last_collected: Timestamp of the last tick in which the line produced.
    """

    line_id: str
    specialization: Specialization
    output_resource: Resource
    output_amount: float = 1.0
    description: str = ""
    requirements: list[ResourceRequirement] = field(default_factory=list)
    min_specialization_level: Optional[int] = None

    # Mutable progression
    level: int = 1
    base_output: float = 1.0
    upgrade_cost: float = 10.0
    last_collected: float = 0.0
