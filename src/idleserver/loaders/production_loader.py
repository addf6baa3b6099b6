"""Production loader — parses config/productions.yaml into ProductionLine models.

File layout::

    stone_mining:
      specialization: mining
      output: stone
      upgrade_cost: 10
      description: Extract stone from the quarry
    brick_making:
      specialization: mining
      output: bricks
      requirements: {stone: 2}
      min_level: 3
      upgrade_cost: 20

Lines keep the order of the file; the tick processes them in that order.
"""

from __future__ import annotations

from pathlib import Path

import yaml

from idleserver.models.production import ProductionLine, ResourceRequirement
from idleserver.models.resources import Resource
from idleserver.models.specialization import Specialization

DEFAULT_PRODUCTIONS_PATH = "config/productions.yaml"


def _parse_requirements(raw: dict | list | None) -> list[ResourceRequirement]:
    """Accept either ``{resource: amount}`` or ``[{resource, amount}]``."""
    if not raw:
        return []
    if isinstance(raw, dict):
        pairs = raw.items()
    else:
        pairs = ((entry["resource"], entry["amount"]) for entry in raw)
    return [ResourceRequirement(Resource.parse(res), float(amount)) for res, amount in pairs]


def _parse_line(line_id: str, attrs: dict) -> ProductionLine:
    min_level = attrs.get("min_level")
    return ProductionLine(
        line_id=line_id,
        specialization=Specialization.parse(attrs["specialization"]),
        output_resource=Resource.parse(attrs["output"]),
        output_amount=float(attrs.get("output_amount", 1)),
        description=attrs.get("description", ""),
        requirements=_parse_requirements(attrs.get("requirements")),
        min_specialization_level=int(min_level) if min_level is not None else None,
        base_output=float(attrs.get("base_output", 1)),
        upgrade_cost=float(attrs.get("upgrade_cost", 10)),
    )


def load_productions(path: str | Path = DEFAULT_PRODUCTIONS_PATH) -> list[ProductionLine]:
    """Load all production line templates from a YAML file.

    Raises:
        FileNotFoundError: If the catalog file does not exist.
        NotFoundError: If a line names an unknown resource or specialization.
    """
    path = Path(path)
    with path.open() as f:
        data = yaml.safe_load(f) or {}

    lines: list[ProductionLine] = []
    for line_id, attrs in data.items():
        if not isinstance(attrs, dict):
            continue
        lines.append(_parse_line(line_id, attrs))
    return lines
