"""Specialization loader — parses config/specializations.yaml.

File layout::

    mining:
      description: Gain XP by producing stone and ore.
      unlocks:
        1: Stone Mining
        3: Brick Making (requires stone)
      chains:
        basic: [stone_mining]
        advanced: [brick_making]
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import yaml

from idleserver.models.specialization import Specialization, SpecializationInfo

log = logging.getLogger(__name__)

DEFAULT_SPECIALIZATIONS_PATH = "config/specializations.yaml"


def _parse_info(spec: Specialization, attrs: dict) -> SpecializationInfo:
    chains = attrs.get("chains") or {}
    return SpecializationInfo(
        specialization=spec,
        description=attrs.get("description", ""),
        level_unlocks={int(lvl): str(text) for lvl, text in sorted(
            (attrs.get("unlocks") or {}).items(), key=lambda item: int(item[0]))},
        basic_lines=list(chains.get("basic", [])),
        advanced_lines=list(chains.get("advanced", [])),
    )


def load_specialization_info(
    path: str | Path = DEFAULT_SPECIALIZATIONS_PATH,
) -> dict[Specialization, SpecializationInfo]:
    """Load descriptions, level unlocks and production chains.

    A missing file logs a warning; specializations without a section get
    empty metadata.
    """
    p = Path(path)
    data: dict = {}
    if p.exists():
        with p.open() as f:
            data = yaml.safe_load(f) or {}
    else:
        log.warning("Specialization info not found at %s — using empty metadata", p)

    infos = {}
    for key, attrs in data.items():
        spec = Specialization.parse(key)
        infos[spec] = _parse_info(spec, attrs or {})
    for spec in Specialization:
        infos.setdefault(spec, SpecializationInfo(specialization=spec))
    return infos


def check_chains(infos: dict[Specialization, SpecializationInfo], line_ids: Iterable[str]) -> None:
    """Ensure every chain entry names a known production line.

    Raises:
        ValueError: On an unknown line id.
    """
    known = set(line_ids)
    for spec, info in infos.items():
        for line_id in info.basic_lines + info.advanced_lines:
            if line_id not in known:
                raise ValueError(f"Chain of {spec.value} names unknown production line {line_id}")
