"""Pydantic request/response models for the REST API.

These models define the HTTP request bodies and command response shapes.
Snapshot responses are plain dicts built by ``network.serialization``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from idleserver.models.specialization import Specialization


# ===================================================================
# Commands
# ===================================================================


class SpecializationRequest(BaseModel):
    specialization: Specialization


class TradeRequest(BaseModel):
    resource: str
    amount: float = Field(gt=0)


class CommandResponse(BaseModel):
    success: bool
    error: str = ""


class UpgradeResponse(CommandResponse):
    production: Optional[Dict[str, Any]] = None


class TradeResponse(CommandResponse):
    resource: str = ""
    amount: float = 0.0
    money: float = 0.0
    held: float = 0.0


class AllocateResponse(CommandResponse):
    node_id: str = ""
    available_points: int = 0


# ===================================================================
# Queries
# ===================================================================


class EffectResponse(BaseModel):
    type: str
    target: Optional[str] = None
    value: float


class PriceResponse(BaseModel):
    resource: str
    price: float
    buy_price: float
    sell_price: float
