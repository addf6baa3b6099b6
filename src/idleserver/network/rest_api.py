"""REST API — FastAPI application over the engine's command/query surface.

The presentation layer reads snapshots and issues commands through these
endpoints. Commands answer ``{"success": bool, "error": str, ...}``;
unknown ids answer 404.

Usage::

    from idleserver.network.rest_api import create_app

    app = create_app(services)
    # Start with uvicorn as an asyncio task alongside the game loop
"""

from __future__ import annotations

import logging
from typing import Any, Optional, TYPE_CHECKING

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from idleserver.models.resources import TRADABLE_RESOURCES, Resource
from idleserver.models.specialization import Specialization, SpecializationInfo
from idleserver.network.rest_models import (
    AllocateResponse,
    CommandResponse,
    EffectResponse,
    PriceResponse,
    SpecializationRequest,
    TradeRequest,
    TradeResponse,
    UpgradeResponse,
)
from idleserver.network.serialization import (
    production_to_dict,
    progress_to_dict,
    resources_to_dict,
    skill_tree_to_dict,
    specialization_info_to_dict,
    state_to_dict,
)
from idleserver.util.errors import NotFoundError

if TYPE_CHECKING:
    from idleserver.main import Services

log = logging.getLogger(__name__)


def create_app(services: "Services") -> FastAPI:
    """Factory: create and return a configured FastAPI application.

    The ``services`` reference is captured by closure so every endpoint
    can access game logic without global state.
    """
    app = FastAPI(title="Idle Industries", version="1.0.0")

    # CORS — the presentation layer is served from another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        log.warning("%s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    def engine():
        return services.engine

    # =================================================================
    # Snapshots
    # =================================================================

    @app.get("/api/state")
    async def get_state() -> dict[str, Any]:
        e = engine()
        return state_to_dict(
            e.resources(), e.market_prices(), e.progress(),
            e.productions(), e.skill_trees(), e.active_specialization,
        )

    @app.get("/api/resources")
    async def get_resources() -> dict[str, float]:
        return resources_to_dict(engine().resources())

    @app.get("/api/progress")
    async def get_progress() -> dict[str, Any]:
        return progress_to_dict(engine().progress())

    @app.get("/api/status")
    async def get_status() -> dict[str, Any]:
        loop = services.game_loop
        e = engine()
        return {
            "active_specialization": e.active_specialization.value if e.active_specialization else None,
            "running": bool(loop and loop.is_running),
            "tick_count": loop.tick_count if loop else 0,
            "uptime_seconds": loop.uptime_seconds if loop else 0.0,
            "avg_tick_duration_ms": loop.avg_tick_duration_ms if loop else 0.0,
        }

    # =================================================================
    # Specialization
    # =================================================================

    @app.put("/api/specialization", response_model=CommandResponse)
    async def set_specialization(body: SpecializationRequest) -> dict[str, Any]:
        engine().set_active_specialization(body.specialization)
        return {"success": True, "error": ""}

    @app.get("/api/specializations")
    async def get_specializations() -> dict[str, Any]:
        e = engine()
        progress = e.progress()
        return {
            spec.value: specialization_info_to_dict(
                info, progress[spec], spec is e.active_specialization)
            for spec, info in services.specializations.items()
        }

    @app.get("/api/specializations/{specialization}")
    async def get_specialization(specialization: str) -> dict[str, Any]:
        e = engine()
        spec = Specialization.parse(specialization)
        info = services.specializations.get(spec) or SpecializationInfo(specialization=spec)
        return specialization_info_to_dict(info, e.progress()[spec], spec is e.active_specialization)

    # =================================================================
    # Production
    # =================================================================

    def _production_view(line_id: str, line) -> dict[str, Any]:
        e = engine()
        view = production_to_dict(line)
        view["can_produce"] = e.can_produce(line_id)
        view["can_afford_upgrade"] = e.can_afford_upgrade(line_id)
        view["rate_per_second"] = e.production_rate(line_id)
        return view

    @app.get("/api/productions")
    async def get_productions() -> dict[str, Any]:
        return {lid: _production_view(lid, line) for lid, line in engine().productions().items()}

    @app.get("/api/productions/{line_id}")
    async def get_production(line_id: str) -> dict[str, Any]:
        lines = engine().productions()
        if line_id not in lines:
            raise NotFoundError(f"Unknown production line: {line_id}")
        return _production_view(line_id, lines[line_id])

    @app.post("/api/productions/{line_id}/upgrade", response_model=UpgradeResponse)
    async def upgrade_production(line_id: str) -> dict[str, Any]:
        e = engine()
        error = e.upgrade_production(line_id)
        line = e.productions()[line_id]
        return {"success": error is None, "error": error or "", "production": _production_view(line_id, line)}

    # =================================================================
    # Market
    # =================================================================

    def _price_view(resource: Resource) -> dict[str, Any]:
        e = engine()
        return {
            "resource": resource.value,
            "price": e.market_prices()[resource],
            "buy_price": e.buy_price(resource),
            "sell_price": e.sell_price(resource),
        }

    @app.get("/api/market", response_model=list[PriceResponse])
    async def get_market() -> list[dict[str, Any]]:
        return [_price_view(res) for res in TRADABLE_RESOURCES]

    @app.get("/api/market/{resource}", response_model=PriceResponse)
    async def get_price(resource: str) -> dict[str, Any]:
        res = Resource.parse(resource)
        if res not in TRADABLE_RESOURCES:
            raise NotFoundError(f"Resource is not traded: {res.value}")
        return _price_view(res)

    def _trade_response(error: Optional[str], body: TradeRequest) -> dict[str, Any]:
        ledger = engine().resources()
        res = Resource.parse(body.resource)
        return {
            "success": error is None,
            "error": error or "",
            "resource": res.value,
            "amount": body.amount,
            "money": ledger[Resource.MONEY],
            "held": ledger[res],
        }

    @app.post("/api/market/buy", response_model=TradeResponse)
    async def buy(body: TradeRequest) -> dict[str, Any]:
        error = engine().buy_resource(body.resource, body.amount)
        return _trade_response(error, body)

    @app.post("/api/market/sell", response_model=TradeResponse)
    async def sell(body: TradeRequest) -> dict[str, Any]:
        error = engine().sell_resource(body.resource, body.amount)
        return _trade_response(error, body)

    # =================================================================
    # Skill trees
    # =================================================================

    @app.get("/api/skill-trees")
    async def get_skill_trees() -> dict[str, Any]:
        return {spec.value: skill_tree_to_dict(t) for spec, t in engine().skill_trees().items()}

    @app.get("/api/skill-trees/{specialization}")
    async def get_skill_tree(specialization: str) -> dict[str, Any]:
        spec = Specialization.parse(specialization)
        return skill_tree_to_dict(engine().skill_trees()[spec])

    @app.get("/api/skills/effect", response_model=EffectResponse)
    async def get_effect(effect_type: str = Query(alias="type"),
                         target: Optional[str] = None) -> dict[str, Any]:
        value = engine().get_node_effect(effect_type, target)
        return {"type": effect_type, "target": target, "value": value}

    @app.get("/api/skills/{node_id}/can-allocate")
    async def can_allocate(node_id: str) -> dict[str, Any]:
        return {"node_id": node_id, "can_allocate": engine().can_allocate_node(node_id)}

    @app.post("/api/skills/{node_id}/allocate", response_model=AllocateResponse)
    async def allocate(node_id: str) -> dict[str, Any]:
        e = engine()
        error = e.allocate_skill_point(node_id)
        spec = Specialization.parse(node_id.split("-", 1)[0])
        return {
            "success": error is None,
            "error": error or "",
            "node_id": node_id,
            "available_points": e.skill_trees()[spec].available_points,
        }

    return app
