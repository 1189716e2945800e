from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from responsible_tool import __version__
from responsible_tool.engine import CollectingSink, FixedClock, Order, ResponsibleResolver
from responsible_tool.api.mapping_api import router as mapping_router
from responsible_tool.api import state

app = FastAPI(
    title="Responsible Tool API",
    description="Resolves the Bitrix responsible for incoming Shopify orders",
    version=__version__,
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include mapping management API
app.include_router(mapping_router)


class SimulatedTime(BaseModel):
    """Local time to resolve at instead of the real clock (0 = Sunday)."""
    weekday: int = Field(ge=0, le=6)
    hour: int = Field(default=0, ge=0, le=23)
    minute: int = Field(default=0, ge=0, le=59)


class ResolveRequest(BaseModel):
    order: Dict[str, Any]
    at: Optional[SimulatedTime] = None


@app.get("/")
async def root():
    return {"status": "online", "message": "Responsible Tool API Active"}


@app.post("/resolve")
async def resolve_responsible(req: ResolveRequest):
    try:
        config = state.mapping_store.config
    except (FileNotFoundError, ValueError) as e:
        raise HTTPException(status_code=503, detail=f"Mapping unavailable: {e}")

    resolver = state.resolver
    if req.at is not None:
        resolver = ResponsibleResolver(
            clock=FixedClock(req.at.weekday, req.at.hour, req.at.minute),
            sink=state.resolver.sink,
        )

    sink = CollectingSink(forward_to=state.resolver.sink)
    result = resolver.resolve(config, Order.from_shopify(req.order), sink=sink)
    return {**result.to_dict(), "warnings": sink.messages}


@app.get("/system/status")
async def get_status():
    try:
        config = state.mapping_store.config
        counts = config.counts()
        mapping_error = None
    except (FileNotFoundError, ValueError) as e:
        config, counts, mapping_error = None, {}, str(e)

    return {
        "engine_active": True,
        "timezone": state.clock.tz_name,
        "local_time": str(state.clock.now()),
        "mapping_loaded": config is not None,
        "mapping_error": mapping_error,
        "default_configured": bool(config and config.default_id not in (None, '')),
        "mapping_counts": counts,
        "mapping_last_compile": state.mapping_store.loaded_at,
    }
