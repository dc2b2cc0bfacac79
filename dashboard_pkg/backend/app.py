from __future__ import annotations

from typing import Dict, Optional

from fastapi import FastAPI
from pydantic import BaseModel, Field

from .service import LinkageService

app = FastAPI(title="Two-Link IK", version="0.1.0")
service = LinkageService()


class ArmRequest(BaseModel):
    first_length: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    second_length: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    direction_angle: Optional[float] = Field(default=None, allow_inf_nan=False)
    target_distance: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)


class Pointer(BaseModel):
    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)


@app.get("/api/status")
def api_status() -> Dict:
    return service.status()


@app.get("/api/state")
def api_state() -> Dict:
    return service.state().to_dict()


@app.get("/api/ranges")
def api_ranges() -> Dict:
    return service.ranges()


@app.post("/api/request")
def api_request(body: ArmRequest) -> Dict:
    changes = body.model_dump(exclude_none=True)
    return service.request(**changes).to_dict()


@app.post("/api/pointer")
def api_pointer(body: Pointer) -> Dict:
    return service.pointer(body.x, body.y).to_dict()


@app.get("/api/events")
def api_events(limit: int = 50) -> Dict:
    limit = max(1, min(limit, 200))
    return {"events": service.events(limit)}
