"""Liveness endpoint."""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    ok: bool = True


@router.get("/health", response_model=HealthResponse)
async def get_health() -> HealthResponse:
    """Unconditional liveness signal; does not touch storage."""
    return HealthResponse()
