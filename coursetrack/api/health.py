"""Liveness and readiness probes.

  /health: is the process up?  Always 200; `status` says "degraded" when a
            dependency check fails so the orchestrator does not restart us
            for an outage we cannot fix by restarting.
  /ready: can this instance take traffic?  503 while a configured
            database is unreachable, so the load balancer routes around it.
"""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from coursetrack.db import engine as db

router = APIRouter(tags=["health"])


async def _database_check() -> str:
    if db.engine is None:
        return "not_configured"
    return "ok" if await db.ping() else "degraded"


@router.get("/health")
async def health() -> dict:
    checks = {"self": "ok", "database": await _database_check()}
    overall = "degraded" if "degraded" in checks.values() else "ok"
    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready() -> Response:
    if await _database_check() == "degraded":
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response(status_code=status.HTTP_200_OK)
