"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running
and Postgres is reachable.
"""

from fastapi import APIRouter, Request

from kitchenhand import __version__
from kitchenhand.db.engine import check_connection

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Check server health and database connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        await check_connection(request.app.state.engine)
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {e}"

    status = "healthy" if checks["database"] == "ok" else "degraded"
    return {"status": status, **checks}
