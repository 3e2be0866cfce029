"""Health check endpoint."""

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request) -> dict:
    """API liveness plus whether the rollover scheduler is ticking."""
    scheduler = getattr(request.app.state, "rollover_scheduler", None)
    if scheduler is None:
        rollover = "disabled"
    else:
        rollover = "running" if scheduler.running else "stopped"
    return {"status": "ok", "rollover_scheduler": rollover}
