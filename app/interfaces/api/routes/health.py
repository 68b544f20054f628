from fastapi import APIRouter, Request

from app.interfaces.api.dependencies import get_container

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> dict:
    """Report the engine instance and the event subscriber counters."""

    container = get_container(request)
    return {
        "status": "ok",
        "instance_id": container.engine.instance_id,
        "events": container.subscriber.totals().as_dict(),
    }
