from fastapi import APIRouter

from app.core.config import get_settings

router = APIRouter()

settings = get_settings()


@router.get("/ping", tags=["health"])
async def ping() -> dict:
    return {"message": settings.ping_message}


@router.get("/demo", tags=["health"])
async def demo() -> dict:
    return {"message": "Hello from the ticketing API"}
