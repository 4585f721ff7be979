from fastapi import APIRouter
from spacerag.core.config import settings

router = APIRouter()


@router.get("/health")
async def health_check():
    return {
        "status": "ok",
        "message": f"{settings.APP_NAME} API is running",
        "environment": settings.ENVIRONMENT,
        "index_backend": settings.INDEX_BACKEND,
    }
