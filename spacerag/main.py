from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from spacerag.api import documents, health, query, spaces
from spacerag.core.config import settings
from spacerag.core.exception import CustomException
from spacerag.core.logger import logger

app = FastAPI(title=settings.APP_NAME)

app.include_router(spaces.router, prefix="/api")
app.include_router(documents.router, prefix="/api")
app.include_router(query.router, prefix="/api")
app.include_router(health.router, prefix="/api")


@app.exception_handler(CustomException)
async def handle_custom_exception(request: Request, exc: CustomException):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": type(exc).__name__, "detail": exc.message},
    )
