from time import perf_counter

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from turnos.shared.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/health/db")
async def health_db(request: Request):
    t0 = perf_counter()
    try:
        async with request.app.state.db.session() as s:
            await s.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Database health check failed", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"service": "db", "status": "unavailable"},
        )
    return {"service": "db", "status": "ok", "latency_ms": int((perf_counter() - t0) * 1000)}
