"""
Главный файл FastAPI приложения.
"""
import asyncio
import logging
from contextlib import suppress

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import AppException
from app.api import api_router
from app.services.notification_scheduler import run_notification_scheduler

# Настройка логирования
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_TITLE,
    description="API для учёта лекарств и напоминаний об истечении срока годности",
    version="1.0.0",
)

_scheduler_task: asyncio.Task | None = None


@app.exception_handler(AppException)
async def app_exception_handler(request, exc: AppException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error_code": exc.error_code},
    )


# CORS middleware — разрешённые домены из переменной окружения
origins = [o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Health check endpoint
@app.get("/health")
def health(db: Session = Depends(get_db)):
    """Health check endpoint with database verification."""
    try:
        db.execute(text("SELECT 1"))
        return {"status": "healthy", "database": "connected"}
    except Exception as e:
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "database": str(e)},
        )

# Подключаем API роутер
app.include_router(api_router)


@app.on_event("startup")
async def startup_event():
    """Действия при старте приложения."""
    global _scheduler_task
    logger.info("Application startup")

    # Запускаем фоновый scheduler уведомлений (только один раз)
    if settings.SCHEDULER_ENABLED and _scheduler_task is None:
        _scheduler_task = asyncio.create_task(run_notification_scheduler())
        logger.info("Notification scheduler started as background task")
    elif not settings.SCHEDULER_ENABLED:
        logger.info("Notification scheduler disabled")


@app.on_event("shutdown")
async def shutdown_event():
    """Действия при остановке приложения."""
    global _scheduler_task
    if _scheduler_task is not None:
        _scheduler_task.cancel()
        with suppress(asyncio.CancelledError):
            await _scheduler_task
        _scheduler_task = None
    logger.info("Application shutdown")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
