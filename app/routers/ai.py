"""
ai.py — Health routes for the AI client and the store

Business Rules:
- /api/ai/health always answers 200; "healthy" carries the verdict
- /api/health/db answers 500 when the store cannot be reached

Called by: main.py (router mount)
Depends on: services/ai_service.py, database.py
"""

from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from ..database import Database, get_database
from ..exceptions import UnexpectedError
from ..schemas.responses import ItemResponse, ok
from ..services.ai_service import HuggingFaceClient, get_ai_client

router = APIRouter(tags=["health"])


@router.get("/api/ai/health", response_model=ItemResponse, response_model_exclude_unset=True)
async def ai_health(ai: HuggingFaceClient = Depends(get_ai_client)):
    return ok(await ai.health_check())


@router.get("/api/health/db", response_model=ItemResponse, response_model_exclude_unset=True)
async def db_health(database: Database = Depends(get_database)):
    try:
        database.ping()
    except SQLAlchemyError as e:
        logger.error("Database health check failed: {}", e)
        raise UnexpectedError("Database connection failed") from e
    return ok({"connected": True, "dialect": database.engine.dialect.name}, "Database connection successful")
