import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config import configure_logging, settings
from repositories import CategoryRepository
from routes import (
    ai_router,
    alert_router,
    auth_router,
    budget_item_router,
    budget_router,
    category_router,
    goal_router,
    invitation_router,
    notification_router,
    report_router,
    transaction_router,
    user_router,
    wallet_router,
)
from sqlalchemy_db import DatabaseEngine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    database = DatabaseEngine()
    database.create_tables()
    with database.session_scope() as session:
        CategoryRepository(session).seed_default_categories()
    logger.info("%s started", settings.project_name)
    yield
    logger.info("%s stopped", settings.project_name)


# Create FastAPI app
app = FastAPI(
    title=settings.project_name,
    description="Shared wallets, transactions, budgets and savings goals for households",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    service: str


@app.get("/")
async def root():
    """Root endpoint"""
    return {"message": f"{settings.project_name} is running", "docs": "/docs"}


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint"""
    return HealthResponse(status="healthy", timestamp=datetime.now(), service=settings.project_name)


app.include_router(auth_router)
app.include_router(user_router)
app.include_router(wallet_router)
app.include_router(invitation_router)
app.include_router(category_router)
app.include_router(transaction_router)
app.include_router(budget_router)
app.include_router(budget_item_router)
app.include_router(goal_router)
app.include_router(notification_router)
app.include_router(alert_router)
app.include_router(report_router)
app.include_router(ai_router)
