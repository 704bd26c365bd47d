# main.py - FastAPI app for the expense dashboard
import os
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from expense_dashboard.api.routes import router
from expense_dashboard.config import Settings, load_settings
from expense_dashboard.db import build_engine, build_sessionmaker, init_models, verify_database
from expense_dashboard.errors import register_error_handlers
from expense_dashboard.models.schemas import CATEGORIES
from expense_dashboard.services.seed import seed_demo_expenses
from expense_dashboard.services.storage import ExpenseStore, BudgetStore

VERSION = "1.0.0"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Starting up application...")
    try:
        await init_models(app.state.engine)
        await verify_database(app.state.session_factory)
        if app.state.settings.seed_demo_data:
            await seed_demo_expenses(app.state.expense_store)
        logger.info("✅ Application startup complete")
    except Exception as e:
        logger.error(f"❌ Startup failed: {e}")
        raise

    yield

    logger.info("🔌 Shutting down application...")
    await app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the app with its own engine and stores, shared for the process lifetime"""
    settings = settings or load_settings()

    app = FastAPI(
        title="Expense Dashboard API",
        description="Expense tracking with monthly budgets and spending analytics",
        version=VERSION,
        lifespan=lifespan,
    )

    engine = build_engine(settings.database_url)
    session_factory = build_sessionmaker(engine)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.expense_store = ExpenseStore(session_factory)
    app.state.budget_store = BudgetStore(session_factory)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    register_error_handlers(app)
    app.include_router(router)

    @app.get("/api")
    async def root():
        return {
            "message": "🚀 Expense Dashboard API is running!",
            "version": VERSION,
            "categories": CATEGORIES,
            "endpoints": {
                "expenses": "/api/expenses",
                "budgets": "/api/budgets/{month}",
                "dashboard": "/api/dashboard",
                "history": "/api/history",
                "docs": "/docs",
                "health": "/health",
            },
        }

    @app.get("/health")
    async def health_check():
        try:
            count = await verify_database(app.state.session_factory)
            return {
                "status": "healthy",
                "database": "connected",
                "expenses": count,
                "version": VERSION,
                "timestamp": datetime.now().isoformat(),
            }
        except Exception as e:
            logger.error(f"❌ Health check failed: {e}")
            return {
                "status": "unhealthy",
                "error": str(e),
                "timestamp": datetime.now().isoformat(),
            }

    # single-page client, registered last so API routes win
    if os.path.isdir(settings.static_dir):
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
        logger.info(f"📦 Serving static files from {settings.static_dir}")

    return app


def run() -> None:
    import uvicorn

    settings = load_settings()
    configure_logging(settings.log_level)
    logger.info(f"🚀 Starting server on {settings.api_host}:{settings.api_port}")

    uvicorn.run(
        create_app(settings),
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
