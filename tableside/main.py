import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from prometheus_client import make_asgi_app

from tableside.config import settings
from tableside.database import build_engine, build_session_factory, create_schema
from tableside.middleware.metrics import MetricsMiddleware
from tableside.middleware.request_id import RequestIDMiddleware
from tableside.routers import cart, menu, orders
from tableside.services.locks import TableLockRegistry
from tableside.services.menu_service import seed_menu_items
from tableside.services.order_service import OrderPlacementEngine
from tableside.tracing import setup_tracing
from tableside.utils.logging import setup_logging

setup_logging(settings.log_level, settings.log_json)
logger = logging.getLogger(__name__)

tracing_enabled = setup_tracing("tableside", settings.otlp_endpoint)


@asynccontextmanager
async def lifespan(app: FastAPI):
    pool_options = {}
    if not settings.database_url.startswith("sqlite"):
        pool_options = {
            "pool_size": settings.db_pool_size,
            "max_overflow": settings.db_max_overflow,
            "pool_pre_ping": True,
        }
    engine = build_engine(settings.database_url, **pool_options)

    logger.info("Starting up, creating database tables")
    await create_schema(engine)

    if tracing_enabled:
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)

    session_factory = build_session_factory(engine)
    if settings.seed_menu:
        await seed_menu_items(session_factory)

    app.state.session_factory = session_factory
    app.state.placement_engine = OrderPlacementEngine(session_factory, TableLockRegistry())
    logger.info("Startup complete", extra={"table_count": settings.table_count})

    yield

    await engine.dispose()
    logger.info("Shutting down")


app = FastAPI(
    title="Tableside Ordering",
    description="Menu, cart and order placement for in-restaurant tables",
    version="1.0.0",
    lifespan=lifespan,
)

if tracing_enabled:
    FastAPIInstrumentor.instrument_app(app)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)
app.include_router(menu.router, prefix="/api", tags=["menu"])
app.include_router(cart.router, prefix="/api/cart", tags=["cart"])
app.include_router(orders.router, prefix="/api", tags=["orders"])

# Expose Prometheus metrics at /metrics
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
