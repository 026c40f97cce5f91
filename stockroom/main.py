"""FastAPI application entrypoint."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockroom.api.routes import api_router
from stockroom.core.config import Settings, get_settings
from stockroom.core.database import build_engine, build_session_factory, init_db
from stockroom.core.errors import setup_exception_handlers
from stockroom.core.logging import configure_logging
from stockroom.services.session_oracle import build_session_oracle


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup: ensure tables exist (use Alembic in production)
    await init_db(app.state.engine)
    yield
    await app.state.session_oracle.aclose()
    await app.state.engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Stockroom",
        version="0.1.0",
        description="Shared inventories with optimistic concurrency control",
        lifespan=lifespan,
    )

    # Explicitly constructed collaborators; handlers reach them via app.state
    app.state.engine = build_engine(settings.database_url)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.session_oracle = build_session_oracle(settings)

    # ── CORS ─────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    # ── API routes ───────────────────────────────────────────
    app.include_router(api_router)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict:
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("stockroom.main:app", host="0.0.0.0", port=get_settings().port)
