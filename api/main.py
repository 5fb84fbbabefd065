import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from class_locations import router as class_locations_router
from classes import router as classes_router
from core import db, settings
from core.errors import install_error_handlers
from core.store import DocumentStore
from instructors import router as instructors_router

logging.basicConfig(
    level=settings.log_level(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


def create_app(store: DocumentStore | None = None) -> FastAPI:
    """
    Build the API. A ready `store` skips opening the Postgres pool.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if store is not None:
            app.state.store = store
            yield
            return

        # One pool per process, handed to routers through `db.get_store`.
        pool, app.state.store = await db.open_store()
        try:
            yield
        finally:
            await pool.close()

    app = FastAPI(title="Yoga Studio Management API", lifespan=lifespan)
    if store is not None:
        app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)

    app.include_router(instructors_router.router, prefix=settings.API_PREFIX, tags=["instructors"])
    app.include_router(class_locations_router.router, prefix=settings.API_PREFIX, tags=["class locations"])
    app.include_router(classes_router.router, prefix=settings.API_PREFIX, tags=["classes"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/ping")
    def ping() -> dict:
        return {"message": "running"}

    return app


app = create_app()
