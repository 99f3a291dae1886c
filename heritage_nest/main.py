from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .api.routes import router as api_router
from .config import CORS_ORIGINS
from .db import Base, engine
from .errors import register_exception_handlers
from .utils import logger
from . import models  # noqa: F401 ensure models are imported so tables are known


def create_app() -> FastAPI:
    app = FastAPI(title="Heritage Nest API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(api_router)

    @app.on_event("startup")
    def on_startup_create_tables():
        # Ensure database tables (and the text index on PostgreSQL) exist
        Base.metadata.create_all(bind=engine)
        logger.info("Database ready at %s", engine.url.render_as_string(hide_password=True))

    return app


app = create_app()
