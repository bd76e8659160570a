from typing import Optional

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pymongo.database import Database

from api.errors import register_error_handlers
from api.event_routes import event_router
from api.media import MediaStorage
from api.models import HealthResponse
from api.mongo import get_db, lifespan, ping
from api.routes import auth_router
from api.user_routes import user_router
from utils.config import Config
from utils.logger import get_logger, set_level

logger = get_logger(__name__)


def create_app(config: Optional[Config] = None, mongo_client=None) -> FastAPI:
    """
    Build the API application.

    Args:
        config (Config, optional): Settings; read from the environment when omitted.
        mongo_client: Already constructed MongoDB client to use instead of
            connecting to config.MONGODB_URI. The caller keeps ownership of it.
    """
    config = (config or Config()).validate()
    set_level(config.LOG_LEVEL)

    app = FastAPI(title="Event Media API", lifespan=lifespan)
    app.state.config = config
    app.state.mongo_client = mongo_client
    app.state.db = None

    media = MediaStorage.from_config(config)
    media.ensure_directory()
    app.state.media = media

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(user_router)
    app.include_router(event_router)

    # Uploaded media is public
    app.mount(f"/{media.url_prefix}", StaticFiles(directory=media.upload_dir), name="uploads")

    @app.get("/db-check")
    def db_check(db: Database = Depends(get_db)):
        """Check if MongoDB connection is alive."""
        if ping(db):
            return {"status": "ok", "message": "MongoDB connection successful"}
        return {"status": "error", "message": "MongoDB ping failed"}

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    logger.info(
        f"App configured: db={config.MONGODB_DB}, uploads={media.upload_dir}, "
        f"update policy={config.EVENT_UPDATE_POLICY}"
    )
    return app


def main():
    import uvicorn

    config = Config()
    uvicorn.run(create_app(config), host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    # Run with: uvicorn api.server:create_app --factory --reload
    main()
