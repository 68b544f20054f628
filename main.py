from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.container import NotificationContainer, build_container
from app.infrastructure.database import engine, initialize_database
from app.infrastructure.redis_client import close_async_redis_client
from app.interfaces.api.routes import register_routes


def create_app(container: NotificationContainer | None = None) -> FastAPI:
    """Create the FastAPI application serving realtime notifications.

    A prebuilt ``container`` may be supplied; otherwise one is assembled from
    the environment when the application starts.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Create the schema and start consuming events; release resources on exit."""

        if container is None:
            initialize_database()
            app.state.container = build_container(get_settings())
        else:
            app.state.container = container
        await app.state.container.start()
        try:
            yield
        finally:
            await app.state.container.close()
            if container is None:
                await close_async_redis_client()
                engine.dispose()

    app = FastAPI(lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
