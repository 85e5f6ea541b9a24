import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from memolil.config import settings
from memolil.db import init_storage

logger = logging.getLogger(__name__)


async def load_seed_data_if_empty() -> None:
    """Give a brand-new personal collection a few sample items to practice with."""
    from memolil.db.sqlite import count_items, get_db, insert_items
    from memolil.services.clock import now_ms
    from memolil.services.seed_data import seed_items

    namespace = settings.default_namespace
    async for db in get_db():
        if await count_items(db, namespace) == 0:
            count = await insert_items(db, namespace, seed_items(now_ms()))
            logger.info("Loaded %d seed items into namespace %s", count, namespace)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_storage(settings.memolil_data_dir)
    if settings.seed_on_empty:
        await load_seed_data_if_empty()
    yield


def create_app() -> FastAPI:
    application = FastAPI(
        title="Memolil Backend", version="0.1.0", lifespan=lifespan
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from memolil.routers import health, items, quiz, setup, stats

    application.include_router(health.router)
    application.include_router(
        items.router, prefix="/items", tags=["items"]
    )
    application.include_router(
        quiz.router, prefix="/quiz", tags=["quiz"]
    )
    application.include_router(
        stats.router, prefix="/stats", tags=["stats"]
    )
    application.include_router(
        setup.router, prefix="/settings", tags=["settings"]
    )

    return application


app = create_app()
