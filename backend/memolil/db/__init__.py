import logging
from pathlib import Path

from memolil.db.sqlite import init_sqlite

logger = logging.getLogger(__name__)


async def init_storage(data_dir: Path) -> None:
    """Create the data directory and bring the SQLite schema up to date."""
    data_dir.mkdir(parents=True, exist_ok=True)
    await init_sqlite(data_dir)
    logger.info("Storage ready in %s", data_dir)
