"""
Image reconciliation sweep.

Image writes and entity-store writes are not atomic together, so files can be
left behind. The sweep:
1. Promotes staged files that a committed News row already references
2. Deletes staged files nobody references
3. Deletes stored images nobody references
Only files older than the grace period are touched so in-flight requests are
never raced.
"""

import asyncio
import time
from pathlib import Path
from typing import Callable, Dict

import structlog

from ..config import get_settings
from ..core.database import session_scope
from ..exceptions import StorageFault
from ..repositories.news_repository import NewsRepository
from .file_store import ImageStore

logger = structlog.get_logger(__name__)


class ImageReconciler:
    def __init__(
        self,
        news_repo: NewsRepository,
        image_store: ImageStore,
        grace_minutes: int = 60,
        clock: Callable[[], float] = time.time,
    ):
        self.news_repo = news_repo
        self.image_store = image_store
        self.grace_seconds = grace_minutes * 60
        self.clock = clock

    def _is_old(self, path: Path, now: float) -> bool:
        try:
            return now - path.stat().st_mtime >= self.grace_seconds
        except FileNotFoundError:
            return False

    def _unlink(self, path: Path) -> bool:
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("Failed to delete orphaned image", path=str(path), error=str(e))
            return False

    def sweep(self) -> Dict[str, int]:
        now = self.clock()
        referenced = self.news_repo.referenced_images()
        stats = {"promoted": 0, "removed_staged": 0, "removed_stored": 0, "kept": 0}

        for path in list(self.image_store.staged_files()):
            if not self._is_old(path, now):
                stats["kept"] += 1
                continue
            if path.name in referenced and not self.image_store.path_for(path.name).exists():
                try:
                    self.image_store.finalize(path.name)
                    stats["promoted"] += 1
                except StorageFault as e:
                    logger.warning("Failed to promote staged image", stored_name=path.name, error=e.details.get("error"))
                continue
            if self._unlink(path):
                stats["removed_staged"] += 1

        for path in list(self.image_store.stored_files()):
            if path.name in referenced or not self._is_old(path, now):
                stats["kept"] += 1
                continue
            if self._unlink(path):
                stats["removed_stored"] += 1

        logger.info("Image reconciliation finished", **stats)
        return stats


def run_sweep() -> Dict[str, int]:
    settings = get_settings()
    with session_scope() as db:
        reconciler = ImageReconciler(
            NewsRepository(db),
            ImageStore(settings.image_dir),
            grace_minutes=settings.orphan_grace_minutes,
        )
        return reconciler.sweep()


async def run_periodically(interval_minutes: int) -> None:
    while True:
        await asyncio.sleep(interval_minutes * 60)
        try:
            await asyncio.to_thread(run_sweep)
        except Exception as e:
            logger.error("Image reconciliation failed", error=str(e), exc_info=e)


if __name__ == "__main__":
    from ..core.logging_config import configure_logging

    configure_logging(get_settings())
    run_sweep()
