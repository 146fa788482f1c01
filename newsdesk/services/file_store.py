import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Optional

import aiofiles
import structlog
from fastapi import UploadFile

from ..exceptions import StorageFault

logger = structlog.get_logger(__name__)

CHUNK_SIZE = 1024 * 1024
STAGING_DIR_NAME = ".staging"


@dataclass
class UploadedFile:
    """An image received from the client, consumed once by the image store."""

    size: Optional[int]
    mime_type: Optional[str]
    original_name: Optional[str]
    stream: Any  # anything with ``async read(size)``

    @classmethod
    def from_upload(cls, upload: UploadFile) -> "UploadedFile":
        size = upload.size
        if size is None and hasattr(upload.file, "seek") and hasattr(upload.file, "tell"):
            upload.file.seek(0, 2)
            size = upload.file.tell()
            upload.file.seek(0)
        return cls(
            size=size,
            mime_type=upload.content_type,
            original_name=upload.filename,
            stream=upload,
        )


class ImageStore:
    """Local image storage with a two-step write.

    ``stage`` writes the bytes under a staging directory; ``finalize`` moves the
    file to its public location once the entity referencing it is committed.
    """

    def __init__(self, image_dir):
        self.image_dir = Path(image_dir)
        self.staging_dir = self.image_dir / STAGING_DIR_NAME
        self.staging_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, stored_name: str) -> Path:
        return self.image_dir / stored_name

    def staged_path_for(self, stored_name: str) -> Path:
        return self.staging_dir / stored_name

    async def stage(self, upload: UploadedFile, stored_name: str) -> Path:
        staged_path = self.staged_path_for(stored_name)
        try:
            async with aiofiles.open(staged_path, "wb") as out:
                while True:
                    chunk = await upload.stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    await out.write(chunk)
        except OSError as e:
            if staged_path.exists():
                staged_path.unlink()
            raise StorageFault(
                "Failed to write image",
                details={"stored_name": stored_name, "error": str(e)}
            ) from e

        logger.debug("Image staged", stored_name=stored_name, size=upload.size)
        return staged_path

    def finalize(self, stored_name: str) -> Path:
        final_path = self.path_for(stored_name)
        try:
            os.replace(self.staged_path_for(stored_name), final_path)
        except OSError as e:
            raise StorageFault(
                "Failed to finalize image",
                details={"stored_name": stored_name, "error": str(e)}
            ) from e
        return final_path

    def discard(self, stored_name: str) -> None:
        staged_path = self.staged_path_for(stored_name)
        try:
            if staged_path.exists():
                staged_path.unlink()
        except OSError as e:
            # Left behind for the reconciliation sweep
            logger.warning("Failed to discard staged image", stored_name=stored_name, error=str(e))

    def remove(self, stored_name: Optional[str]) -> bool:
        if not stored_name:
            return False
        path = self.path_for(stored_name)
        try:
            if path.exists():
                path.unlink()
                logger.info("Removed superseded image", stored_name=stored_name)
                return True
        except OSError as e:
            logger.warning("Failed to remove image", stored_name=stored_name, error=str(e))
        return False

    def stored_files(self) -> Iterator[Path]:
        for path in self.image_dir.iterdir():
            if path.is_file() and not path.name.startswith("."):
                yield path

    def staged_files(self) -> Iterator[Path]:
        for path in self.staging_dir.iterdir():
            if path.is_file():
                yield path
