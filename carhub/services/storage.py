import logging
import os
import uuid
from pathlib import Path
from typing import Iterable, List, Sequence

from fastapi import HTTPException, UploadFile, status

from carhub.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


class ImageStorage:
    """
    Writes uploaded car images below ``root`` and hands back paths relative
    to it ("cars/<hex>.jpg"), which is what the database records.
    """

    def __init__(self, root: Path, subdir: str = "cars", allowed_extensions: Sequence[str] = ()):
        self.root = Path(root)
        self.subdir = subdir
        self.allowed_extensions = [ext.lower() for ext in allowed_extensions]

    def _extension(self, upload: UploadFile) -> str:
        filename = upload.filename or "image"
        return os.path.splitext(filename)[1].lower()

    def validate(self, uploads: Iterable[UploadFile]) -> None:
        for upload in uploads:
            ext = self._extension(upload)
            if self.allowed_extensions and ext not in self.allowed_extensions:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Unsupported file type: {ext or upload.filename}",
                )

    async def save(self, uploads: Sequence[UploadFile]) -> List[str]:
        """Validate every upload first, then write them all. Returns relative paths."""
        self.validate(uploads)

        target_dir = self.root / self.subdir
        target_dir.mkdir(parents=True, exist_ok=True)

        saved: List[str] = []
        try:
            for upload in uploads:
                safe_name = f"{uuid.uuid4().hex}{self._extension(upload)}"
                contents = await upload.read()
                (target_dir / safe_name).write_bytes(contents)
                saved.append(f"{self.subdir}/{safe_name}")
        except OSError:
            self.discard(saved)
            raise
        return saved

    def discard(self, paths: Iterable[str]) -> None:
        """Remove files written for a request whose database write failed."""
        for rel in paths:
            file_path = self.root / rel
            try:
                file_path.unlink()
            except FileNotFoundError:
                continue
            logger.info("Discarded orphaned upload %s", rel)


def get_image_storage() -> ImageStorage:
    return ImageStorage(
        root=settings.media_root,
        allowed_extensions=settings.allowed_image_extensions,
    )
