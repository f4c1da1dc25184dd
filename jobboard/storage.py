"""
Resume file storage.

Applications keep only the reference string returned by ``save``; the
bytes live in GridFS or on local disk depending on ``RESUME_STORAGE``.
"""

import io
import logging
import os
import random
import time
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

from bson import ObjectId
from gridfs.errors import NoFile
from motor.motor_asyncio import AsyncIOMotorGridFSBucket
from starlette.concurrency import run_in_threadpool

from jobboard import config
from jobboard.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def validate_resume_upload(filename: str, size: int) -> str:
    """Return the lower-cased extension, or raise if the upload is not acceptable."""
    ext = os.path.splitext(filename or "")[1].lower()
    if ext not in config.ALLOWED_RESUME_EXTENSIONS:
        raise ValidationError(
            "Invalid file type. Allowed types for resume: "
            + ", ".join(config.ALLOWED_RESUME_EXTENSIONS)
        )
    if size > config.MAX_FILE_SIZE:
        raise ValidationError(
            f"File size exceeds {config.MAX_FILE_SIZE // (1024 * 1024)}MB limit"
        )
    if size == 0:
        raise ValidationError("Uploaded resume is empty")
    return ext


class ResumeStorage(ABC):
    @abstractmethod
    async def save(self, filename: str, content: bytes, content_type: str, metadata: dict) -> str:
        """Store the file and return the reference kept on the application."""

    @abstractmethod
    async def open(self, ref: str) -> Tuple[str, str, bytes]:
        """Return (filename, content_type, bytes) for a stored reference."""

    @abstractmethod
    async def delete(self, ref: str) -> None:
        """Remove a stored file. Unknown references are ignored."""


class GridFSResumeStorage(ResumeStorage):
    def __init__(self, db, bucket_name: str = "resumes"):
        self.bucket = AsyncIOMotorGridFSBucket(db, bucket_name=bucket_name)

    async def save(self, filename, content, content_type, metadata):
        file_id = await self.bucket.upload_from_stream(
            filename,
            io.BytesIO(content),
            metadata={
                **metadata,
                "content_type": content_type,
                "uploaded_at": datetime.utcnow(),
            },
        )
        return str(file_id)

    async def open(self, ref):
        if not ObjectId.is_valid(ref):
            raise NotFoundError("Resume not found")
        try:
            grid_out = await self.bucket.open_download_stream(ObjectId(ref))
        except NoFile:
            raise NotFoundError("Resume not found")
        contents = await grid_out.read()
        content_type = (grid_out.metadata or {}).get("content_type", "application/octet-stream")
        return grid_out.filename, content_type, contents

    async def delete(self, ref):
        if not ObjectId.is_valid(ref):
            return
        try:
            await self.bucket.delete(ObjectId(ref))
        except NoFile:
            logger.warning("Resume %s was already gone from GridFS", ref)


class LocalResumeStorage(ResumeStorage):
    def __init__(self, upload_dir: str):
        self.root = Path(upload_dir).resolve()
        self.folder = self.root / "resumes"

    def _path_for(self, ref: str) -> Path:
        path = (self.root / ref).resolve()
        if self.folder not in path.parents:
            raise NotFoundError("Resume not found")
        return path

    async def save(self, filename, content, content_type, metadata):
        self.folder.mkdir(parents=True, exist_ok=True)
        ext = os.path.splitext(filename)[1].lower()
        unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
        path = self.folder / f"resume-{unique_suffix}{ext}"
        await run_in_threadpool(path.write_bytes, content)
        return path.relative_to(self.root).as_posix()

    async def open(self, ref):
        path = self._path_for(ref)
        if not path.is_file():
            raise NotFoundError("Resume not found")
        contents = await run_in_threadpool(path.read_bytes)
        content_type = {
            ".pdf": "application/pdf",
            ".doc": "application/msword",
            ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        }.get(path.suffix.lower(), "application/octet-stream")
        return path.name, content_type, contents

    async def delete(self, ref):
        path = self._path_for(ref)
        await run_in_threadpool(path.unlink, missing_ok=True)


def build_resume_storage(db, backend: Optional[str] = None) -> ResumeStorage:
    backend = backend or config.RESUME_STORAGE
    if backend == "local":
        logger.info("Storing resumes on local disk under %s", config.UPLOAD_DIR)
        return LocalResumeStorage(config.UPLOAD_DIR)
    if backend == "gridfs":
        logger.info("Storing resumes in GridFS bucket 'resumes'")
        return GridFSResumeStorage(db)
    raise ValueError(f"Unknown RESUME_STORAGE backend: {backend!r}")
