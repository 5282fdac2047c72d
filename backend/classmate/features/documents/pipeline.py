"""
Documents feature: ingestion pipeline for class materials.

Each file goes through PENDING -> EXTRACTED -> EMBEDDED -> UPLOADED -> RECORDED,
one file at a time in upload order. The first failure stops the run; files
already recorded are kept. A blob uploaded for a file whose record insert
fails is removed again so no blob is left without its record.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from supabase import Client

from classmate.config import get_settings
from classmate.core.exceptions import (
    AppBaseError,
    NotFoundError,
    StorageFailureError,
    UnauthenticatedError,
    UpstreamFailureError,
)
from classmate.core.result import Result
from classmate.features.documents.extractor import extract_text
from classmate.features.knowledge.embedding import embed_text

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9.]")


def sanitize_file_name(file_name: str) -> str:
    """Replace every character outside [A-Za-z0-9.] with an underscore."""
    return _UNSAFE_CHARS.sub("_", file_name)


def storage_path_for(class_id: str, file_name: str) -> str:
    return f"{class_id}/{sanitize_file_name(file_name)}"


@dataclass
class UploadedFile:
    filename: str
    content_type: str
    data: bytes


class IngestState(str, Enum):
    PENDING = "pending"
    EXTRACTED = "extracted"
    EMBEDDED = "embedded"
    UPLOADED = "uploaded"
    RECORDED = "recorded"


@dataclass
class FileIngestion:
    """Progress of one file through the pipeline."""
    file: UploadedFile
    storage_path: str
    state: IngestState = IngestState.PENDING
    content: str | None = None
    embedding: list[float] | None = field(default=None, repr=False)
    document: dict | None = None


class IngestionPipeline:
    """Extract, embed, upload and record uploaded files for a class."""

    def __init__(
        self,
        db: Client,
        embed: Callable[[str], list[float]] | None = None,
        bucket: str | None = None,
    ):
        self.db = db
        self.embed = embed or embed_text
        self.bucket = bucket or get_settings().STORAGE_BUCKET

    def ingest(self, class_id: str, user_id: str, files: list[UploadedFile]) -> Result[str]:
        """Ingest files into a class.

        Returns:
            Result with the class id on success, or the error of the first
            failing file. Earlier files stay ingested.
        """
        if not user_id:
            return Result.failure(UnauthenticatedError())

        try:
            owned = (
                self.db.table("classes")
                .select("id")
                .eq("id", class_id)
                .eq("user_id", user_id)
                .execute()
            )
        except Exception as e:
            return Result.failure(StorageFailureError("lookup class", str(e)))
        if not owned.data:
            return Result.failure(NotFoundError("Class", class_id))

        logger.info(f"🚀 Ingesting {len(files)} file(s) into class {class_id}")
        for index, file in enumerate(files, start=1):
            job = FileIngestion(file=file, storage_path=storage_path_for(class_id, file.filename))
            try:
                self._process(job, class_id, user_id)
            except AppBaseError as e:
                logger.error(
                    f"❌ Ingestion aborted at file {index}/{len(files)} "
                    f"({file.filename}, state={job.state.value}): {e}"
                )
                return Result.failure(e)
            logger.info(f"✅ [{index}/{len(files)}] {file.filename} -> {job.storage_path}")

        return Result.success(class_id)

    def _process(self, job: FileIngestion, class_id: str, user_id: str) -> None:
        job.content = extract_text(job.file.data, job.file.content_type)
        job.state = IngestState.EXTRACTED

        try:
            job.embedding = self.embed(job.content)
        except Exception as e:
            raise UpstreamFailureError("Embedding", str(e)) from e
        job.state = IngestState.EMBEDDED

        try:
            self.db.storage.from_(self.bucket).upload(
                path=job.storage_path,
                file=job.file.data,
                file_options={"content-type": job.file.content_type, "upsert": "false"},
            )
        except Exception as e:
            raise StorageFailureError("upload", str(e)) from e
        job.state = IngestState.UPLOADED

        insert_data = {
            "name": job.file.filename,
            "file_path": job.storage_path,
            "file_type": job.file.content_type,
            "class_id": class_id,
            "user_id": user_id,
            "content": job.content,
            "embedding": job.embedding,
        }
        try:
            res = self.db.table("documents").insert(insert_data).execute()
        except Exception as e:
            self._remove_blob(job.storage_path)
            raise StorageFailureError("insert document", str(e)) from e
        job.document = res.data[0] if res.data else None
        job.state = IngestState.RECORDED

    def _remove_blob(self, storage_path: str) -> None:
        try:
            self.db.storage.from_(self.bucket).remove([storage_path])
            logger.info(f"↩️ Removed blob {storage_path} after failed insert")
        except Exception as e:
            logger.warning(f"⚠️ Could not remove orphaned blob {storage_path}: {e}")
