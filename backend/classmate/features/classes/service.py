"""
Classes feature: Service layer for classes and their documents.
"""

import logging

from supabase import Client

from classmate.config import get_settings
from classmate.core.exceptions import (
    NotFoundError,
    StorageFailureError,
    UnauthenticatedError,
    ValidationFailedError,
)
from classmate.core.result import Result

logger = logging.getLogger(__name__)

CLASS_WITH_DOCUMENTS = "id, name, description, documents!class_id(id, name, file_path, file_type)"


class ClassRepository:
    """CRUD over classes and documents, scoped to the owning user.

    Deleting a class removes its blobs and document rows explicitly before
    the class row. Blobs always go before records, so a failure can leave an
    orphaned blob but never a record pointing at a missing blob.
    """

    def __init__(self, db: Client, bucket: str | None = None):
        self.db = db
        self.bucket = bucket or get_settings().STORAGE_BUCKET

    def create_class(self, name: str, user_id: str, description: str | None = None) -> Result[dict]:
        if not user_id:
            return Result.failure(UnauthenticatedError())
        if not name or not name.strip():
            return Result.failure(ValidationFailedError("Class name is required"))

        insert_data = {
            "name": name.strip(),
            "description": description,
            "user_id": user_id,
        }
        try:
            result = self.db.table("classes").insert(insert_data).execute()
        except Exception as e:
            return Result.failure(StorageFailureError("insert class", str(e)))

        if not result.data:
            return Result.failure(StorageFailureError("insert class", "insert returned no row"))
        created = result.data[0]
        logger.info(f"📚 Created class {created['id']} ({created['name']}) for user {user_id}")
        return Result.success(created)

    def list_classes(self, user_id: str) -> Result[list[dict]]:
        """Classes owned by the user, each with its documents joined."""
        if not user_id:
            return Result.failure(UnauthenticatedError())
        try:
            result = (
                self.db.table("classes")
                .select(CLASS_WITH_DOCUMENTS)
                .eq("user_id", user_id)
                .order("name")
                .execute()
            )
        except Exception as e:
            return Result.failure(StorageFailureError("list classes", str(e)))

        classes = result.data or []
        for c in classes:
            c["documents"] = c.get("documents") or []
        return Result.success(classes)

    def delete_class(self, class_id: str, user_id: str) -> Result[None]:
        if not user_id:
            return Result.failure(UnauthenticatedError())
        try:
            found = (
                self.db.table("classes")
                .select("id")
                .eq("id", class_id)
                .eq("user_id", user_id)
                .execute()
            )
            if not found.data:
                return Result.failure(NotFoundError("Class", class_id))

            documents = (
                self.db.table("documents")
                .select("id, file_path")
                .eq("class_id", class_id)
                .execute()
            )
        except Exception as e:
            return Result.failure(StorageFailureError("lookup class", str(e)))

        paths = [d["file_path"] for d in documents.data or [] if d.get("file_path")]
        if paths:
            try:
                self.db.storage.from_(self.bucket).remove(paths)
            except Exception as e:
                return Result.failure(StorageFailureError("remove blobs", str(e)))

        try:
            self.db.table("documents").delete().eq("class_id", class_id).execute()
            self.db.table("classes").delete().eq("id", class_id).eq("user_id", user_id).execute()
        except Exception as e:
            return Result.failure(StorageFailureError("delete class", str(e)))

        logger.info(f"🗑️ Deleted class {class_id} with {len(paths)} document(s)")
        return Result.success()

    def delete_document(self, document_id: str, user_id: str) -> Result[None]:
        if not user_id:
            return Result.failure(UnauthenticatedError())
        try:
            res = (
                self.db.table("documents")
                .select("file_path")
                .eq("id", document_id)
                .eq("user_id", user_id)
                .execute()
            )
        except Exception as e:
            return Result.failure(StorageFailureError("lookup document", str(e)))
        if not res.data:
            return Result.failure(NotFoundError("Document", document_id))

        storage_path = res.data[0].get("file_path")
        if storage_path:
            try:
                self.db.storage.from_(self.bucket).remove([storage_path])
            except Exception as e:
                return Result.failure(StorageFailureError("remove blob", str(e)))

        try:
            self.db.table("documents").delete().eq("id", document_id).eq("user_id", user_id).execute()
        except Exception as e:
            return Result.failure(StorageFailureError("delete document", str(e)))

        logger.info(f"🗑️ Deleted document {document_id} ({storage_path})")
        return Result.success()

    def get_document_download_url(
        self,
        document_id: str,
        user_id: str,
        expires_in: int = 3600,
    ) -> Result[str]:
        """Signed URL for a document blob (the bucket is private)."""
        if not user_id:
            return Result.failure(UnauthenticatedError())
        try:
            res = (
                self.db.table("documents")
                .select("file_path")
                .eq("id", document_id)
                .eq("user_id", user_id)
                .execute()
            )
            if not res.data:
                return Result.failure(NotFoundError("Document", document_id))

            signed = self.db.storage.from_(self.bucket).create_signed_url(
                res.data[0]["file_path"], expires_in
            )
        except Exception as e:
            return Result.failure(StorageFailureError("sign url", str(e)))

        return Result.success(signed.get("signedURL") or signed.get("signedUrl"))
