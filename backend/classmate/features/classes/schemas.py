"""
Classes feature: Pydantic schemas for response models.
"""

from pydantic import BaseModel


class DocumentSummary(BaseModel):
    id: str
    name: str
    file_path: str
    file_type: str | None = None


class ClassResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    documents: list[DocumentSummary] = []
