"""
Chat feature: request/response models.
"""

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(min_length=1)
    class_id: str = Field(alias="classId")


class Source(BaseModel):
    document: str | None = None  # original filename
    excerpt: str
    page: int | None = None


class ChatResponse(BaseModel):
    response: str
    sources: list[Source] = []
