"""
Shared fixtures: in-memory Supabase double, document builders, fake models.
"""

import io
import math
import os
import time
import uuid

# Settings are read on first import of the app; give them test values.
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-for-classmate")

import pytest
from docx import Document as DocxDocument
from jose import jwt
from langchain_core.embeddings import DeterministicFakeEmbedding
from langchain_core.language_models import FakeListChatModel
from pptx import Presentation

from classmate.features.documents.extractor import DOCX, PDF, PPTX
from classmate.features.documents.pipeline import UploadedFile
from classmate.features.knowledge import embedding as embedding_module

USER_ID = "11111111-1111-1111-1111-111111111111"
OTHER_USER_ID = "22222222-2222-2222-2222-222222222222"


# -- Supabase double --

class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    """Chainable subset of the postgrest query builder used by the app."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.columns = "*"
        self.payload = None
        self.filters: list[tuple[str, object]] = []
        self.order_by: tuple[str, bool] | None = None

    def select(self, columns: str = "*", count: str | None = None):
        self.op = "select"
        self.columns = columns
        return self

    def insert(self, data):
        self.op = "insert"
        self.payload = data
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column: str, value):
        self.filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False):
        self.order_by = (column, desc)
        return self

    def _matches(self, row: dict) -> bool:
        return all(row.get(column) == value for column, value in self.filters)

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.table, self.op))
        self.db.raise_if_failing(self.table, self.op)
        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            created = []
            for item in items:
                row = {"id": str(uuid.uuid4()), **item}
                rows.append(row)
                created.append(dict(row))
            if self.table in self.db.hidden_inserts:
                return FakeResponse([])
            return FakeResponse(created)

        if self.op == "delete":
            removed = [r for r in rows if self._matches(r)]
            self.db.tables[self.table] = [r for r in rows if not self._matches(r)]
            return FakeResponse([dict(r) for r in removed])

        selected = [dict(r) for r in rows if self._matches(r)]
        if self.table == "classes" and "documents" in self.columns:
            for row in selected:
                row["documents"] = [
                    {k: d.get(k) for k in ("id", "name", "file_path", "file_type")}
                    for d in self.db.tables.get("documents", [])
                    if d.get("class_id") == row["id"]
                ]
        if self.order_by:
            column, desc = self.order_by
            selected.sort(key=lambda r: r.get(column) or "", reverse=desc)
        return FakeResponse(selected, count=len(selected))


def _cosine(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


class FakeRpc:
    def __init__(self, db: "FakeSupabase", name: str, params: dict):
        self.db = db
        self.name = name
        self.params = params

    def execute(self) -> FakeResponse:
        self.db.calls.append(("rpc", self.name))
        self.db.rpc_calls.append((self.name, self.params))
        self.db.raise_if_failing("rpc", self.name)
        assert self.name == "match_documents"
        query = self.params["query_embedding"]
        candidates = [
            d for d in self.db.tables.get("documents", [])
            if d.get("class_id") == self.params["match_class_id"]
            and d.get("user_id") == self.params["match_user_id"]
            and d.get("embedding") is not None
        ]
        ranked = sorted(candidates, key=lambda d: _cosine(query, d["embedding"]), reverse=True)
        return FakeResponse([
            {
                "id": d["id"],
                "name": d["name"],
                "file_path": d["file_path"],
                "content": d["content"],
                "similarity": _cosine(query, d["embedding"]),
            }
            for d in ranked[: self.params["match_count"]]
        ])


class FakeBucket:
    def __init__(self, db: "FakeSupabase", bucket: str):
        self.db = db
        self.bucket = bucket
        self.objects = db.blobs.setdefault(bucket, {})

    def upload(self, path: str, file: bytes, file_options: dict | None = None):
        self.db.calls.append(("storage", "upload"))
        self.db.raise_if_failing("storage", "upload")
        upsert = (file_options or {}).get("upsert") == "true"
        if path in self.objects and not upsert:
            raise RuntimeError(f"The resource already exists: {path}")
        self.objects[path] = file
        return {"path": path}

    def remove(self, paths: list[str]):
        self.db.calls.append(("storage", "remove"))
        self.db.raise_if_failing("storage", "remove")
        removed = [{"name": p} for p in paths if self.objects.pop(p, None) is not None]
        return removed

    def create_signed_url(self, path: str, expires_in: int):
        self.db.calls.append(("storage", "create_signed_url"))
        return {"signedURL": f"https://test-project.supabase.co/storage/v1/object/sign/{self.bucket}/{path}?token=t&expires={expires_in}"}


class FakeStorage:
    def __init__(self, db: "FakeSupabase"):
        self.db = db

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self.db, bucket)


class FakeSupabase:
    """In-memory stand-in for the Supabase client: tables, rpc and storage."""

    def __init__(self):
        self.tables: dict[str, list[dict]] = {"classes": [], "documents": []}
        self.blobs: dict[str, dict[str, bytes]] = {}
        self.calls: list[tuple[str, str]] = []
        self.rpc_calls: list[tuple[str, dict]] = []
        self.failures: dict[tuple[str, str], Exception] = {}
        # tables whose inserts succeed without returning the row (RLS-filtered representation)
        self.hidden_inserts: set[str] = set()
        self.storage = FakeStorage(self)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: dict) -> FakeRpc:
        return FakeRpc(self, name, params)

    def fail(self, target: str, op: str, error: Exception | None = None) -> None:
        self.failures[(target, op)] = error or RuntimeError(f"{target}.{op} failed")

    def raise_if_failing(self, target: str, op: str) -> None:
        error = self.failures.get((target, op))
        if error is not None:
            raise error

    # helpers for assertions
    def add_class(self, name: str, user_id: str = USER_ID) -> dict:
        row = {"id": str(uuid.uuid4()), "name": name, "description": None, "user_id": user_id}
        self.tables["classes"].append(row)
        return row

    def documents_of(self, class_id: str) -> list[dict]:
        return [d for d in self.tables["documents"] if d["class_id"] == class_id]

    def blob_paths(self, bucket: str = "documents") -> set[str]:
        return set(self.blobs.get(bucket, {}))


# -- Document builders --

def make_pdf_bytes(*pages: str) -> bytes:
    """Minimal valid PDF with one line of Helvetica text per page."""
    page_ids = [4 + 2 * i for i in range(len(pages))]
    kids = " ".join(f"{pid} 0 R" for pid in page_ids)
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {len(pages)} >>".encode(),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    for page_id, text in zip(page_ids, pages):
        objects.append(
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 3 0 R >> >> /Contents {page_id + 1} 0 R >>".encode()
        )
        stream = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode()
        objects.append(b"<< /Length " + str(len(stream)).encode() + b" >>\nstream\n" + stream + b"\nendstream")

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"
    xref_at = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_at}\n%%EOF\n".encode()
    return bytes(out)


def make_docx_bytes(*paragraphs: str) -> bytes:
    doc = DocxDocument()
    for text in paragraphs:
        doc.add_paragraph(text)
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def make_pptx_bytes(*slide_titles: str) -> bytes:
    prs = Presentation()
    for title in slide_titles:
        slide = prs.slides.add_slide(prs.slide_layouts[5])  # "Title Only"
        slide.shapes.title.text = title
    buffer = io.BytesIO()
    prs.save(buffer)
    return buffer.getvalue()


def pdf_upload(filename: str, *pages: str) -> UploadedFile:
    return UploadedFile(filename=filename, content_type=PDF, data=make_pdf_bytes(*pages))


def docx_upload(filename: str, *paragraphs: str) -> UploadedFile:
    return UploadedFile(filename=filename, content_type=DOCX, data=make_docx_bytes(*paragraphs))


def pptx_upload(filename: str, *titles: str) -> UploadedFile:
    return UploadedFile(filename=filename, content_type=PPTX, data=make_pptx_bytes(*titles))


def make_token(user_id: str = USER_ID, secret: str | None = None, expires_in: int = 3600) -> str:
    now = int(time.time())
    payload = {"sub": user_id, "aud": "authenticated", "role": "authenticated", "iat": now, "exp": now + expires_in}
    return jwt.encode(payload, secret or os.environ["SUPABASE_JWT_SECRET"], algorithm="HS256")


# -- Fake models --

class RecordingChatModel(FakeListChatModel):
    """FakeListChatModel that keeps the messages of every call."""
    received: list = []

    async def ainvoke(self, input, config=None, **kwargs):
        self.received.append(input)
        return await super().ainvoke(input, config, **kwargs)


class SlowEmbeddings(DeterministicFakeEmbedding):
    """Deterministic embeddings whose calls block like a remote API."""
    delay: float = 0.5

    def embed_query(self, text: str) -> list[float]:
        time.sleep(self.delay)
        return super().embed_query(text)


class FailingChatModel(FakeListChatModel):
    async def ainvoke(self, input, config=None, **kwargs):
        raise RuntimeError("completion service unavailable")


# -- Fixtures --

@pytest.fixture
def fake_db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def fake_embeddings(monkeypatch) -> DeterministicFakeEmbedding:
    model = DeterministicFakeEmbedding(size=16)
    monkeypatch.setattr(embedding_module, "_embeddings_model", model)
    return model


@pytest.fixture
def chat_model() -> RecordingChatModel:
    return RecordingChatModel(responses=["The mitochondria is the powerhouse of the cell [biology_notes.pdf]."])
