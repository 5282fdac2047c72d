"""
Documents feature: text extraction from uploaded course materials.

Supported: PDF (PyPDFLoader), Word (python-docx), PowerPoint .pptx (python-pptx).
"""

import io
import logging
import os
import tempfile
from typing import Callable, List

from docx import Document as DocxDocument
from langchain_community.document_loaders import PyPDFLoader
from langchain_core.documents import Document
from pptx import Presentation

from classmate.core.exceptions import ExtractionFailedError, UnsupportedFormatError

logger = logging.getLogger(__name__)

PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC = "application/msword"
PPTX = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
PPT = "application/vnd.ms-powerpoint"

# Content types the upload routes accept. Legacy .ppt passes the filter but has no extractor.
UPLOAD_MEDIA_TYPES = {PDF, DOCX, DOC, PPTX, PPT}


def _load_pdf(file_bytes: bytes) -> List[Document]:
    # PyPDFLoader needs a path on disk
    with tempfile.NamedTemporaryFile(delete=False, suffix=".pdf") as temp_file:
        temp_file.write(file_bytes)
        temp_path = temp_file.name

    try:
        pages = PyPDFLoader(temp_path).load()
    finally:
        if os.path.exists(temp_path):
            os.remove(temp_path)

    docs = []
    for page in pages:
        page_num = page.metadata.get("page", 0)  # 0-indexed
        docs.append(Document(
            page_content=page.page_content,
            metadata={"page": page_num + 1 if isinstance(page_num, int) else None},
        ))
    return docs


def _load_word(file_bytes: bytes) -> List[Document]:
    doc = DocxDocument(io.BytesIO(file_bytes))
    full_text = [para.text for para in doc.paragraphs if para.text.strip()]
    # python-docx has no notion of pages
    return [Document(page_content="\n".join(full_text), metadata={"page": 1})]


def _load_presentation(file_bytes: bytes) -> List[Document]:
    prs = Presentation(io.BytesIO(file_bytes))
    docs = []
    for number, slide in enumerate(prs.slides, start=1):
        texts = [
            shape.text_frame.text
            for shape in slide.shapes
            if shape.has_text_frame and shape.text_frame.text.strip()
        ]
        docs.append(Document(page_content="\n".join(texts), metadata={"page": number}))
    return docs


_LOADERS: dict[str, Callable[[bytes], List[Document]]] = {
    PDF: _load_pdf,
    DOCX: _load_word,
    DOC: _load_word,
    PPTX: _load_presentation,
}

SUPPORTED_MEDIA_TYPES = frozenset(_LOADERS)


def load_pages(file_bytes: bytes, media_type: str) -> List[Document]:
    """Parse a file into one LangChain Document per page (or slide).

    Raises:
        UnsupportedFormatError: media_type has no extractor; nothing is parsed.
        ExtractionFailedError: the parser rejected the bytes.
    """
    loader = _LOADERS.get(media_type)
    if loader is None:
        raise UnsupportedFormatError(media_type)

    try:
        return loader(file_bytes)
    except Exception as e:
        logger.error(f"❌ Error extracting text from {media_type}: {e}")
        raise ExtractionFailedError(detail=f"{type(e).__name__}: {e}") from e


def extract_text(file_bytes: bytes, media_type: str) -> str:
    """Extract plain text from a PDF, Word or PowerPoint file, pages in document order."""
    pages = load_pages(file_bytes, media_type)
    text = "\n\n".join(page.page_content for page in pages if page.page_content.strip())
    if not text.strip():
        raise ExtractionFailedError("No text could be extracted from the document.")
    return text
