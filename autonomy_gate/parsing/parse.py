from __future__ import annotations

import hashlib
import logging
from io import BytesIO
from pathlib import Path

from docx import Document
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from pypdf import PdfReader

from .models import ParsedBlock, ParsedDoc

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".txt": "txt", ".pdf": "pdf", ".docx": "docx"}


def _compute_doc_id(text: str, filename: str) -> str:
    seed = text if text.strip() else filename
    digest = hashlib.sha256(seed.encode("utf-8", errors="ignore")).hexdigest()
    return digest[:16]


def _dedupe(links: list[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for link in links:
        clean = link.strip()
        if clean and clean not in seen:
            seen.add(clean)
            ordered.append(clean)
    return ordered


def _parse_txt(content: bytes) -> tuple[str, list[str], list[ParsedBlock], list[str]]:
    text = content.decode("utf-8", errors="replace")
    return text, [], [], []


def _pdf_page_links(page) -> list[str]:
    links: list[str] = []
    annotations = page.get("/Annots") or []
    for ref in annotations:
        annot = ref.get_object()
        if annot.get("/Subtype") != "/Link":
            continue
        action = annot.get("/A")
        if action is None:
            continue
        uri = action.get_object().get("/URI")
        if uri:
            links.append(str(uri))
    return links


def _parse_pdf(content: bytes) -> tuple[str, list[str], list[ParsedBlock], list[str]]:
    warnings: list[str] = []
    blocks: list[ParsedBlock] = []
    links: list[str] = []

    try:
        reader = PdfReader(BytesIO(content))
        text_parts: list[str] = []
        for index, page in enumerate(reader.pages, start=1):
            page_text = (page.extract_text() or "").strip()
            if page_text:
                text_parts.append(page_text)
                blocks.append(ParsedBlock(page=index, text=page_text))
            try:
                links.extend(_pdf_page_links(page))
            except Exception as exc:  # noqa: BLE001 - a broken annotation must not drop the page text
                warnings.append(f"Could not read links on page {index}: {exc}")
        if not text_parts:
            warnings.append("No extractable text found in PDF. Ensure it's not a scanned image.")
        return "\n".join(text_parts), _dedupe(links), blocks, warnings
    except Exception as exc:
        logger.warning("pdf_parse_failed: %s", exc)
        warnings.append(f"PDF parsing failed: {exc}")
        return "", [], blocks, warnings


def _parse_docx(content: bytes) -> tuple[str, list[str], list[ParsedBlock], list[str]]:
    warnings: list[str] = []
    blocks: list[ParsedBlock] = []

    try:
        document = Document(BytesIO(content))
        paragraphs = [p.text.strip() for p in document.paragraphs if p.text and p.text.strip()]
        for paragraph_text in paragraphs:
            blocks.append(ParsedBlock(page=None, text=paragraph_text))
        links = [
            rel.target_ref
            for rel in document.part.rels.values()
            if rel.reltype == RT.HYPERLINK and rel.is_external
        ]
        if not paragraphs:
            warnings.append("No extractable text found in DOCX.")
        return "\n".join(paragraphs), _dedupe(links), blocks, warnings
    except Exception as exc:
        logger.warning("docx_parse_failed: %s", exc)
        warnings.append(f"DOCX parsing failed: {exc}")
        return "", [], blocks, warnings


def source_type_for(filename: str) -> str:
    extension = Path(filename).suffix.lower()
    source_type = SUPPORTED_EXTENSIONS.get(extension)
    if source_type is None:
        raise NotImplementedError(
            f"Unsupported file type '{extension}'. Supported types: .txt, .pdf, .docx"
        )
    return source_type


def parse_document_bytes(content: bytes, filename: str) -> ParsedDoc:
    source_type = source_type_for(filename)
    if source_type == "txt":
        text, links, blocks, warnings = _parse_txt(content)
    elif source_type == "pdf":
        text, links, blocks, warnings = _parse_pdf(content)
    else:
        text, links, blocks, warnings = _parse_docx(content)

    return ParsedDoc(
        doc_id=_compute_doc_id(text=text, filename=filename),
        source_type=source_type,
        text=text,
        hyperlinks=links,
        blocks=blocks,
        parsing_warnings=warnings,
    )


def parse_document(file_path: str) -> ParsedDoc:
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Input document not found: '{path}'")
    source_type_for(path.name)
    return parse_document_bytes(path.read_bytes(), path.name)
