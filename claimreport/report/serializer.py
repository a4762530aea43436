from __future__ import annotations

import io
import logging

import pymupdf as fitz
from pypdf import PageObject, PdfReader, PdfWriter, Transformation
from reportlab.pdfgen.canvas import Canvas

from .attachments import upright_pages
from .errors import SerializationError
from .layout import Document, EmbeddedPageRef, SourcePage


logger = logging.getLogger(__name__)

PRODUCER = 'Travel Claim Report Engine'


def render_text_layer(document: Document) -> bytes:
    """Draw every page's text operations; embedded pages are merged afterwards."""
    if not document.pages:
        raise SerializationError('document has no pages')

    buffer = io.BytesIO()
    first = document.pages[0]
    canvas = Canvas(buffer, pagesize=(first.width, first.height), pageCompression=1)
    canvas.setProducer(PRODUCER)
    if document.title:
        canvas.setTitle(document.title)

    for page in document.pages:
        canvas.setPageSize((page.width, page.height))
        for op in page.draw_ops():
            canvas.setFont(document.font_name, op.font_size)
            canvas.drawString(op.x, op.y, op.text)
        canvas.showPage()

    canvas.save()
    return buffer.getvalue()


def _embed_transformation(ref: EmbeddedPageRef) -> Transformation:
    # move the source box origin to (0, 0) before scaling into place
    return (
        Transformation()
        .translate(-ref.source.origin_x, -ref.source.origin_y)
        .scale(ref.scale_x, ref.scale_y)
        .translate(ref.x, ref.y)
    )


class _SourceCache:
    def __init__(self):
        self._pages: dict[int, list[PageObject]] = {}

    def page(self, source: SourcePage) -> PageObject:
        key = id(source.source_bytes)
        pages = self._pages.get(key)
        if pages is None:
            reader = PdfReader(io.BytesIO(source.source_bytes))
            if reader.is_encrypted:
                reader.decrypt('')
            pages = upright_pages(reader)
            self._pages[key] = pages
        return pages[source.page_index]


def _merge_with_pypdf(text_pdf_bytes: bytes, document: Document) -> bytes | None:
    try:
        writer = PdfWriter()
        text_reader = PdfReader(io.BytesIO(text_pdf_bytes))
        sources = _SourceCache()

        for page, text_page in zip(document.pages, text_reader.pages):
            target = writer.add_page(text_page)
            for ref in page.embedded_pages():
                target.merge_transformed_page(sources.page(ref.source), _embed_transformation(ref))

        if text_reader.metadata:
            writer.add_metadata(dict(text_reader.metadata))

        output = io.BytesIO()
        writer.write(output)
        return output.getvalue()
    except Exception as exc:
        logger.warning('Failed to merge attachment pages with pypdf: %s', exc)
        return None


def _merge_with_pymupdf(text_pdf_bytes: bytes, document: Document) -> bytes | None:
    output_doc = None
    source_docs: dict[int, fitz.Document] = {}
    try:
        output_doc = fitz.open(stream=text_pdf_bytes, filetype='pdf')
        for page in document.pages:
            refs = list(page.embedded_pages())
            if not refs:
                continue
            target = output_doc.load_page(page.index)
            for ref in refs:
                key = id(ref.source.source_bytes)
                source_doc = source_docs.get(key)
                if source_doc is None:
                    source_doc = fitz.open(stream=ref.source.source_bytes, filetype='pdf')
                    if source_doc.is_encrypted:
                        source_doc.authenticate('')
                    source_docs[key] = source_doc
                # PyMuPDF measures y from the top edge
                top = page.height - ref.y - ref.height
                rect = fitz.Rect(ref.x, top, ref.x + ref.width, top + ref.height)
                target.show_pdf_page(rect, source_doc, ref.source.page_index, keep_proportion=False)
        return output_doc.tobytes(garbage=3, deflate=True)
    except Exception as exc:
        logger.warning('Failed to merge attachment pages with PyMuPDF: %s', exc)
        return None
    finally:
        for source_doc in source_docs.values():
            source_doc.close()
        if output_doc is not None:
            output_doc.close()


def serialize_document(document: Document) -> bytes:
    """Produce the final PDF bytes. A document serializes exactly once."""
    document.ensure_mutable()

    try:
        text_pdf_bytes = render_text_layer(document)
    except SerializationError:
        raise
    except Exception as exc:
        raise SerializationError(f'failed to render report pages: {exc}') from exc

    has_embeds = any(True for page in document.pages for _ in page.embedded_pages())
    if not has_embeds:
        document.mark_serialized()
        return text_pdf_bytes

    merged = _merge_with_pypdf(text_pdf_bytes, document)
    if merged is None:
        merged = _merge_with_pymupdf(text_pdf_bytes, document)
    if merged is None:
        raise SerializationError('failed to embed attachment pages into the report')

    document.mark_serialized()
    return merged
