from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Protocol

from claimreport.adapters.ticket_storage import TicketStorage
from claimreport.storage import write_bytes_atomic
from claimreport.types import ExportStatus

from .attachments import ATTACHMENT_SCALE, AttachmentEmbedder
from .composer import DocumentComposer
from .errors import DeliveryError, ReportError, SerializationError
from .fonts import register_base_font
from .layout import Document, LayoutCursor
from .serializer import serialize_document


logger = logging.getLogger(__name__)

PDF_MIME_TYPE = 'application/pdf'

RenderFn = Callable[[DocumentComposer, Any], Awaitable[None]]


@dataclass
class ExportResult:
    filename: str
    data: bytes
    page_count: int
    status: ExportStatus
    mime_type: str = PDF_MIME_TYPE
    location: str | None = None


class DeliverySink(Protocol):
    async def deliver(self, filename: str, data: bytes) -> str | None:
        """Persist or hand over the finished PDF; may return where it went."""
        ...


class MemorySink:
    """Keeps delivered files in memory, for callers that upload or return them."""

    def __init__(self):
        self.files: dict[str, bytes] = {}

    async def deliver(self, filename: str, data: bytes) -> str | None:
        self.files[filename] = data
        return None


class FileSink:
    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)

    async def deliver(self, filename: str, data: bytes) -> str | None:
        path = self.output_dir / filename
        await asyncio.to_thread(write_bytes_atomic, path, data)
        return str(path)


_WHITESPACE_PATTERN = re.compile(r'\s+')


def report_filename(organisation_name: str | None) -> str:
    token = _WHITESPACE_PATTERN.sub('_', str(organisation_name or '').strip()) or 'submission'
    # keep path separators out of the file name
    token = token.replace('/', '_').replace('\\', '_')
    return f'reimbursement_{token}.pdf'


class ExportPipeline:
    """Empty -> Rendering -> Serialized -> Delivered, once per instance."""

    def __init__(
        self,
        *,
        font_name: str = 'Helvetica',
        font_path: Path | None = None,
        storage: TicketStorage | None = None,
        attachment_scale: float = ATTACHMENT_SCALE,
        title: str | None = None,
    ):
        self.font_name = font_name
        self.font_path = font_path
        self.storage = storage
        self.attachment_scale = attachment_scale
        self.title = title
        self.status = ExportStatus.empty
        self.document: Document | None = None

    def _transition(self, expected: ExportStatus, target: ExportStatus) -> None:
        if self.status is not expected:
            raise ReportError(f'export is {self.status.value}, expected {expected.value}')
        self.status = target

    def create_composer(self) -> DocumentComposer:
        font = register_base_font(self.font_name, self.font_path)
        document = Document(font_name=font, title=self.title)
        cursor = LayoutCursor(document)
        embedder = AttachmentEmbedder(
            document,
            storage=self.storage,
            scale=self.attachment_scale,
        )
        self.document = document
        return DocumentComposer(document, cursor=cursor, embedder=embedder)

    async def run(
        self,
        render_fn: RenderFn,
        data: Any,
        filename: str,
        sink: DeliverySink | None = None,
    ) -> ExportResult:
        if self.status is not ExportStatus.empty:
            raise ReportError(f'export is {self.status.value}, a pipeline runs once')
        composer = self.create_composer()

        self._transition(ExportStatus.empty, ExportStatus.rendering)
        await render_fn(composer, data)

        document = composer.document
        try:
            pdf_bytes = await asyncio.to_thread(serialize_document, document)
        except ReportError:
            raise
        except Exception as exc:
            raise SerializationError(f'failed to serialize report: {exc}') from exc
        self._transition(ExportStatus.rendering, ExportStatus.serialized)
        page_count = document.page_count
        # the document is finished; only the bytes travel on
        self.document = None

        location = None
        if sink is not None:
            try:
                location = await sink.deliver(filename, pdf_bytes)
            except Exception as exc:
                raise DeliveryError(f'failed to deliver {filename}: {exc}') from exc
        self._transition(ExportStatus.serialized, ExportStatus.delivered)

        logger.info('Exported %s: %s page(s), %s bytes.', filename, page_count, len(pdf_bytes))
        return ExportResult(
            filename=filename,
            data=pdf_bytes,
            page_count=page_count,
            status=self.status,
            location=location,
        )


async def export(
    render_fn: RenderFn,
    data: Any,
    filename: str,
    *,
    sink: DeliverySink | None = None,
    storage: TicketStorage | None = None,
    font_name: str = 'Helvetica',
    font_path: Path | None = None,
    attachment_scale: float = ATTACHMENT_SCALE,
    title: str | None = None,
) -> ExportResult:
    """Render data with render_fn into a fresh document and deliver the PDF bytes."""
    pipeline = ExportPipeline(
        font_name=font_name,
        font_path=font_path,
        storage=storage,
        attachment_scale=attachment_scale,
        title=title,
    )
    return await pipeline.run(render_fn, data, filename, sink)
