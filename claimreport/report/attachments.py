from __future__ import annotations

import io
import logging
from dataclasses import dataclass

from pypdf import PageObject, PdfReader, PdfWriter

from claimreport.adapters.ticket_storage import TicketStorage

from .errors import AttachmentFetchError, AttachmentParseError
from .layout import Document, EmbeddedPageRef, SourcePage
from .sanitize import sanitize


logger = logging.getLogger(__name__)

ATTACHMENT_SCALE = 0.8
HEADER_X = 40.0
LABEL_OFFSET = 40.0
CAPTION_OFFSET = 60.0
LABEL_FONT_SIZE = 16
CAPTION_FONT_SIZE = 12
# Top edge of the shrunk first page sits this far below the wrapper's top.
WRAPPER_CONTENT_OFFSET = 100.0
WRAPPER_MIN_BOTTOM = 30.0


@dataclass
class Attachment:
    label: str
    caption: str | None = None
    source_bytes: bytes | None = None
    file_reference: str | None = None


@dataclass(frozen=True)
class Placement:
    x: float
    y: float
    scale_x: float
    scale_y: float
    width: float
    height: float


def wrapper_placement(width: float, height: float, scale: float = ATTACHMENT_SCALE) -> Placement:
    scaled_width = width * scale
    scaled_height = height * scale
    y = height - WRAPPER_CONTENT_OFFSET - scaled_height
    if y < WRAPPER_MIN_BOTTOM:
        y = WRAPPER_MIN_BOTTOM
    return Placement(
        x=HEADER_X,
        y=y,
        scale_x=scale,
        scale_y=scale,
        width=scaled_width,
        height=scaled_height,
    )


def continuation_placement(width: float, height: float, scale: float = ATTACHMENT_SCALE) -> Placement:
    """The continuation page is exactly the scaled original, so the content fills it."""
    return Placement(
        x=0.0,
        y=0.0,
        scale_x=scale,
        scale_y=scale,
        width=width * scale,
        height=height * scale,
    )


def open_pdf(data: bytes, *, reference: str | None = None) -> PdfReader:
    try:
        reader = PdfReader(io.BytesIO(data))
        if reader.is_encrypted:
            # documents with only an owner password open with an empty user password
            if not reader.decrypt(''):
                raise AttachmentParseError('attachment PDF is encrypted', reference=reference)
        if len(reader.pages) == 0:
            raise AttachmentParseError('attachment PDF has no pages', reference=reference)
    except AttachmentParseError:
        raise
    except Exception as exc:
        raise AttachmentParseError(f'malformed attachment PDF: {exc}', reference=reference) from exc
    return reader


def upright_pages(reader: PdfReader) -> list[PageObject]:
    """Pages with /Rotate folded into their content, so page boxes match what a viewer shows."""
    if not any(int(page.rotation or 0) % 360 for page in reader.pages):
        return list(reader.pages)
    # content can only be rewritten on pages owned by a writer
    writer = PdfWriter(clone_from=reader)
    for page in writer.pages:
        if int(page.rotation or 0) % 360:
            page.transfer_rotation_to_content()
    return list(writer.pages)


def load_source_pages(data: bytes, *, reference: str | None = None) -> list[SourcePage]:
    """Copy every page of a foreign PDF, keeping each page's visible size."""
    reader = open_pdf(data, reference=reference)
    pages: list[SourcePage] = []
    try:
        rotations = [int(page.rotation or 0) for page in reader.pages]
        for index, page in enumerate(upright_pages(reader)):
            rotation = rotations[index]
            box = page.cropbox
            width = float(box.width)
            height = float(box.height)
            if width <= 0 or height <= 0:
                raise AttachmentParseError(
                    f'attachment page {index + 1} has an empty page box',
                    reference=reference,
                )
            pages.append(
                SourcePage(
                    source_bytes=data,
                    page_index=index,
                    width=width,
                    height=height,
                    origin_x=float(box.left),
                    origin_y=float(box.bottom),
                    rotation=rotation,
                )
            )
    except AttachmentParseError:
        raise
    except Exception as exc:
        raise AttachmentParseError(f'malformed attachment page: {exc}', reference=reference) from exc
    return pages


class AttachmentEmbedder:
    def __init__(
        self,
        document: Document,
        *,
        storage: TicketStorage | None = None,
        scale: float = ATTACHMENT_SCALE,
    ):
        if not 0 < scale <= 1:
            raise ValueError(f'attachment scale must be in (0, 1]: {scale}')
        self.document = document
        self.storage = storage
        self.scale = float(scale)

    async def resolve(self, attachment: Attachment) -> bytes | None:
        if attachment.source_bytes:
            return attachment.source_bytes
        reference = str(attachment.file_reference or '').strip()
        if not reference or self.storage is None:
            return None
        try:
            return await self.storage.fetch(reference)
        except AttachmentFetchError:
            raise
        except Exception as exc:
            raise AttachmentFetchError(
                f'failed to fetch attachment {reference}: {exc}',
                reference=reference,
            ) from exc

    async def attach(self, attachment: Attachment) -> int:
        """Append one wrapper page plus a scaled page per remaining foreign page.

        Returns the number of pages added; 0 when the attachment has no
        resolvable source. Raises AttachmentFetchError or AttachmentParseError
        without touching the document.
        """
        self.document.ensure_mutable()
        data = await self.resolve(attachment)
        if not data:
            logger.info('Attachment %r has no stored file; skipped.', attachment.label)
            return 0

        source_pages = load_source_pages(data, reference=attachment.file_reference)

        first = source_pages[0]
        wrapper = self.document.add_page(first.width, first.height)
        wrapper.draw_text(
            sanitize(attachment.label),
            x=HEADER_X,
            y=first.height - LABEL_OFFSET,
            font_size=LABEL_FONT_SIZE,
        )
        caption = sanitize(attachment.caption)
        if caption:
            wrapper.draw_text(
                caption,
                x=HEADER_X,
                y=first.height - CAPTION_OFFSET,
                font_size=CAPTION_FONT_SIZE,
            )
        placement = wrapper_placement(first.width, first.height, self.scale)
        wrapper.draw_page(
            EmbeddedPageRef(
                source=first,
                x=placement.x,
                y=placement.y,
                scale_x=placement.scale_x,
                scale_y=placement.scale_y,
            )
        )

        for source in source_pages[1:]:
            placement = continuation_placement(source.width, source.height, self.scale)
            page = self.document.add_page(placement.width, placement.height)
            page.draw_page(
                EmbeddedPageRef(
                    source=source,
                    x=placement.x,
                    y=placement.y,
                    scale_x=placement.scale_x,
                    scale_y=placement.scale_y,
                )
            )

        logger.info(
            'Embedded attachment %r: %s page(s), document now has %s page(s).',
            attachment.label,
            len(source_pages),
            self.document.page_count,
        )
        return len(source_pages)
