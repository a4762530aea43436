from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from .layout import LINE_HEIGHT, MARGIN_SIDE, Document, LayoutCursor
from .sanitize import sanitize

if TYPE_CHECKING:
    from .attachments import Attachment, AttachmentEmbedder


TITLE_FONT_SIZE = 18
TITLE_ADVANCE = 30
SUBTITLE_FONT_SIZE = 14
SUBTITLE_ADVANCE = 22
RULE_FONT_SIZE = 10
RULE_ADVANCE = 20
BODY_FONT_SIZE = 12
FIELD_VALUE_OFFSET = 110

RULE_TEXT = '-' * 46
BULLET = '- '
EMPTY_VALUE = '-'


class DocumentComposer:
    """Drawing primitives over a document and its layout cursor.

    Every primitive sanitizes its text, makes room, draws at the cursor and
    advances, so nothing is ever written below the bottom margin.
    """

    def __init__(
        self,
        document: Document,
        *,
        cursor: LayoutCursor | None = None,
        embedder: 'AttachmentEmbedder | None' = None,
    ):
        self.document = document
        self.cursor = cursor or LayoutCursor(document)
        self.embedder = embedder

    @property
    def page_count(self) -> int:
        return self.document.page_count

    def _draw(self, text: str, *, font_size: float, advance: float, x: float = MARGIN_SIDE) -> None:
        self.document.ensure_mutable()
        page = self.cursor.ensure_space(advance)
        page.draw_text(text, x=x, y=self.cursor.y, font_size=font_size)
        self.cursor.advance(advance)

    def title(self, text: str | None) -> None:
        self._draw(sanitize(text), font_size=TITLE_FONT_SIZE, advance=TITLE_ADVANCE)

    def subtitle(self, text: str | None) -> None:
        self._draw(sanitize(text), font_size=SUBTITLE_FONT_SIZE, advance=SUBTITLE_ADVANCE)

    def line(self) -> None:
        self._draw(RULE_TEXT, font_size=RULE_FONT_SIZE, advance=RULE_ADVANCE)

    def field(self, label: str | None, value: str | None = None) -> None:
        self.document.ensure_mutable()
        page = self.cursor.ensure_space(LINE_HEIGHT)
        y = self.cursor.y
        page.draw_text(sanitize(label), x=MARGIN_SIDE, y=y, font_size=BODY_FONT_SIZE)
        page.draw_text(
            sanitize(value) or EMPTY_VALUE,
            x=MARGIN_SIDE + FIELD_VALUE_OFFSET,
            y=y,
            font_size=BODY_FONT_SIZE,
        )
        self.cursor.advance(LINE_HEIGHT)

    def paragraph(self, text: str | None) -> None:
        for line in sanitize(text).split('\n'):
            self._draw(line, font_size=BODY_FONT_SIZE, advance=LINE_HEIGHT)

    def list(self, items: Iterable[str | None]) -> None:
        for item in items:
            self._draw(BULLET + sanitize(item), font_size=BODY_FONT_SIZE, advance=LINE_HEIGHT)

    async def attach(self, attachment: 'Attachment') -> int:
        """Embed a foreign PDF after the current pages; returns pages added."""
        if self.embedder is None:
            raise RuntimeError('composer has no attachment embedder')
        added = await self.embedder.attach(attachment)
        if added:
            self.cursor.request_page_break()
        return added
