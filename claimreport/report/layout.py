from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Union

from reportlab.lib.pagesizes import A4

from .errors import DocumentStateError, LayoutError


logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = A4  # 595.2756 x 841.8898, drawn as 595.28 x 841.89
PAGE_SIZE = (round(PAGE_WIDTH, 2), round(PAGE_HEIGHT, 2))

MARGIN_SIDE = 50.0
MARGIN_TOP = 50.0
MARGIN_BOTTOM = 40.0
LINE_HEIGHT = 16.0


@dataclass(frozen=True)
class DrawOp:
    text: str
    x: float
    y: float
    font_size: float


@dataclass(frozen=True)
class SourcePage:
    """One page copied out of a foreign PDF, with its intrinsic size."""

    source_bytes: bytes = field(repr=False)
    page_index: int
    width: float
    height: float
    origin_x: float = 0.0
    origin_y: float = 0.0
    rotation: int = 0


@dataclass(frozen=True)
class EmbeddedPageRef:
    source: SourcePage
    x: float
    y: float
    scale_x: float
    scale_y: float

    @property
    def width(self) -> float:
        return self.source.width * self.scale_x

    @property
    def height(self) -> float:
        return self.source.height * self.scale_y


PageContent = Union[DrawOp, EmbeddedPageRef]


@dataclass
class Page:
    index: int
    width: float
    height: float
    contents: list[PageContent] = field(default_factory=list)

    def draw_text(self, text: str, *, x: float, y: float, font_size: float) -> DrawOp:
        op = DrawOp(text=text, x=float(x), y=float(y), font_size=float(font_size))
        self.contents.append(op)
        return op

    def draw_page(self, ref: EmbeddedPageRef) -> EmbeddedPageRef:
        self.contents.append(ref)
        return ref

    def draw_ops(self) -> Iterator[DrawOp]:
        for item in self.contents:
            if isinstance(item, DrawOp):
                yield item

    def embedded_pages(self) -> Iterator[EmbeddedPageRef]:
        for item in self.contents:
            if isinstance(item, EmbeddedPageRef):
                yield item


class Document:
    """In-memory report: pages are appended, never removed, until serialization."""

    def __init__(self, *, font_name: str, title: str | None = None):
        self.font_name = font_name
        self.title = title
        self.pages: list[Page] = []
        self._serialized = False

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def serialized(self) -> bool:
        return self._serialized

    def add_page(self, width: float, height: float) -> Page:
        self.ensure_mutable()
        if width <= 0 or height <= 0:
            raise LayoutError(f'invalid page size: {width} x {height}')
        page = Page(index=len(self.pages), width=float(width), height=float(height))
        self.pages.append(page)
        return page

    def ensure_mutable(self) -> None:
        if self._serialized:
            raise DocumentStateError('document was already serialized')

    def mark_serialized(self) -> None:
        self.ensure_mutable()
        self._serialized = True


class CursorState(str, Enum):
    writing = 'writing'
    page_break_pending = 'page_break_pending'


class LayoutCursor:
    """Write position for one document; breaks pages before space runs out."""

    def __init__(
        self,
        document: Document,
        *,
        page_size: tuple[float, float] = PAGE_SIZE,
        top_margin: float = MARGIN_TOP,
        bottom_margin: float = MARGIN_BOTTOM,
    ):
        self.document = document
        self.page_size = page_size
        self.top_margin = float(top_margin)
        self.bottom_margin = float(bottom_margin)
        self.state = CursorState.writing
        if document.pages:
            self.page = document.pages[-1]
            self.y = self.page.height - self.top_margin
        else:
            self.new_page()

    @property
    def remaining(self) -> float:
        return self.y - self.bottom_margin

    def new_page(self) -> Page:
        self.page = self.document.add_page(*self.page_size)
        self.y = self.page.height - self.top_margin
        self.state = CursorState.writing
        return self.page

    def request_page_break(self) -> None:
        # Foreign pages were appended after the cursor page; text resumes on a fresh page.
        self.state = CursorState.page_break_pending

    def ensure_space(self, min_required: float) -> Page:
        if self.state is CursorState.page_break_pending or self.remaining < min_required:
            self.new_page()
            logger.debug('Page break: now on page %s', self.page.index + 1)
        return self.page

    def advance(self, line_height: float) -> None:
        if self.y - line_height < self.bottom_margin:
            raise LayoutError(
                f'advance of {line_height} from y={self.y:.2f} would cross the bottom margin'
            )
        self.y -= line_height
