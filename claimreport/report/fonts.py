from __future__ import annotations

import logging
from pathlib import Path

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from .errors import FontEmbeddingError


logger = logging.getLogger(__name__)


def register_base_font(font_name: str, font_path: Path | None = None) -> str:
    """Make the report font available to reportlab and return its registered name."""
    name = str(font_name or '').strip() or 'Helvetica'

    if font_path is not None:
        path = Path(font_path).expanduser()
        if not path.is_file():
            raise FontEmbeddingError(f'font file not found: {path}')
        try:
            pdfmetrics.registerFont(TTFont(name, str(path)))
        except Exception as exc:
            raise FontEmbeddingError(f'failed to embed font {name} from {path}: {exc}') from exc
        logger.info('Embedded TrueType font %s from %s', name, path)
        return name

    # standard Type 1 fonts resolve lazily; anything else must have been registered
    try:
        pdfmetrics.getFont(name)
    except Exception as exc:
        raise FontEmbeddingError(f'failed to load font {name}: {exc}') from exc
    return name
