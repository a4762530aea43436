from __future__ import annotations

import re


_REPLACEMENTS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile('→'), '->'),
    (re.compile('[–—]'), '-'),
    (re.compile('[“”«»„]'), '"'),
    (re.compile('[‘’]'), "'"),
    (re.compile('\t'), '  '),
    (re.compile('\r'), ''),
)

# The standard PDF fonts are WinAnsi-encoded; anything past Latin-1 has no glyph.
# Applied for every font, including a configured TrueType one, so output does not
# depend on which glyphs a font file happens to carry.
_UNRENDERABLE_PATTERN = re.compile(r'[^\x00-\xff]')


def sanitize(text: str | None) -> str:
    """Map typographic characters to ones the base font can draw.

    Idempotent: every replacement produces plain ASCII that no rule touches again.
    """
    if not text:
        return ''
    value = str(text)
    for pattern, replacement in _REPLACEMENTS:
        value = pattern.sub(replacement, value)
    return _UNRENDERABLE_PATTERN.sub('?', value)
