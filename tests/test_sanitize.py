import pytest

from claimreport.report.sanitize import sanitize


@pytest.mark.parametrize(
    'raw, expected',
    [
        ('Berlin → Lisbon', 'Berlin -> Lisbon'),
        ('2024–2025 — final', '2024-2025 - final'),
        ('“quoted” «guillemets» „low“', '"quoted" "guillemets" "low"'),
        ('it‘s ’fine’', "it's 'fine'"),
        ('a\tb', 'a  b'),
        ('line\r\nnext', 'line\nnext'),
        ('Café Zürich', 'Café Zürich'),
        ('Łódź', '?ód?'),
    ],
)
def test_sanitize_replacements(raw, expected):
    assert sanitize(raw) == expected


@pytest.mark.parametrize('raw', [None, ''])
def test_sanitize_empty(raw):
    assert sanitize(raw) == ''


@pytest.mark.parametrize(
    'raw',
    [
        '→→ –—“”«»„‘’\t\r',
        'Ticket 1 of 3: Kraków → Wien (45.50 EUR)',
        '\t\t\r\r  mixed “text” — with ‘everything’ →',
        'plain ascii',
        '日本語 text',
    ],
)
def test_sanitize_is_idempotent(raw):
    once = sanitize(raw)
    assert sanitize(once) == once


def test_sanitize_keeps_newlines_for_paragraphs():
    assert sanitize('first\nsecond').split('\n') == ['first', 'second']
