from __future__ import annotations

import io

import pytest
from pypdf import PdfReader, PdfWriter
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen.canvas import Canvas

from claimreport.types import Participant, Project, Rates, Submission, SubmissionBundle, Ticket


def build_pdf(page_count: int = 1, pagesize=A4, prefix: str = 'Scanned ticket page') -> bytes:
    buffer = io.BytesIO()
    canvas = Canvas(buffer, pagesize=pagesize)
    for index in range(page_count):
        canvas.setFont('Helvetica', 10)
        canvas.drawString(10, pagesize[1] / 2, f'{prefix} {index + 1}')
        canvas.showPage()
    canvas.save()
    return buffer.getvalue()


def rotate_pdf(data: bytes, degrees: int = 90) -> bytes:
    writer = PdfWriter(clone_from=io.BytesIO(data))
    for page in writer.pages:
        page.rotate(degrees)
    output = io.BytesIO()
    writer.write(output)
    return output.getvalue()


class DictStorage:
    def __init__(self, files: dict[str, bytes] | None = None):
        self.files = dict(files or {})
        self.requested: list[str] = []

    async def fetch(self, reference: str) -> bytes | None:
        self.requested.append(reference)
        return self.files.get(reference)


@pytest.fixture
def make_pdf():
    return build_pdf


@pytest.fixture
def make_rotated_pdf():
    def _make(page_count: int = 1, pagesize=A4, degrees: int = 90) -> bytes:
        return rotate_pdf(build_pdf(page_count, pagesize=pagesize), degrees)

    return _make


@pytest.fixture
def read_pdf():
    def _read(data: bytes) -> PdfReader:
        return PdfReader(io.BytesIO(data))

    return _read


@pytest.fixture
def pdf_text(read_pdf):
    def _text(data: bytes) -> str:
        return '\n'.join(page.extract_text() or '' for page in read_pdf(data).pages)

    return _text


@pytest.fixture
def storage():
    return DictStorage()


@pytest.fixture
def bundle():
    return SubmissionBundle(
        submission=Submission(
            organisation_name='Green Rail Association',
            country_code='DE',
            contact_name='Jana Novak',
            contact_email='jana@example.org',
            account_holder='Green Rail e.V.',
            iban='DE89370400440532013000',
            bic='COBADEFFXXX',
        ),
        project=Project(name='Youth Exchange 2025', project_reference='2025-1-DE04-KA152'),
        participants=[
            Participant(full_name='Alice Meyer'),
            Participant(full_name='Bruno Costa'),
        ],
        tickets=[
            Ticket(
                from_location='Berlin',
                to_location='Lisbon',
                amount_eur=45.50,
                assigned_participants=['Alice Meyer'],
            )
        ],
        rates=Rates(standard=20, green=10),
    )
