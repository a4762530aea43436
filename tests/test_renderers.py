import asyncio
from datetime import date, datetime

import pytest

from claimreport.config import Settings
from claimreport.report.export import MemorySink, export
from claimreport.renderers.admin_submission import render_admin_submission
from claimreport.renderers.partner_submission import render_partner_submission
from claimreport.runner import render_report
from claimreport.types import Participant, ReportKind, Ticket


def _export(render_fn, bundle, storage=None):
    return asyncio.run(export(render_fn, bundle, 'claim.pdf', storage=storage))


def test_admin_simple_report(bundle, pdf_text):
    result = _export(render_admin_submission, bundle)
    text = pdf_text(result.data)

    assert result.page_count == 1
    assert 'Alice Meyer' in text
    assert 'Bruno Costa' in text
    lines = [line.strip() for line in text.split('\n')]
    assert 'Total claimed: 45.50 EUR' in lines
    assert 'Max allowed: 40.00 EUR' in lines  # 2 participants at the standard rate
    assert 'Difference: 5.50 EUR' in lines
    assert 'Youth Exchange 2025' in text
    assert 'Berlin -> Lisbon (45.50 EUR)' in text


def test_admin_report_project_details(bundle, pdf_text):
    bundle.project.start_date = date(2025, 3, 1)
    bundle.project.end_date = date(2025, 3, 10)
    bundle.submission.submitted_at = datetime(2025, 4, 2, 9, 30)

    text = pdf_text(_export(render_admin_submission, bundle).data)

    assert '2025-03-01 -> 2025-03-10' in text
    assert '2025-04-02 09:30' in text


def test_admin_report_without_tickets_or_participants(bundle, pdf_text):
    bundle.tickets = []
    bundle.participants = []
    bundle.project = None
    bundle.rates = None

    result = _export(render_admin_submission, bundle)
    text = pdf_text(result.data)

    assert result.page_count == 1
    assert 'None' in text
    assert 'No tickets.' in text


def test_partner_report_total(bundle, pdf_text):
    bundle.tickets.append(Ticket(from_location='Lisbon', to_location='Berlin', amount_eur=30))

    text = pdf_text(_export(render_partner_submission, bundle).data)

    assert 'Total claimed: 75.50 EUR' in text
    assert 'Youth Exchange 2025' not in text


@pytest.mark.parametrize('render_fn', [render_admin_submission, render_partner_submission])
def test_attachment_expansion(bundle, storage, make_pdf, render_fn):
    base = _export(render_fn, bundle, storage=storage).page_count

    storage.files['tickets/berlin-lisbon.pdf'] = make_pdf(3)
    bundle.tickets[0].file_url = 'tickets/berlin-lisbon.pdf'
    result = _export(render_fn, bundle, storage=storage)

    assert result.page_count == base + 3


def test_missing_file_is_skipped(bundle, storage, pdf_text):
    base = _export(render_admin_submission, bundle, storage=storage).page_count

    bundle.tickets[0].file_url = 'tickets/gone.pdf'
    result = _export(render_admin_submission, bundle, storage=storage)

    assert result.page_count == base
    assert storage.requested == ['tickets/gone.pdf']


def test_malformed_file_is_skipped(bundle, storage, make_pdf, read_pdf):
    storage.files['broken.pdf'] = b'%PDF-1.7 truncated'
    storage.files['good.pdf'] = make_pdf(1)
    bundle.tickets[0].file_url = 'broken.pdf'
    bundle.tickets.append(Ticket(from_location='Lisbon', to_location='Berlin', amount_eur=30, file_url='good.pdf'))

    result = _export(render_admin_submission, bundle, storage=storage)

    reader = read_pdf(result.data)
    assert len(reader.pages) == result.page_count
    assert 'Ticket 2 of 2' in reader.pages[-1].extract_text()


def test_attachments_follow_ticket_order(bundle, storage, make_pdf, read_pdf):
    bundle.tickets = [
        Ticket(from_location=f'City {i}', to_location='Home', amount_eur=10, file_url=f't{i}.pdf')
        for i in range(1, 4)
    ]
    for i in range(1, 4):
        storage.files[f't{i}.pdf'] = make_pdf(1, prefix=f'Scan of ticket {i} page')

    result = _export(render_partner_submission, bundle, storage=storage)
    pages = read_pdf(result.data).pages[-3:]

    for i, page in enumerate(pages, start=1):
        text = page.extract_text()
        assert f'Ticket {i} of 3' in text
        assert f'Scan of ticket {i} page 1' in text


def test_admin_caption_lists_participants(bundle, storage, make_pdf, read_pdf):
    storage.files['t.pdf'] = make_pdf(1)
    bundle.tickets[0].file_url = 't.pdf'
    bundle.participants.append(Participant(full_name='Chen Li', is_green_travel=True))

    result = _export(render_admin_submission, bundle, storage=storage)

    assert 'Berlin -> Lisbon (45.50 EUR) | Alice Meyer' in read_pdf(result.data).pages[-1].extract_text()


def test_render_report_uses_settings(bundle, storage, tmp_path):
    settings = Settings(output_dir=tmp_path)
    sink = MemorySink()

    result = asyncio.run(render_report(bundle, ReportKind.partner, sink=sink, storage=storage, settings=settings))

    assert result.filename == 'reimbursement_Green_Rail_Association.pdf'
    assert list(sink.files) == [result.filename]
