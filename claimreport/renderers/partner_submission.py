from __future__ import annotations

from claimreport.claims import claimed_total, format_eur
from claimreport.report.composer import DocumentComposer
from claimreport.types import SubmissionBundle

from .common import (
    REPORT_TITLE,
    attach_ticket_files,
    contact_line,
    draw_bank_details,
    draw_participants,
    draw_ticket_overview,
    organisation_line,
)


async def render_partner_submission(pdf: DocumentComposer, data: SubmissionBundle) -> None:
    submission = data.submission

    pdf.title(REPORT_TITLE)

    pdf.field('Organisation:', organisation_line(submission))
    pdf.field('Contact:', contact_line(submission))
    pdf.line()

    draw_bank_details(pdf, submission)
    pdf.line()

    draw_participants(pdf, [p.full_name for p in data.participants])
    pdf.line()

    draw_ticket_overview(pdf, data.tickets)
    pdf.paragraph(f'Total claimed: {format_eur(claimed_total(data.tickets))}')

    await attach_ticket_files(pdf, data.tickets, with_participants=False)
