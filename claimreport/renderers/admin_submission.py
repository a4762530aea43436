from __future__ import annotations

from claimreport.claims import calculate_claim_totals, format_eur
from claimreport.report.composer import DocumentComposer
from claimreport.types import Rates, SubmissionBundle

from .common import (
    REPORT_TITLE,
    attach_ticket_files,
    contact_line,
    date_range,
    draw_bank_details,
    draw_participants,
    draw_ticket_overview,
    organisation_line,
)


def _rate_value(value: float | None) -> str | None:
    return None if value is None else format_eur(value)


async def render_admin_submission(pdf: DocumentComposer, data: SubmissionBundle) -> None:
    """Review report for administrators: project, claim summary and every ticket file."""
    submission = data.submission
    project = data.project
    rates = data.rates or Rates()

    pdf.title(REPORT_TITLE)

    pdf.subtitle('Project information')
    pdf.field('Project:', project.name if project else None)
    pdf.field('Dates:', date_range(project))
    pdf.field('Reference no.:', project.project_reference if project else None)
    pdf.line()

    pdf.subtitle('Organisation')
    pdf.field('Organisation:', organisation_line(submission))
    pdf.field('Contact:', contact_line(submission))
    if submission.submitted_at:
        pdf.field('Submitted at:', submission.submitted_at.strftime('%Y-%m-%d %H:%M'))
    pdf.line()

    draw_bank_details(pdf, submission)
    pdf.line()

    draw_participants(pdf, [p.full_name for p in data.participants])
    pdf.line()

    totals = calculate_claim_totals(data.participants, data.tickets, rates)
    pdf.subtitle('Claim summary')
    pdf.field('Standard rate:', _rate_value(rates.standard))
    pdf.field('Green rate:', _rate_value(rates.green))
    pdf.paragraph(
        f'Total claimed: {format_eur(totals.claimed_total)}\n'
        f'Max allowed: {format_eur(totals.approved_max)}\n'
        f'Difference: {format_eur(totals.difference)}'
    )
    pdf.line()

    draw_ticket_overview(pdf, data.tickets)

    await attach_ticket_files(pdf, data.tickets, with_participants=True)
