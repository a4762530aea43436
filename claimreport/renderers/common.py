from __future__ import annotations

import logging

from claimreport.claims import format_eur
from claimreport.report.attachments import Attachment
from claimreport.report.composer import DocumentComposer
from claimreport.report.errors import AttachmentError
from claimreport.types import Project, Submission, Ticket


logger = logging.getLogger(__name__)

REPORT_TITLE = 'Travel Reimbursement Claim'


def date_range(project: Project | None) -> str:
    if project is None:
        return '-'
    if project.start_date and project.end_date:
        return f'{project.start_date.isoformat()} -> {project.end_date.isoformat()}'
    if project.start_date:
        return f'from {project.start_date.isoformat()}'
    if project.end_date:
        return f'until {project.end_date.isoformat()}'
    return '-'


def contact_line(submission: Submission) -> str:
    return ' - '.join(part for part in (submission.contact_name, submission.contact_email) if part)


def organisation_line(submission: Submission) -> str:
    return f'{submission.organisation_name} ({submission.country_code})'


def route_line(ticket: Ticket) -> str:
    return f'{ticket.from_location} -> {ticket.to_location} ({format_eur(ticket.amount_eur)})'


def participants_line(ticket: Ticket) -> str:
    return ', '.join(ticket.assigned_participants) or '-'


def draw_bank_details(pdf: DocumentComposer, submission: Submission) -> None:
    pdf.subtitle('Bank details')
    pdf.field('Account holder:', submission.account_holder)
    pdf.field('IBAN:', submission.iban)
    pdf.field('BIC:', submission.bic)


def draw_participants(pdf: DocumentComposer, names: list[str]) -> None:
    pdf.subtitle('Participants')
    if not names:
        pdf.paragraph('None')
    else:
        pdf.list(names)


def draw_ticket_overview(pdf: DocumentComposer, tickets: list[Ticket]) -> None:
    pdf.subtitle('Tickets (overview)')
    if not tickets:
        pdf.paragraph('No tickets.')
        return
    for index, ticket in enumerate(tickets, start=1):
        pdf.paragraph(f'{index}. {route_line(ticket)}\nParticipants: {participants_line(ticket)}')


async def attach_ticket_files(
    pdf: DocumentComposer,
    tickets: list[Ticket],
    *,
    with_participants: bool,
) -> int:
    """Attach each ticket's stored PDF in ticket order; unreadable files are skipped."""
    total = len(tickets)
    attached = 0
    for index, ticket in enumerate(tickets, start=1):
        caption = route_line(ticket)
        if with_participants and ticket.assigned_participants:
            caption = f'{caption} | {", ".join(ticket.assigned_participants)}'
        attachment = Attachment(
            label=f'Ticket {index} of {total}',
            caption=caption,
            file_reference=ticket.file_url,
        )
        try:
            added = await pdf.attach(attachment)
        except AttachmentError as exc:
            logger.warning('Skipping ticket %s attachment (%s): %s', index, exc.reference, exc)
            continue
        if added:
            attached += 1
    return attached
