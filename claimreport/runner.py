from __future__ import annotations

import logging

from claimreport.adapters.ticket_storage import (
    HttpTicketStorage,
    HttpTicketStorageConfig,
    LocalTicketStorage,
    TicketStorage,
)
from claimreport.config import Settings, get_settings
from claimreport.renderers.admin_submission import render_admin_submission
from claimreport.renderers.partner_submission import render_partner_submission
from claimreport.report.export import DeliverySink, ExportResult, RenderFn, export, report_filename
from claimreport.types import ReportKind, SubmissionBundle


logger = logging.getLogger(__name__)

RENDERERS: dict[ReportKind, RenderFn] = {
    ReportKind.admin: render_admin_submission,
    ReportKind.partner: render_partner_submission,
}


def build_ticket_storage(settings: Settings | None = None) -> TicketStorage | None:
    settings = settings or get_settings()
    if settings.ticket_storage_dir is not None:
        return LocalTicketStorage(
            settings.ticket_storage_dir,
            max_bytes=settings.max_attachment_bytes,
        )
    if settings.ticket_storage_url:
        return HttpTicketStorage(
            HttpTicketStorageConfig(
                base_url=settings.ticket_storage_url,
                bucket=settings.ticket_storage_bucket,
                api_key=settings.ticket_storage_api_key,
                timeout_seconds=settings.ticket_fetch_timeout_seconds,
                max_bytes=settings.max_attachment_bytes,
            )
        )
    logger.info('No ticket storage configured; ticket files will not be attached.')
    return None


async def render_report(
    bundle: SubmissionBundle,
    kind: ReportKind,
    *,
    sink: DeliverySink | None = None,
    storage: TicketStorage | None = None,
    settings: Settings | None = None,
) -> ExportResult:
    settings = settings or get_settings()
    if storage is None:
        storage = build_ticket_storage(settings)
    return await export(
        RENDERERS[kind],
        bundle,
        report_filename(bundle.submission.organisation_name),
        sink=sink,
        storage=storage,
        font_name=settings.pdf_font_name,
        font_path=settings.pdf_font_path,
        attachment_scale=settings.attachment_scale,
        title=f'Travel Reimbursement Claim - {bundle.submission.organisation_name}',
    )
