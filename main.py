from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from claimreport.config import get_settings
from claimreport.report.errors import ReportError
from claimreport.report.export import FileSink
from claimreport.runner import build_ticket_storage, render_report
from claimreport.storage import read_json
from claimreport.types import ReportKind, SubmissionBundle


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def cmd_render(args: argparse.Namespace) -> int:
    settings = get_settings()
    input_path = Path(args.input).expanduser().resolve()
    if not input_path.is_file():
        _print_json({'status': 'error', 'message': f'Input not found: {input_path}'})
        return 2

    try:
        bundle = SubmissionBundle.model_validate(read_json(input_path))
    except (json.JSONDecodeError, ValidationError) as exc:
        _print_json({'status': 'error', 'message': f'Invalid submission bundle: {exc}'})
        return 2

    if args.tickets_dir:
        settings = settings.model_copy(update={'ticket_storage_dir': Path(args.tickets_dir).expanduser()})
    output_dir = Path(args.output_dir).expanduser() if args.output_dir else settings.output_dir

    try:
        result = asyncio.run(
            render_report(
                bundle,
                ReportKind(args.kind),
                sink=FileSink(output_dir),
                storage=build_ticket_storage(settings),
                settings=settings,
            )
        )
    except ReportError as exc:
        logging.getLogger(__name__).error('Export failed: %s', exc)
        _print_json({'status': 'error', 'message': str(exc), 'error': type(exc).__name__})
        return 1

    _print_json(
        {
            'status': result.status.value,
            'filename': result.filename,
            'path': result.location,
            'mime_type': result.mime_type,
            'page_count': result.page_count,
            'bytes': len(result.data),
        }
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Travel reimbursement claim PDF export')
    sub = parser.add_subparsers(dest='command', required=True)

    render = sub.add_parser('render', help='Render a submission bundle to PDF')
    render.add_argument('--input', required=True, help='Path to submission bundle JSON')
    render.add_argument('--kind', choices=[k.value for k in ReportKind], default=ReportKind.admin.value)
    render.add_argument('--output-dir', required=False, help='Directory for the PDF file')
    render.add_argument('--tickets-dir', required=False, help='Local directory holding ticket files')
    render.set_defaults(func=cmd_render)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, get_settings().log_level.upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    return int(args.func(args))


if __name__ == '__main__':
    raise SystemExit(main())
