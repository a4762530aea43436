from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol
from urllib.parse import quote

import httpx

from claimreport.report.errors import AttachmentFetchError


logger = logging.getLogger(__name__)


class TicketStorage(Protocol):
    async def fetch(self, reference: str) -> bytes | None:
        """Return the stored file, or None when nothing is stored under reference."""
        ...


def _check_size(data: bytes, *, reference: str, max_bytes: int | None) -> bytes:
    if max_bytes is not None and len(data) > max_bytes:
        raise AttachmentFetchError(
            f'attachment too large: {len(data)} bytes, max allowed {max_bytes} bytes',
            reference=reference,
        )
    return data


class LocalTicketStorage:
    def __init__(self, root: Path, *, max_bytes: int | None = None):
        self.root = Path(root).expanduser().resolve()
        self.max_bytes = max_bytes

    def path_for(self, reference: str) -> Path:
        token = str(reference or '').strip().lstrip('/')
        if not token:
            raise AttachmentFetchError('empty file reference', reference=reference)
        path = (self.root / token).resolve()
        if path != self.root and self.root not in path.parents:
            raise AttachmentFetchError(f'file reference escapes storage root: {reference}', reference=reference)
        return path

    async def fetch(self, reference: str) -> bytes | None:
        path = self.path_for(reference)
        if not path.is_file():
            logger.info('Ticket file not found in %s: %s', self.root, reference)
            return None
        data = await asyncio.to_thread(path.read_bytes)
        return _check_size(data, reference=reference, max_bytes=self.max_bytes)


@dataclass
class HttpTicketStorageConfig:
    base_url: str
    bucket: str
    api_key: str | None
    timeout_seconds: int
    max_bytes: int | None = None


class HttpTicketStorage:
    """Object-storage bucket over HTTP (``<base>/storage/v1/object/<bucket>/<ref>``)."""

    def __init__(self, cfg: HttpTicketStorageConfig, *, transport: httpx.AsyncBaseTransport | None = None):
        self.cfg = cfg
        self._transport = transport

    def url_for(self, reference: str) -> str:
        token = str(reference or '').strip()
        # absolute URLs are fetched as-is
        if token.startswith('http://') or token.startswith('https://'):
            return token
        base = self.cfg.base_url.rstrip('/')
        return f'{base}/storage/v1/object/{quote(self.cfg.bucket)}/{quote(token.lstrip("/"))}'

    async def fetch(self, reference: str) -> bytes | None:
        url = self.url_for(reference)
        headers: dict[str, str] = {}
        api_key = str(self.cfg.api_key or '').strip()
        if api_key:
            headers['Authorization'] = f'Bearer {api_key}'
            headers['apikey'] = api_key

        try:
            async with httpx.AsyncClient(
                timeout=max(5, int(self.cfg.timeout_seconds)),
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise AttachmentFetchError(f'ticket download failed: {exc}', reference=reference) from exc

        if response.status_code in {400, 404}:
            # the storage API answers 400 for unknown objects as well
            logger.info('Ticket file not found at %s (HTTP %s)', url, response.status_code)
            return None
        if response.status_code >= 400:
            raise AttachmentFetchError(
                f'ticket download failed: HTTP {response.status_code}',
                reference=reference,
            )
        return _check_size(response.content, reference=reference, max_bytes=self.cfg.max_bytes)
