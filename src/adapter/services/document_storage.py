import logging
import os
import tempfile
from pathlib import Path
from typing import Optional
from urllib.parse import urljoin, urlparse
from urllib.request import url2pathname

import httpx
from fastapi.concurrency import run_in_threadpool

from src.app.services.document_storage import DocumentStorageError, IDocumentStorage

logger = logging.getLogger(__name__)


class HttpDocumentStorage(IDocumentStorage):
    """
    Fetches source documents over HTTP and keeps signed artifacts on disk.

    Relative document URLs (e.g. "/uploads/nda.pdf") are resolved against
    base_url. file:// URLs are only served from the signed documents
    directory.
    """

    def __init__(
        self,
        base_url: str,
        signed_documents_dir: str,
        timeout: float = 30.0,
        max_bytes: int = 25 * 1024 * 1024,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.signed_documents_dir = Path(signed_documents_dir).resolve()
        self.timeout = timeout
        self.max_bytes = max_bytes
        self.transport = transport

    async def fetch(self, url: str) -> bytes:
        parsed = urlparse(url)
        if parsed.scheme == "file":
            return await run_in_threadpool(self._read_local, parsed.path)

        if not parsed.scheme:
            url = urljoin(self.base_url.rstrip("/") + "/", url.lstrip("/"))
        elif parsed.scheme not in ("http", "https"):
            raise DocumentStorageError(f"Unsupported document URL scheme: {parsed.scheme}")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport, follow_redirects=True
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise DocumentStorageError(f"Fetching {url} failed: {exc}") from exc

        if len(response.content) > self.max_bytes:
            raise DocumentStorageError(
                f"Document is larger than {self.max_bytes} bytes"
            )
        return response.content

    async def store(self, key: str, content: bytes) -> str:
        if not key or Path(key).name != key or key in (".", ".."):
            raise DocumentStorageError(f"Invalid storage key: {key!r}")
        path = await run_in_threadpool(self._write_local, key, content)
        logger.info("Stored signed document %s (%d bytes)", key, len(content))
        return path.as_uri()

    def _read_local(self, url_path: str) -> bytes:
        path = Path(url2pathname(url_path)).resolve()
        if not path.is_relative_to(self.signed_documents_dir):
            raise DocumentStorageError("Local documents outside storage are not readable")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise DocumentStorageError(f"Reading {path.name} failed: {exc}") from exc

    def _write_local(self, key: str, content: bytes) -> Path:
        target = self.signed_documents_dir / key
        try:
            self.signed_documents_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.signed_documents_dir, suffix=".tmp")
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(content)
            os.replace(tmp_name, target)
        except OSError as exc:
            raise DocumentStorageError(f"Writing {key} failed: {exc}") from exc
        return target
