"""Concurrent upload of local images to the image host.

The host follows the PicGo server contract::

    POST {endpoint}   {"list": ["/abs/path/to/image.png"]}
    200               {"success": true, "result": ["https://cdn/x.png"]}

Every unit of a file is uploaded at once, without a concurrency bound. Each
upload resolves to a tagged :class:`UploadOutcome`; none is dropped silently.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from picmark.config.constants import DEFAULT_UPLOAD_ENDPOINT, DEFAULT_UPLOAD_TIMEOUT
from picmark.core.mapping import UploadOutcome, UploadUnit
from picmark.core.task import ErrorKind
from picmark.exceptions import UploadAddressError
from picmark.utils.logging import get_logger

log = get_logger(__name__)

# Raised by httpx before any I/O when the target address cannot be used
_ADDRESS_ERRORS = (httpx.InvalidURL, httpx.UnsupportedProtocol)


@dataclass(frozen=True)
class ProgressEvent:
    """Upload progress of one file."""

    total_count: int
    uploaded_count: int


ProgressCallback = Callable[[ProgressEvent], None]


def _parse_response(payload: Any) -> str | None:
    """First URL of a successful upload response, or None."""
    if not isinstance(payload, dict) or not payload.get("success"):
        return None
    result = payload.get("result")
    if isinstance(result, list) and result and isinstance(result[0], str) and result[0]:
        return result[0]
    return None


class UploadOrchestrator:
    """Uploads every unit of a file concurrently and aggregates progress."""

    def __init__(
        self,
        endpoint: str = DEFAULT_UPLOAD_ENDPOINT,
        timeout: float | None = DEFAULT_UPLOAD_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            endpoint: Upload URL of the image host
            timeout: Per-upload timeout in seconds; None disables it
            transport: Optional httpx transport (tests use ``httpx.MockTransport``)
        """
        self.endpoint = endpoint
        self.timeout = timeout
        self.transport = transport

    async def upload_one(self, client: httpx.AsyncClient, unit: UploadUnit) -> UploadOutcome:
        """Upload a single unit.

        Raises:
            httpx.InvalidURL, httpx.UnsupportedProtocol: the endpoint is malformed
        """
        path = str(unit.absolute_path)
        try:
            response = await client.post(self.endpoint, json={"list": [path]})
            response.raise_for_status()
        except _ADDRESS_ERRORS:
            raise
        except (httpx.HTTPError, ValueError) as e:
            # ValueError covers request bodies that cannot be encoded
            log.warning("Upload failed", path=path, error=str(e))
            return UploadOutcome.failure(unit, ErrorKind.UPLOAD_FAILED, str(e))

        try:
            payload = response.json()
        except ValueError as e:
            log.warning("Upload response is not JSON", path=path, error=str(e))
            return UploadOutcome.failure(unit, ErrorKind.UPLOAD_FAILED, "Invalid JSON response")

        remote_url = _parse_response(payload)
        if remote_url is None:
            log.warning("Upload rejected by image host", path=path, response=str(payload))
            return UploadOutcome.failure(
                unit, ErrorKind.UPLOAD_FAILED, "Image host returned no URL"
            )

        log.debug("Uploaded image", path=path, remote_url=remote_url)
        return UploadOutcome.success(unit, remote_url)

    async def upload_all(
        self,
        units: list[UploadUnit],
        on_progress: ProgressCallback | None = None,
    ) -> list[UploadOutcome]:
        """Upload all units concurrently.

        ``on_progress`` is called once per settled upload, success or not.
        Returns only after every upload has settled.

        Args:
            units: Units to upload
            on_progress: Optional progress callback

        Returns:
            Outcomes in completion order

        Raises:
            UploadAddressError: The endpoint address is malformed
        """
        total = len(units)
        uploaded_count = 0
        outcomes: list[UploadOutcome] = []

        async def run(client: httpx.AsyncClient, unit: UploadUnit) -> None:
            nonlocal uploaded_count
            try:
                outcomes.append(await self.upload_one(client, unit))
            finally:
                uploaded_count += 1
                if on_progress:
                    on_progress(ProgressEvent(total_count=total, uploaded_count=uploaded_count))

        log.info("Uploading images", count=total, endpoint=self.endpoint)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            results = await asyncio.gather(
                *(run(client, unit) for unit in units),
                return_exceptions=True,
            )

        errors = [r for r in results if isinstance(r, BaseException)]
        for error in errors:
            if isinstance(error, asyncio.CancelledError):
                raise error
        for error in errors:
            if isinstance(error, _ADDRESS_ERRORS):
                raise UploadAddressError(self.endpoint, error) from error
        if errors:
            raise errors[0]

        failed = sum(1 for o in outcomes if not o.succeeded)
        log.info("Uploads settled", succeeded=total - failed, failed=failed)
        return outcomes
