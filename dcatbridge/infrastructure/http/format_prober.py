"""HTTP adapter for the FormatProber port."""

import httpx

from dcatbridge.domain.catalog.port.format_prober import FormatProber
from dcatbridge.domain.shared.error import FormatProbeError


class HttpFormatProber(FormatProber):
    """Reads the Content-Type of a download URL without downloading the body."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def content_type(self, url: str) -> str | None:
        try:
            # Hosted downloads redirect to the stored file
            async with self._client.stream("GET", url, follow_redirects=True) as response:
                if not response.is_success:
                    raise FormatProbeError(
                        f"Probe of {url} returned {response.status_code}",
                        code="probe_failed",
                    )
                return response.headers.get("content-type")
        except httpx.HTTPError as e:
            raise FormatProbeError(f"Probe of {url} failed: {e}", code="probe_failed") from e
