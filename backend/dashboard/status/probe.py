"""Query the public status API for one game-server address."""

from __future__ import annotations

import httpx
import structlog
from pydantic import ValidationError

from dashboard.status.types import ProbeResult

logger = structlog.get_logger()

DEFAULT_STATUS_API_URL = "https://api.mcsrvstat.us/3"


class StatusProbe:
    """Fetch and normalize server status from the status API.

    Transport errors, unusable addresses, non-2xx responses and malformed
    bodies all come back as an offline result, so a failing API and a
    server that is really down look the same to callers. No retries and no
    caching; the httpx default timeout applies.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_STATUS_API_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._transport = transport

    async def check(self, address: str) -> ProbeResult:
        if not address:
            raise ValueError("address must not be empty")

        log = logger.bind(address=address)
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(f"{self._base_url}/{address}")
                response.raise_for_status()
            return ProbeResult.model_validate(response.json())
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            log.warning("status probe failed", error=str(e))
        except (ValueError, ValidationError) as e:
            log.warning("status probe returned malformed body", error=str(e))
        except Exception:
            log.exception("status probe crashed")
        return ProbeResult.unreachable(address)
