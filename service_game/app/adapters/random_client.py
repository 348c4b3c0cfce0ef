"""
Random-number service client for the Game Service.
"""

import random
from typing import Any, Optional

import httpx

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from shared.retry import RetryError, RetryPolicy, power_backoff

MAX_RETRY_ATTEMPTS = 2
BACKOFF_BASE = 3.0

# The local generator draws from the same range as the choice ids
FALLBACK_MIN = 1
FALLBACK_MAX = 5


def is_server_error(response: httpx.Response) -> bool:
    """Responses worth retrying: 5xx only."""
    return response.status_code >= 500


class RandomNumberClient:
    """Client for the upstream random-number service.

    ``get_random_number`` never fails outward: transport errors and 5xx
    responses are retried, and whatever still goes wrong is replaced by a
    locally generated number. Task cancellation is the one exception and is
    always propagated.
    """

    def __init__(self,
                 base_url: str,
                 timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 rng: Optional[random.Random] = None,
                 metrics: Optional[MetricsCollector] = None,
                 max_retries: int = MAX_RETRY_ATTEMPTS):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.transport = transport
        self.rng = rng or random.Random()
        self.metrics = metrics
        self.logger = get_logger("game.random_client")

        self.retry_policy = RetryPolicy(
            "random_service",
            config=power_backoff(max_retries, BACKOFF_BASE),
            retry_on=(httpx.TransportError,),
            retry_if_result=is_server_error,
            on_retry=metrics.record_retry if metrics else None,
        )

    async def _request(self) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport
        ) as client:
            return await client.get("/random")

    async def get_random_number(self) -> int:
        """Fetch a random integer, falling back to the local generator."""
        self.logger.info("Fetching random number", url=f"{self.base_url}/random")

        try:
            response = await self.retry_policy.execute(self._request)
        except RetryError as e:
            return self._fallback("transport_error", error=str(e.last_exception))
        except Exception as e:
            return self._fallback("unexpected_error", error=str(e))

        if not response.is_success:
            return self._fallback("bad_status", status_code=response.status_code)

        number = self._parse(response)
        if number is None:
            return self._fallback("bad_body", body=response.text[:200])

        self.logger.debug("Random number received", random_number=number)
        return number

    @staticmethod
    def _parse(response: httpx.Response) -> Optional[int]:
        try:
            payload: Any = response.json()
        except ValueError:
            return None

        if not isinstance(payload, dict):
            return None

        number = payload.get("random_number")
        # bool is an int subclass; reject it explicitly
        if isinstance(number, bool) or not isinstance(number, int):
            return None
        return number

    def _fallback(self, reason: str, **context) -> int:
        number = self.rng.randint(FALLBACK_MIN, FALLBACK_MAX)
        self.logger.warning(
            "Unable to fetch from random service. Falling back to internal random generator",
            reason=reason,
            random_number=number,
            **context
        )
        if self.metrics is not None:
            self.metrics.record_fallback(reason)
        return number

    async def health_check(self) -> bool:
        """Single probe of the upstream, without retries."""
        try:
            response = await self._request()
            return response.is_success
        except httpx.HTTPError:
            return False
