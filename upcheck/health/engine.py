"""HTTP check engine — probes a target with timeout and bounded retries.

A target is "up" when any HTTP response arrives and, if the target sets
``expect_status``, its code matches exactly. Network failures never raise:
they come back as a down CheckResult carrying the last error message.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from upcheck.targets.registry import Target

from .clock import Clock, SystemClock, format_timestamp

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
RETRY_DELAY_SECONDS = 0.2


# ── Models ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one check (or a carried-over status when not due)."""

    name: str
    url: str
    timestamp: str
    up: bool
    status: int = 0  # 0 = no response received
    latency_ms: int = 0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "name": self.name,
            "url": self.url,
            "timestamp": self.timestamp,
            "up": self.up,
            "status": self.status,
            "latency_ms": self.latency_ms,
        }
        if self.error:
            d["error"] = self.error
        return d


def is_up(status: int, expect_status: int) -> bool:
    """Liveness rule: got a response, and it matches the expectation if one is set."""
    return status != 0 and (expect_status == 0 or status == expect_status)


# ── Checker ──────────────────────────────────────────────────────────────────


class HTTPChecker:
    """Runs HTTP checks against targets.

    Each attempt runs on an ``httpx.AsyncClient`` under a total deadline of
    the target's timeout, so a server that trickles bytes cannot hold an
    attempt open past it. ``transport`` replaces the network layer
    (``httpx.MockTransport`` in tests); ``sleep`` is called with
    ``retry_delay`` between failed attempts.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
        default_timeout: float = DEFAULT_TIMEOUT_SECONDS,
        retry_delay: float = RETRY_DELAY_SECONDS,
    ) -> None:
        self.clock = clock or SystemClock()
        self._transport = transport
        self._sleep = sleep
        self.default_timeout = default_timeout
        self.retry_delay = retry_delay

    def timeout_for(self, target: Target) -> float:
        if target.timeout_seconds > 0:
            return float(target.timeout_seconds)
        return self.default_timeout

    @staticmethod
    def attempts_for(target: Target) -> int:
        return 1 + max(target.retries, 0)

    def check(self, target: Target) -> CheckResult:
        """Probe ``target`` once, retrying transport failures up to ``target.retries`` times."""
        timeout = self.timeout_for(target)
        method = (target.method or "GET").upper()
        attempts = self.attempts_for(target)
        issued_at = format_timestamp(self.clock.now())

        last_error = ""
        latency_ms = 0

        for attempt in range(1, attempts + 1):
            t0 = time.perf_counter()
            try:
                status = self._attempt(method, target.url, timeout)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                last_error = f"{type(e).__name__}: {e}"
            except asyncio.TimeoutError:
                last_error = f"TimeoutError: no response within {timeout:g}s"
            else:
                latency_ms = int((time.perf_counter() - t0) * 1000)
                break

            latency_ms = int((time.perf_counter() - t0) * 1000)
            if attempt < attempts:
                logger.info(
                    "Check %s attempt %d/%d failed (%s), retrying in %.1fs",
                    target.name, attempt, attempts, last_error, self.retry_delay,
                )
                self._sleep(self.retry_delay)
                continue
            logger.warning(
                "Check %s down after %d attempt(s): %s", target.name, attempts, last_error,
            )
            return CheckResult(
                name=target.name,
                url=target.url,
                timestamp=issued_at,
                up=False,
                status=0,
                latency_ms=latency_ms,
                error=last_error,
            )

        up = is_up(status, target.expect_status)
        if up:
            logger.debug("Check %s: HTTP %d up (%dms)", target.name, status, latency_ms)
        else:
            logger.warning(
                "Check %s: HTTP %d, expected %d", target.name, status, target.expect_status,
            )
        return CheckResult(
            name=target.name,
            url=target.url,
            timestamp=issued_at,
            up=up,
            status=status,
            latency_ms=latency_ms,
        )

    def _attempt(self, method: str, url: str, timeout: float) -> int:
        """One request, cut off ``timeout`` seconds after it starts."""
        return asyncio.run(asyncio.wait_for(self._fetch_status(method, url, timeout), timeout))

    async def _fetch_status(self, method: str, url: str, timeout: float) -> int:
        async with httpx.AsyncClient(
            timeout=timeout, follow_redirects=True, transport=self._transport,
        ) as client:
            async with client.stream(method, url) as resp:
                return resp.status_code
