"""Advisory client adapter - asks an external text-generation service for a
short operating recommendation based on the current telemetry.

Provides:
- ``AdvisoryConfig``   - endpoint, model and refresh knobs.
- ``AdvisoryClient``   - one-shot HTTP call to the Gemini ``generateContent``
                         REST endpoint; every failure becomes fallback text.
- ``AdvisoryAdapter``  - in-flight guard plus the latest advisory text,
                         loading flag and completion time.
- ``is_refresh_due``   - staleness predicate, independent of any scheduler.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable
from typing import Any, Protocol

import httpx
from pydantic import BaseModel, Field

from hrems.models import TelemetrySnapshot

__all__ = [
    "ERROR_FALLBACK",
    "EMPTY_FALLBACK",
    "INITIAL_ADVICE",
    "AdvisoryAdapter",
    "AdvisoryClient",
    "AdvisoryConfig",
    "Advisor",
    "build_prompt",
    "is_refresh_due",
]

logger = logging.getLogger("hrems.advisory")

ERROR_FALLBACK = "Analysis unavailable. Connection to AI advisor lost."
EMPTY_FALLBACK = "System metrics nominal. No immediate adjustments required."
INITIAL_ADVICE = "Initializing system advisor..."

_PROMPT_TEMPLATE = """\
As an expert Renewable Energy Management AI, analyze the following real-time telemetry \
from a Hybrid Renewable Energy Management System (HREMS):

Current State:
- Solar Generation: {solar_p}W (Irradiance: {solar_irr}W/m², Temp: {solar_temp}°C)
- Wind Generation: {wind_p}W (Wind Speed: {wind_speed}m/s)
- Battery Storage: {soc}% (Voltage: {battery_v}V, Status: {battery_status})
- Active Load Demand: {load_p}W (Priority: {load_priority})
- Inverter Efficiency: {inverter_eff}%

Please provide a concise (2-3 sentence) technical assessment and optimization recommendation.
Focus on whether to prioritize battery charging or load shedding based on current generation vs demand.
Keep the tone professional and industrial.
"""


class AdvisoryConfig(BaseModel):
    """Advisory service settings.

    Attributes:
        enabled: When ``False`` no advisory request is ever made.
        base_url: Root of the Generative Language REST API.
        model: Model name used in the ``generateContent`` path.
        api_key_env: Environment variable holding the API key.
        api_key: Explicit key; overrides ``api_key_env`` when set.
        temperature / top_p: Sampling parameters forwarded to the service.
        timeout_s: Per-request timeout in seconds.
        refresh_interval_s: Age after which the advice is considered stale.
    """

    enabled: bool = True
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    model: str = "gemini-3-flash-preview"
    api_key_env: str = "GEMINI_API_KEY"
    api_key: str | None = None
    temperature: float = 0.7
    top_p: float = 0.9
    timeout_s: float = Field(default=30.0, gt=0)
    refresh_interval_s: float = Field(default=30.0, gt=0)

    def resolve_api_key(self) -> str | None:
        return self.api_key or os.environ.get(self.api_key_env)


class Advisor(Protocol):
    """Anything that turns a snapshot into advisory text without raising."""

    async def analyze(self, snapshot: TelemetrySnapshot) -> str: ...


def build_prompt(snapshot: TelemetrySnapshot) -> str:
    """Render the advisory prompt for *snapshot*."""
    return _PROMPT_TEMPLATE.format(
        solar_p=round(snapshot.solar.power, 1),
        solar_irr=_fmt(snapshot.solar.irradiance),
        solar_temp=_fmt(snapshot.solar.temperature),
        wind_p=round(snapshot.wind.power, 1),
        wind_speed=_fmt(snapshot.wind.wind_speed),
        soc=round(snapshot.battery_soc, 2),
        battery_v=snapshot.battery.voltage,
        battery_status=snapshot.battery.status or "Unknown",
        load_p=round(snapshot.load.active, 1),
        load_priority=snapshot.load.priority.value,
        inverter_eff=snapshot.inverter.efficiency,
    )


def _fmt(value: float | None) -> str:
    return "n/a" if value is None else f"{value:.1f}"


def is_refresh_due(now: float, last_update: float | None, interval_s: float = 30.0) -> bool:
    """True when no advice has completed yet or the last one is older than *interval_s*."""
    return last_update is None or now - last_update > interval_s


# -----------------------------------------------------------------------
# HTTP client
# -----------------------------------------------------------------------


class AdvisoryClient:
    """Calls the Gemini ``generateContent`` endpoint over HTTP.

    :meth:`analyze` never raises: transport errors, HTTP error statuses,
    timeouts, malformed bodies and a missing API key all resolve to
    :data:`ERROR_FALLBACK`; an empty reply resolves to :data:`EMPTY_FALLBACK`.

    Parameters:
        config: Endpoint / model settings.
        transport: Optional ``httpx`` transport (tests pass a
            ``httpx.MockTransport``).
    """

    def __init__(
        self,
        config: AdvisoryConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or AdvisoryConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def url(self) -> str:
        return f"{self._config.base_url.rstrip('/')}/models/{self._config.model}:generateContent"

    async def connect(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.timeout_s),
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
            logger.info("AdvisoryClient ready - model: %s", self._config.model)

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("AdvisoryClient closed")

    async def analyze(self, snapshot: TelemetrySnapshot) -> str:
        api_key = self._config.resolve_api_key()
        if not api_key:
            logger.error("Advisory analysis error: no API key (set %s)", self._config.api_key_env)
            return ERROR_FALLBACK

        await self.connect()
        if self._client is None:
            logger.error("Advisory analysis error: AdvisoryClient is not connected")
            return ERROR_FALLBACK

        payload = {
            "contents": [{"parts": [{"text": build_prompt(snapshot)}]}],
            "generationConfig": {
                "temperature": self._config.temperature,
                "topP": self._config.top_p,
            },
        }
        try:
            resp = await self._client.post(self.url, json=payload, headers={"x-goog-api-key": api_key})
            resp.raise_for_status()
            text = _extract_text(resp.json())
        except Exception as exc:
            logger.error("Advisory analysis error: %s", exc)
            return ERROR_FALLBACK

        logger.debug("POST %s - HTTP %d - %d chars", self.url, resp.status_code, len(text))
        return text or EMPTY_FALLBACK


def _extract_text(body: dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate."""
    candidates = body.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts).strip()


# -----------------------------------------------------------------------
# Adapter - in-flight guard and latest advice
# -----------------------------------------------------------------------


class AdvisoryAdapter:
    """Holds the latest advisory text and serialises requests.

    At most one request is in flight; :meth:`refresh` called while one is
    pending returns ``False`` immediately without queueing.  A reply is
    applied when it arrives even if newer telemetry exists by then.  An
    advisor that raises is treated like a failed request and leaves
    :data:`ERROR_FALLBACK` as the text.

    Parameters:
        advisor: The service wrapper (normally :class:`AdvisoryClient`).
        refresh_interval_s: Staleness threshold for :meth:`is_due`.
        clock: Time source, ``time.time`` by default.
    """

    def __init__(
        self,
        advisor: Advisor,
        *,
        refresh_interval_s: float = 30.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._advisor = advisor
        self._refresh_interval_s = refresh_interval_s
        self._clock = clock
        self.text = INITIAL_ADVICE
        self.loading = False
        self.last_update: float | None = None

    def is_due(self) -> bool:
        return is_refresh_due(self._clock(), self.last_update, self._refresh_interval_s)

    async def refresh(self, snapshot: TelemetrySnapshot) -> bool:
        """Request new advice for *snapshot*; ``False`` if one is already pending."""
        if self.loading:
            logger.debug("Advisory request already in flight - ignoring trigger")
            return False

        self.loading = True
        try:
            self.text = await self._advisor.analyze(snapshot)
        except Exception as exc:
            logger.error("Advisory analysis error: %s", exc)
            self.text = ERROR_FALLBACK
        finally:
            self.loading = False
        self.last_update = self._clock()

        logger.info("Advisory updated: %s", self.text)
        return True
