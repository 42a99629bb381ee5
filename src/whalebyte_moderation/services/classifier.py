"""Automated content checks feeding AI confidence into report resolution.

The engine only depends on the ``ContentClassifier`` protocol. Two concrete
classifiers ship with the package: a local keyword heuristic and an HTTP
client for an external model service.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

import httpx

from whalebyte_moderation.core.settings import Settings
from whalebyte_moderation.services.errors import ClassifierUnavailableError

logger = logging.getLogger(__name__)

_NORMALIZE_RE = re.compile(r"[^a-z0-9\s']+")
_WHITESPACE_RE = re.compile(r"\s+")


class AIReportReason(str, Enum):
    """Categories an automated check may flag."""

    CHILD_NUDITY = "child_nudity"
    PEDOPHILIA = "pedophilia"
    CHILD_VIOLENCE = "child_violence"
    VIOLENCE_AGAINST_WOMEN = "violence_against_women"
    RAPE = "rape"
    EXTREME_VIOLENCE = "extreme_violence"
    HATE_SPEECH = "hate_speech"
    TERRORISM = "terrorism"


@dataclass(frozen=True)
class ContentCheckResult:
    """Single-shot signal returned by a classifier."""

    confidence: float
    flags: tuple[AIReportReason, ...] = ()

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError("confidence must be within [0, 1]")

    def is_allowed(self, threshold: float) -> bool:
        """Return True if the content stays below the auto-removal threshold."""
        return self.confidence < threshold


class ContentClassifier(Protocol):
    async def check_content(self, text: str, media_refs: Sequence[str]) -> ContentCheckResult:
        ...


def parse_check_result(payload: Mapping[str, Any]) -> ContentCheckResult:
    """Build a result from a ``{confidence, flags}`` mapping.

    Raises:
        ClassifierUnavailableError: If the payload is malformed.
    """
    try:
        confidence = float(payload["confidence"])
        raw_flags = payload.get("flags") or []
        flags: list[AIReportReason] = []
        for raw in raw_flags:
            try:
                flags.append(AIReportReason(raw))
            except ValueError:
                logger.debug("Ignoring unknown classifier flag %r", raw)
        return ContentCheckResult(confidence=confidence, flags=tuple(flags))
    except (KeyError, TypeError, ValueError) as exc:
        raise ClassifierUnavailableError(f"Malformed classifier response: {exc}") from exc


class NullClassifier:
    """Classifier that never flags anything."""

    async def check_content(self, text: str, media_refs: Sequence[str]) -> ContentCheckResult:
        return ContentCheckResult(confidence=0.0)


# Phrase lists are intentionally short; this is a first-pass filter, not a model.
DEFAULT_TERMS: dict[AIReportReason, tuple[str, ...]] = {
    AIReportReason.HATE_SPEECH: ("subhuman", "vermin", "inferior race", "go back to your country"),
    AIReportReason.TERRORISM: ("join the jihad", "martyrdom operation", "bomb the crowd"),
    AIReportReason.EXTREME_VIOLENCE: ("dismember", "torture video", "behead", "mutilate"),
    AIReportReason.VIOLENCE_AGAINST_WOMEN: ("beat your wife", "women deserve to be hit"),
    AIReportReason.CHILD_VIOLENCE: ("child abuse", "hurt the kid"),
    AIReportReason.RAPE: ("rape",),
}


class KeywordClassifier:
    """Local text heuristic that maps phrase hits to AI reasons.

    The first hit scores ``base_confidence``; each additional hit adds
    ``step`` up to 1.0. Media references are not inspected.
    """

    def __init__(
        self,
        terms: Mapping[AIReportReason, Sequence[str]] | None = None,
        *,
        base_confidence: float = 0.6,
        step: float = 0.15,
    ) -> None:
        self.terms = {
            reason: tuple(phrase.lower() for phrase in phrases)
            for reason, phrases in (terms or DEFAULT_TERMS).items()
        }
        self.base_confidence = base_confidence
        self.step = step

    @staticmethod
    def _normalize(text: str) -> str:
        lowered = _NORMALIZE_RE.sub(" ", text.lower())
        return _WHITESPACE_RE.sub(" ", lowered).strip()

    async def check_content(self, text: str, media_refs: Sequence[str]) -> ContentCheckResult:
        # Padded so phrases only match on word boundaries.
        normalized = f" {self._normalize(text)} "
        hits = 0
        flags: list[AIReportReason] = []
        for reason, phrases in self.terms.items():
            reason_hits = sum(1 for phrase in phrases if f" {phrase} " in normalized)
            if reason_hits:
                hits += reason_hits
                flags.append(reason)

        if not hits:
            return ContentCheckResult(confidence=0.0)

        confidence = min(1.0, self.base_confidence + self.step * (hits - 1))
        logger.debug("Keyword classifier matched %d phrase(s): %s", hits, [f.value for f in flags])
        return ContentCheckResult(confidence=confidence, flags=tuple(flags))


class HttpClassifier:
    """Client for an external model service speaking ``{confidence, flags}`` JSON."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def check_content(self, text: str, media_refs: Sequence[str]) -> ContentCheckResult:
        payload = {"text": text, "media": list(media_refs)}
        try:
            response = await self._client.post(self.url, json=payload)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError, ValueError) as exc:
            raise ClassifierUnavailableError(f"Classifier request failed: {exc}") from exc

        if not isinstance(data, Mapping):
            raise ClassifierUnavailableError("Classifier response is not a JSON object")
        return parse_check_result(data)

    async def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        await self._client.aclose()


def build_classifier(config: Settings) -> ContentClassifier:
    """Return the classifier selected by configuration."""
    if config.classifier_url:
        return HttpClassifier(config.classifier_url, timeout=config.ai_check_timeout_seconds)
    return KeywordClassifier()
