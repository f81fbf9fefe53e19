"""
Provenance risk heuristic.

Additive rule table over already-reconciled rows:

    batch missing            +60  "Origin missing"
    no handoffs              +20  "No custody transfers recorded"
    no sensor readings       +10  "No sensor readings"
    latest reading too old   +10  "Sensor data stale"

score > suspicious_above -> Suspicious, score > review_above -> Review,
otherwise Authentic. Pure; safe to call any number of times.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from django.conf import settings

SUSPICIOUS = "Suspicious"
REVIEW = "Review"
AUTHENTIC = "Authentic"


@dataclass(frozen=True)
class RiskPolicy:
    stale_after: int = 24 * 3600
    suspicious_above: int = 40
    review_above: int = 10

    @classmethod
    def from_settings(cls) -> "RiskPolicy":
        conf = getattr(settings, "PROVENANCE_RISK", {}) or {}
        return cls(
            stale_after=int(conf.get("STALE_AFTER_SECONDS", cls.stale_after)),
            suspicious_above=int(conf.get("SUSPICIOUS_ABOVE", cls.suspicious_above)),
            review_above=int(conf.get("REVIEW_ABOVE", cls.review_above)),
        )


@dataclass(frozen=True)
class RiskResult:
    score: int
    reasons: List[str] = field(default_factory=list)
    label: str = AUTHENTIC

    def as_dict(self):
        return {"score": self.score, "reasons": list(self.reasons), "label": self.label}


def _time_of(sensor: Any) -> int:
    t = sensor.get("time") if isinstance(sensor, dict) else getattr(sensor, "time", None)
    return int(t) if t is not None else 0


def label_for(score: int, policy: RiskPolicy) -> str:
    if score > policy.suspicious_above:
        return SUSPICIOUS
    if score > policy.review_above:
        return REVIEW
    return AUTHENTIC


def score(
    batch: Optional[Any],
    handoffs: Sequence[Any],
    sensors: Sequence[Any],
    now: int,
    policy: Optional[RiskPolicy] = None,
) -> RiskResult:
    policy = policy or RiskPolicy()
    total = 0
    reasons: List[str] = []

    if batch is None:
        total += 60
        reasons.append("Origin missing")

    if not handoffs:
        total += 20
        reasons.append("No custody transfers recorded")

    if not sensors:
        total += 10
        reasons.append("No sensor readings")
    else:
        latest = max(_time_of(s) for s in sensors)
        if now - latest > policy.stale_after:
            total += 10
            reasons.append("Sensor data stale")

    return RiskResult(score=total, reasons=reasons, label=label_for(total, policy))
