from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
import json
import logging
import math
from datetime import timezone

from dateutil import parser as dtparser

log = logging.getLogger(__name__)

# numeric ts below this is seconds, otherwise already ms
_MS_CUTOFF = 1e12

# sqlite INTEGER range
_INT64_MIN, _INT64_MAX = -2**63, 2**63 - 1


def parse_ts(s: str):
    return dtparser.isoparse(s)


def _to_float_or_none(x):
    try:
        v = float(x)
        if math.isnan(v) or math.isinf(v):
            return None
        return v
    except Exception:
        return None


@dataclass(frozen=True)
class ParsedPayload:
    """Fields derived from a raw sensor payload; any of them may be missing."""
    temp_c: Optional[float] = None
    payload_ts: Optional[int] = None
    nonce: Optional[str] = None


EMPTY_PAYLOAD = ParsedPayload()


def payload_to_text(raw: Any) -> Optional[str]:
    """Stored form of a payload: strings as-is, anything else as compact JSON."""
    if raw is None:
        return None
    if isinstance(raw, str):
        return raw
    return json.dumps(raw, separators=(",", ":"), ensure_ascii=False)


def load_payload(raw: Any) -> Optional[Dict[str, Any]]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            log.debug("payload is not JSON (len=%d)", len(raw))
            return None
    return raw if isinstance(raw, dict) else None


def _as_int64(ms: float) -> Optional[int]:
    try:
        v = int(ms)
    except (OverflowError, ValueError):
        return None
    return v if _INT64_MIN <= v <= _INT64_MAX else None


def _payload_ts_ms(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    n = _to_float_or_none(value)
    if n is not None:
        return _as_int64(n * 1000 if abs(n) < _MS_CUTOFF else n)
    if isinstance(value, str):
        try:
            dt = parse_ts(value)
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
            return _as_int64(dt.timestamp() * 1000)
        except (ValueError, OverflowError):
            return None
    return None


def parse_payload(raw: Any) -> ParsedPayload:
    """
    Pull tempC / ts / nonce out of a sensor payload.

    Never raises: a payload that is missing, not JSON, or not an object
    yields EMPTY_PAYLOAD, and each unusable field is simply None.
    """
    data = load_payload(raw)
    if data is None:
        return EMPTY_PAYLOAD

    nonce = data.get("nonce")
    if isinstance(nonce, (dict, list)):
        nonce = None
    return ParsedPayload(
        temp_c=_to_float_or_none(data.get("tempC")),
        payload_ts=_payload_ts_ms(data.get("ts")),
        nonce=str(nonce) if nonce is not None else None,
    )


def short_hex(value: Optional[str], pre: int = 10, suf: int = 6) -> str:
    if not value:
        return ""
    if len(value) <= pre + suf + 3:
        return value
    return f"{value[:pre]}…{value[-suf:]}"


NameLookup = Callable[[Optional[str]], Optional[str]]


# 직렬화 (verify 응답용). 모델 인스턴스를 받아 dict 로.
def serialize_batch(b, names: NameLookup) -> Optional[Dict[str, Any]]:
    if b is None:
        return None
    return {
        "batch_id": b.batch_id,
        "content_ref": b.content_ref,
        "manufacturer": b.manufacturer,
        "manufacturer_name": names(b.manufacturer),
        "created_at": b.created_at,
    }


def serialize_handoff(h, names: NameLookup) -> Dict[str, Any]:
    return {
        "id": h.id,
        "batch_id": h.batch_id,
        "from_addr": h.from_addr,
        "from_name": names(h.from_addr),
        "to_addr": h.to_addr,
        "to_name": names(h.to_addr),
        "time": h.time,
    }


def serialize_sensor(s, names: NameLookup) -> Dict[str, Any]:
    return {
        "id": s.id,
        "batch_id": s.batch_id,
        "reading_hash": s.reading_hash,
        "short_hash": short_hex(s.reading_hash, 12, 6),
        "signer": s.signer,
        "signer_name": names(s.signer),
        "time": s.time,
        "tempC": s.temp_c,
        "payload_ts": s.payload_ts,
        "nonce": s.nonce,
        "raw_payload": s.raw_payload,
        "complete": s.is_complete,
    }


__all__ = [
    "ParsedPayload", "EMPTY_PAYLOAD", "parse_payload", "payload_to_text", "load_payload",
    "parse_ts", "short_hex", "serialize_batch", "serialize_handoff", "serialize_sensor",
]
