"""
Normalized ledger events.

Every log coming out of the CustodyRegistry contract is turned into one of the
three frozen dataclasses below before it reaches the reconciler. Identifiers
are normalized to strings: integers as decimal, raw bytes as 0x-hex.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union

from .exceptions import EventDecodeError

BATCH_REGISTERED = "BatchRegistered"
CUSTODY_TRANSFERRED = "CustodyTransferred"
SENSOR_ANCHORED = "SensorAnchored"

EVENT_NAMES = (BATCH_REGISTERED, CUSTODY_TRANSFERRED, SENSOR_ANCHORED)

# uint256 on the ledger, but stored as a signed 64-bit integer
_MAX_TIME = 2**63 - 1


@dataclass(frozen=True)
class BatchRegistered:
    batch_id: str
    content_ref: str
    manufacturer: str
    time: int
    block_number: int = 0
    log_index: int = 0

    kind = BATCH_REGISTERED


@dataclass(frozen=True)
class CustodyTransferred:
    batch_id: str
    from_addr: str
    to_addr: str
    time: int
    block_number: int = 0
    log_index: int = 0

    kind = CUSTODY_TRANSFERRED


@dataclass(frozen=True)
class SensorAnchored:
    batch_id: str
    reading_hash: str
    signer: str
    time: int
    block_number: int = 0
    log_index: int = 0

    kind = SENSOR_ANCHORED


NormalizedEvent = Union[BatchRegistered, CustodyTransferred, SensorAnchored]


def id_to_str(value: Any) -> str:
    if isinstance(value, bool) or value is None:
        raise EventDecodeError(f"unusable identifier: {value!r}")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    text = str(value).strip()
    if not text:
        raise EventDecodeError("empty identifier")
    return text.lower() if text.startswith("0x") else text


def _time(value: Any) -> int:
    try:
        t = int(value)
    except (TypeError, ValueError) as e:
        raise EventDecodeError(f"bad event time: {value!r}") from e
    if t < 0:
        raise EventDecodeError(f"negative event time: {t}")
    if t > _MAX_TIME:
        raise EventDecodeError(f"event time out of range: {t}")
    return t


def _address(value: Any) -> str:
    if not value:
        raise EventDecodeError("missing address")
    return str(value)


def normalize_log(name: str, log: Mapping[str, Any]) -> NormalizedEvent:
    """Decode one web3 event log (``{"args": ..., "blockNumber": ..., "logIndex": ...}``)."""
    try:
        args = log["args"]
        block_number = int(log.get("blockNumber") or 0)
        log_index = int(log.get("logIndex") or 0)

        if name == BATCH_REGISTERED:
            return BatchRegistered(
                batch_id=id_to_str(args["batchId"]),
                content_ref=str(args["ipfsCid"]),
                manufacturer=_address(args["manufacturer"]),
                time=_time(args["time"]),
                block_number=block_number,
                log_index=log_index,
            )
        if name == CUSTODY_TRANSFERRED:
            return CustodyTransferred(
                batch_id=id_to_str(args["batchId"]),
                from_addr=_address(args["from"]),
                to_addr=_address(args["to"]),
                time=_time(args["time"]),
                block_number=block_number,
                log_index=log_index,
            )
        if name == SENSOR_ANCHORED:
            return SensorAnchored(
                batch_id=id_to_str(args["batchId"]),
                reading_hash=id_to_str(args["readingHash"]),
                signer=_address(args["signer"]),
                time=_time(args["time"]),
                block_number=block_number,
                log_index=log_index,
            )
    except EventDecodeError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise EventDecodeError(f"{name}: {type(e).__name__}: {e}") from e
    raise EventDecodeError(f"unknown event kind: {name}")
