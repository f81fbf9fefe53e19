import json, logging, threading
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from django.conf import settings

from web3 import Web3

from .exceptions import LedgerConfigError, LedgerUnavailable
logger = logging.getLogger(__name__)

_LOCK = threading.Lock()
_HANDLES: Optional[Tuple[Web3, Any]] = None


def ledger_config() -> Dict[str, Any]:
    return dict(getattr(settings, "LEDGER", {}) or {})


def load_abi(artifact_path) -> list:
    """ABI from a Hardhat/Truffle artifact (``{"abi": [...]}``) or a bare ABI list."""
    path = Path(artifact_path)
    if not path.exists():
        raise LedgerConfigError(f"Artifact not found at {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise LedgerConfigError(f"Artifact unreadable at {path}: {e}") from e
    abi = data.get("abi") if isinstance(data, dict) else data
    if not isinstance(abi, list) or not abi:
        raise LedgerConfigError(f"Artifact at {path} has no ABI")
    return abi


def build_handles(conf: Optional[Dict[str, Any]] = None) -> Tuple[Web3, Any]:
    conf = conf or ledger_config()
    address = (conf.get("CONTRACT_ADDRESS") or "").strip()
    if not address:
        raise LedgerConfigError("Please set CONTRACT_ADDRESS")
    if not Web3.is_address(address):
        raise LedgerConfigError(f"CONTRACT_ADDRESS is not an address: {address}")
    abi = load_abi(conf.get("ARTIFACT_PATH", ""))

    rpc_url = conf.get("RPC_URL") or "http://127.0.0.1:8545"
    w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": float(conf.get("TIMEOUT", 30))}))
    try:
        connected = w3.is_connected()
    except Exception as e:
        raise LedgerUnavailable(f"ledger unreachable at {rpc_url}: {e}") from e
    if not connected:
        raise LedgerUnavailable(f"ledger unreachable at {rpc_url}")

    contract = w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)
    logger.info("[LEDGER] connected rpc=%s contract=%s", rpc_url, contract.address)
    return w3, contract


def get_handles() -> Tuple[Web3, Any]:
    """Process-wide web3 + contract, built on first use."""
    global _HANDLES
    if _HANDLES is not None:
        return _HANDLES
    with _LOCK:
        if _HANDLES is None:
            _HANDLES = build_handles()
        return _HANDLES


def has_contract_code(w3: Web3, address: str) -> bool:
    try:
        code = w3.eth.get_code(Web3.to_checksum_address(address))
    except Exception as e:
        raise LedgerUnavailable(f"get_code failed: {type(e).__name__}: {e}") from e
    return bool(code) and bytes(code) != b""


def get_status() -> Dict[str, Any]:
    conf = ledger_config()
    try:
        exists = Path(conf.get("ARTIFACT_PATH", "")).exists()
    except Exception:
        exists = None
    return {
        "rpc_url": conf.get("RPC_URL"),
        "contract": conf.get("CONTRACT_ADDRESS") or None,
        "artifact_exists": exists,
    }
