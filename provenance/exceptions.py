class ProvenanceError(Exception):
    """Base class for indexer errors."""


class LedgerConfigError(ProvenanceError):
    """Contract address or ABI artifact missing / unusable. Fatal at startup."""


class LedgerUnavailable(ProvenanceError):
    """Ledger RPC unreachable or a log query failed."""


class EventDecodeError(ProvenanceError):
    """A single log could not be turned into a NormalizedEvent."""
