import pytest
from rest_framework.test import APIClient

from provenance.reconciler import Reconciler


class FakeEvent:
    """Stands in for ``contract.events.<Name>``; serves logs by block range."""

    def __init__(self, ledger, name):
        self.ledger = ledger
        self.name = name

    def get_logs(self, from_block, to_block):
        self.ledger.calls.append((self.name, from_block, to_block))
        if self.ledger.fail_next:
            self.ledger.fail_next -= 1
            raise TimeoutError("read timed out")
        return [
            log for log in self.ledger.logs[self.name]
            if from_block <= log["blockNumber"] <= to_block
        ]


class FakeEvents:
    def __init__(self, ledger):
        for name in ("BatchRegistered", "CustodyTransferred", "SensorAnchored"):
            setattr(self, name, FakeEvent(ledger, name))


class FakeEth:
    def __init__(self, ledger):
        self.ledger = ledger

    @property
    def block_number(self):
        return self.ledger.head


class FakeLedger:
    """In-memory ledger: a head block number and logs per event kind."""

    def __init__(self, head=0):
        self.head = head
        self.logs = {"BatchRegistered": [], "CustodyTransferred": [], "SensorAnchored": []}
        self.calls = []
        self.fail_next = 0
        self.eth = FakeEth(self)
        self.events = FakeEvents(self)
        self.address = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
        self._log_index = 0

    # w3 and contract are the same object in tests
    @property
    def w3(self):
        return self

    @property
    def contract(self):
        return self

    def _add(self, name, block, args):
        self._log_index += 1
        self.logs[name].append({
            "args": args,
            "blockNumber": block,
            "logIndex": self._log_index,
            "transactionHash": f"0xtx{self._log_index}",
        })
        self.head = max(self.head, block)

    def batch(self, block, batch_id, cid="bafy-cid", manufacturer="0xMaker", time=1_700_000_000):
        self._add("BatchRegistered", block,
                  {"batchId": batch_id, "ipfsCid": cid, "manufacturer": manufacturer, "time": time})

    def handoff(self, block, batch_id, frm, to, time):
        self._add("CustodyTransferred", block,
                  {"batchId": batch_id, "from": frm, "to": to, "time": time})

    def anchor(self, block, batch_id, reading_hash, signer, time):
        self._add("SensorAnchored", block,
                  {"batchId": batch_id, "readingHash": reading_hash, "signer": signer, "time": time})


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def reconciler():
    return Reconciler()


@pytest.fixture
def api_client():
    return APIClient()
