"""Tests for receipt polling."""

import pytest

from gas_profiler.config.settings import ReceiptPollConfig
from gas_profiler.exceptions import (
    MalformedReceiptError,
    ReceiptQueryError,
    ReceiptTimeoutError,
    TransactionRevertedError,
)
from gas_profiler.helpers.receipts import await_receipt, gas_used_of

FAST_POLL = ReceiptPollConfig(timeout=0.5, interval=0.001, max_interval=0.005)
TX = "0x" + "ab" * 32


class ScriptedSource:
    """Answers receipt queries from a list, repeating the last answer."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.calls = 0

    async def get_transaction_receipt(self, tx_hash):
        self.calls += 1
        answer = self.answers[min(self.calls, len(self.answers)) - 1]
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.mark.asyncio
async def test_returns_receipt_once_mined():
    receipt = {"gasUsed": 21_000, "status": 1}
    source = ScriptedSource(None, None, receipt)

    assert await await_receipt(source, TX, FAST_POLL) == receipt
    assert source.calls == 3


@pytest.mark.asyncio
async def test_times_out_when_never_mined():
    source = ScriptedSource(None)
    poll = ReceiptPollConfig(timeout=0.05, interval=0.001, max_interval=0.01)

    with pytest.raises(ReceiptTimeoutError) as info:
        await await_receipt(source, TX, poll, operation="transfer")

    assert info.value.tx_hash == TX
    assert info.value.operation == "transfer"
    assert source.calls > 1


@pytest.mark.asyncio
@pytest.mark.parametrize("receipt", [{"status": 1}, {"gasUsed": 0, "status": 1}, {"gasUsed": None}])
async def test_rejects_receipt_without_gas_used(receipt):
    with pytest.raises(MalformedReceiptError, match="did not contain gasUsed"):
        await await_receipt(ScriptedSource(receipt), TX, FAST_POLL)


@pytest.mark.asyncio
async def test_reverted_transaction():
    with pytest.raises(TransactionRevertedError):
        await await_receipt(ScriptedSource({"gasUsed": 30_000, "status": 0}), TX, FAST_POLL)


@pytest.mark.asyncio
async def test_receipt_without_status_is_accepted():
    receipt = {"gasUsed": 30_000}
    assert await await_receipt(ScriptedSource(receipt), TX, FAST_POLL) is receipt


@pytest.mark.asyncio
async def test_query_errors_propagate():
    source = ScriptedSource(None, ReceiptQueryError("node down", tx_hash=TX))
    with pytest.raises(ReceiptQueryError) as info:
        await await_receipt(source, TX, FAST_POLL, operation="transfer")
    assert info.value.operation == "transfer"
    assert info.value.tx_hash == TX


def test_gas_used_of():
    assert gas_used_of({"gasUsed": 52_000}, TX) == 52_000
    with pytest.raises(MalformedReceiptError):
        gas_used_of({"gasUsed": True}, TX)
