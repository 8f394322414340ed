"""Tests for the web3-backed ChainClient, using mocked web3 objects."""

import asyncio
import threading
import time
from unittest.mock import MagicMock

import pytest
from eth_account.signers.local import LocalAccount
from web3.exceptions import ContractLogicError, TransactionNotFound

from gas_profiler.exceptions import GasEstimationError, ReceiptQueryError, SubmissionError
from gas_profiler.helpers.chain_client import ChainClient

OWNER = "0x1111111111111111111111111111111111111111"
TX_BYTES = b"\xab" * 32
TX_HEX = "0x" + "ab" * 32


@pytest.fixture
def w3():
    return MagicMock()


@pytest.fixture
def client(w3):
    return ChainClient(w3)


@pytest.mark.asyncio
async def test_estimate_gas_uses_sender(client):
    invocation = MagicMock()
    invocation.estimate_gas.return_value = 51_234

    assert await client.estimate_gas(invocation, OWNER) == 51_234
    invocation.estimate_gas.assert_called_once_with({"from": OWNER})


@pytest.mark.asyncio
async def test_estimate_gas_failure(client):
    invocation = MagicMock()
    invocation.estimate_gas.side_effect = ContractLogicError("execution reverted")

    with pytest.raises(GasEstimationError) as info:
        await client.estimate_gas(invocation, OWNER, operation="transfer")
    assert info.value.operation == "transfer"


@pytest.mark.asyncio
async def test_submit_from_unlocked_account(client):
    invocation = MagicMock()
    invocation.transact.return_value = TX_BYTES

    assert await client.submit_transaction(invocation, OWNER, 100_000) == TX_HEX
    invocation.transact.assert_called_once_with({"from": OWNER, "gas": 100_000})


@pytest.mark.asyncio
async def test_submit_signed_locally(client, w3):
    account = MagicMock(spec=LocalAccount)
    account.address = OWNER
    account.sign_transaction.return_value = MagicMock(raw_transaction=b"\x02\x01")
    w3.eth.get_transaction_count.return_value = 7
    w3.eth.chain_id = 31337
    w3.eth.send_raw_transaction.return_value = TX_BYTES
    invocation = MagicMock()
    invocation.build_transaction.return_value = {"to": OWNER}

    assert await client.submit_transaction(invocation, account, 90_000) == TX_HEX

    invocation.build_transaction.assert_called_once_with(
        {"from": OWNER, "gas": 90_000, "nonce": 7, "chainId": 31337}
    )
    w3.eth.get_transaction_count.assert_called_once_with(OWNER, "pending")
    w3.eth.send_raw_transaction.assert_called_once_with(b"\x02\x01")
    invocation.transact.assert_not_called()


@pytest.mark.asyncio
async def test_submit_failure(client):
    invocation = MagicMock()
    invocation.transact.side_effect = ValueError({"message": "insufficient funds"})

    with pytest.raises(SubmissionError, match="insufficient funds"):
        await client.submit_transaction(invocation, OWNER, 1, operation="deployment")


@pytest.mark.asyncio
async def test_pending_receipt_is_none(client, w3):
    w3.eth.get_transaction_receipt.side_effect = TransactionNotFound("not yet")
    assert await client.get_transaction_receipt(TX_HEX) is None


@pytest.mark.asyncio
async def test_receipt_lookup_failure(client, w3):
    w3.eth.get_transaction_receipt.side_effect = ConnectionError("refused")

    with pytest.raises(ReceiptQueryError) as info:
        await client.get_transaction_receipt(TX_HEX)
    assert info.value.tx_hash == TX_HEX


@pytest.mark.asyncio
async def test_receipt_returned(client, w3):
    w3.eth.get_transaction_receipt.return_value = {"gasUsed": 21_000}
    assert await client.get_transaction_receipt(TX_HEX) == {"gasUsed": 21_000}


def test_accounts(client, w3):
    w3.eth.accounts = [OWNER]
    assert client.accounts() == [OWNER]


@pytest.fixture
def slow_ledger(w3):
    """w3 stub with RPC latency whose pending nonce is the number of sent transactions."""
    sent = []
    guard = threading.Lock()

    def get_transaction_count(address, block):
        time.sleep(0.01)
        with guard:
            return len(sent)

    def send_raw_transaction(raw):
        time.sleep(0.01)
        with guard:
            sent.append(raw)
            return bytes([len(sent)]) * 32

    w3.eth.get_transaction_count.side_effect = get_transaction_count
    w3.eth.send_raw_transaction.side_effect = send_raw_transaction
    w3.eth.chain_id = 31337
    return sent


@pytest.mark.asyncio
async def test_concurrent_signed_submissions_use_distinct_nonces(client, slow_ledger):
    signed_nonces = []
    account = MagicMock(spec=LocalAccount)
    account.address = OWNER

    def sign_transaction(tx):
        signed_nonces.append(tx["nonce"])
        return MagicMock(raw_transaction=bytes([tx["nonce"]]))

    account.sign_transaction.side_effect = sign_transaction
    invocation = MagicMock()
    invocation.build_transaction.side_effect = lambda params: dict(params)

    hashes = await asyncio.gather(
        *(client.submit_transaction(invocation, account, 50_000) for _ in range(6))
    )

    assert sorted(signed_nonces) == list(range(6))
    assert len(set(hashes)) == 6


@pytest.mark.asyncio
async def test_different_senders_do_not_share_a_lock(client):
    other = "0x2222222222222222222222222222222222222222"
    assert client._lock_for(OWNER) is client._lock_for(OWNER)
    assert client._lock_for(OWNER) is not client._lock_for(other)
