"""Tests for cancelling orders."""

from __future__ import annotations

import asyncio

import pytest
from eth_account import Account
from web3 import Web3
from web3.exceptions import ContractLogicError, Web3RPCError

from ethmarket.base import ORDERBOOK_ABI_NAME, ContractCallException, ContractCallType, get_contract
from ethmarket.test_fixtures import MOCK_GAS_ESTIMATE, MOCK_GAS_PRICE, NODE_ACCOUNT, MockChain

from .cancel import (
    ESTIMATE_GAS_PRICE,
    async_cancel_orders,
    build_cancel_orders_transaction,
    cancel_orders,
    estimate_cancel_orders_gas,
    fill_gas_params,
)
from .types import TransactionOptions

MARKET_ADDRESS = Web3.to_checksum_address("0xcf7ed3acca5a467e9e704c703e8d87f634fb0fc9")
ORDER_IDS = [3, 17, 42]


class TestBuildCancelOrdersTransaction:
    """Only the overrides that were given end up in the transaction."""

    def test_no_overrides(self, mock_chain: MockChain):
        orderbook = get_contract(mock_chain.web3, MARKET_ADDRESS, ORDERBOOK_ABI_NAME)
        txn = build_cancel_orders_transaction(orderbook, NODE_ACCOUNT, ORDER_IDS)
        assert txn == {
            "to": MARKET_ADDRESS,
            "from": NODE_ACCOUNT,
            "data": orderbook.encode_abi("batchCancelOrders", args=[ORDER_IDS]),
        }

    def test_overrides(self, mock_chain: MockChain):
        orderbook = get_contract(mock_chain.web3, MARKET_ADDRESS, ORDERBOOK_ABI_NAME)
        tx_options = TransactionOptions(nonce=0, gas_limit=90_000, max_fee_per_gas=50, max_priority_fee_per_gas=2)
        txn = build_cancel_orders_transaction(orderbook, NODE_ACCOUNT, ORDER_IDS, tx_options)
        assert txn["nonce"] == 0
        assert txn["gas"] == 90_000
        assert txn["maxFeePerGas"] == 50
        assert txn["maxPriorityFeePerGas"] == 2
        assert "gasPrice" not in txn

    def test_zero_gas_fields_are_ignored(self, mock_chain: MockChain):
        orderbook = get_contract(mock_chain.web3, MARKET_ADDRESS, ORDERBOOK_ABI_NAME)
        txn = build_cancel_orders_transaction(orderbook, NODE_ACCOUNT, ORDER_IDS, TransactionOptions(gas_price=0))
        assert "gasPrice" not in txn
        assert "nonce" not in txn

    def test_calldata(self, mock_chain: MockChain):
        orderbook = get_contract(mock_chain.web3, MARKET_ADDRESS, ORDERBOOK_ABI_NAME)
        txn = build_cancel_orders_transaction(orderbook, NODE_ACCOUNT, [1])
        # selector, offset, length, one element
        assert len(txn["data"]) == 2 + 8 + 3 * 64
        assert str(txn["data"]).endswith("1".rjust(64, "0"))


class TestFillGasParams:
    """Missing gas fields are filled from the estimates."""

    def test_priority_fee_is_added_in_gwei(self):
        txn = fill_gas_params({}, 80_000, 10, priority_fee=1.5)
        assert txn == {"gas": 80_000, "gasPrice": 10 + 1_500_000_000}

    def test_base_gas_price_only(self):
        assert fill_gas_params({}, 80_000, 10) == {"gas": 80_000, "gasPrice": 10}

    def test_zero_base_gas_price(self):
        assert fill_gas_params({}, 80_000, 0) == {"gas": 80_000, "gasPrice": 0}
        assert fill_gas_params({}, 80_000, 0, priority_fee=2) == {"gas": 80_000, "gasPrice": 2_000_000_000}

    def test_existing_values_are_kept(self):
        txn = fill_gas_params({"gas": 1, "maxFeePerGas": 7}, 80_000, None, priority_fee=1)
        assert txn == {"gas": 1, "maxFeePerGas": 7}


class TestCancelOrders:
    """Cancel transactions are estimated, priced, sent and awaited."""

    def test_node_account(self, mock_chain: MockChain):
        tx_options = TransactionOptions(priority_fee=1)
        receipt = asyncio.run(async_cancel_orders(mock_chain.web3, MARKET_ADDRESS, ORDER_IDS, tx_options=tx_options))
        assert receipt["status"] == 1
        (sent,) = mock_chain.sent_transactions
        assert sent.sender == NODE_ACCOUNT
        assert sent.params is not None
        assert sent.params["gas"] == MOCK_GAS_ESTIMATE
        assert sent.params["gasPrice"] == MOCK_GAS_PRICE + Web3.to_wei(1, "gwei")
        estimate_params = mock_chain.web3.eth.estimate_gas.call_args.args[0]
        assert estimate_params["gasPrice"] == ESTIMATE_GAS_PRICE
        assert estimate_params["from"] == NODE_ACCOUNT

    def test_local_signer(self, mock_chain: MockChain, signer):
        receipt = cancel_orders(mock_chain.web3, MARKET_ADDRESS, ORDER_IDS, signer=signer)
        assert receipt["status"] == 1
        (sent,) = mock_chain.sent_transactions
        assert sent.sender == signer.address
        assert Account.recover_transaction(sent.raw_transaction) == signer.address
        assert mock_chain.web3.eth.send_transaction.call_count == 0

    def test_zero_gas_price_node(self, mock_chain: MockChain, signer):
        mock_chain.web3.eth.gas_price = 0
        receipt = cancel_orders(mock_chain.web3, MARKET_ADDRESS, [1, 2], signer=signer)
        assert receipt["status"] == 1
        assert mock_chain.sent_transactions[0].sender == signer.address

    def test_zero_gas_price_node_with_priority_fee(self, mock_chain: MockChain):
        mock_chain.web3.eth.gas_price = 0
        cancel_orders(mock_chain.web3, MARKET_ADDRESS, [1, 2], tx_options=TransactionOptions(priority_fee=1))
        (sent,) = mock_chain.sent_transactions
        assert sent.params is not None
        assert sent.params["gasPrice"] == Web3.to_wei(1, "gwei")

    def test_given_gas_is_not_estimated(self, mock_chain: MockChain):
        tx_options = TransactionOptions(nonce=7, gas_limit=90_000, gas_price=5, priority_fee=3)
        cancel_orders(mock_chain.web3, MARKET_ADDRESS, ORDER_IDS, tx_options=tx_options)
        assert mock_chain.web3.eth.estimate_gas.call_count == 0
        (sent,) = mock_chain.sent_transactions
        assert sent.params is not None
        assert sent.params["nonce"] == 7
        assert sent.params["gas"] == 90_000
        assert sent.params["gasPrice"] == 5

    def test_max_fee_per_gas(self, mock_chain: MockChain):
        tx_options = TransactionOptions(max_fee_per_gas=50, max_priority_fee_per_gas=2)
        cancel_orders(mock_chain.web3, MARKET_ADDRESS, ORDER_IDS, tx_options=tx_options)
        assert "gasPrice" not in mock_chain.web3.eth.estimate_gas.call_args.args[0]
        (sent,) = mock_chain.sent_transactions
        assert sent.params is not None
        assert "gasPrice" not in sent.params
        assert sent.params["maxFeePerGas"] == 50

    def test_revert_is_simplified(self, mock_chain: MockChain):
        mock_chain.web3.eth.estimate_gas.side_effect = ContractLogicError(
            "execution reverted: OrderAlreadyFilledOrCancelled"
        )
        with pytest.raises(ContractCallException) as exc_info:
            cancel_orders(mock_chain.web3, MARKET_ADDRESS, ORDER_IDS)
        assert str(exc_info.value) == "OrderAlreadyFilledOrCancelled"
        assert exc_info.value.contract_call_type == ContractCallType.TRANSACTION
        assert exc_info.value.fn_args == (ORDER_IDS,)
        assert not mock_chain.sent_transactions

    def test_rpc_error_is_simplified(self, mock_chain: MockChain):
        rpc_response = {"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "nonce too low"}}
        mock_chain.web3.eth.send_transaction.side_effect = Web3RPCError(
            "nonce too low", rpc_response=rpc_response  # type: ignore
        )
        with pytest.raises(ContractCallException, match="nonce too low"):
            cancel_orders(mock_chain.web3, MARKET_ADDRESS, ORDER_IDS)

    def test_other_errors_propagate(self, mock_chain: MockChain):
        mock_chain.web3.eth.accounts = []
        with pytest.raises(ValueError):
            cancel_orders(mock_chain.web3, MARKET_ADDRESS, ORDER_IDS)

    def test_failed_receipt(self, mock_chain: MockChain):
        mock_chain.receipt_status = 0
        with pytest.raises(ContractCallException) as exc_info:
            cancel_orders(mock_chain.web3, MARKET_ADDRESS, ORDER_IDS)
        assert exc_info.value.function_name_or_signature == "batchCancelOrders"
        assert exc_info.value.raw_txn is not None


class TestEstimateCancelOrdersGas:
    """Gas estimates come straight from the node."""

    def test_estimate(self, mock_chain: MockChain, signer):
        assert estimate_cancel_orders_gas(mock_chain.web3, MARKET_ADDRESS, ORDER_IDS, signer) == MOCK_GAS_ESTIMATE
        estimate_params = mock_chain.web3.eth.estimate_gas.call_args.args[0]
        assert estimate_params["from"] == signer.address
        assert estimate_params["to"] == MARKET_ADDRESS

    def test_revert_is_simplified(self, mock_chain: MockChain):
        mock_chain.web3.eth.estimate_gas.side_effect = ContractLogicError("execution reverted: MarketStateError")
        with pytest.raises(ContractCallException) as exc_info:
            estimate_cancel_orders_gas(mock_chain.web3, MARKET_ADDRESS, ORDER_IDS)
        assert str(exc_info.value) == "MarketStateError"
        assert exc_info.value.contract_call_type == ContractCallType.PREVIEW
