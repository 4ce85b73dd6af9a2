"""An in-memory stand-in for a node, for testing contract helpers without a running chain."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator
from unittest.mock import MagicMock

import eth_abi
import pytest
from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_typing import ABI
from eth_utils.abi import function_abi_to_4byte_selector, get_abi_input_types
from eth_utils.conversions import to_hex
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import TransactionNotFound

# Well known development keys, never used on a live network
SIGNER_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
NODE_ACCOUNT = Web3.to_checksum_address("0x70997970c51812dc3a010c7d01b50e0d17dc79c8")

MOCK_CHAIN_ID = 31337
MOCK_GAS_ESTIMATE = 100_000
MOCK_GAS_PRICE = Web3.to_wei(2, "gwei")
MOCK_MAX_PRIORITY_FEE = Web3.to_wei(1, "gwei")


@dataclass
class ContractCall:
    """A contract write that was built for sending."""

    address: str
    function_name: str
    args: tuple
    sender: str


@dataclass
class SentTransaction:
    """A transaction the mock node accepted."""

    tx_hash: HexBytes
    sender: str
    # Only set for transactions the node signed itself
    params: dict[str, Any] | None = None
    raw_transaction: bytes | None = None


class MockContractFunction:
    """A contract function bound to its arguments."""

    def __init__(self, contract: MockContract, function_name: str, args: tuple):
        self.contract = contract
        self.function_name = function_name
        self.args = args

    def call(self, **_kwargs) -> Any:
        """Answer from the values registered with `MockChain.set_read`."""
        result = self.contract.chain.read_results[(self.contract.address, self.function_name)]
        if isinstance(result, Exception):
            raise result
        if callable(result):
            return result(*self.args)
        return result

    def build_transaction(self, transaction: dict[str, Any]) -> dict[str, Any]:
        chain = self.contract.chain
        chain.contract_calls.append(
            ContractCall(self.contract.address, self.function_name, self.args, transaction["from"])
        )
        if self.function_name in chain.reverting_functions:
            raise chain.reverting_functions[self.function_name]
        built = {
            "to": self.contract.address,
            "from": transaction["from"],
            "data": self.contract.encode_abi(self.function_name, args=list(self.args)),
            "value": 0,
            "gas": MOCK_GAS_ESTIMATE,
            "gasPrice": chain.web3.eth.gas_price,
            "chainId": chain.web3.eth.chain_id,
        }
        # Like web3, the nonce is only set when the caller gives one
        if "nonce" in transaction:
            built["nonce"] = transaction["nonce"]
        return built

    def estimate_gas(self, transaction: dict[str, Any]) -> int:
        return self.contract.chain.web3.eth.estimate_gas(
            {
                **transaction,
                "to": self.contract.address,
                "data": self.contract.encode_abi(self.function_name, args=list(self.args)),
            }
        )


class MockContract:
    """A deployed contract that the mock node knows the abi of."""

    def __init__(self, chain: MockChain, address: str, abi: ABI):
        self.chain = chain
        self.address = address
        self.abi = abi

    def get_function_by_name(self, function_name: str) -> Callable[..., MockContractFunction]:
        self._function_abi(function_name)
        return lambda *args: MockContractFunction(self, function_name, args)

    def encode_abi(self, abi_element_identifier: str, args: list | None = None) -> str:
        function_abi = self._function_abi(abi_element_identifier)
        selector = function_abi_to_4byte_selector(function_abi)
        encoded_args = eth_abi.encode(get_abi_input_types(function_abi), args or [])  # type: ignore
        return to_hex(selector + encoded_args)

    def _function_abi(self, function_name: str) -> dict[str, Any]:
        for abi_entry in self.abi:
            if abi_entry.get("type") == "function" and abi_entry.get("name") == function_name:
                return abi_entry  # type: ignore
        raise ValueError(f"Function {function_name} is not in the contract abi")


@dataclass
class MockChain:
    """A mocked `Web3` with a scriptable node behind it.

    Contract reads answer from `read_results`, every write is mined at once with `receipt_status`,
    and `web3.eth` methods are `MagicMock`s that tests can reconfigure.
    """

    receipt_status: int = 1
    # Number of receipt polls that report the transaction as not found yet
    pending_polls: int = 0
    web3: MagicMock = field(default_factory=MagicMock)
    read_results: dict[tuple[str, str], Any] = field(default_factory=dict)
    reverting_functions: dict[str, Exception] = field(default_factory=dict)
    contract_calls: list[ContractCall] = field(default_factory=list)
    sent_transactions: list[SentTransaction] = field(default_factory=list)
    nonces: defaultdict[str, int] = field(default_factory=lambda: defaultdict(int))
    receipts: dict[HexBytes, dict[str, Any]] = field(default_factory=dict)
    block_number: int = 1

    def __post_init__(self):
        eth = self.web3.eth
        eth.contract.side_effect = self.contract
        eth.chain_id = MOCK_CHAIN_ID
        eth.gas_price = MOCK_GAS_PRICE
        eth.max_priority_fee = MOCK_MAX_PRIORITY_FEE
        eth.default_account = None
        eth.accounts = [NODE_ACCOUNT]
        eth.estimate_gas.return_value = MOCK_GAS_ESTIMATE
        eth.get_transaction_count.side_effect = lambda address, *_: self.nonces[address]
        eth.send_raw_transaction.side_effect = self._send_raw_transaction
        eth.send_transaction.side_effect = self._send_transaction
        eth.get_transaction_receipt.side_effect = self._get_transaction_receipt
        eth.wait_for_transaction_receipt.side_effect = lambda tx_hash, **_: self.receipts[HexBytes(tx_hash)]

    def contract(self, address: str, abi: ABI) -> MockContract:
        return MockContract(self, address, abi)

    def set_read(self, address: str, function_name: str, result: Any) -> None:
        """Register what a view function returns.

        `result` may be a plain value, a callable taking the call arguments, or an exception to raise.
        """
        self.read_results[(Web3.to_checksum_address(address), function_name)] = result

    def calls_to(self, function_name: str) -> list[ContractCall]:
        return [call for call in self.contract_calls if call.function_name == function_name]

    def _mine(self, sender: str) -> HexBytes:
        tx_hash = HexBytes(Web3.keccak(text=f"{sender}:{self.nonces[sender]}:{len(self.sent_transactions)}"))
        self.nonces[sender] += 1
        self.block_number += 1
        self.receipts[tx_hash] = {
            "transactionHash": tx_hash,
            "from": sender,
            "blockNumber": self.block_number,
            "status": self.receipt_status,
            "gasUsed": MOCK_GAS_ESTIMATE,
            "logs": [],
        }
        return tx_hash

    def _send_raw_transaction(self, raw_transaction: bytes) -> HexBytes:
        sender = Account.recover_transaction(raw_transaction)
        tx_hash = self._mine(sender)
        self.sent_transactions.append(SentTransaction(tx_hash, sender, raw_transaction=bytes(raw_transaction)))
        return tx_hash

    def _send_transaction(self, transaction: dict[str, Any]) -> HexBytes:
        sender = transaction["from"]
        tx_hash = self._mine(sender)
        self.sent_transactions.append(SentTransaction(tx_hash, sender, params=dict(transaction)))
        return tx_hash

    def _get_transaction_receipt(self, tx_hash: HexBytes) -> dict[str, Any]:
        if self.pending_polls > 0:
            self.pending_polls -= 1
            raise TransactionNotFound(f"Transaction with hash: {to_hex(tx_hash)} not found.")
        return self.receipts[HexBytes(tx_hash)]


@pytest.fixture(scope="function")
def mock_chain() -> Iterator[MockChain]:
    """An empty mock chain.

    Yield
    -----
    MockChain
        The mock chain, its `web3` attribute is passed to the functions under test.
    """
    yield MockChain()


@pytest.fixture(scope="function")
def signer() -> LocalAccount:
    """A funded development account that signs locally."""
    return Account.from_key(SIGNER_PRIVATE_KEY)


def mock_order_book(
    chain: MockChain,
    market_address: str,
    base_asset_address: str,
    quote_asset_address: str,
    vault_address: str,
    vault_best_ask: int,
) -> None:
    """Register market and vault parameters for an order book on the mock chain."""
    # pylint: disable=too-many-arguments
    # pylint: disable=too-many-positional-arguments
    chain.set_read(
        market_address,
        "getMarketParams",
        (10**7, 10**18, base_asset_address, 18, quote_asset_address, 6, 100, 10**15, 10**24, 30, 10),
    )
    chain.set_read(
        market_address,
        "getVaultParams",
        (vault_address, vault_best_ask - 10**16, 0, vault_best_ask, 0, 5 * 10**17, 5 * 10**17, 50),
    )
