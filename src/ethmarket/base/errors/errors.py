"""Error handling for vault and order book contract calls."""

from __future__ import annotations

from enum import Enum
from typing import Any

from eth_utils.conversions import to_hex
from eth_utils.crypto import keccak
from web3.contract.contract import Contract
from web3.exceptions import ContractCustomError, ContractLogicError, Web3RPCError

from .types import ABIError

REVERT_PREFIX = "execution reverted: "


class ContractCallType(Enum):
    r"""A type of contract call"""

    PREVIEW = "preview"
    TRANSACTION = "transaction"
    READ = "read"


class ContractCallException(Exception):
    """Custom contract call exception wrapper that contains additional information on the function call"""

    # We'd like to pass in these optional kwargs to this exception
    # pylint: disable=too-many-arguments
    def __init__(
        self,
        *args,
        # Explicitly passing these arguments as kwargs to allow for multiple `args` to be passed in
        # similar for other types of exceptions
        orig_exception: Exception | list[Exception] | BaseException | None = None,
        contract_call_type: ContractCallType | None = None,
        function_name_or_signature: str | None = None,
        fn_args: tuple | None = None,
        fn_kwargs: dict[str, Any] | None = None,
        raw_txn: dict[str, Any] | None = None,
        block_number: int | None = None,
    ):
        super().__init__(*args)
        self.orig_exception = orig_exception
        self.contract_call_type = contract_call_type
        self.function_name_or_signature = function_name_or_signature
        self.fn_args = fn_args
        self.fn_kwargs = fn_kwargs
        self.block_number = block_number
        self.raw_txn = raw_txn


def error_selector(error: ABIError) -> str:
    """The 4 byte selector of an abi error, e.g. "0xc1ab6dc1" for `InvalidToken()`."""
    input_types = ",".join(component.get("type") or "" for component in error["inputs"])
    return str(to_hex(primitive=keccak(text=f"{error['name']}({input_types})")))[:10]


def decode_error_selector_for_contract(error_selector_hex: str, contract: Contract) -> str:
    """Find the name of the custom error that a revert selector belongs to.

    Arguments
    ---------
    error_selector_hex: str
        The first 4 bytes of the revert data as a 0x prefixed hex string.
    contract: Contract
        The reverting contract. Its abi lists the custom errors.

    Returns
    -------
    str
       The error name, or "UnknownError" if no error in the abi matches.
    """
    if not contract.abi:
        raise ValueError("Contract does not have an abi, cannot decode the error selector.")
    for entry in contract.abi:
        if entry.get("type") != "error":
            continue
        error = ABIError(name=entry["name"], inputs=entry.get("inputs", []), type="error")  # type: ignore
        if error_selector(error) == error_selector_hex.lower():
            return error["name"]
    return "UnknownError"


def is_provider_error(err: BaseException) -> bool:
    """Whether the exception came back from the node, either as a JSON-RPC error or a contract revert.

    Arguments
    ---------
    err: BaseException
        The exception raised by the web3 call.

    Returns
    -------
    bool
        True if `extract_error_message` can simplify the error.
    """
    return isinstance(err, (ContractLogicError, Web3RPCError))


def extract_error_message(err: BaseException, contract: Contract | None = None) -> str:
    """Reduce a provider error to a short human readable message.

    Custom errors are decoded to their name using the contract abi, reverts with a reason
    string return the reason, and JSON-RPC errors return the message the node sent back.

    Arguments
    ---------
    err: BaseException
        The exception raised by the web3 call.
    contract: Contract | None, optional
        The contract that was called. Needed to decode custom error selectors.

    Returns
    -------
    str
        The simplified error message.
    """
    if isinstance(err, ContractCustomError):
        error_data = err.data if isinstance(err.data, str) else err.args[0]
        if contract is not None and contract.abi:
            return decode_error_selector_for_contract(str(error_data)[:10], contract)
        return str(error_data)
    if isinstance(err, ContractLogicError):
        message = err.message if err.message is not None else str(err)
        return _strip_revert_prefix(message)
    if isinstance(err, Web3RPCError):
        rpc_error = err.rpc_response.get("error") if err.rpc_response else None
        if isinstance(rpc_error, dict) and rpc_error.get("message"):
            return _strip_revert_prefix(str(rpc_error["message"]))
        return _strip_revert_prefix(err.message)
    return str(err)


def _strip_revert_prefix(message: str) -> str:
    if message.startswith(REVERT_PREFIX):
        return message[len(REVERT_PREFIX) :]
    return message
