"""Web3 powered functions for interfacing with smart contracts"""

from __future__ import annotations

import logging
import random
from typing import Any, Sequence

from eth_account.signers.local import LocalAccount
from eth_typing import ABI, ChecksumAddress
from hexbytes import HexBytes
from web3 import Web3
from web3._utils.threads import Timeout
from web3.contract.contract import Contract, ContractFunction
from web3.exceptions import ContractCustomError, TimeExhausted, TransactionNotFound
from web3.types import TxParams, TxReceipt

from .errors import ContractCallException, ContractCallType, UnknownBlockError, decode_error_selector_for_contract
from .retry_utils import retry_call

# Reads are retried, writes are sent once
READ_RETRY_COUNT = 5


def smart_contract_read(
    contract: Contract,
    function_name_or_signature: str,
    *fn_args,
    read_retry_count: int | None = None,
    contract_call_type: ContractCallType = ContractCallType.READ,
    **fn_kwargs,
) -> dict[str, Any]:
    """Return from a smart contract read call

    Arguments
    ---------
    contract: web3.contract.contract.Contract
        The contract that we are reading from.
    function_name_or_signature: str
        The name of the function to query.
    *fn_args: Unknown
        The arguments passed to the contract method.
    read_retry_count: int | None, optional
        The number of times to try the read call. Defaults to READ_RETRY_COUNT.
    contract_call_type: ContractCallType, optional
        The call type recorded on a raised `ContractCallException`, e.g. PREVIEW for vault previews.
    **fn_kwargs: Unknown
        The keyword arguments passed to the contract call, e.g. `block_identifier`.

    Returns
    -------
    dict[str, Any]
        A dictionary keyed by the output names in the abi.
        Unnamed outputs are keyed "value" if there is one, or "value0", "value1", ... otherwise.
    """
    if read_retry_count is None:
        read_retry_count = READ_RETRY_COUNT
    # get the callable contract function from function_name & call it
    if "(" in function_name_or_signature:
        function = contract.get_function_by_signature(function_name_or_signature)(*fn_args)
    else:
        function = contract.get_function_by_name(function_name_or_signature)(*fn_args)
    try:
        return_values = retry_call(read_retry_count, None, function.call, **fn_kwargs)
    except Exception as err:
        # Add additional information to the exception
        raise ContractCallException(
            "Error in smart contract read",
            orig_exception=err,
            contract_call_type=contract_call_type,
            function_name_or_signature=function_name_or_signature,
            fn_args=fn_args,
            fn_kwargs=fn_kwargs,
            block_number=fn_kwargs.get("block_identifier", None),
        ) from err

    # If there is a single value returned, we want to put it in a list of length 1
    if not isinstance(return_values, Sequence) or isinstance(return_values, str):
        return_values = [return_values]

    if contract.abi:  # not all contracts have an associated ABI
        return_names_and_types = _contract_function_abi_outputs(contract.abi, function_name_or_signature)
        if return_names_and_types is not None:
            if len(return_names_and_types) != len(return_values):
                raise AssertionError(
                    f"{len(return_names_and_types)=} must equal {len(return_values)=}."
                    f"\n{return_names_and_types=}\n{return_values=}"
                )
            if len(return_values) == 1 and not return_names_and_types[0][0]:
                return {"value": return_values[0]}
            function_return_dict = {}
            for idx, (var_name_and_type, var_value) in enumerate(zip(return_names_and_types, return_values)):
                var_name = var_name_and_type[0]
                function_return_dict[var_name or f"value{idx}"] = var_value
            return function_return_dict
    return {f"value{idx}": value for idx, value in enumerate(return_values)}


async def async_wait_for_transaction_receipt(
    web3: Web3,
    transaction_hash: HexBytes,
    timeout: float | None = None,
    start_latency: float = 0.01,
    backoff_multiplier: float = 2,
) -> TxReceipt:
    """Retrieve the transaction receipt asynchronously, retrying with exponential backoff.

    This function is copied from `web3.eth.wait_for_transaction_receipt`,
    but using exponential backoff and a non-blocking wait.

    Arguments
    ---------
    web3: Web3
        web3 provider object
    transaction_hash: HexBytes
        The hash of the transaction.
    timeout: float | None, optional
        The amount of time in seconds to time out the connection. Default is 120.
    start_latency: float
        The starting amount of time in seconds to wait between polls.
    backoff_multiplier: float
        The backoff factor for the exponential backoff.

    Returns
    -------
    TxReceipt
        The transaction receipt
    """
    if timeout is None:
        timeout = 120.0
    try:
        with Timeout(timeout) as _timeout:
            poll_latency = start_latency
            while True:
                try:
                    tx_receipt = web3.eth.get_transaction_receipt(transaction_hash)
                except TransactionNotFound:
                    tx_receipt = None
                if tx_receipt is not None:
                    break
                await _timeout.async_sleep(poll_latency)
                # Exponential backoff
                poll_latency *= backoff_multiplier
                # Add random latency to avoid collisions
                poll_latency += random.uniform(0, 0.1)

    except Timeout as exc:
        raise TimeExhausted(
            f"Transaction {HexBytes(transaction_hash) !r} is not in the chain " f"after {timeout} seconds"
        ) from exc
    return tx_receipt


def get_sender_address(web3: Web3, signer: LocalAccount | None = None) -> ChecksumAddress:
    """Get the address that will send a transaction.

    Arguments
    ---------
    web3: Web3
        web3 provider object
    signer: LocalAccount | None, optional
        The account that signs locally. If None, the account managed by the node is used,
        which is `web3.eth.default_account` if set, otherwise the first account the node reports.

    Returns
    -------
    ChecksumAddress
        The sender address.
    """
    if signer is not None:
        return Web3.to_checksum_address(signer.address)
    default_account = web3.eth.default_account
    if isinstance(default_account, str) and default_account:
        return Web3.to_checksum_address(default_account)
    accounts = web3.eth.accounts
    if not accounts:
        raise ValueError("No signer was given and the node does not manage any accounts.")
    return Web3.to_checksum_address(accounts[0])


def send_transaction(web3: Web3, unsent_txn: TxParams, signer: LocalAccount | None = None) -> HexBytes:
    """Sign and send a transaction.

    With a local signer the nonce and chain id are filled in when missing and the transaction is
    signed here. Without one the node signs it with its own account.

    Arguments
    ---------
    web3: Web3
        web3 provider object
    unsent_txn: TxParams
        The transaction to send. Must include "from".
    signer: LocalAccount | None, optional
        The account that signs locally.

    Returns
    -------
    HexBytes
        The transaction hash.
    """
    if signer is None:
        return HexBytes(web3.eth.send_transaction(unsent_txn))
    txn = dict(unsent_txn)
    if txn.get("nonce") is None:
        txn["nonce"] = retry_call(READ_RETRY_COUNT, None, web3.eth.get_transaction_count, txn["from"])
    if "chainId" not in txn:
        txn["chainId"] = web3.eth.chain_id
    if "maxFeePerGas" in txn and "maxPriorityFeePerGas" not in txn:
        txn["maxPriorityFeePerGas"] = web3.eth.max_priority_fee
    signed_txn = signer.sign_transaction(txn)
    return HexBytes(web3.eth.send_raw_transaction(signed_txn.raw_transaction))


def check_transaction_receipt(
    tx_receipt: TxReceipt,
    function_name_or_signature: str,
    fn_args: tuple,
    raw_txn: dict[str, Any] | None = None,
) -> TxReceipt:
    """Raise if a mined transaction failed without the node raising an error.

    Arguments
    ---------
    tx_receipt: TxReceipt
        The receipt of the mined transaction.
    function_name_or_signature: str
        The contract function that was called.
    fn_args: tuple
        The arguments the function was called with.
    raw_txn: dict[str, Any] | None, optional
        The transaction that was sent.

    Returns
    -------
    TxReceipt
        The receipt, unchanged.
    """
    status = tx_receipt.get("status", None)
    orig_exception = None
    if status is None:
        orig_exception = UnknownBlockError("Receipt did not return status")
    elif status == 0:
        orig_exception = UnknownBlockError("Receipt has status of 0", f"{tx_receipt=}")
    if orig_exception is not None:
        # The block number of this call failing is the previous block
        block_number = tx_receipt.get("blockNumber", None)
        raise ContractCallException(
            "Error in smart_contract_transact",
            orig_exception=orig_exception,
            contract_call_type=ContractCallType.TRANSACTION,
            function_name_or_signature=function_name_or_signature,
            fn_args=fn_args,
            fn_kwargs={},
            raw_txn=raw_txn,
            block_number=block_number - 1 if block_number is not None else None,
        )
    return tx_receipt


def _send_transaction_and_wait_for_receipt(
    func_handle: ContractFunction,
    signer: LocalAccount,
    web3: Web3,
    timeout: float | None = None,
) -> TxReceipt:
    """Sends a transaction and waits for the receipt.

    The nonce is left to `send_transaction`, which reads the transaction count of the signer.

    Arguments
    ---------
    func_handle: ContractFunction
        The function to call
    signer: LocalAccount
        The LocalAccount that will be used to pay for the gas & sign the transaction
    web3: Web3
        web3 provider object
    timeout: float | None
        The number of seconds to wait for the receipt.

    Returns
    -------
    TxReceipt
        a TypedDict; success can be checked via tx_receipt["status"]
    """
    unsent_txn = func_handle.build_transaction({"from": Web3.to_checksum_address(signer.address)})
    tx_hash = send_transaction(web3, unsent_txn, signer)
    if timeout is None:
        timeout = 120.0
    return web3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)


def smart_contract_transact(
    web3: Web3,
    contract: Contract,
    signer: LocalAccount,
    function_name_or_signature: str,
    *fn_args,
    timeout: float | None = None,
) -> TxReceipt:
    """Execute a named function on a contract that requires a signature & gas

    Arguments
    ---------
    web3: Web3
        web3 container object
    contract: Contract
        Any deployed web3 contract
    signer: LocalAccount
        The LocalAccount that will be used to pay for the gas & sign the transaction
    function_name_or_signature: str
        This function must exist in the compiled contract's ABI
    fn_args: ordered list
        All remaining arguments will be passed to the contract function in the order received
    timeout: float | None
        The number of seconds to wait for the receipt. Defaults to 120.

    Returns
    -------
    TxReceipt
        a TypedDict; success can be checked via tx_receipt["status"]
    """
    try:
        if "(" in function_name_or_signature:
            func_handle = contract.get_function_by_signature(function_name_or_signature)(*fn_args)
        else:
            func_handle = contract.get_function_by_name(function_name_or_signature)(*fn_args)
        tx_receipt = _send_transaction_and_wait_for_receipt(func_handle, signer, web3, timeout)
        # Error checking when transaction doesn't throw an error, but instead
        # has errors in the tx_receipt
        return check_transaction_receipt(tx_receipt, function_name_or_signature, fn_args)
    except ContractCustomError as err:
        err.args += (
            f"ContractCustomError {decode_error_selector_for_contract(str(err.args[0])[:10], contract)} raised.\n"
            + f"function name: {function_name_or_signature}"
            + f"\nfunction args: {fn_args}",
        )
        raise ContractCallException(
            "Error in smart_contract_transact",
            orig_exception=err,
            contract_call_type=ContractCallType.TRANSACTION,
            function_name_or_signature=function_name_or_signature,
            fn_args=fn_args,
            fn_kwargs={},
        ) from err
    except ContractCallException as err:
        # Avoid double wrapping exception
        raise err
    except Exception as err:
        raise ContractCallException(
            "Error in smart_contract_transact",
            orig_exception=err,
            contract_call_type=ContractCallType.TRANSACTION,
            function_name_or_signature=function_name_or_signature,
            fn_args=fn_args,
            fn_kwargs={},
        ) from err


def _get_name_and_type_from_abi(abi_outputs: dict) -> tuple[str, str]:
    """Retrieve and narrow the types for abi outputs"""
    return_value_name: str = abi_outputs.get("name") or ""
    return_value_type: str = abi_outputs.get("type") or "none"
    return (return_value_name, return_value_type)


def _contract_function_abi_outputs(contract_abi: ABI, function_name: str) -> list[tuple[str, str]] | None:
    """Parse the function abi to get the name and type for each output"""
    function_abi = None
    # find the first function matching the function_name
    for abi in contract_abi:  # loop over each entry in the abi list
        if abi.get("type") == "function" and abi.get("name") == function_name:
            function_abi = abi
            break
    if function_abi is None:
        logging.warning("could not find function_name=%s in contract abi", function_name)
        return None
    function_outputs = function_abi.get("outputs")
    if function_outputs is None:
        logging.warning("function abi does not specify outputs")
        return None
    if not isinstance(function_outputs, Sequence):  # could be list or tuple
        logging.warning("function abi outputs are not a sequence")
        return None
    if len(function_outputs) == 0:
        return None
    if len(function_outputs) > 1:  # multiple vars were returned
        return [_get_name_and_type_from_abi(output) for output in function_outputs]  # type: ignore
    if function_outputs[0].get("type") == "tuple" and function_outputs[0].get("components") is not None:
        # multiple named outputs were returned in a struct
        return [_get_name_and_type_from_abi(component) for component in function_outputs[0]["components"]]  # type: ignore
    # final condition is a single output
    return [_get_name_and_type_from_abi(function_outputs[0])]  # type: ignore
