"""Cancel resting orders on an order book."""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Sequence

from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress
from web3 import Web3
from web3.contract.contract import Contract
from web3.types import TxParams, TxReceipt, Wei

from ethmarket.base import (
    ORDERBOOK_ABI_NAME,
    ContractCallException,
    ContractCallType,
    async_wait_for_transaction_receipt,
    check_transaction_receipt,
    extract_error_message,
    get_contract,
    get_sender_address,
    is_provider_error,
    send_transaction,
)
from ethmarket.marketlogs import log_timing
from ethmarket.utils import async_runner

from .types import TransactionOptions

CANCEL_FUNCTION_NAME = "batchCancelOrders"
# Gas price attached to the estimate request when the caller set no fees
ESTIMATE_GAS_PRICE = Web3.to_wei(1, "gwei")


def build_cancel_orders_transaction(
    orderbook_contract: Contract,
    sender: ChecksumAddress,
    order_ids: Sequence[int],
    tx_options: TransactionOptions | None = None,
) -> TxParams:
    """Build the unsent `batchCancelOrders` transaction.

    Arguments
    ---------
    orderbook_contract: Contract
        The order book contract.
    sender: ChecksumAddress
        The owner of the orders.
    order_ids: Sequence[int]
        The ids of the orders to cancel.
    tx_options: TransactionOptions | None, optional
        Overrides. The nonce is used whenever it is set, gas fields only when nonzero.

    Returns
    -------
    TxParams
        The transaction, without any gas fields the caller did not provide.
    """
    if tx_options is None:
        tx_options = TransactionOptions()
    unsent_txn: TxParams = {
        "to": orderbook_contract.address,
        "from": sender,
        "data": orderbook_contract.encode_abi(CANCEL_FUNCTION_NAME, args=[list(order_ids)]),
    }
    if tx_options.nonce is not None:
        unsent_txn["nonce"] = tx_options.nonce
    if tx_options.gas_limit:
        unsent_txn["gas"] = tx_options.gas_limit
    if tx_options.gas_price:
        unsent_txn["gasPrice"] = Wei(tx_options.gas_price)
    if tx_options.max_fee_per_gas:
        unsent_txn["maxFeePerGas"] = Wei(tx_options.max_fee_per_gas)
    if tx_options.max_priority_fee_per_gas:
        unsent_txn["maxPriorityFeePerGas"] = Wei(tx_options.max_priority_fee_per_gas)
    return unsent_txn


def _estimate_gas_limit(web3: Web3, unsent_txn: TxParams) -> int:
    if "gas" in unsent_txn:
        return unsent_txn["gas"]
    estimate_params = dict(unsent_txn)
    if "maxFeePerGas" not in estimate_params:
        estimate_params["gasPrice"] = ESTIMATE_GAS_PRICE
    return web3.eth.estimate_gas(estimate_params)  # type: ignore


def _get_base_gas_price(web3: Web3, unsent_txn: TxParams) -> Wei | None:
    if "gasPrice" in unsent_txn or "maxFeePerGas" in unsent_txn:
        return None
    return web3.eth.gas_price


def fill_gas_params(
    unsent_txn: TxParams,
    gas_limit: int,
    base_gas_price: int | None,
    priority_fee: float | None = None,
) -> TxParams:
    """Fill in the gas limit and legacy gas price the caller did not provide.

    Arguments
    ---------
    unsent_txn: TxParams
        The transaction to update in place.
    gas_limit: int
        The estimated gas limit, used when the transaction has none.
    base_gas_price: int | None
        The node's gas price. None when the caller already set gas pricing.
    priority_fee: float | None, optional
        Tip in gwei added to the base gas price.

    Returns
    -------
    TxParams
        The updated transaction.
    """
    if "gas" not in unsent_txn:
        unsent_txn["gas"] = gas_limit
    if "gasPrice" not in unsent_txn and "maxFeePerGas" not in unsent_txn and base_gas_price is not None:
        if priority_fee:
            unsent_txn["gasPrice"] = Wei(base_gas_price + Web3.to_wei(str(priority_fee), "gwei"))
        else:
            unsent_txn["gasPrice"] = Wei(base_gas_price)
    return unsent_txn


async def async_cancel_orders(
    web3: Web3,
    orderbook_address: str,
    order_ids: Sequence[int],
    signer: LocalAccount | None = None,
    tx_options: TransactionOptions | None = None,
    timeout: float | None = None,
) -> TxReceipt:
    """Cancel several orders in a single transaction and wait for it to be mined.

    The gas estimate and the node gas price are fetched concurrently, and only when
    `tx_options` does not already provide them.

    Arguments
    ---------
    web3: Web3
        web3 provider object
    orderbook_address: str
        The address of the order book contract.
    order_ids: Sequence[int]
        The ids of the orders to cancel.
    signer: LocalAccount | None, optional
        The owner of the orders, signing locally. If None, the node's own account sends the transaction.
    tx_options: TransactionOptions | None, optional
        Nonce and gas overrides.
    timeout: float | None, optional
        The number of seconds to wait for the receipt. Defaults to 120.

    Returns
    -------
    TxReceipt
        The receipt of the mined cancel transaction.
    """
    # pylint: disable=too-many-arguments
    # pylint: disable=too-many-positional-arguments
    if tx_options is None:
        tx_options = TransactionOptions()
    orderbook_contract = get_contract(web3, orderbook_address, ORDERBOOK_ABI_NAME)
    fn_args = (list(order_ids),)
    with log_timing("Total Cancel Orders Time"):
        try:
            with log_timing("Get Signer Time"):
                sender = get_sender_address(web3, signer)
            unsent_txn = build_cancel_orders_transaction(orderbook_contract, sender, order_ids, tx_options)

            with log_timing("RPC Calls Time"):
                gas_limit, base_gas_price = await async_runner(
                    [partial(_estimate_gas_limit, web3, unsent_txn), partial(_get_base_gas_price, web3, unsent_txn)]
                )
            fill_gas_params(unsent_txn, gas_limit, base_gas_price, tx_options.priority_fee)

            with log_timing("Transaction Send Time"):
                tx_hash = send_transaction(web3, unsent_txn, signer)
            with log_timing("Transaction Wait Time"):
                tx_receipt = await async_wait_for_transaction_receipt(web3, tx_hash, timeout=timeout)
            return check_transaction_receipt(tx_receipt, CANCEL_FUNCTION_NAME, fn_args, raw_txn=dict(unsent_txn))
        except Exception as err:
            logging.error("Cancelling orders %s failed: %r", list(order_ids), err)
            if not is_provider_error(err):
                raise
            raise ContractCallException(
                extract_error_message(err, orderbook_contract),
                orig_exception=err,
                contract_call_type=ContractCallType.TRANSACTION,
                function_name_or_signature=CANCEL_FUNCTION_NAME,
                fn_args=fn_args,
                fn_kwargs={},
            ) from err


def cancel_orders(
    web3: Web3,
    orderbook_address: str,
    order_ids: Sequence[int],
    signer: LocalAccount | None = None,
    tx_options: TransactionOptions | None = None,
    timeout: float | None = None,
) -> TxReceipt:
    """Synchronous version of `async_cancel_orders`. Must not be called from a running event loop.

    Arguments
    ---------
    web3: Web3
        web3 provider object
    orderbook_address: str
        The address of the order book contract.
    order_ids: Sequence[int]
        The ids of the orders to cancel.
    signer: LocalAccount | None, optional
        The owner of the orders, signing locally. If None, the node's own account sends the transaction.
    tx_options: TransactionOptions | None, optional
        Nonce and gas overrides.
    timeout: float | None, optional
        The number of seconds to wait for the receipt. Defaults to 120.

    Returns
    -------
    TxReceipt
        The receipt of the mined cancel transaction.
    """
    # pylint: disable=too-many-arguments
    # pylint: disable=too-many-positional-arguments
    return asyncio.run(async_cancel_orders(web3, orderbook_address, order_ids, signer, tx_options, timeout))


def estimate_cancel_orders_gas(
    web3: Web3,
    orderbook_address: str,
    order_ids: Sequence[int],
    signer: LocalAccount | None = None,
) -> int:
    """Estimate the gas needed to cancel several orders.

    Arguments
    ---------
    web3: Web3
        web3 provider object
    orderbook_address: str
        The address of the order book contract.
    order_ids: Sequence[int]
        The ids of the orders to cancel.
    signer: LocalAccount | None, optional
        The owner of the orders. If None, the node's own account is used as the sender.

    Returns
    -------
    int
        The gas estimate.
    """
    orderbook_contract = get_contract(web3, orderbook_address, ORDERBOOK_ABI_NAME)
    fn_args = (list(order_ids),)
    try:
        sender = get_sender_address(web3, signer)
        return orderbook_contract.get_function_by_name(CANCEL_FUNCTION_NAME)(*fn_args).estimate_gas({"from": sender})
    except Exception as err:
        if not is_provider_error(err):
            raise
        raise ContractCallException(
            extract_error_message(err, orderbook_contract),
            orig_exception=err,
            contract_call_type=ContractCallType.PREVIEW,
            function_name_or_signature=CANCEL_FUNCTION_NAME,
            fn_args=fn_args,
            fn_kwargs={},
        ) from err
