"""Deposit into and withdraw from a two asset vault."""

from __future__ import annotations

import logging
from typing import NamedTuple

from eth_account.signers.local import LocalAccount
from fixedpointmath import FixedPoint
from web3 import Web3
from web3.types import TxReceipt

from ethmarket.base import (
    VAULT_ABI_NAME,
    ContractCallType,
    approve_token,
    get_contract,
    smart_contract_read,
    smart_contract_transact,
)
from ethmarket.market import get_market_params, get_vault_params

# Number of arguments is influenced by the underlying solidity contract
# pylint: disable=too-many-arguments
# pylint: disable=too-many-positional-arguments


class TokenAmounts(NamedTuple):
    """Amounts of the two vault assets, in each token's smallest unit."""

    amount1: int
    amount2: int


def calc_deposit_for_shares(web3: Web3, vault_address: str, shares: int) -> TokenAmounts:
    """Calculate the amount of tokens needed to mint a given number of shares.

    Arguments
    ---------
    web3: Web3
        web3 provider object
    vault_address: str
        The address of the vault contract.
    shares: int
        The number of shares to mint.

    Returns
    -------
    TokenAmounts
        The token1 and token2 amounts the mint would pull from the caller.
    """
    vault_contract = get_contract(web3, vault_address, VAULT_ABI_NAME)
    preview = smart_contract_read(vault_contract, "previewMint", shares, contract_call_type=ContractCallType.PREVIEW)
    return TokenAmounts(preview["amount1"], preview["amount2"])


def calc_withdraw_for_shares(web3: Web3, vault_address: str, shares: int) -> TokenAmounts:
    """Calculate the amount of tokens received for burning a given number of shares.

    Arguments
    ---------
    web3: Web3
        web3 provider object
    vault_address: str
        The address of the vault contract.
    shares: int
        The number of shares to burn.

    Returns
    -------
    TokenAmounts
        The token1 and token2 amounts the redeem would pay out.
    """
    vault_contract = get_contract(web3, vault_address, VAULT_ABI_NAME)
    preview = smart_contract_read(
        vault_contract, "previewRedeem", shares, contract_call_type=ContractCallType.PREVIEW
    )
    return TokenAmounts(preview["amount1"], preview["amount2"])


def calc_shares_for_deposit(web3: Web3, vault_address: str, amount1: int, amount2: int) -> int:
    """Calculate the number of shares received for depositing the given token amounts.

    Arguments
    ---------
    web3: Web3
        web3 provider object
    vault_address: str
        The address of the vault contract.
    amount1: int
        The amount of token1 to deposit.
    amount2: int
        The amount of token2 to deposit.

    Returns
    -------
    int
        The number of shares.
    """
    vault_contract = get_contract(web3, vault_address, VAULT_ABI_NAME)
    preview = smart_contract_read(
        vault_contract, "previewDeposit", amount1, amount2, contract_call_type=ContractCallType.PREVIEW
    )
    return preview["shares"]


def calc_amount2_for_amount1(web3: Web3, market_address: str, amount1: int) -> int:
    """Calculate the amount of token2 to pair with an amount of token1 at the vault's best ask.

    Arguments
    ---------
    web3: Web3
        web3 provider object
    market_address: str
        The address of the order book the vault provides liquidity to.
    amount1: int
        The amount of token1.

    Returns
    -------
    int
        amount1 * vault_best_ask / 1e18, rounded down.
    """
    price = get_vault_params(web3, market_address).vault_best_ask
    return (FixedPoint(scaled_value=amount1) * FixedPoint(scaled_value=price)).scaled_value


def _approve_vault_tokens(
    web3: Web3,
    signer: LocalAccount,
    market_address: str,
    vault_address: str,
    amount1: int,
    amount2: int,
    timeout: float | None = None,
) -> None:
    """Approve the vault to pull the market's base (token1) and quote (token2) assets."""
    market_params = get_market_params(web3, market_address)
    approve_token(web3, signer, market_params.base_asset_address, vault_address, amount1, timeout=timeout)
    approve_token(web3, signer, market_params.quote_asset_address, vault_address, amount2, timeout=timeout)


def deposit_based_on_amount1(
    web3: Web3,
    signer: LocalAccount,
    amount1: int,
    vault_address: str,
    market_address: str,
    should_approve: bool = False,
    timeout: float | None = None,
) -> TxReceipt:
    """Deposit an amount of token1 together with the matching amount of token2.

    Arguments
    ---------
    web3: Web3
        web3 provider object
    signer: LocalAccount
        The depositor, who also receives the shares.
    amount1: int
        The amount of token1 to deposit.
    vault_address: str
        The address of the vault contract.
    market_address: str
        The address of the order book the vault provides liquidity to.
    should_approve: bool, optional
        Whether to approve both tokens for the vault before depositing. Defaults to False.
    timeout: float | None, optional
        The number of seconds to wait for each receipt.

    Returns
    -------
    TxReceipt
        The receipt of the deposit.
    """
    amount2 = calc_amount2_for_amount1(web3, market_address, amount1)
    vault_contract = get_contract(web3, vault_address, VAULT_ABI_NAME)
    if should_approve:
        _approve_vault_tokens(web3, signer, market_address, vault_address, amount1, amount2, timeout)
    receiver = Web3.to_checksum_address(signer.address)
    logging.info("Depositing amount1=%s amount2=%s into vault %s", amount1, amount2, vault_address)
    return smart_contract_transact(web3, vault_contract, signer, "deposit", amount1, amount2, receiver, timeout=timeout)


def deposit_based_on_shares(
    web3: Web3,
    signer: LocalAccount,
    shares: int,
    market_address: str,
    vault_address: str,
    should_approve: bool = False,
    timeout: float | None = None,
) -> TxReceipt:
    """Mint a number of vault shares, paying whatever token amounts the vault asks for.

    Arguments
    ---------
    web3: Web3
        web3 provider object
    signer: LocalAccount
        The depositor, who also receives the shares.
    shares: int
        The number of shares to mint.
    market_address: str
        The address of the order book the vault provides liquidity to.
    vault_address: str
        The address of the vault contract.
    should_approve: bool, optional
        Whether to approve the previewed token amounts for the vault before minting. Defaults to False.
    timeout: float | None, optional
        The number of seconds to wait for each receipt.

    Returns
    -------
    TxReceipt
        The receipt of the mint.
    """
    vault_contract = get_contract(web3, vault_address, VAULT_ABI_NAME)
    if should_approve:
        amount1, amount2 = calc_deposit_for_shares(web3, vault_address, shares)
        _approve_vault_tokens(web3, signer, market_address, vault_address, amount1, amount2, timeout)
    receiver = Web3.to_checksum_address(signer.address)
    logging.info("Minting %s shares of vault %s", shares, vault_address)
    return smart_contract_transact(web3, vault_contract, signer, "mint", shares, receiver, timeout=timeout)


def deposit_with_amounts(
    web3: Web3,
    signer: LocalAccount,
    amount1: int,
    amount2: int,
    market_address: str,
    vault_address: str,
    should_approve: bool = False,
    timeout: float | None = None,
) -> TxReceipt:
    """Deposit explicit amounts of both tokens.

    Arguments
    ---------
    web3: Web3
        web3 provider object
    signer: LocalAccount
        The depositor, who also receives the shares.
    amount1: int
        The amount of token1 to deposit.
    amount2: int
        The amount of token2 to deposit.
    market_address: str
        The address of the order book the vault provides liquidity to.
    vault_address: str
        The address of the vault contract.
    should_approve: bool, optional
        Whether to approve both tokens for the vault before depositing. Defaults to False.
    timeout: float | None, optional
        The number of seconds to wait for each receipt.

    Returns
    -------
    TxReceipt
        The receipt of the deposit.
    """
    vault_contract = get_contract(web3, vault_address, VAULT_ABI_NAME)
    if should_approve:
        _approve_vault_tokens(web3, signer, market_address, vault_address, amount1, amount2, timeout)
    receiver = Web3.to_checksum_address(signer.address)
    logging.info("Depositing amount1=%s amount2=%s into vault %s", amount1, amount2, vault_address)
    return smart_contract_transact(web3, vault_contract, signer, "deposit", amount1, amount2, receiver, timeout=timeout)


def withdraw_based_on_amount1(
    web3: Web3,
    signer: LocalAccount,
    amount1: int,
    vault_address: str,
    timeout: float | None = None,
) -> TxReceipt:
    """Withdraw the shares worth an amount of token1 at the vault's current token1 per share.

    Arguments
    ---------
    web3: Web3
        web3 provider object
    signer: LocalAccount
        The share owner, who also receives the tokens.
    amount1: int
        The amount of token1 to withdraw.
    vault_address: str
        The address of the vault contract.
    timeout: float | None, optional
        The number of seconds to wait for the receipt.

    Returns
    -------
    TxReceipt
        The receipt of the withdrawal.
    """
    vault_contract = get_contract(web3, vault_address, VAULT_ABI_NAME)
    total_assets = smart_contract_read(vault_contract, "totalAssets")
    total_supply = smart_contract_read(vault_contract, "totalSupply")["value"]
    if total_assets["amount1"] == 0:
        raise ValueError(f"Vault {vault_address} holds no token1, cannot convert {amount1=} to shares.")
    shares = amount1 * total_supply // total_assets["amount1"]
    owner = Web3.to_checksum_address(signer.address)
    logging.info("Withdrawing %s shares (amount1=%s) from vault %s", shares, amount1, vault_address)
    return smart_contract_transact(web3, vault_contract, signer, "withdraw", shares, owner, owner, timeout=timeout)


def withdraw_based_on_shares(
    web3: Web3,
    signer: LocalAccount,
    shares: int,
    vault_address: str,
    timeout: float | None = None,
) -> TxReceipt:
    """Redeem a number of vault shares for both tokens.

    Arguments
    ---------
    web3: Web3
        web3 provider object
    signer: LocalAccount
        The share owner, who also receives the tokens.
    shares: int
        The number of shares to burn.
    vault_address: str
        The address of the vault contract.
    timeout: float | None, optional
        The number of seconds to wait for the receipt.

    Returns
    -------
    TxReceipt
        The receipt of the redemption.
    """
    vault_contract = get_contract(web3, vault_address, VAULT_ABI_NAME)
    owner = Web3.to_checksum_address(signer.address)
    logging.info("Redeeming %s shares from vault %s", shares, vault_address)
    return smart_contract_transact(web3, vault_contract, signer, "redeem", shares, owner, owner, timeout=timeout)
