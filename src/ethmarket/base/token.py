"""Utilities for ERC20 token contracts."""

from __future__ import annotations

import logging

from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.types import TxReceipt

from .abi import ERC20_ABI_NAME, get_contract
from .transactions import smart_contract_read, smart_contract_transact


def approve_token(
    web3: Web3,
    signer: LocalAccount,
    token_address: str,
    spender_address: str,
    amount: int,
    timeout: float | None = None,
) -> TxReceipt:
    """Approve `spender_address` to spend `amount` of the signer's tokens and wait for the receipt.

    Arguments
    ---------
    web3: Web3
        web3 provider object
    signer: LocalAccount
        The token owner, who signs the approval.
    token_address: str
        The address of the ERC20 token.
    spender_address: str
        The address of the contract allowed to spend the tokens.
    amount: int
        The amount to approve, in the token's smallest unit.
    timeout: float | None, optional
        The number of seconds to wait for the receipt.

    Returns
    -------
    TxReceipt
        The receipt of the approval.
    """
    # pylint: disable=too-many-arguments
    # pylint: disable=too-many-positional-arguments
    token_contract = get_contract(web3, token_address, ERC20_ABI_NAME)
    logging.info("Approving %s of token %s for spender %s", amount, token_address, spender_address)
    return smart_contract_transact(
        web3,
        token_contract,
        signer,
        "approve",
        Web3.to_checksum_address(spender_address),
        amount,
        timeout=timeout,
    )


def get_allowance(web3: Web3, token_address: str, owner_address: str, spender_address: str) -> int:
    """Get how much of the owner's tokens the spender may still spend.

    Arguments
    ---------
    web3: Web3
        web3 provider object
    token_address: str
        The address of the ERC20 token.
    owner_address: str
        The token owner.
    spender_address: str
        The approved spender.

    Returns
    -------
    int
        The remaining allowance, in the token's smallest unit.
    """
    token_contract = get_contract(web3, token_address, ERC20_ABI_NAME)
    return smart_contract_read(
        token_contract,
        "allowance",
        Web3.to_checksum_address(owner_address),
        Web3.to_checksum_address(spender_address),
    )["value"]
