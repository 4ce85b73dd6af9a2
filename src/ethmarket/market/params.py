"""Read market and vault parameters from an order book."""

from __future__ import annotations

from web3 import Web3
from web3.types import BlockIdentifier

from ethmarket.base import ORDERBOOK_ABI_NAME, get_contract, smart_contract_read

from .types import MarketParams, VaultParams


def get_market_params(web3: Web3, market_address: str, block_identifier: BlockIdentifier = "latest") -> MarketParams:
    """Get the market parameters of an order book.

    Arguments
    ---------
    web3: Web3
        web3 provider object
    market_address: str
        The address of the order book contract.
    block_identifier: BlockIdentifier, optional
        The block to read at. Defaults to "latest".

    Returns
    -------
    MarketParams
        The market parameters, including the base (token1) and quote (token2) asset addresses.
    """
    orderbook_contract = get_contract(web3, market_address, ORDERBOOK_ABI_NAME)
    return MarketParams.from_contract(
        smart_contract_read(orderbook_contract, "getMarketParams", block_identifier=block_identifier)
    )


def get_vault_params(web3: Web3, market_address: str, block_identifier: BlockIdentifier = "latest") -> VaultParams:
    """Get the parameters of the vault attached to an order book.

    Arguments
    ---------
    web3: Web3
        web3 provider object
    market_address: str
        The address of the order book contract.
    block_identifier: BlockIdentifier, optional
        The block to read at. Defaults to "latest".

    Returns
    -------
    VaultParams
        The vault parameters, including the vault's best ask price.
    """
    orderbook_contract = get_contract(web3, market_address, ORDERBOOK_ABI_NAME)
    return VaultParams.from_contract(
        smart_contract_read(orderbook_contract, "getVaultParams", block_identifier=block_identifier)
    )
