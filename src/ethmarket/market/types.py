"""Value types read from, or sent to, the order book contract."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

# pylint: disable=too-many-instance-attributes


def camel_to_snake(camel_string: str) -> str:
    """Convert camel case string to snake case string."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", camel_string).lower()


@dataclass
class MarketParams:
    """Order book market parameters, as returned by `getMarketParams`."""

    price_precision: int
    size_precision: int
    base_asset_address: str
    base_asset_decimals: int
    quote_asset_address: str
    quote_asset_decimals: int
    tick_size: int
    min_size: int
    max_size: int
    taker_fee_bps: int
    maker_fee_bps: int

    @classmethod
    def from_contract(cls, contract_values: dict[str, Any]) -> MarketParams:
        """Build from a camelCase dictionary returned by `smart_contract_read`."""
        return cls(**{camel_to_snake(key): value for key, value in contract_values.items()})


@dataclass
class VaultParams:
    """Parameters of the vault that provides liquidity to the order book, as returned by `getVaultParams`."""

    vault_address: str
    vault_best_bid: int
    bid_partially_filled_size: int
    vault_best_ask: int
    ask_partially_filled_size: int
    vault_bid_order_size: int
    vault_ask_order_size: int
    spread: int

    @classmethod
    def from_contract(cls, contract_values: dict[str, Any]) -> VaultParams:
        """Build from a camelCase dictionary returned by `smart_contract_read`."""
        return cls(**{camel_to_snake(key): value for key, value in contract_values.items()})


@dataclass
class TransactionOptions:
    """Optional overrides for a transaction.

    Gas fields that are left as None are filled in by estimation. `priority_fee` is in gwei and is
    added on top of the node's gas price when no gas price or max fee per gas is given.
    """

    nonce: int | None = None
    gas_limit: int | None = None
    gas_price: int | None = None
    max_fee_per_gas: int | None = None
    max_priority_fee_per_gas: int | None = None
    priority_fee: float | None = None
