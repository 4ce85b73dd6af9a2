"""Helpers for order book contracts."""

from .cancel import (
    async_cancel_orders,
    build_cancel_orders_transaction,
    cancel_orders,
    estimate_cancel_orders_gas,
    fill_gas_params,
)
from .params import get_market_params, get_vault_params
from .types import MarketParams, TransactionOptions, VaultParams
