"""Client helpers for vault and order book contracts. This file exposes specific functions and classes."""

from .eth_config import EthConfig, build_eth_config
from .base import ContractCallException, initialize_web3_with_http_provider
from .market import (
    MarketParams,
    TransactionOptions,
    VaultParams,
    async_cancel_orders,
    cancel_orders,
    estimate_cancel_orders_gas,
    get_market_params,
    get_vault_params,
)
from .vault import (
    TokenAmounts,
    calc_amount2_for_amount1,
    calc_deposit_for_shares,
    calc_shares_for_deposit,
    calc_withdraw_for_shares,
    deposit_based_on_amount1,
    deposit_based_on_shares,
    deposit_with_amounts,
    withdraw_based_on_amount1,
    withdraw_based_on_shares,
)
