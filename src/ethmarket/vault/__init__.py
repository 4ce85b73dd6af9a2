"""Helpers for two asset vault contracts."""

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
