"""Test fixtures for ethmarket."""

from .mock_chain import (
    MOCK_CHAIN_ID,
    MOCK_GAS_ESTIMATE,
    MOCK_GAS_PRICE,
    NODE_ACCOUNT,
    ContractCall,
    MockChain,
    SentTransaction,
    mock_chain,
    mock_order_book,
    signer,
)
