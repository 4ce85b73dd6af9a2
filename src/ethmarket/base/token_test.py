"""Tests for token.py"""

from web3 import Web3

from ethmarket.test_fixtures import MockChain

from .token import approve_token, get_allowance

TOKEN_ADDRESS = Web3.to_checksum_address("0xe7f1725e7734ce288f8367e1bb143e90bb3f0512")
SPENDER_ADDRESS = Web3.to_checksum_address("0x9fe46736679d2d9a65f0992f2272de9f3c7fa6e0")


def test_approve_token(mock_chain: MockChain, signer):
    """The spender is approved by the signer."""
    receipt = approve_token(mock_chain.web3, signer, TOKEN_ADDRESS, SPENDER_ADDRESS.lower(), 500)
    assert receipt["status"] == 1
    (call,) = mock_chain.calls_to("approve")
    assert call.address == TOKEN_ADDRESS
    assert call.args == (SPENDER_ADDRESS, 500)
    assert call.sender == signer.address


def test_get_allowance(mock_chain: MockChain, signer):
    """Allowances are read as plain integers."""
    allowances = {(signer.address, SPENDER_ADDRESS): 123}
    mock_chain.set_read(TOKEN_ADDRESS, "allowance", lambda owner, spender: allowances.get((owner, spender), 0))
    assert get_allowance(mock_chain.web3, TOKEN_ADDRESS, signer.address.lower(), SPENDER_ADDRESS) == 123
    assert get_allowance(mock_chain.web3, TOKEN_ADDRESS, SPENDER_ADDRESS, signer.address) == 0
