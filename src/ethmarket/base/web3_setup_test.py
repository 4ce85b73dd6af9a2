"""Tests for web3_setup.py"""

from web3 import HTTPProvider

from .web3_setup import initialize_web3_with_http_provider


def test_initialize_web3_with_http_provider():
    """The provider points at the given node and does not connect on creation."""
    web3 = initialize_web3_with_http_provider("http://localhost:8545", request_kwargs={"timeout": 5})
    assert isinstance(web3.provider, HTTPProvider)
    assert web3.provider.endpoint_uri == "http://localhost:8545"
