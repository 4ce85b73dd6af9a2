"""Connect to a node over HTTP."""

from __future__ import annotations

from eth_typing import URI
from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

DEFAULT_REQUEST_KWARGS = {"timeout": 20}


def initialize_web3_with_http_provider(ethereum_node: URI | str, request_kwargs: dict | None = None) -> Web3:
    """Build a `Web3` instance for the node at `ethereum_node`.

    The proof of authority middleware is injected so that chains which pack extra data into
    block headers (geth --dev, Polygon, BNB Chain and most L2 devnets) can be read.

    Arguments
    ---------
    ethereum_node: URI | str
        The http(s) uri of the node, e.g. `EthConfig.rpc_uri`.
    request_kwargs: dict | None, optional
        Keyword arguments for the underlying http session, e.g. the request timeout.
        Defaults to a 20 second timeout.

    Returns
    -------
    Web3
        The web3 instance. No request is made until it is first used.
    """
    if request_kwargs is None:
        request_kwargs = dict(DEFAULT_REQUEST_KWARGS)
    web3 = Web3(Web3.HTTPProvider(ethereum_node, request_kwargs=request_kwargs))
    web3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
    return web3
