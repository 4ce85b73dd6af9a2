"""Node connection settings, read from the environment or a dotenv file."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv
from eth_typing import URI


@dataclass
class EthConfig:
    """Where the node is."""

    rpc_uri: URI | str = URI("http://localhost:8545")
    """The http uri of the node."""

    def __post_init__(self):
        if isinstance(self.rpc_uri, str):
            self.rpc_uri = URI(self.rpc_uri)


def build_eth_config(dotenv_file: str = "eth.env") -> EthConfig:
    """Build the config from the `RPC_URI` environment variable, falling back to the default.

    Values in `dotenv_file` are loaded first if the file exists, without overriding
    variables that are already set.

    Arguments
    ---------
    dotenv_file: str, optional
        Path to the dotenv file. Defaults to "eth.env".

    Returns
    -------
    EthConfig
        The connection settings.
    """
    if os.path.exists(dotenv_file):
        load_dotenv(dotenv_file)
    rpc_uri = os.getenv("RPC_URI")
    if rpc_uri is None:
        return EthConfig()
    return EthConfig(rpc_uri=rpc_uri)
