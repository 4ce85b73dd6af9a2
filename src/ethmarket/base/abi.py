"""Load ABIs and build contract handles from them."""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache

from eth_typing import ABI
from web3 import Web3
from web3.contract.contract import Contract

VAULT_ABI_NAME = "Vault"
ORDERBOOK_ABI_NAME = "OrderBook"
ERC20_ABI_NAME = "ERC20"

# The Vault, OrderBook and ERC20 abis shipped with the package
DEFAULT_ABI_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "abis")


def load_all_abis(abi_folder: str) -> dict[str, ABI]:
    """Load every contract abi found in a folder of artifact json files.

    Arguments
    ---------
    abi_folder: str
        Directory to search recursively for `.json` files.

    Returns
    -------
    dict[str, ABI]
        The abis keyed by file name without extension, e.g. "OrderBook".
        Json files without an "abi" field are skipped.
    """
    abis: dict[str, ABI] = {}
    for abi_file in _collect_files(abi_folder):
        contract_name = os.path.splitext(os.path.basename(abi_file))[0]
        try:
            abis[contract_name] = load_abi_from_file(abi_file)
        except AssertionError as err:
            logging.debug("Skipping %s: %s", abi_file, err)
    logging.debug("Loaded abis for %s from %s", sorted(abis), abi_folder)
    return abis


def load_abi_from_file(file_name: str) -> ABI:
    """Read the "abi" field of a compiled contract artifact.

    Arguments
    ---------
    file_name: str
        Path to the artifact json.

    Returns
    -------
    ABI
       The contract abi.
    """
    with open(file_name, mode="r", encoding="UTF-8") as file:
        artifact = json.load(file)
    if "abi" not in artifact:
        raise AssertionError(f"ABI for {file_name=} must contain an 'abi' field")
    return artifact["abi"]


@lru_cache
def load_contract_abi(abi_name: str) -> ABI:
    """Load a single named ABI, caching the result.

    Arguments
    ---------
    abi_name: str
        The file name of the abi without the `.json` extension, e.g. "Vault".

    Returns
    -------
    ABI
        The decoded abi.
    """
    abis = load_all_abis(DEFAULT_ABI_DIR)
    if abi_name not in abis:
        raise AssertionError(f"{abi_name} ABI was not found in {DEFAULT_ABI_DIR}")
    return abis[abi_name]


def get_contract(web3: Web3, address: str, abi_name: str) -> Contract:
    """Get a contract handle at an address using one of the known ABIs.

    Arguments
    ---------
    web3: Web3
        web3 provider object
    address: str
        The address of the deployed contract.
    abi_name: str
        The name of the abi to use, e.g. "Vault" or "OrderBook".

    Returns
    -------
    Contract
        The contract object bound to `web3`.
    """
    return web3.eth.contract(address=Web3.to_checksum_address(address), abi=load_contract_abi(abi_name))


def _collect_files(folder_path: str, extension: str = ".json") -> list[str]:
    return sorted(
        os.path.join(root, file_name)
        for root, _, file_names in os.walk(folder_path)
        for file_name in file_names
        if file_name.endswith(extension)
    )

