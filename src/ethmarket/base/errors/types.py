"""Types used when decoding contract errors."""

from typing import Literal, Sequence, TypedDict

from eth_typing import ABIComponent


class ABIError(TypedDict, total=True):
    """An `error` entry of a contract abi, e.g. `OrderAlreadyFilledOrCancelled()`."""

    name: str
    inputs: Sequence[ABIComponent]
    type: Literal["error"]


class UnknownBlockError(Exception):
    """A transaction was mined but its receipt reports failure (status 0) or no status at all."""
