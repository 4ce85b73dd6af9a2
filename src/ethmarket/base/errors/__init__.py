"""Custom error reporting and contract error parsing."""

from .errors import (
    ContractCallException,
    ContractCallType,
    decode_error_selector_for_contract,
    error_selector,
    extract_error_message,
    is_provider_error,
)
from .types import ABIError, UnknownBlockError
