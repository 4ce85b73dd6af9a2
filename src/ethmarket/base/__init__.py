"""Base utilities for working with contracts via web3"""

from .abi import ERC20_ABI_NAME, ORDERBOOK_ABI_NAME, VAULT_ABI_NAME, get_contract, load_all_abis, load_contract_abi
from .errors import (
    ContractCallException,
    ContractCallType,
    UnknownBlockError,
    decode_error_selector_for_contract,
    extract_error_message,
    is_provider_error,
)
from .retry_utils import RetryCallOptions, retry_call
from .token import approve_token, get_allowance
from .transactions import (
    READ_RETRY_COUNT,
    async_wait_for_transaction_receipt,
    check_transaction_receipt,
    get_sender_address,
    send_transaction,
    smart_contract_read,
    smart_contract_transact,
)
from .web3_setup import initialize_web3_with_http_provider
