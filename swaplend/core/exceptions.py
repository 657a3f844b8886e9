"""
Custom exceptions for the swap-and-lend pipeline

Every pipeline stage fails with its own exception kind so callers can branch
on which stage broke without parsing message text. The underlying client or
network error is kept on ``cause`` (and chained as ``__cause__`` when raised
with ``raise ... from``).
"""
from typing import List, Optional


class SwapLendException(Exception):
    """Base exception for all custom exceptions"""

    def __init__(self, message: str, code: str = None, cause: Optional[BaseException] = None):
        self.message = message
        self.code = code
        self.cause = cause
        super().__init__(self.message)


class ConfigurationMissing(SwapLendException):
    """Raised at startup when RPC URL or private key is not configured or unusable"""

    def __init__(self, message: str, missing: Optional[List[str]] = None):
        super().__init__(message, code="configuration_missing")
        self.missing = list(missing or [])


class ChainConnectionError(SwapLendException):
    """Raised when the RPC endpoint cannot be reached"""
    pass


class TransactionReverted(SwapLendException):
    """Raised when a mined transaction reports failure status"""

    def __init__(self, message: str, tx_hash: str):
        super().__init__(message, code="transaction_reverted")
        self.tx_hash = tx_hash


class ApprovalFailed(SwapLendException):
    """Raised when a token approval is rejected or confirms with failure"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, code="approval_failed", cause=cause)


class PoolNotFound(SwapLendException):
    """Raised when no pool exists for the token pair at the requested fee tier"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, code="pool_not_found", cause=cause)


class SwapFailed(SwapLendException):
    """Raised when the swap is rejected or confirms with failure"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, code="swap_failed", cause=cause)


class BalanceReadFailed(SwapLendException):
    """Raised when the post-swap balance cannot be read"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, code="balance_read_failed", cause=cause)


class DepositFailed(SwapLendException):
    """Raised when the lending deposit is rejected or confirms with failure"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, code="deposit_failed", cause=cause)
