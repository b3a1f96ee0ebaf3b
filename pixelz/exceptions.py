"""
Custom Exception Classes

This module defines the exceptions raised by the pixelz tool. Every exception
carries an ErrorKind tag so the command layer can branch on the kind of
failure rather than on message text.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Category of a pixelz failure."""

    CONFIG = "config"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    MALFORMED_DATA = "malformed_data"
    UNCONFIRMED_MINT = "unconfirmed_mint"
    PARTIAL_MINT = "partial_mint"
    TRANSACTION_FAILED = "transaction_failed"
    CONTENT_STORE = "content_store"
    UNKNOWN = "unknown"


class PixelzBaseException(Exception):
    """Base exception for the pixelz application."""

    kind: ErrorKind = ErrorKind.UNKNOWN


class ConfigurationError(PixelzBaseException):
    """Raised for a bad or missing deployment file or configuration value."""

    kind = ErrorKind.CONFIG


ConfigError = ConfigurationError


class ValidationError(PixelzBaseException):
    """Raised when user input is rejected before any network call."""

    kind = ErrorKind.VALIDATION


class NotFoundError(PixelzBaseException):
    """Raised when a content address is unknown to the IPFS node."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, address: str, message: Optional[str] = None):
        self.address = address
        super().__init__(message or f"content not found: {address}")


class TokenNotFoundError(NotFoundError):
    """Raised when the contract has no token with the given id."""

    def __init__(self, token_id, original_error: Optional[Exception] = None):
        self.token_id = str(token_id)
        self.original_error = original_error
        message = f"token {token_id} not found"
        if original_error:
            message = f"{message}: {original_error}"
        super().__init__(self.token_id, message)


class MalformedDataError(PixelzBaseException):
    """Raised when fetched metadata is not valid JSON."""

    kind = ErrorKind.MALFORMED_DATA

    def __init__(self, address: str, original_error: Exception):
        self.address = address
        self.original_error = original_error
        super().__init__(f"data at {address} is not valid JSON: {original_error}")


class UnconfirmedMintError(PixelzBaseException):
    """
    Raised when a mint transaction was confirmed but its receipt carries no
    Transfer event. Gas has been spent and the transaction is on-chain, so the
    command must not be re-run blindly.
    """

    kind = ErrorKind.UNCONFIRMED_MINT

    def __init__(self, tx_hash: Optional[str] = None):
        self.tx_hash = tx_hash
        details = f" (transaction {tx_hash})" if tx_hash else ""
        super().__init__(f"unable to get token id: no Transfer event in receipt{details}")


class PartialMintError(PixelzBaseException):
    """
    Raised when a token was minted on-chain but a follow-up step of the mint
    failed, for example moving it to the requested owner. The token exists and
    belongs to the signer, so running mint again would create a second one.
    """

    kind = ErrorKind.PARTIAL_MINT

    def __init__(self, token_id, original_error: Exception, tx_hash: Optional[str] = None):
        self.token_id = str(token_id)
        self.original_error = original_error
        self.tx_hash = tx_hash
        super().__init__(f"token {token_id} was minted but moving it to the requested owner failed: {original_error}")


class TransactionFailedError(PixelzBaseException):
    """Raised when a transaction receipt reports a reverted status."""

    kind = ErrorKind.TRANSACTION_FAILED

    def __init__(self, function_name: str, tx_hash: Optional[str] = None):
        self.function_name = function_name
        self.tx_hash = tx_hash
        super().__init__(f"transaction for {function_name} reverted (tx: {tx_hash})")


class ContentStoreError(PixelzBaseException):
    """Raised when the IPFS node rejects a request for a reason other than not-found."""

    kind = ErrorKind.CONTENT_STORE

    def __init__(self, operation: str, status_code: int, message: str):
        self.operation = operation
        self.status_code = status_code
        super().__init__(f"IPFS {operation} failed with HTTP {status_code}: {message}")
