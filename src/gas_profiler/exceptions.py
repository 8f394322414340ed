"""Custom exception classes for the gas profiler.

Every failure point of the profiling pipeline has its own exception type so
callers can tell a compilation problem from a stuck transaction without
parsing messages.
"""

from __future__ import annotations

from typing import Any


class ProfilerError(Exception):
    """Base exception for all profiling errors."""

    pass


class ConfigurationError(ProfilerError, ValueError):
    """Raised when settings, environment values or accounts are unusable."""

    pass


class InvalidContractSpecError(ProfilerError, ValueError):
    """Raised when a contract spec string cannot be parsed."""

    pass


class UnsupportedContractTypeError(ProfilerError, ValueError):
    """Raised when the requested contract type is not ERC20 or ERC721."""

    pass


class DuplicateOperationError(ProfilerError, ValueError):
    """Raised when a stage tries to overwrite an operation already in a report."""

    pass


# --------------------------------------------------------------------------- #
# Deployment                                                                  #
# --------------------------------------------------------------------------- #

class DeployError(ProfilerError):
    """Base exception for failures before the contract is live on chain."""

    pass


class CompilationError(DeployError):
    """Raised when the selector is absent from the compiler output or solc fails."""

    def __init__(self, message: str, errors: list[Any] | None = None):
        super().__init__(message)
        self.errors = list(errors or [])


class SourceNotFoundError(CompilationError, FileNotFoundError):
    """Raised when the source file or one of its imports does not exist."""

    pass


class MissingBytecodeError(DeployError):
    """Raised when the compiled contract has no deployable bytecode."""

    pass


class MissingInterfaceError(DeployError):
    """Raised when the compiled contract has no ABI."""

    pass


class ConstructorArgumentError(DeployError, ValueError):
    """Raised when constructor arguments do not fit the constructor ABI."""

    pass


# --------------------------------------------------------------------------- #
# Transactions                                                                #
# --------------------------------------------------------------------------- #

class TransactionError(ProfilerError):
    """Base exception for failures while executing a single operation."""

    def __init__(self, message: str, operation: str | None = None, tx_hash: str | None = None):
        super().__init__(message)
        self.operation = operation
        self.tx_hash = tx_hash


class GasEstimationError(TransactionError):
    """Raised when the node rejects or cannot estimate gas for a call."""

    pass


class SubmissionError(TransactionError):
    """Raised when the node refuses the transaction."""

    pass


class TransactionRevertedError(SubmissionError):
    """Raised when a transaction was mined with a failed status."""

    pass


class ReceiptError(TransactionError):
    """Base exception for receipt polling failures."""

    pass


class ReceiptQueryError(ReceiptError):
    """Raised when the node errors while being asked for a receipt."""

    pass


class MalformedReceiptError(ReceiptError):
    """Raised when a receipt is present but lacks a positive gasUsed."""

    pass


class ReceiptTimeoutError(ReceiptError, TimeoutError):
    """Raised when no receipt arrived within the configured bound."""

    pass
