"""
Exceptions raised by the serum dex client.

Nothing in this package retries on failure: every error below is raised to the
immediate caller, who decides whether resubmitting is safe.
"""
from typing import Any, Optional, Sequence


class DexClientError(Exception):
    """Base class for all errors raised by this package."""


class StateLoadError(DexClientError):
    """An account needed to build a market handle is missing or failed to decode."""

    def __init__(self, address, reason: str):
        super().__init__(f"Failed to load account {address}: {reason}")
        self.address = address
        self.reason = reason


class DerivationExhausted(DexClientError):
    """No bump seed in [0, 255] produced an off-curve program address."""

    def __init__(self, seeds: Sequence[bytes], program_id):
        super().__init__(
            f"Unable to find a viable program address bump seed for program {program_id}"
        )
        self.seeds = list(seeds)
        self.program_id = program_id


class BroadcastError(DexClientError):
    """The ledger rejected the transaction before it was included."""

    def __init__(self, message: str, response: Optional[Any] = None):
        super().__init__(message)
        self.response = response


class ExecutionError(DexClientError):
    """
    The transaction was included but the on-chain program reported a failure.

    ``payload`` is the error exactly as reported by the ledger, e.g.
    ``{"InstructionError": [0, {"Custom": 1}]}``. It is never parsed here.
    """

    def __init__(self, signature, payload: Any):
        super().__init__(f"Transaction {signature} failed: {payload!r}")
        self.signature = signature
        self.payload = payload
