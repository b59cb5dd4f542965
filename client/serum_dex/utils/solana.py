import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Confirmed, Finalized, Processed
from solana.rpc.core import RPCException
from solana.rpc.types import TxOpts
from solders.errors import SignerError
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction, VersionedTransaction

from serum_dex.errors import BroadcastError, ExecutionError, StateLoadError

logger = logging.getLogger(__name__)

AnyTransaction = Union[Transaction, VersionedTransaction]

# least durable first
_COMMITMENT_ALIASES = {
    "processed": Processed,
    "recent": Processed,
    "confirmed": Confirmed,
    "single": Confirmed,
    "singleGossip": Confirmed,
    "finalized": Finalized,
    "root": Finalized,
    "max": Finalized,
}


def normalize_commitment(commitment: str) -> Commitment:
    try:
        return _COMMITMENT_ALIASES[commitment]
    except KeyError:
        raise ValueError(
            f"Unknown commitment {commitment!r}, expected one of {sorted(_COMMITMENT_ALIASES)}"
        ) from None


@dataclass(frozen=True)
class TransactionOptions:
    skip_preflight: bool = False
    commitment: Commitment = Processed

    def __post_init__(self):
        object.__setattr__(self, "skip_preflight", bool(self.skip_preflight))
        object.__setattr__(self, "commitment", normalize_commitment(self.commitment))


@dataclass(frozen=True)
class ConfirmationResult:
    err: Optional[Any] = None

    @property
    def ok(self) -> bool:
        return self.err is None


class LedgerClient(ABC):
    """The three ledger operations the market client needs from an RPC transport."""

    @abstractmethod
    async def fetch_account(self, address: Pubkey) -> Optional[bytes]:
        """Returns the account data, or None when the account does not exist."""

    @abstractmethod
    async def broadcast(
            self,
            transaction: AnyTransaction,
            signers: Sequence[Keypair],
            skip_preflight: bool,
    ) -> Signature:
        """Sends the transaction once. Raises BroadcastError if the ledger rejects it."""

    @abstractmethod
    async def await_confirmation(self, signature: Signature, commitment: Commitment) -> ConfirmationResult:
        """Blocks until the signature reaches ``commitment``."""


async def fetch_account_data(client: LedgerClient, address: Pubkey) -> Optional[bytes]:
    """Fetches through ``client``, reporting transport failures as a StateLoadError for ``address``."""
    try:
        return await client.fetch_account(address)
    except Exception as e:
        raise StateLoadError(address, f"fetch failed: {e}") from e


class RpcLedgerClient(LedgerClient):
    def __init__(self, client: Union[AsyncClient, str], commitment: Commitment = Confirmed):
        if isinstance(client, str):
            client = AsyncClient(client)
        self.client = client
        self.commitment = normalize_commitment(commitment)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        await self.client.close()

    async def fetch_account(self, address: Pubkey) -> Optional[bytes]:
        resp = await self.client.get_account_info(address, commitment=self.commitment)
        if resp.value is None:
            logger.debug("Account %s not found", address)
            return None
        return bytes(resp.value.data)

    async def _sign(self, transaction: AnyTransaction, signers: Sequence[Keypair]) -> AnyTransaction:
        if not signers:
            return transaction
        if isinstance(transaction, VersionedTransaction):
            return VersionedTransaction(transaction.message, list(signers))
        blockhash = (await self.client.get_latest_blockhash(self.commitment)).value.blockhash
        transaction.sign(list(signers), blockhash)
        return transaction

    async def broadcast(
            self,
            transaction: AnyTransaction,
            signers: Sequence[Keypair],
            skip_preflight: bool,
    ) -> Signature:
        opts = TxOpts(
            skip_preflight=skip_preflight,
            skip_confirmation=True,
            preflight_commitment=self.commitment,
        )
        try:
            transaction = await self._sign(transaction, signers)
            resp = await self.client.send_raw_transaction(bytes(transaction), opts=opts)
        except RPCException as e:
            raise BroadcastError(f"Transaction was rejected: {e}", response=e.args[0] if e.args else None) from e
        except SignerError as e:
            raise BroadcastError(f"Transaction could not be signed: {e}") from e
        return resp.value

    async def await_confirmation(self, signature: Signature, commitment: Commitment) -> ConfirmationResult:
        # solana-py raises UnconfirmedTxError once its own polling gives up
        resp = await self.client.confirm_transaction(signature, commitment)
        return ConfirmationResult(err=signature_status_error(resp))


def signature_status_error(resp) -> Optional[Any]:
    """Pulls the raw ``err`` field out of a getSignatureStatuses response."""
    content = json.loads(resp.to_json())
    statuses = content["result"]["value"]
    if not statuses or statuses[0] is None:
        return None
    return statuses[0].get("err")


async def send_transaction(
        client: LedgerClient,
        tx: AnyTransaction,
        signers: Sequence[Keypair] = (),
        options: Optional[TransactionOptions] = None,
) -> Signature:
    """
    Broadcasts ``tx`` once and waits for it to reach ``options.commitment``.

    Args:
        client: The ledger transport.
        tx: A transaction built by the caller.
        signers: Keypairs to sign with. Passed to the transport untouched.
        options: Preflight and commitment settings. Defaults to TransactionOptions().
    Returns:
        The transaction signature.
    Raises:
        BroadcastError: the ledger rejected the transaction before inclusion.
        ExecutionError: the transaction was included but the program failed.
        solana.rpc.core.UnconfirmedTxError: from RpcLedgerClient, when the RPC
            client stops polling before ``options.commitment`` is reached.

    There is no retry. When this call is wrapped in a timeout and the timeout
    fires, or UnconfirmedTxError is raised, the transaction may or may not have
    landed; check the signature status before resubmitting.
    """
    if options is None:
        options = TransactionOptions()

    signature = await client.broadcast(tx, signers, options.skip_preflight)
    logger.info("Sent transaction %s, waiting for %s confirmation", signature, options.commitment)

    result = await client.await_confirmation(signature, options.commitment)
    if not result.ok:
        logger.warning("Transaction %s returned error: %r", signature, result.err)
        raise ExecutionError(signature, result.err)

    logger.info("Transaction %s confirmed", signature)
    return signature
