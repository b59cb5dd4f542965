import logging

from solders.pubkey import Pubkey

from serum_dex.errors import StateLoadError
from serum_dex.utils.solana import fetch_account_data

from .state import EventQueue, OrderbookState, Slab, account_parser

logger = logging.getLogger(__name__)


async def _load(client, address: Pubkey, expected_type):
    data = await fetch_account_data(client, address)
    if data is None:
        raise StateLoadError(address, "account not found")
    try:
        account = account_parser(data)
    except Exception as e:
        raise StateLoadError(address, f"failed to decode {expected_type.__name__}: {e}") from e
    if not isinstance(account, expected_type):
        raise StateLoadError(
            address, f"expected {expected_type.__name__}, found {type(account).__name__}"
        )
    logger.debug("Loaded %s from %s", expected_type.__name__, address)
    return account


async def load_orderbook_state(client, address: Pubkey) -> OrderbookState:
    return await _load(client, address, OrderbookState)


async def load_slab(client, address: Pubkey) -> Slab:
    return await _load(client, address, Slab)


async def load_event_queue(client, address: Pubkey) -> EventQueue:
    return await _load(client, address, EventQueue)
