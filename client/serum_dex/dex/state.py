from typing import Optional

from podite import I64, U64, Enum, pod, FORMAT_BORSH
from solders.pubkey import Pubkey

from serum_dex.errors import StateLoadError
from serum_dex.utils.pod import PodPubkey


@pod
class AccountTag(Enum[U64]):
    UNINITIALIZED = None
    MARKET = None
    USER_ACCOUNT = None
    CLOSED = None


@pod
class MarketState:
    tag: AccountTag
    signer_nonce: U64
    base_mint: PodPubkey
    quote_mint: PodPubkey
    base_vault: PodPubkey
    quote_vault: PodPubkey
    orderbook: PodPubkey
    admin: PodPubkey
    creation_timestamp: I64
    base_volume: U64
    quote_volume: U64
    accumulated_fees: U64
    min_base_order_size: U64


MARKET_STATE_LEN = MarketState.calc_max_size()


def decode_market_state(address: Pubkey, data: Optional[bytes]) -> MarketState:
    if data is None:
        raise StateLoadError(address, "market account not found")
    if len(data) < MARKET_STATE_LEN:
        raise StateLoadError(address, f"market account is {len(data)} bytes, expected {MARKET_STATE_LEN}")
    tag = int.from_bytes(data[:8], "little")
    if tag != int(AccountTag.MARKET):
        raise StateLoadError(address, f"account tag {tag} is not a market")
    return MarketState.from_bytes(data[:MARKET_STATE_LEN], format=FORMAT_BORSH)
