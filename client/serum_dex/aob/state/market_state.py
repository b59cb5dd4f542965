from podite import U64, pod

from serum_dex.utils.pod import PodPubkey

from .base import AccountTag


@pod
class OrderbookState:
    tag: AccountTag
    caller_authority: PodPubkey
    event_queue: PodPubkey
    bids: PodPubkey
    asks: PodPubkey
    callback_id_len: U64
    callback_info_len: U64
    fee_budget: U64
    initial_lamports: U64
    min_base_order_size: U64
    price_bitmask: U64
    cranker_reward: U64
