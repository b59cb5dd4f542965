from podite import FORMAT_BORSH

from .base import *
from .event_queue import *
from .market_state import *
from .slab import *


def account_parser(data: bytes):
    if not data:
        raise ValueError("Empty orderbook account")
    tag = data[0]
    if tag == int(AccountTag.UNINITIALIZED):
        return None
    elif tag == int(AccountTag.MARKET):
        return OrderbookState.from_bytes(data[:OrderbookState.calc_max_size()], format=FORMAT_BORSH)
    elif tag == int(AccountTag.EVENT_QUEUE):
        return EventQueue.from_bytes(data)
    elif tag in (int(AccountTag.BIDS), int(AccountTag.ASKS)):
        return Slab.from_bytes(data)
    raise ValueError(f"Unknown orderbook account tag {tag}")
