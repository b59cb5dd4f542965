from dataclasses import dataclass, field
from io import BytesIO
from typing import Iterator, List, Union

from podite import U8, U32, U64, U128, Bool, Enum, pod, BYTES_CATALOG, FORMAT_BORSH
from solders.pubkey import Pubkey

from serum_dex.utils.pod import PodPubkey

from .base import AccountTag, Side

EVENT_QUEUE_HEADER_LEN = 37


@pod
class EventQueueHeader:
    tag: AccountTag
    head: U64
    count: U64
    event_size: U64
    seq_num: U64
    register_size: U32


@pod
class EventKind(Enum[U8]):
    FILL = None
    OUT = None


@pod
class Callback:
    user_account: PodPubkey


@pod
class FillEventData:
    taker_side: Side
    maker_order_id: U128
    quote_size: U64
    base_size: U64
    maker_callback_info: Callback
    taker_callback_info: Callback


@pod
class OutEventData:
    side: Side
    order_id: U128
    base_size: U64
    delete: Bool
    callback_info: Callback


@dataclass
class Event:
    kind: EventKind
    event_data: Union[FillEventData, OutEventData]

    @classmethod
    def from_bytes(cls, data: bytes) -> "Event":
        buffer = BytesIO(data)
        kind = BYTES_CATALOG.unpack_partial(EventKind, buffer, format=FORMAT_BORSH)
        data_type = FillEventData if kind == EventKind.FILL else OutEventData
        event_data = BYTES_CATALOG.unpack_partial(data_type, buffer, format=FORMAT_BORSH)
        return Event(kind, event_data)

    def get_user_accounts(self) -> List[Pubkey]:
        if isinstance(self.event_data, FillEventData):
            return [
                self.event_data.maker_callback_info.user_account,
                self.event_data.taker_callback_info.user_account,
            ]
        return [self.event_data.callback_info.user_account]


@dataclass
class EventQueue:
    header: EventQueueHeader
    register: bytes = field(repr=False)
    buffer: bytes = field(repr=False)

    @classmethod
    def from_bytes(cls, data: bytes) -> "EventQueue":
        if len(data) < EVENT_QUEUE_HEADER_LEN:
            raise ValueError(f"Event queue account too small: {len(data)} bytes")
        header = EventQueueHeader.from_bytes(data[:EVENT_QUEUE_HEADER_LEN], format=FORMAT_BORSH)
        if header.event_size == 0:
            raise ValueError("Event queue has a zero event size")
        register_end = EVENT_QUEUE_HEADER_LEN + header.register_size
        if len(data) < register_end:
            raise ValueError("Event queue register runs past the end of the account")
        queue = EventQueue(header, bytes(data[EVENT_QUEUE_HEADER_LEN:register_end]), bytes(data[register_end:]))
        if header.count > queue.capacity:
            raise ValueError(f"Event queue holds {header.count} events but has room for {queue.capacity}")
        return queue

    @property
    def capacity(self) -> int:
        return len(self.buffer) // self.header.event_size

    def __len__(self):
        return self.header.count

    def __getitem__(self, idx: int) -> Event:
        if not 0 <= idx < self.header.count:
            raise IndexError("Index out of bound")

        size = self.header.event_size
        # head and idx count events, the ring wraps at capacity
        slot = (self.header.head + idx) % self.capacity
        start = slot * size
        return Event.from_bytes(self.buffer[start:start + size])

    def __iter__(self) -> Iterator[Event]:
        for idx in range(len(self)):
            yield self[idx]
