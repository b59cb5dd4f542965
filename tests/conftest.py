from typing import Dict, List, Optional, Sequence

import pytest
from solders.pubkey import Pubkey
from solders.signature import Signature

from serum_dex.aob.state import (
    AccountTag as ObAccountTag,
    Callback,
    EventKind,
    EventQueueHeader,
    FillEventData,
    InnerNode,
    LeafNode,
    NodeKind,
    OrderbookState,
    OutEventData,
    Side,
    SlabHeader,
    PADDED_SLAB_HEADER_LEN,
    SLOT_SIZE,
)
from serum_dex.config import DexConfig
from serum_dex.dex.market import MarketView
from serum_dex.dex.state import AccountTag as DexAccountTag, MarketState
from serum_dex.errors import BroadcastError
from serum_dex.utils.solana import ConfirmationResult, LedgerClient
from serum_dex.utils.spl import Mint, TokenAccount


class StubLedgerClient(LedgerClient):
    """In-memory ledger that records every call made against it."""

    def __init__(self, accounts: Optional[Dict[Pubkey, bytes]] = None):
        self.accounts = dict(accounts or {})
        self.fetches: List[Pubkey] = []
        self.broadcasts = []
        self.confirmations = []
        self.signature = Signature.new_unique()
        self.broadcast_error: Optional[Exception] = None
        self.execution_error = None

    async def fetch_account(self, address: Pubkey) -> Optional[bytes]:
        self.fetches.append(address)
        return self.accounts.get(address)

    async def broadcast(self, transaction, signers: Sequence, skip_preflight: bool) -> Signature:
        self.broadcasts.append((transaction, tuple(signers), skip_preflight))
        if self.broadcast_error is not None:
            raise self.broadcast_error
        return self.signature

    async def await_confirmation(self, signature, commitment) -> ConfirmationResult:
        self.confirmations.append((signature, commitment))
        return ConfirmationResult(err=self.execution_error)


def mint_bytes(decimals: int, initialized=True) -> bytes:
    return Mint.to_bytes(Mint(
        mint_authority_option=0,
        mint_authority=Pubkey.default(),
        supply=10 ** 12,
        decimals=decimals,
        is_initialized=initialized,
        freeze_authority_option=0,
        freeze_authority=Pubkey.default(),
    ))


def token_account_bytes(mint: Pubkey, owner: Pubkey, amount: int) -> bytes:
    return TokenAccount.to_bytes(TokenAccount(
        mint=mint,
        owner=owner,
        amount=amount,
        delegate_option=0,
        delegate=Pubkey.default(),
        state=1,
        is_native_option=0,
        is_native=0,
        delegated_amount=0,
        close_authority_option=0,
        close_authority=Pubkey.default(),
    ))


def market_state_bytes(state: MarketState) -> bytes:
    return MarketState.to_bytes(state)


def orderbook_state_bytes(state: OrderbookState) -> bytes:
    return OrderbookState.to_bytes(state)


def slab_bytes(tag, market: Pubkey, nodes: Dict[int, object], root: int = 0, capacity: int = 8) -> bytes:
    """Lays out a slab account with ``nodes`` placed at their slot index."""
    leaf_count = sum(isinstance(node, LeafNode) for node in nodes.values())
    header = SlabHeader(
        account_tag=tag,
        bump_index=len(nodes),
        free_list_len=0,
        free_list_head=0,
        callback_memory_offset=PADDED_SLAB_HEADER_LEN + capacity * SLOT_SIZE,
        callback_free_list_len=0,
        callback_free_list_head=0,
        callback_bump_index=0,
        root_node=root,
        leaf_count=leaf_count,
        market_address=market,
    )
    buffer = bytearray(PADDED_SLAB_HEADER_LEN + capacity * SLOT_SIZE)
    raw_header = SlabHeader.to_bytes(header)
    buffer[:len(raw_header)] = raw_header
    for idx, node in nodes.items():
        kind = NodeKind.INNER if isinstance(node, InnerNode) else NodeKind.LEAF
        start = PADDED_SLAB_HEADER_LEN + idx * SLOT_SIZE
        body = NodeKind.to_bytes(kind) + type(node).to_bytes(node)
        buffer[start:start + len(body)] = body
    return bytes(buffer)


def leaf(price: int, seq: int, qty: int) -> LeafNode:
    return LeafNode(key=(price << 64) | seq, callback_info_pt=0, base_quantity=qty)


def fill_event(maker: Pubkey, taker: Pubkey, base_size=10, quote_size=100) -> bytes:
    return EventKind.to_bytes(EventKind.FILL) + FillEventData.to_bytes(FillEventData(
        taker_side=Side.BID,
        maker_order_id=42,
        quote_size=quote_size,
        base_size=base_size,
        maker_callback_info=Callback(maker),
        taker_callback_info=Callback(taker),
    ))


def out_event(user: Pubkey, order_id=7, delete=True) -> bytes:
    return EventKind.to_bytes(EventKind.OUT) + OutEventData.to_bytes(OutEventData(
        side=Side.ASK,
        order_id=order_id,
        base_size=5,
        delete=delete,
        callback_info=Callback(user),
    ))


def event_queue_bytes(events: List[bytes], head=0, capacity=4, event_size=128, register=b"") -> bytes:
    header = EventQueueHeader(
        tag=ObAccountTag.EVENT_QUEUE,
        head=head,
        count=len(events),
        event_size=event_size,
        seq_num=len(events),
        register_size=len(register),
    )
    ring = bytearray(capacity * event_size)
    for idx, event in enumerate(events):
        start = ((head + idx) % capacity) * event_size
        ring[start:start + len(event)] = event
    return EventQueueHeader.to_bytes(header) + register + bytes(ring)


class MarketFixture:
    def __init__(self):
        self.address = Pubkey.new_unique()
        self.program_id = Pubkey.new_unique()
        self.base_mint = Pubkey.new_unique()
        self.quote_mint = Pubkey.new_unique()
        self.orderbook = Pubkey.new_unique()
        self.bids = Pubkey.new_unique()
        self.asks = Pubkey.new_unique()
        self.event_queue = Pubkey.new_unique()
        self.market_state = MarketState(
            tag=DexAccountTag.MARKET,
            signer_nonce=3,
            base_mint=self.base_mint,
            quote_mint=self.quote_mint,
            base_vault=Pubkey.new_unique(),
            quote_vault=Pubkey.new_unique(),
            orderbook=self.orderbook,
            admin=Pubkey.new_unique(),
            creation_timestamp=1_650_000_000,
            base_volume=0,
            quote_volume=0,
            accumulated_fees=0,
            min_base_order_size=1,
        )
        self.orderbook_state = OrderbookState(
            tag=ObAccountTag.MARKET,
            caller_authority=Pubkey.new_unique(),
            event_queue=self.event_queue,
            bids=self.bids,
            asks=self.asks,
            callback_id_len=32,
            callback_info_len=33,
            fee_budget=0,
            initial_lamports=0,
            min_base_order_size=1,
            price_bitmask=2 ** 64 - 1,
            cranker_reward=0,
        )

    def accounts(self) -> Dict[Pubkey, bytes]:
        return {
            self.address: market_state_bytes(self.market_state),
            self.orderbook: orderbook_state_bytes(self.orderbook_state),
            self.base_mint: mint_bytes(9),
            self.quote_mint: mint_bytes(6),
            self.bids: slab_bytes(ObAccountTag.BIDS, self.address, {}),
            self.asks: slab_bytes(ObAccountTag.ASKS, self.address, {}),
            self.event_queue: event_queue_bytes([]),
        }


@pytest.fixture
def market_fixture():
    return MarketFixture()


@pytest.fixture
def ledger(market_fixture):
    return StubLedgerClient(market_fixture.accounts())


@pytest.fixture
def rejecting_ledger():
    client = StubLedgerClient()
    client.broadcast_error = BroadcastError("Transaction simulation failed: Blockhash not found")
    return client


SRM_MINT = Pubkey.new_unique()
MSRM_MINT = Pubkey.new_unique()


def make_config(program_id, **kwargs) -> DexConfig:
    return DexConfig(
        program_id=program_id,
        primary_discount_mint=SRM_MINT,
        mega_discount_mint=MSRM_MINT,
        **kwargs,
    )


async def load_market(market_fixture, ledger, **kwargs) -> MarketView:
    kwargs.setdefault("config", make_config(market_fixture.program_id))
    return await MarketView.load(ledger, market_fixture.address, **kwargs)
