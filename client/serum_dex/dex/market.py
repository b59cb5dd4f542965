import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

from serum_dex import aob
from serum_dex.aob.state import AccountTag as OrderbookAccountTag
from serum_dex.aob.state import EventQueue, OrderbookState, Slab
from serum_dex.config import DexConfig
from serum_dex.dex import addrs as daddrs
from serum_dex.dex.fees import get_fee_tier
from serum_dex.dex.state import MarketState, decode_market_state
from serum_dex.errors import StateLoadError
from serum_dex.utils import solana as solana_utils
from serum_dex.utils.solana import AnyTransaction, LedgerClient, TransactionOptions
from serum_dex.utils.spl import get_mint_decimals, get_token_balance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeeDiscountKey:
    pubkey: Pubkey
    mint: Pubkey
    balance: int
    fee_tier: int


@dataclass(frozen=True)
class MarketView:
    """
    Read-only handle on one dex market.

    Everything here is fixed when the market is loaded. The orderbook sides
    and the event queue change with every trade, so they are fetched again on
    each ``load_*`` call instead.
    """
    address: Pubkey
    program_id: Pubkey
    market_state: MarketState
    orderbook_state: OrderbookState
    base_decimals: int
    quote_decimals: int
    options: TransactionOptions
    config: DexConfig

    @staticmethod
    async def load(
            client: LedgerClient,
            address: Pubkey,
            program_id: Optional[Pubkey] = None,
            options: Optional[TransactionOptions] = None,
            config: Optional[DexConfig] = None,
    ) -> "MarketView":
        if config is None:
            config = DexConfig.from_env(program_id)
        if program_id is None:
            program_id = config.program_id
        if program_id is None:
            raise ValueError("No dex program id given and the DEX environment variable is not set")
        if options is None:
            options = TransactionOptions()

        data = await solana_utils.fetch_account_data(client, address)
        market_state = decode_market_state(address, data)
        orderbook_state = await aob.load_orderbook_state(client, market_state.orderbook)

        base_decimals, quote_decimals = await asyncio.gather(
            get_mint_decimals(client, market_state.base_mint),
            get_mint_decimals(client, market_state.quote_mint),
        )
        logger.info(
            "Loaded market %s (base %s, quote %s)",
            address, market_state.base_mint, market_state.quote_mint,
        )
        return MarketView(
            address=address,
            program_id=program_id,
            market_state=market_state,
            orderbook_state=orderbook_state,
            base_decimals=base_decimals,
            quote_decimals=quote_decimals,
            options=options,
            config=config,
        )

    @property
    def base_mint(self) -> Pubkey:
        return self.market_state.base_mint

    @property
    def quote_mint(self) -> Pubkey:
        return self.market_state.quote_mint

    @property
    def base_vault(self) -> Pubkey:
        return self.market_state.base_vault

    @property
    def quote_vault(self) -> Pubkey:
        return self.market_state.quote_vault

    @property
    def orderbook_address(self) -> Pubkey:
        return self.market_state.orderbook

    @property
    def bids_address(self) -> Pubkey:
        return self.orderbook_state.bids

    @property
    def asks_address(self) -> Pubkey:
        return self.orderbook_state.asks

    @property
    def event_queue_address(self) -> Pubkey:
        return self.orderbook_state.event_queue

    async def _load_side(self, client: LedgerClient, address: Pubkey, tag: OrderbookAccountTag) -> Slab:
        slab = await aob.load_slab(client, address)
        if slab.header.account_tag != tag:
            raise StateLoadError(address, f"expected a {tag!r} slab, found {slab.header.account_tag!r}")
        return slab

    async def load_bids(self, client: LedgerClient) -> Slab:
        return await self._load_side(client, self.bids_address, OrderbookAccountTag.BIDS)

    async def load_asks(self, client: LedgerClient) -> Slab:
        return await self._load_side(client, self.asks_address, OrderbookAccountTag.ASKS)

    async def load_event_queue(self, client: LedgerClient) -> EventQueue:
        return await aob.load_event_queue(client, self.event_queue_address)

    def find_base_token_account_for_owner(self, owner: Pubkey) -> Pubkey:
        return daddrs.get_associated_token_address(owner, self.base_mint)

    def find_quote_token_account_for_owner(self, owner: Pubkey) -> Pubkey:
        return daddrs.get_associated_token_address(owner, self.quote_mint)

    def find_open_orders_account_for_owner(self, owner: Pubkey) -> Pubkey:
        return daddrs.get_open_orders_addr(self.address, owner, self.program_id)

    async def find_fee_discount_keys(self, client: LedgerClient, owner: Pubkey) -> List[FeeDiscountKey]:
        """
        Returns ``[primary, mega]`` discount token accounts of ``owner`` with
        their balances and the fee tier each one unlocks on its own.
        """
        schedule = self.config.fee_schedule
        primary_mint = self.config.primary_discount_mint
        mega_mint = self.config.mega_discount_mint
        primary_account = daddrs.get_associated_token_address(owner, primary_mint)
        mega_account = daddrs.get_associated_token_address(owner, mega_mint)

        primary_balance, mega_balance = await asyncio.gather(
            get_token_balance(client, primary_account),
            get_token_balance(client, mega_account),
        )
        return [
            FeeDiscountKey(
                pubkey=primary_account,
                mint=primary_mint,
                balance=primary_balance,
                fee_tier=get_fee_tier(primary_balance, 0, schedule),
            ),
            FeeDiscountKey(
                pubkey=mega_account,
                mint=mega_mint,
                balance=mega_balance,
                fee_tier=get_fee_tier(0, mega_balance, schedule),
            ),
        ]

    async def send_transaction(
            self,
            client: LedgerClient,
            transaction: AnyTransaction,
            signers: Sequence[Keypair] = (),
    ) -> Signature:
        return await solana_utils.send_transaction(client, transaction, signers, self.options)
