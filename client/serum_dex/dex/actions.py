from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

from serum_dex.aob.state import Side
from serum_dex.dex.market import MarketView
from serum_dex.utils.solana import AnyTransaction, LedgerClient


class TradeActions(ABC):
    """
    Order entry for a market. Instruction encoding lives with the on-chain
    program, so implementations are supplied by the caller; MarketView never
    depends on this class.
    """

    def __init__(self, market: MarketView):
        self.market = market

    @abstractmethod
    async def load_orders_for_owner(self, client: LedgerClient, owner: Pubkey) -> List[Any]:
        raise NotImplementedError

    @abstractmethod
    def filter_for_open_orders(self, orders: Sequence[Any], owner: Pubkey) -> List[Any]:
        raise NotImplementedError

    @abstractmethod
    def make_place_order_instruction(
            self,
            owner: Pubkey,
            side: Side,
            price: int,
            size: int,
            client_id: Optional[int] = None,
    ) -> Instruction:
        raise NotImplementedError

    @abstractmethod
    def make_place_order_transaction(
            self,
            owner: Pubkey,
            side: Side,
            price: int,
            size: int,
            client_id: Optional[int] = None,
    ) -> AnyTransaction:
        raise NotImplementedError

    @abstractmethod
    async def place_order(
            self,
            client: LedgerClient,
            owner: Keypair,
            side: Side,
            price: int,
            size: int,
            client_id: Optional[int] = None,
    ) -> Signature:
        raise NotImplementedError

    @abstractmethod
    async def cancel_order_by_client_id(self, client: LedgerClient, owner: Keypair, client_id: int) -> Signature:
        raise NotImplementedError

    @abstractmethod
    async def settle_funds(
            self,
            client: LedgerClient,
            owner: Keypair,
            base_wallet: Pubkey,
            quote_wallet: Pubkey,
    ) -> Signature:
        raise NotImplementedError

    @abstractmethod
    async def load_fills(self, client: LedgerClient, limit: int = 100) -> List[Any]:
        raise NotImplementedError
