import argparse
import asyncio
import logging

from serum_dex.aob.state import Side
from serum_dex.dex.market import MarketView
from serum_dex.scripts._network import add_common_args, rpc_url
from serum_dex.utils.solana import RpcLedgerClient


async def run(args):
    async with RpcLedgerClient(rpc_url(args.network)) as client:
        market = await MarketView.load(client, args.market, program_id=args.dex_program_id)
        bids, asks = await asyncio.gather(market.load_bids(client), market.load_asks(client))

    print(f"market: {market.address}")
    print(f"base: {market.base_mint} ({market.base_decimals} decimals)")
    print(f"quote: {market.quote_mint} ({market.quote_decimals} decimals)")
    print("\nAsks")
    print(asks.order_bookify(Side.ASK, group=args.group).to_string())
    print("\nBids")
    print(bids.order_bookify(Side.BID, group=args.group).to_string())


def main():
    ap = argparse.ArgumentParser()
    add_common_args(ap)
    ap.add_argument("--group", action="store_true", help="aggregate orders by price level")
    args = ap.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    asyncio.run(run(args))


if __name__ == '__main__':
    main()
