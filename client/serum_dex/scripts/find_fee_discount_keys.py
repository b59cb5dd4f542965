import argparse
import asyncio
import logging

from serum_dex.dex.market import MarketView
from serum_dex.scripts._network import add_common_args, pubkey_arg, rpc_url
from serum_dex.utils.solana import RpcLedgerClient


async def run(args):
    async with RpcLedgerClient(rpc_url(args.network)) as client:
        market = await MarketView.load(client, args.market, program_id=args.dex_program_id)
        keys = await market.find_fee_discount_keys(client, args.owner)

    print(f"owner: {args.owner}")
    for key in keys:
        print(f"{key.mint}\n\taccount: {key.pubkey}\n\tbalance: {key.balance}\n\tfee tier: {key.fee_tier}")


def main():
    ap = argparse.ArgumentParser()
    add_common_args(ap)
    ap.add_argument("owner", type=pubkey_arg)
    args = ap.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    asyncio.run(run(args))


if __name__ == '__main__':
    main()
