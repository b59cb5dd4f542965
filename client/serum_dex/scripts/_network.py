import argparse

from solders.pubkey import Pubkey

URLS = {
    "devnet": "https://api.devnet.solana.com",
    "dev": "https://api.devnet.solana.com",
    "localnet": "http://localhost:8899/",
    "local": "http://localhost:8899/",
    "mainnet": "https://api.mainnet-beta.solana.com/",
    "mainnet-beta": "https://api.mainnet-beta.solana.com/",
}


def rpc_url(network: str) -> str:
    # anything that is not a known cluster name is taken as an rpc url
    return URLS.get(network, network)


def pubkey_arg(value: str) -> Pubkey:
    try:
        return Pubkey.from_string(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a valid public key: {value}") from None


def add_common_args(ap: argparse.ArgumentParser):
    ap.add_argument("market", type=pubkey_arg)
    ap.add_argument("--network", default="devnet")
    ap.add_argument("--dex_program_id", type=pubkey_arg, default=None)
    ap.add_argument("--verbose", "-v", action="store_true")
