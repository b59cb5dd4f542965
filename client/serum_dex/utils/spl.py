import logging
from typing import Optional

from podite import U8, U32, U64, Bool, pod
from solders.pubkey import Pubkey
from spl.token.constants import ACCOUNT_LEN, MINT_LEN

from serum_dex.errors import StateLoadError
from serum_dex.utils.pod import PodPubkey
from serum_dex.utils.solana import fetch_account_data

logger = logging.getLogger(__name__)


@pod
class Mint:
    mint_authority_option: U32
    mint_authority: PodPubkey
    supply: U64
    decimals: U8
    is_initialized: Bool
    freeze_authority_option: U32
    freeze_authority: PodPubkey


@pod
class TokenAccount:
    mint: PodPubkey
    owner: PodPubkey
    amount: U64
    delegate_option: U32
    delegate: PodPubkey
    state: U8
    is_native_option: U32
    is_native: U64
    delegated_amount: U64
    close_authority_option: U32
    close_authority: PodPubkey


def decode_mint(address: Pubkey, data: Optional[bytes]) -> Mint:
    if data is None:
        raise StateLoadError(address, "mint account not found")
    if len(data) < MINT_LEN:
        raise StateLoadError(address, f"mint account is {len(data)} bytes, expected {MINT_LEN}")
    mint = Mint.from_bytes(data[:MINT_LEN])
    if not mint.is_initialized:
        raise StateLoadError(address, "mint is not initialized")
    return mint


async def get_mint_decimals(client, mint: Pubkey) -> int:
    data = await fetch_account_data(client, mint)
    decimals = decode_mint(mint, data).decimals
    logger.debug("Mint %s has %d decimals", mint, decimals)
    return decimals


async def get_token_balance(client, token_account: Pubkey) -> int:
    """
    Returns the raw (base unit) balance held in ``token_account``.

    An account that does not exist yet holds nothing, so its balance is zero.
    """
    data = await fetch_account_data(client, token_account)
    if data is None:
        logger.debug("Token account %s does not exist, balance is 0", token_account)
        return 0
    if len(data) < ACCOUNT_LEN:
        raise StateLoadError(token_account, f"token account is {len(data)} bytes, expected {ACCOUNT_LEN}")
    return TokenAccount.from_bytes(data[:ACCOUNT_LEN]).amount
