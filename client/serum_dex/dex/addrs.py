import logging
from typing import NamedTuple, Sequence

from solders.pubkey import Pubkey

from serum_dex import program_ids as pids
from serum_dex.errors import DerivationExhausted

logger = logging.getLogger(__name__)

MAX_SEEDS = 16
MAX_SEED_LEN = 32
MAX_BUMP = 255


class ProgramDerivedAddress(NamedTuple):
    address: Pubkey
    bump: int


def is_on_curve(data: bytes) -> bool:
    """True if ``data`` decompresses to an ed25519 point, i.e. it could be a real signing key."""
    return Pubkey.from_bytes(bytes(data)).is_on_curve()


def _check_seeds(seeds: Sequence[bytes]):
    if len(seeds) > MAX_SEEDS:
        raise ValueError(f"At most {MAX_SEEDS} seeds are allowed, got {len(seeds)}")
    for seed in seeds:
        if len(seed) > MAX_SEED_LEN:
            raise ValueError(f"Max seed length exceeded: {len(seed)} > {MAX_SEED_LEN}")


def create_program_address(seeds: Sequence[bytes], program_id: Pubkey) -> Pubkey:
    _check_seeds(seeds)
    try:
        return Pubkey.create_program_address([bytes(seed) for seed in seeds], program_id)
    # solders raises its PubkeyError here, which is not importable
    except Exception as e:
        raise ValueError(f"Invalid seeds, address must fall off the curve: {e}") from e


def find_program_address(seeds: Sequence[bytes], program_id: Pubkey) -> ProgramDerivedAddress:
    seeds = [bytes(seed) for seed in seeds]
    # the bump is appended as one more seed
    _check_seeds(seeds + [b""])
    for bump in range(MAX_BUMP, -1, -1):
        try:
            address = create_program_address(seeds + [bytes([bump])], program_id)
        except ValueError:
            continue
        return ProgramDerivedAddress(address, bump)
    raise DerivationExhausted(seeds, program_id)


def get_associated_token_address(
        owner: Pubkey,
        mint: Pubkey,
        token_program_id: Pubkey = pids.SPL_TOKEN_PROGRAM_ID,
        associated_token_program_id: Pubkey = pids.ASSOCIATED_TOKEN_PROGRAM_ID,
) -> Pubkey:
    key, _ = find_program_address(
        seeds=[
            bytes(owner),
            bytes(token_program_id),
            bytes(mint),
        ],
        program_id=associated_token_program_id,
    )
    logger.debug("Associated token account for owner=%s mint=%s is %s", owner, mint, key)
    return key


def get_open_orders_addr(market: Pubkey, owner: Pubkey, program_id: Pubkey) -> Pubkey:
    return find_program_address([bytes(market), bytes(owner)], program_id)[0]
