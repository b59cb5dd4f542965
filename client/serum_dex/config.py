from dataclasses import dataclass
from typing import Optional

from solders.pubkey import Pubkey

from serum_dex import program_ids as pids
from serum_dex.dex.fees import DEFAULT_FEE_SCHEDULE, FeeSchedule


@dataclass(frozen=True)
class DexConfig:
    program_id: Optional[Pubkey]
    primary_discount_mint: Pubkey
    mega_discount_mint: Pubkey
    fee_schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE

    @staticmethod
    def from_env(program_id: Optional[Pubkey] = None) -> "DexConfig":
        return DexConfig(
            program_id=program_id if program_id is not None else pids.DEX_PROGRAM_ID,
            primary_discount_mint=pids.SRM_MINT,
            mega_discount_mint=pids.MSRM_MINT,
        )
