from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Optional, Tuple

SRM_DECIMALS = 6
MSRM_DECIMALS = 0


@dataclass(frozen=True)
class FeeSchedule:
    """
    Fee tiers unlocked by holding discount tokens.

    ``primary_thresholds`` are ascending raw balances: holding at least
    ``primary_thresholds[i]`` primary tokens gives tier ``i + 1``. Holding at
    least ``mega_threshold`` mega tokens gives ``mega_tier`` outright.
    """
    primary_thresholds: Tuple[int, ...]
    mega_threshold: int = 1
    mega_tier: Optional[int] = field(default=None)

    def __post_init__(self):
        thresholds = tuple(int(t) for t in self.primary_thresholds)
        if any(lo >= hi for lo, hi in zip(thresholds, thresholds[1:])):
            raise ValueError(f"Fee tier thresholds must be strictly ascending: {thresholds}")
        if (thresholds and thresholds[0] < 1) or self.mega_threshold < 1:
            raise ValueError("An empty balance must stay in the lowest tier")
        object.__setattr__(self, "primary_thresholds", thresholds)
        if self.mega_tier is None:
            object.__setattr__(self, "mega_tier", len(thresholds) + 1)
        elif self.mega_tier < len(thresholds):
            raise ValueError("The mega tier cannot rank below the highest primary tier")


DEFAULT_FEE_SCHEDULE = FeeSchedule(
    primary_thresholds=tuple(
        whole * 10 ** SRM_DECIMALS for whole in (100, 1_000, 10_000, 100_000, 1_000_000)
    ),
    mega_threshold=1 * 10 ** MSRM_DECIMALS,
)


def get_fee_tier(
        primary_balance: int,
        mega_balance: int,
        schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE,
) -> int:
    if primary_balance < 0 or mega_balance < 0:
        raise ValueError(f"Balances must be non-negative, got {primary_balance} and {mega_balance}")
    if mega_balance >= schedule.mega_threshold:
        return schedule.mega_tier
    # a balance equal to a threshold reaches that tier
    return bisect_right(schedule.primary_thresholds, primary_balance)
