"""
amount_stability.py
--------------------
Amount stability check for a recurring group.

Stability is the relative range (max - min) / mean. A group is "stable"
when the relative range is strictly below the configured tolerance (15%).
The same measure with a tighter tolerance (5%) decides whether the expected
amount is "fixed" or "variable" on the suggestion.
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from config.config_loader import get_amount_stability_config


@dataclass(frozen=True)
class AmountStability:
    mean: float
    range: float
    relative_range: float | None     # None when the mean is not positive
    is_stable: bool
    is_fixed: bool

    @property
    def assessable(self) -> bool:
        return self.relative_range is not None


def assess_amount_stability(amounts: Sequence[float]) -> AmountStability:
    """
    Computes mean, range and stability flags for a list of amounts.

    A non-positive mean cannot be assessed: the group is reported as
    variable instead of raising.
    """
    cfg = get_amount_stability_config()
    values = np.asarray(amounts, dtype=float)

    if values.size == 0:
        return AmountStability(mean=0.0, range=0.0, relative_range=None, is_stable=False, is_fixed=False)

    mean_amt = float(np.mean(values))
    range_amt = float(np.max(values) - np.min(values))

    if mean_amt <= 0:
        return AmountStability(mean=mean_amt, range=range_amt, relative_range=None, is_stable=False, is_fixed=False)

    relative = range_amt / mean_amt
    return AmountStability(
        mean=mean_amt,
        range=range_amt,
        relative_range=relative,
        is_stable=relative < cfg["stable_tolerance"],
        is_fixed=relative < cfg["fixed_tolerance"],
    )
