# File: src/ecoride/domain/rates.py
"""
Rate Schedule for EcoRide Car Rental System

A fixed catalogue of rate tiers plus the two pure calculations every
pricing strategy builds on: distance overage and tax.
"""

from typing import Iterable, Optional, Sequence, Tuple
from decimal import Decimal

from .models import RateTier, to_decimal
from .exceptions import OutOfRangeError


STANDARD_RATE_TIERS: Tuple[RateTier, ...] = (
    RateTier("Compact Petrol", Decimal('5000'), Decimal('100'), Decimal('50'), Decimal('10')),
    RateTier("Hybrid Midsize", Decimal('7500'), Decimal('150'), Decimal('60'), Decimal('12')),
    RateTier("Electric Premium", Decimal('10000'), Decimal('200'), Decimal('40'), Decimal('8')),
    RateTier("Luxury SUV", Decimal('15000'), Decimal('250'), Decimal('75'), Decimal('15')),
)


class RateSchedule:
    """
    Immutable catalogue of rate tiers addressed by zero-based index
    """

    def __init__(self, tiers: Optional[Iterable[RateTier]] = None):
        self._tiers: Tuple[RateTier, ...] = tuple(tiers) if tiers is not None else STANDARD_RATE_TIERS
        if not self._tiers:
            raise ValueError("Rate schedule needs at least one tier")

    @property
    def tiers(self) -> Sequence[RateTier]:
        return self._tiers

    def __len__(self) -> int:
        return len(self._tiers)

    def lookup(self, tier_index: int) -> RateTier:
        """
        Get the tier at the given index
        Raises: OutOfRangeError if index is not in the catalogue
        """
        if not isinstance(tier_index, int) or isinstance(tier_index, bool) \
                or not 0 <= tier_index < len(self._tiers):
            raise OutOfRangeError(
                f"Rate tier index must be between 0 and {len(self._tiers) - 1}, got: {tier_index}"
            )
        return self._tiers[tier_index]

    @staticmethod
    def compute_overage(tier: RateTier, total_distance: Decimal, days: int) -> Decimal:
        """Charge for distance beyond the tier's free allowance for the rental"""
        allowance = tier.free_distance_per_day * days
        excess = to_decimal(total_distance) - allowance
        if excess <= Decimal('0'):
            return Decimal('0')
        return excess * tier.overage_fee_per_unit

    @staticmethod
    def compute_tax(tier: RateTier, taxable_amount: Decimal) -> Decimal:
        return to_decimal(taxable_amount) * tier.tax_rate_percent / Decimal('100')
