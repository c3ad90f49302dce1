# File: src/ecoride/domain/pricing.py
"""
Strategy Pattern Implementation for Rental Pricing

A pricing strategy turns a rate tier, a rental length, a distance and the
driver flag into an itemized Breakdown. The standard strategy reproduces the
published EcoRide formula:

    base      = daily_fee * days
    overage   = max(0, distance - free_per_day * days) * overage_fee
    driver    = driver_daily_fee * days               (driver included only)
    discount  = base * discount_rate                  (days >= discount_min_days)
    taxable   = base - discount + overage + driver
    tax       = taxable * tax_rate / 100
    final     = taxable + tax - deposit               (negative means refund)
"""

from abc import ABC, abstractmethod
from typing import Optional
from decimal import Decimal
import logging

from .models import RateTier, Breakdown, to_decimal
from .rates import RateSchedule
from .aggregates import Booking, RentalPolicies


# ============================================================================
# STRATEGY INTERFACE
# ============================================================================

class PricingStrategy(ABC):
    """
    Abstract base class for pricing strategies
    Defines the interface for rental fee calculation
    """

    def __init__(self, policies: Optional[RentalPolicies] = None):
        self.policies = policies or RentalPolicies()
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def price(
        self,
        tier: RateTier,
        rental_days: int,
        distance: Decimal,
        driver_included: bool,
        deposit: Decimal
    ) -> Breakdown:
        """
        Compute the full monetary breakdown for one rental
        Inputs are pre-validated by the caller
        """
        pass

    def price_booking(self, booking: Booking, distance: Optional[Decimal] = None) -> Breakdown:
        """Price a booking with its own figures; distance defaults to the pricing distance"""
        return self.price(
            booking.vehicle.rate_tier,
            booking.rental_days,
            booking.pricing_distance if distance is None else distance,
            booking.has_driver,
            booking.deposit
        )

    def get_strategy_name(self) -> str:
        return self.__class__.__name__.replace("PricingStrategy", "") or "Pricing"

    def __str__(self) -> str:
        return f"{self.get_strategy_name()} Strategy"


# ============================================================================
# CONCRETE STRATEGIES
# ============================================================================

class StandardPricingStrategy(PricingStrategy):
    """
    Strategy: Standard EcoRide rental pricing
    - Day-count discount applies to the base fee only
    - Tax is charged on the discounted net including overage and driver fee
    - Deposit is deducted after tax
    """

    def driver_fee(self, rental_days: int, driver_included: bool) -> Decimal:
        if not driver_included:
            return Decimal('0')
        return self.policies.driver_daily_fee * rental_days

    def discount(self, base: Decimal, rental_days: int) -> Decimal:
        if rental_days >= self.policies.discount_min_days:
            return base * self.policies.discount_rate
        return Decimal('0')

    def price(
        self,
        tier: RateTier,
        rental_days: int,
        distance: Decimal,
        driver_included: bool,
        deposit: Decimal
    ) -> Breakdown:
        distance = to_decimal(distance)
        deposit = to_decimal(deposit)

        base = tier.daily_fee * rental_days
        overage = RateSchedule.compute_overage(tier, distance, rental_days)
        driver_fee = self.driver_fee(rental_days, driver_included)
        discount = self.discount(base, rental_days)

        taxable = base - discount + overage + driver_fee
        tax = RateSchedule.compute_tax(tier, taxable)
        final_amount = taxable + tax - deposit

        self.logger.debug(
            f"Priced {tier.name} x {rental_days} day(s), {distance} km: "
            f"base={base} overage={overage} driver={driver_fee} "
            f"discount={discount} tax={tax} final={final_amount}"
        )

        return Breakdown(
            base_price=base,
            overage_charge=overage,
            discount=discount,
            driver_fee=driver_fee,
            tax=tax,
            deposit_deducted=deposit,
            final_amount=final_amount,
            distance_used=distance,
            currency=self.policies.currency
        )
