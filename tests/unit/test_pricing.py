# File: tests/unit/test_pricing.py
"""
Pricing Strategy Unit Tests

Tests for the standard rental pricing formula.
"""

import unittest
from decimal import Decimal

from tests.helpers import COMPACT, ELECTRIC, TODAY, days_from_today
from ecoride.domain.models import RateTier, LocalCustomer, Vehicle, Driver
from ecoride.domain.aggregates import Booking, RentalPolicies
from ecoride.domain.pricing import StandardPricingStrategy


DEPOSIT = Decimal('5000')


class TestStandardPricingStrategy(unittest.TestCase):
    """Unit tests for StandardPricingStrategy.price"""

    def setUp(self):
        self.strategy = StandardPricingStrategy()

    def test_five_day_rental_with_overage(self):
        """Test 5 days, 800 km on the compact tier without a driver"""
        breakdown = self.strategy.price(COMPACT, 5, Decimal('800'), False, DEPOSIT)

        self.assertEqual(breakdown.base_price, Decimal('25000'))
        self.assertEqual(breakdown.overage_charge, Decimal('15000'))
        self.assertEqual(breakdown.discount, Decimal('0'))
        self.assertEqual(breakdown.driver_fee, Decimal('0'))
        self.assertEqual(breakdown.taxable_amount, Decimal('40000'))
        self.assertEqual(breakdown.tax, Decimal('4000'))
        self.assertEqual(breakdown.deposit_deducted, Decimal('5000'))
        self.assertEqual(breakdown.final_amount, Decimal('39000'))
        self.assertFalse(breakdown.is_refund)

    def test_seven_day_rental_gets_discount(self):
        """Test 7 days, 800 km: 10% off the base fee only"""
        breakdown = self.strategy.price(COMPACT, 7, Decimal('800'), False, DEPOSIT)

        self.assertEqual(breakdown.base_price, Decimal('35000'))
        self.assertEqual(breakdown.discount, Decimal('3500'))
        self.assertEqual(breakdown.overage_charge, Decimal('5000'))
        self.assertEqual(breakdown.taxable_amount, Decimal('36500'))
        self.assertEqual(breakdown.tax, Decimal('3650'))
        self.assertEqual(breakdown.final_amount, Decimal('35150'))

    def test_discount_threshold(self):
        """Test discount is zero below 7 days and exactly 10% of base from 7 days"""
        for days in range(1, 7):
            breakdown = self.strategy.price(COMPACT, days, Decimal('0'), False, DEPOSIT)
            self.assertEqual(breakdown.discount, Decimal('0'), msg=f"days={days}")

        for days in (7, 8, 30):
            breakdown = self.strategy.price(COMPACT, days, Decimal('0'), False, DEPOSIT)
            self.assertEqual(breakdown.discount, breakdown.base_price * Decimal('0.10'), msg=f"days={days}")

    def test_driver_fee_is_taxed(self):
        """Test 3 days with a driver: 2500 per day added before tax"""
        breakdown = self.strategy.price(COMPACT, 3, Decimal('200'), True, DEPOSIT)

        self.assertEqual(breakdown.driver_fee, Decimal('7500'))
        self.assertEqual(breakdown.overage_charge, Decimal('0'))
        self.assertEqual(breakdown.taxable_amount, Decimal('22500'))
        self.assertEqual(breakdown.tax, Decimal('2250'))
        self.assertEqual(breakdown.final_amount, Decimal('19750'))

    def test_other_tier(self):
        """Test the electric tier with its own allowance and tax rate"""
        breakdown = self.strategy.price(ELECTRIC, 2, Decimal('500'), False, DEPOSIT)

        self.assertEqual(breakdown.base_price, Decimal('20000'))
        self.assertEqual(breakdown.overage_charge, Decimal('4000'))
        self.assertEqual(breakdown.tax, Decimal('1920'))
        self.assertEqual(breakdown.final_amount, Decimal('20920'))

    def test_final_amount_identity(self):
        """Test final = base - discount + overage + driver + tax - deposit across inputs"""
        test_cases = [
            (COMPACT, 1, Decimal('0'), False),
            (COMPACT, 7, Decimal('1234.5'), True),
            (ELECTRIC, 10, Decimal('2500'), True),
            (ELECTRIC, 3, Decimal('100'), False),
        ]
        for tier, days, distance, driver in test_cases:
            b = self.strategy.price(tier, days, distance, driver, DEPOSIT)
            expected = (b.base_price - b.discount + b.overage_charge + b.driver_fee
                        + b.tax - b.deposit_deducted)
            self.assertEqual(b.final_amount, expected, msg=f"{tier.name} x {days}")

    def test_refund_when_deposit_exceeds_charges(self):
        """Test a negative final amount is a refund"""
        budget = RateTier("Budget", 1000, 100, 10, 0)
        breakdown = self.strategy.price(budget, 1, Decimal('0'), False, DEPOSIT)

        self.assertEqual(breakdown.final_amount, Decimal('-4000'))
        self.assertTrue(breakdown.is_refund)

    def test_breakdown_records_distance_and_currency(self):
        breakdown = self.strategy.price(COMPACT, 5, 800, False, DEPOSIT)
        self.assertEqual(breakdown.distance_used, Decimal('800'))
        self.assertEqual(breakdown.currency, "LKR")
        self.assertEqual(breakdown.money('final_amount').format(), "LKR 39,000.00")

    def test_custom_policies(self):
        """Test discount and driver fee come from the policies"""
        policies = RentalPolicies(discount_min_days=3, discount_rate=Decimal('0.2'),
                                  driver_daily_fee=Decimal('1000'))
        strategy = StandardPricingStrategy(policies)
        breakdown = strategy.price(COMPACT, 3, Decimal('0'), True, DEPOSIT)

        self.assertEqual(breakdown.discount, Decimal('3000'))
        self.assertEqual(breakdown.driver_fee, Decimal('3000'))

    def test_strategy_name(self):
        self.assertEqual(self.strategy.get_strategy_name(), "Standard")
        self.assertEqual(str(self.strategy), "Standard Strategy")


class TestPriceBooking(unittest.TestCase):
    """Unit tests for pricing a booking with its own figures"""

    def setUp(self):
        self.strategy = StandardPricingStrategy()
        self.customer = LocalCustomer("Nimal", "077", "n@example.com", "B1", "90V", id="C001")
        self.vehicle = Vehicle("Toyota Aqua", COMPACT, id="V001")

    def _booking(self, driver=None) -> Booking:
        return Booking(
            id="B0001",
            customer=self.customer,
            vehicle=self.vehicle,
            booking_date=days_from_today(5),
            rental_days=5,
            estimated_distance=Decimal('800'),
            driver=driver,
            creation_date=TODAY
        )

    def test_uses_estimate_before_completion(self):
        breakdown = self.strategy.price_booking(self._booking())
        self.assertEqual(breakdown.final_amount, Decimal('39000'))
        self.assertEqual(breakdown.distance_used, Decimal('800'))

    def test_explicit_distance_overrides_estimate(self):
        breakdown = self.strategy.price_booking(self._booking(), distance=Decimal('400'))
        self.assertEqual(breakdown.overage_charge, Decimal('0'))
        self.assertEqual(breakdown.final_amount, Decimal('22500'))

    def test_driver_detected_from_booking(self):
        driver = Driver("Kamal", "DL-1", "071", id="D001")
        breakdown = self.strategy.price_booking(self._booking(driver))
        self.assertEqual(breakdown.driver_fee, Decimal('12500'))


if __name__ == '__main__':
    unittest.main()
