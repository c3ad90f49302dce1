# File: tests/unit/test_models.py
"""
Domain Model Unit Tests

Tests for value objects, customers, rental assets, invoices and events.
"""

import unittest
from decimal import Decimal

from tests.helpers import COMPACT
from ecoride.domain.models import (
    Money, Breakdown, LocalCustomer, ForeignCustomer, Vehicle, Driver, Invoice,
    VehicleStatus, DriverStatus, BookingStatus, CustomerType, AssetKind,
    BookingCreatedEvent, AssetStatusChangedEvent, EventType, to_decimal
)
from ecoride.domain.exceptions import ConflictError


# ============================================================================
# VALUE OBJECTS
# ============================================================================

class TestMoney(unittest.TestCase):
    """Unit tests for Money value object"""

    def test_arithmetic(self):
        a = Money(Decimal('100.50'))
        b = Money(Decimal('50.25'))
        self.assertEqual((a + b).amount, Decimal('150.75'))
        self.assertEqual((a - b).amount, Decimal('50.25'))
        self.assertEqual((a * 2).amount, Decimal('201.00'))

    def test_negative_amount_is_a_credit(self):
        credit = Money(Decimal('10')) - Money(Decimal('25'))
        self.assertTrue(credit.is_negative)
        self.assertEqual(credit.format(), "LKR -15.00")

    def test_currency_mismatch(self):
        with self.assertRaises(ValueError):
            Money(Decimal('1'), "LKR") + Money(Decimal('1'), "USD")

    def test_invalid_currency_code(self):
        with self.assertRaises(ValueError):
            Money(Decimal('1'), "RUPEES")

    def test_float_input_is_exact(self):
        self.assertEqual(Money(0.1).amount, Decimal('0.1'))
        self.assertEqual(to_decimal(2.5), Decimal('2.5'))


class TestBreakdown(unittest.TestCase):
    """Unit tests for Breakdown value object"""

    def test_to_dict_uses_strings(self):
        breakdown = Breakdown(
            base_price=Decimal('25000'),
            overage_charge=Decimal('15000'),
            discount=Decimal('0'),
            driver_fee=Decimal('0'),
            tax=Decimal('4000'),
            deposit_deducted=Decimal('5000'),
            final_amount=Decimal('39000'),
            distance_used=Decimal('800')
        )
        data = breakdown.to_dict()
        self.assertEqual(data["final_amount"], "39000")
        self.assertEqual(data["currency"], "LKR")
        self.assertEqual(breakdown.taxable_amount, Decimal('40000'))


# ============================================================================
# CUSTOMERS
# ============================================================================

class TestCustomer(unittest.TestCase):
    """Unit tests for local and foreign customers"""

    def setUp(self):
        self.local = LocalCustomer(
            "Nimal Perera", "0771234567", "nimal@example.com", "B1234567", "901234567V", id="C001"
        )
        self.foreign = ForeignCustomer(
            "Anna Schmidt", "+49301234567", "anna@example.de", "DE998877", "C01X00T47", id="C002"
        )

    def test_customer_types(self):
        self.assertEqual(self.local.customer_type, CustomerType.LOCAL)
        self.assertEqual(self.local.identity_document, "901234567V")
        self.assertEqual(self.foreign.customer_type, CustomerType.FOREIGN)
        self.assertEqual(self.foreign.identity_document, "C01X00T47")

    def test_update_contact_details(self):
        self.local.update_contact_details(contact_no="0779999999", email="nimal.p@example.com")
        self.assertEqual(self.local.contact_no, "0779999999")
        self.assertEqual(self.local.email, "nimal.p@example.com")

    def test_update_keeps_values_for_blank_fields(self):
        """Test empty or omitted values keep the current details"""
        self.local.update_contact_details(contact_no="", email=None)
        self.assertEqual(self.local.contact_no, "0771234567")
        self.assertEqual(self.local.email, "nimal@example.com")

        self.local.update_contact_details(contact_no="   ")
        self.assertEqual(self.local.contact_no, "0771234567")

    def test_to_dict(self):
        data = self.foreign.to_dict()
        self.assertEqual(data["id"], "C002")
        self.assertEqual(data["customer_type"], "foreign")
        self.assertEqual(data["identity_document"], "C01X00T47")


# ============================================================================
# RENTAL ASSETS
# ============================================================================

class TestVehicle(unittest.TestCase):
    """Unit tests for vehicle status transitions"""

    def setUp(self):
        self.vehicle = Vehicle("Toyota Aqua", COMPACT, id="V001")

    def test_new_vehicle_is_available(self):
        self.assertEqual(self.vehicle.status, VehicleStatus.AVAILABLE)
        self.assertTrue(self.vehicle.is_available)
        self.assertIs(self.vehicle.rate_tier, COMPACT)

    def test_reserve_and_release(self):
        self.vehicle.reserve()
        self.assertEqual(self.vehicle.status, VehicleStatus.RESERVED)
        self.assertFalse(self.vehicle.is_available)

        self.vehicle.release()
        self.assertEqual(self.vehicle.status, VehicleStatus.AVAILABLE)

    def test_reserve_twice_conflicts(self):
        self.vehicle.reserve()
        with self.assertRaises(ConflictError):
            self.vehicle.reserve()

    def test_release_available_conflicts(self):
        with self.assertRaises(ConflictError):
            self.vehicle.release()

    def test_maintenance_override(self):
        """Test AVAILABLE <-> UNDER_MAINTENANCE and its effect on reservation"""
        self.vehicle.set_status(VehicleStatus.UNDER_MAINTENANCE)
        self.assertFalse(self.vehicle.is_available)
        with self.assertRaises(ConflictError):
            self.vehicle.reserve()

        self.vehicle.set_status(VehicleStatus.AVAILABLE)
        self.assertTrue(self.vehicle.is_available)

    def test_override_rejected_while_reserved(self):
        self.vehicle.reserve()
        with self.assertRaises(ConflictError):
            self.vehicle.set_status(VehicleStatus.UNDER_MAINTENANCE)
        self.assertEqual(self.vehicle.status, VehicleStatus.RESERVED)

    def test_cannot_override_to_reserved(self):
        with self.assertRaises(ConflictError):
            self.vehicle.set_status(VehicleStatus.RESERVED)

    def test_empty_model_rejected(self):
        with self.assertRaises(ValueError):
            Vehicle("  ", COMPACT, id="V009")


class TestDriver(unittest.TestCase):
    """Unit tests for driver status transitions"""

    def setUp(self):
        self.driver = Driver("Kamal Silva", "DL-5566", "0719876543", id="D001")

    def test_assign_and_release(self):
        self.assertTrue(self.driver.is_available)
        self.driver.assign()
        self.assertEqual(self.driver.status, DriverStatus.ASSIGNED)
        self.driver.release()
        self.assertEqual(self.driver.status, DriverStatus.AVAILABLE)

    def test_on_leave_cannot_be_assigned(self):
        self.driver.set_status(DriverStatus.ON_LEAVE)
        with self.assertRaises(ConflictError):
            self.driver.assign()

    def test_override_rejected_while_assigned(self):
        self.driver.assign()
        with self.assertRaises(ConflictError):
            self.driver.set_status(DriverStatus.ON_LEAVE)

    def test_to_dict(self):
        self.assertEqual(self.driver.to_dict()["status"], "AVAILABLE")


class TestEntityIdentity(unittest.TestCase):

    def test_equality_by_id_and_type(self):
        a = Driver("A", "L1", "1", id="D001")
        b = Driver("B", "L2", "2", id="D001")
        self.assertEqual(a, b)
        self.assertEqual(len({a, b}), 1)
        self.assertNotEqual(a, Vehicle("Car", COMPACT, id="D001"))


# ============================================================================
# INVOICE
# ============================================================================

class TestInvoice(unittest.TestCase):
    """Unit tests for the passive invoice holder"""

    def _breakdown(self, final: str) -> Breakdown:
        return Breakdown(
            base_price=Decimal('5000'), overage_charge=Decimal('0'), discount=Decimal('0'),
            driver_fee=Decimal('0'), tax=Decimal('500'), deposit_deducted=Decimal('5000'),
            final_amount=Decimal(final)
        )

    def test_unpriced_invoice(self):
        invoice = Invoice("INV-B0001", "B0001")
        self.assertFalse(invoice.is_populated)
        with self.assertRaises(ValueError):
            invoice.present()
        self.assertEqual(invoice.to_dict(), {"invoice_id": "INV-B0001", "booking_id": "B0001"})

    def test_populate_replaces_all_figures(self):
        invoice = Invoice("INV-B0001", "B0001")
        invoice.populate(self._breakdown('500'))
        self.assertEqual(invoice.final_amount, Decimal('500'))

        invoice.populate(self._breakdown('750'))
        self.assertEqual(invoice.final_amount, Decimal('750'))
        self.assertEqual(invoice.tax, Decimal('500'))
        self.assertEqual(invoice.deposit_deducted, Decimal('5000'))


# ============================================================================
# ENUMS AND EVENTS
# ============================================================================

class TestEnumsAndEvents(unittest.TestCase):

    def test_terminal_booking_states(self):
        self.assertFalse(BookingStatus.RESERVED.is_terminal)
        self.assertTrue(BookingStatus.COMPLETED.is_terminal)
        self.assertTrue(BookingStatus.CANCELLED.is_terminal)
        self.assertEqual(str(BookingStatus.RESERVED), "RESERVED")

    def test_event_serialization(self):
        event = BookingCreatedEvent("B0001", "C001", "V001", None, Decimal('39000'))
        data = event.to_dict()
        self.assertEqual(data["event_type"], "booking.created")
        self.assertEqual(data["data"]["final_amount"], "39000")
        self.assertIsNone(data["data"]["driver_id"])
        self.assertTrue(event.event_id)

    def test_asset_event(self):
        event = AssetStatusChangedEvent("V001", AssetKind.VEHICLE, "AVAILABLE", "UNDER_MAINTENANCE")
        self.assertEqual(event.event_type, EventType.ASSET_STATUS_CHANGED)
        self.assertEqual(event.data()["kind"], "vehicle")


if __name__ == '__main__':
    unittest.main()
