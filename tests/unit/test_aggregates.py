#!/usr/bin/env python3
"""
Unit tests for the Facility and Vehicle aggregates
"""

import unittest
from decimal import Decimal

from parkledger.domain.aggregates import AggregateRoot, Facility, Vehicle
from parkledger.domain.models import (
    Money, Tariff, Timestamp, VehicleEnteredEvent, VehicleExitedEvent
)


class TestFacility(unittest.TestCase):

    def setUp(self):
        self.facility = Facility("P1", 2, Tariff(1, 1.5, 20), "EUR")

    def test_initial_state(self):
        self.assertIsInstance(self.facility, AggregateRoot)
        self.assertEqual(self.facility.free_spaces, 2)
        self.assertFalse(self.facility.is_full)
        self.assertEqual(str(self.facility), "P1 2 2")
        self.assertEqual(self.facility.billing_days, [])

    def test_positive_capacity_required(self):
        with self.assertRaises(ValueError):
            Facility("P0", 0, Tariff(1, 2, 3), "EUR")

    def test_occupy_and_release_raise_events(self):
        entry = Timestamp(1, 1, 2023, 10, 0)
        vehicle = Vehicle("AA-00-AA")
        vehicle.park("P1", entry, "EUR")
        self.facility.occupy_space("AA-00-AA", entry)
        self.assertEqual(self.facility.free_spaces, self.facility.capacity - 1)

        event = vehicle.leave(Timestamp(1, 1, 2023, 11, 0), Money(Decimal("4")))
        self.facility.release_space(event)

        events = self.facility.clear_events()
        self.assertEqual([type(e) for e in events], [VehicleEnteredEvent, VehicleExitedEvent])
        self.assertEqual(events[0].free_spaces, 1)
        self.assertEqual(events[1].cost.format(), "4.00")
        self.assertEqual(self.facility.clear_events(), [])
        self.assertEqual(self.facility.version, 3)

    def test_cannot_overfill_or_overrelease(self):
        entry = Timestamp(1, 1, 2023)
        self.facility.occupy_space("AA-00-AA", entry)
        self.facility.occupy_space("BB-00-BB", entry)
        self.assertTrue(self.facility.is_full)
        with self.assertRaises(ValueError):
            self.facility.occupy_space("CC-00-CC", entry)

        empty = Facility("P2", 1, Tariff(1, 2, 3), "EUR")
        event = Vehicle("AA-00-AA").park("P2", entry, "EUR")
        with self.assertRaises(ValueError):
            empty.release_space(event)

    def test_record_billing_groups_by_day(self):
        cost = Money(Decimal("2"))
        first = self.facility.record_billing("AA-00-AA", Timestamp(1, 1, 2023, 9, 0), cost)
        same = self.facility.record_billing("BB-00-BB", Timestamp(1, 1, 2023, 22, 0), cost)
        other = self.facility.record_billing("AA-00-AA", Timestamp(3, 1, 2023, 8, 0), cost)

        self.assertIs(first, same)
        self.assertIsNot(first, other)
        days = self.facility.billing_days
        self.assertEqual([day.exit_date.date_str() for day in days], ["01-01-2023", "03-01-2023"])
        self.assertEqual([day.total.format() for day in days], ["4.00", "2.00"])

        self.assertIs(self.facility.billing_day_for(Timestamp(1, 1, 2023)), first)
        self.assertIsNone(self.facility.billing_day_for(Timestamp(2, 1, 2023)))

        self.assertEqual(self.facility.discard_billing(), 2)
        self.assertEqual(self.facility.billing_days, [])


class TestVehicle(unittest.TestCase):

    def setUp(self):
        self.vehicle = Vehicle("AA-00-AA")

    def test_park_and_leave(self):
        self.assertFalse(self.vehicle.is_parked)
        self.vehicle.park("P1", Timestamp(1, 1, 2023, 10, 0), "EUR")
        self.assertTrue(self.vehicle.is_parked_at("P1"))
        self.assertIsNotNone(self.vehicle.open_event)

        with self.assertRaises(ValueError):
            self.vehicle.park("P2", Timestamp(1, 1, 2023, 10, 30), "EUR")

        event = self.vehicle.leave(Timestamp(1, 1, 2023, 11, 0), Money(Decimal("4")))
        self.assertFalse(self.vehicle.is_parked)
        self.assertIsNone(self.vehicle.open_event)
        self.assertEqual(event.cost.format(), "4.00")

        with self.assertRaises(ValueError):
            self.vehicle.leave(Timestamp(1, 1, 2023, 12, 0), Money.zero())

    def test_events_at(self):
        for facility_name, hour in [("P1", 8), ("P2", 10), ("P1", 12)]:
            self.vehicle.park(facility_name, Timestamp(1, 1, 2023, hour, 0), "EUR")
            self.vehicle.leave(Timestamp(1, 1, 2023, hour + 1, 0), Money.zero())

        self.assertEqual([e.entry.hour for e in self.vehicle.events_at("P1")], [8, 12])
        self.assertEqual(len(self.vehicle.events), 3)

    def test_purge_facility(self):
        self.vehicle.park("P1", Timestamp(1, 1, 2023, 8, 0), "EUR")
        self.vehicle.leave(Timestamp(1, 1, 2023, 9, 0), Money.zero())
        self.vehicle.park("P2", Timestamp(1, 1, 2023, 10, 0), "EUR")

        self.assertEqual(self.vehicle.purge_facility("P1"), 1)
        self.assertTrue(self.vehicle.is_parked_at("P2"))

        self.assertEqual(self.vehicle.purge_facility("P2"), 1)
        self.assertFalse(self.vehicle.is_parked)
        self.assertEqual(self.vehicle.events, [])


if __name__ == '__main__':
    unittest.main()
