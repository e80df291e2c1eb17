from __future__ import annotations

import unittest
from datetime import date

from app.parsing.source_records import (
    normalize_inspection_id,
    normalize_source_row,
    parse_inspection_date,
    parse_risk_level,
)


def _row(**overrides: object) -> dict:
    row = {
        "license_": "2589631",
        "dba_name": "TACO PALACE",
        "aka_name": "TACO PALACE #2",
        "facility_type": "Restaurant",
        "risk": "Risk 1 (High)",
        "address": "123 N STATE ST ",
        "city": "CHICAGO",
        "state": "IL",
        "zip": "60602",
        "latitude": "41.88",
        "longitude": "-87.62",
        "inspection_id": "2627108",
        "inspection_date": "2024-11-14T00:00:00.000",
        "inspection_type": "Canvass",
        "results": "Pass",
        "violations": "38. INSECTS - Comments: NONE",
    }
    row.update(overrides)
    return row


class TestNormalizeInspectionId(unittest.TestCase):
    def test_synthetic_and_plain_ids_share_one_identifier(self) -> None:
        self.assertEqual(normalize_inspection_id("2627108"), "2627108")
        self.assertEqual(normalize_inspection_id("2627108-2024-11-14T00:00:00.000"), "2627108")
        self.assertEqual(normalize_inspection_id(" 2627108 "), "2627108")

    def test_falls_back_to_trimmed_original_without_digits(self) -> None:
        self.assertEqual(normalize_inspection_id(" abc-2024 "), "abc-2024")

    def test_accepts_integers(self) -> None:
        self.assertEqual(normalize_inspection_id(2627108), "2627108")


class TestParsers(unittest.TestCase):
    def test_risk_levels(self) -> None:
        self.assertEqual(parse_risk_level("Risk 1 (High)"), 1)
        self.assertEqual(parse_risk_level("Risk 2 (Medium)"), 2)
        self.assertEqual(parse_risk_level("Risk 3 (Low)"), 3)
        self.assertEqual(parse_risk_level("All"), 2)
        self.assertEqual(parse_risk_level(None), 2)

    def test_inspection_dates(self) -> None:
        self.assertEqual(parse_inspection_date("2024-11-14T00:00:00.000"), date(2024, 11, 14))
        self.assertEqual(parse_inspection_date("2024-11-14"), date(2024, 11, 14))
        self.assertIsNone(parse_inspection_date("yesterday"))
        self.assertIsNone(parse_inspection_date(None))


class TestNormalizeSourceRow(unittest.TestCase):
    def test_normalizes_complete_row(self) -> None:
        record = normalize_source_row(_row())

        assert record is not None
        self.assertEqual(record.license_number, "2589631")
        self.assertEqual(record.inspection_id, "2627108")
        self.assertEqual(record.inspection_date, date(2024, 11, 14))
        self.assertEqual(record.risk_level, 1)
        self.assertEqual(record.address, "123 N STATE ST")
        self.assertAlmostEqual(record.latitude or 0.0, 41.88)
        self.assertEqual(record.raw_violations, "38. INSECTS - Comments: NONE")

    def test_missing_required_fields_drop_the_row(self) -> None:
        for field_name in ("license_", "dba_name", "inspection_id", "inspection_date"):
            with self.subTest(field=field_name):
                self.assertIsNone(normalize_source_row(_row(**{field_name: None})))

    def test_defaults_and_zero_coordinates(self) -> None:
        record = normalize_source_row(
            _row(facility_type=None, city=None, state=None, latitude="0", longitude="", risk=None)
        )

        assert record is not None
        self.assertEqual(record.facility_type, "Restaurant")
        self.assertEqual(record.city, "Chicago")
        self.assertEqual(record.state, "IL")
        self.assertEqual(record.risk_level, 2)
        self.assertIsNone(record.latitude)
        self.assertIsNone(record.longitude)


if __name__ == "__main__":
    unittest.main()
