"""
tests/test_incident_row_validator.py

Pure row normalization tests: no database, no I/O.
"""

from __future__ import annotations

import unittest
from datetime import date, datetime, time

from app.validators.incident_row_validator import MISSING_VALUE_MESSAGE, IncidentRowValidator


def _row(**overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "IncidentID": " INC-100 ",
        "Date": "2024-03-15",
        "Time": "14:30",
        "DayOfWeek": "Friday",
        "CaseStatus": "Resolved",
        "EventProximity": "",
        "IndoorsOrOutdoors": "Indoors",
        "HouseBuildingNumber": "",
        "StreetName": " Rizal St. ",
        "PurokBlockLot": None,
        "Barangay": "San Isidro",
        "MunicipalityCity": "Tagum City",
        "Province": "Davao del Norte",
        "ZipCode": "",
        "Region": "Region XI",
        "IncidentType": "Theft",
        "IncidentCategory": "Property",
    }
    row.update(overrides)
    return row


class TestIncidentRowValidator(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = IncidentRowValidator()

    def test_normalizes_valid_row(self) -> None:
        incident, errors = self.validator.normalize_row(raw_row=_row(), row_number=2)

        self.assertEqual(errors, [])
        assert incident is not None
        self.assertEqual(incident.incident_id, "INC-100")
        self.assertEqual(incident.date, date(2024, 3, 15))
        self.assertEqual(incident.case_status, "Resolved")
        self.assertEqual(incident.indoors_or_outdoors, "Indoors")
        self.assertIsNone(incident.event_proximity)
        self.assertEqual(incident.place.street_name, "Rizal St.")
        self.assertIsNone(incident.place.house_building_number)
        self.assertIsNone(incident.place.zip_code)
        self.assertEqual(
            incident.place.match_key,
            ("San Isidro", "Tagum City", "Davao del Norte", "Region XI"),
        )
        self.assertEqual(incident.category.name, "Theft")
        self.assertEqual(incident.category.group, "Property")

    def test_missing_required_fields_stop_format_checks(self) -> None:
        incident, errors = self.validator.normalize_row(
            raw_row=_row(Date="  ", Region=None, CaseStatus="Bogus"),
            row_number=7,
        )

        self.assertIsNone(incident)
        self.assertEqual([error.field for error in errors], ["Date", "Region"])
        self.assertTrue(all(error.row_number == 7 for error in errors))
        self.assertTrue(all(error.message == MISSING_VALUE_MESSAGE for error in errors))

    def test_absent_required_key_is_reported(self) -> None:
        raw = _row()
        del raw["IncidentType"]

        incident, errors = self.validator.normalize_row(raw_row=raw, row_number=3)

        self.assertIsNone(incident)
        self.assertEqual(errors[0].field, "IncidentType")

    def test_invalid_date_is_rejected(self) -> None:
        incident, errors = self.validator.normalize_row(raw_row=_row(Date="31/31/2024"), row_number=4)

        self.assertIsNone(incident)
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].field, "Date")
        self.assertEqual(errors[0].value, "31/31/2024")

    def test_accepts_common_date_formats_and_native_cells(self) -> None:
        cases = {
            "03/15/2024": date(2024, 3, 15),
            "2024/03/15": date(2024, 3, 15),
            "15-Mar-2024": date(2024, 3, 15),
            "March 15, 2024": date(2024, 3, 15),
            "2024-03-15T10:00:00Z": date(2024, 3, 15),
        }
        for raw, expected in cases.items():
            with self.subTest(raw=raw):
                incident, errors = self.validator.normalize_row(raw_row=_row(Date=raw), row_number=2)
                self.assertEqual(errors, [])
                assert incident is not None
                self.assertEqual(incident.date, expected)

        incident, _ = self.validator.normalize_row(
            raw_row=_row(Date=datetime(2024, 1, 2, 9, 0), Time=time(9, 5)),
            row_number=2,
        )
        assert incident is not None
        self.assertEqual(incident.date, date(2024, 1, 2))
        self.assertEqual(incident.time, "09:05")

    def test_enumerations_are_optional_but_checked(self) -> None:
        incident, errors = self.validator.normalize_row(
            raw_row=_row(CaseStatus="", IndoorsOrOutdoors=None),
            row_number=2,
        )
        self.assertEqual(errors, [])
        assert incident is not None
        self.assertIsNone(incident.case_status)
        self.assertIsNone(incident.indoors_or_outdoors)

        incident, errors = self.validator.normalize_row(
            raw_row=_row(CaseStatus="Closed", IndoorsOrOutdoors="Underground"),
            row_number=5,
        )
        self.assertIsNone(incident)
        self.assertEqual({error.field for error in errors}, {"CaseStatus", "IndoorsOrOutdoors"})

    def test_enumerations_match_case_insensitively(self) -> None:
        incident, errors = self.validator.normalize_row(
            raw_row=_row(CaseStatus="pending", IndoorsOrOutdoors="OUTDOORS"),
            row_number=2,
        )
        self.assertEqual(errors, [])
        assert incident is not None
        self.assertEqual(incident.case_status, "Pending")
        self.assertEqual(incident.indoors_or_outdoors, "Outdoors")

    def test_values_longer_than_store_columns_are_row_errors(self) -> None:
        incident, errors = self.validator.normalize_row(
            raw_row=_row(IncidentID="X" * 200, DayOfWeek="Wednesday (public holiday)"),
            row_number=6,
        )

        self.assertIsNone(incident)
        by_field = {error.field: error for error in errors}
        self.assertEqual(set(by_field), {"IncidentID", "DayOfWeek"})
        self.assertEqual(by_field["IncidentID"].message, "Value exceeds 120 characters.")
        self.assertEqual(by_field["DayOfWeek"].message, "Value exceeds 16 characters.")
        self.assertTrue(all(error.row_number == 6 for error in errors))

    def test_values_at_column_length_are_accepted(self) -> None:
        incident, errors = self.validator.normalize_row(
            raw_row=_row(IncidentID="X" * 120, ZipCode="9" * 20),
            row_number=2,
        )

        self.assertEqual(errors, [])
        assert incident is not None
        self.assertEqual(len(incident.incident_id), 120)

    def test_empty_row_detection(self) -> None:
        self.assertTrue(self.validator.is_completely_empty_row({"IncidentID": " ", "Date": None}))
        self.assertFalse(self.validator.is_completely_empty_row({"IncidentID": "X", "Date": None}))

    def test_extract_incident_id(self) -> None:
        self.assertEqual(self.validator.extract_incident_id({"IncidentID": " A-1 "}), "A-1")
        self.assertIsNone(self.validator.extract_incident_id({"IncidentID": ""}))


if __name__ == "__main__":
    unittest.main()
