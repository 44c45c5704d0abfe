from __future__ import annotations

import unittest

from app.validators.import_schema_validator import (
    REQUIRED_COLUMNS,
    TEMPLATE_COLUMNS,
    ImportSchemaValidator,
    ImportStructureError,
    MissingColumnsError,
)


class TestImportSchemaValidator(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = ImportSchemaValidator()

    def test_accepts_full_template(self) -> None:
        cleaned = self.validator.validate(list(TEMPLATE_COLUMNS))
        self.assertEqual(cleaned, list(TEMPLATE_COLUMNS))

    def test_optional_columns_may_be_absent(self) -> None:
        cleaned = self.validator.validate(list(REQUIRED_COLUMNS))
        self.assertEqual(len(cleaned), len(REQUIRED_COLUMNS))

    def test_headers_are_trimmed_and_blanks_dropped(self) -> None:
        headers = [f"  {column} " for column in REQUIRED_COLUMNS] + ["", None]
        cleaned = self.validator.validate(headers)
        self.assertEqual(cleaned, list(REQUIRED_COLUMNS))

    def test_lists_every_missing_required_column(self) -> None:
        headers = [column for column in TEMPLATE_COLUMNS if column not in {"Date", "Region"}]

        with self.assertRaises(MissingColumnsError) as ctx:
            self.validator.validate(headers)

        self.assertEqual(ctx.exception.missing, ("Date", "Region"))
        self.assertIsInstance(ctx.exception, ImportStructureError)
        payload = ctx.exception.to_dict()
        self.assertEqual(payload["missing_columns"], ["Date", "Region"])
        self.assertIn("Date", payload["message"])

    def test_header_matching_is_case_sensitive(self) -> None:
        headers = [column.lower() if column == "IncidentID" else column for column in REQUIRED_COLUMNS]
        with self.assertRaises(MissingColumnsError) as ctx:
            self.validator.validate(headers)
        self.assertEqual(ctx.exception.missing, ("IncidentID",))


if __name__ == "__main__":
    unittest.main()
