from __future__ import annotations

import unittest

from pulse.domain.records import EmailCampaignRecord, UTMRecord
from pulse.mappers.csv_normalizer import CSVNormalizer, normalize, normalize_header, parse_csv_text
from pulse.mappers.schemas import (
    EMAIL_CAMPAIGN_SCHEMA,
    TRAFFIC_ACQUISITION_SCHEMA,
    UTM_SCHEMA,
    get_schema,
)
from pulse.sources.errors import ParseFailure

EMAIL_CSV = (
    "\ufeffCampaign,Date,Emails sent,Email opened (MPP excluded),Email clicked,"
    "Email unsubscribes,Email bounces,Email open rate (MPP excluded),Email click rate\n"
    "Spring Sale,2024-03-05,\"1,000\",400,120,3,7,0.4,0.12\n"
    "\n"
    ",N/A,abc,,5,,-2,bad,\n"
)


class TestParseCSVText(unittest.TestCase):
    def test_strips_bom_and_skips_blank_lines(self) -> None:
        rows = parse_csv_text(EMAIL_CSV)

        self.assertEqual(len(rows), 2)
        self.assertIn("Campaign", rows[0])
        self.assertEqual(rows[0]["Emails sent"], "1,000")

    def test_blank_text_yields_no_rows(self) -> None:
        self.assertEqual(parse_csv_text("   \n"), [])

    def test_malformed_csv_raises_parse_failure(self) -> None:
        with self.assertRaises(ParseFailure):
            parse_csv_text('Campaign,Date\n"unterminated,2024-01-01\n')


class TestCSVNormalizer(unittest.TestCase):
    def setUp(self) -> None:
        self.normalizer = CSVNormalizer()

    def test_maps_declared_headers_onto_typed_records(self) -> None:
        records = self.normalizer.normalize(parse_csv_text(EMAIL_CSV), EMAIL_CAMPAIGN_SCHEMA)

        self.assertEqual(len(records), 2)
        first = records[0]
        self.assertIsInstance(first, EmailCampaignRecord)
        self.assertEqual(first.name, "Spring Sale")
        self.assertEqual(first.date, "2024-03-05")
        self.assertEqual(first.sent, 1000)
        self.assertEqual(first.opened, 400)
        self.assertAlmostEqual(first.reported_open_rate, 40.0)
        self.assertAlmostEqual(first.reported_click_rate, 12.0)

    def test_bad_cells_default_instead_of_raising(self) -> None:
        records = self.normalizer.normalize(parse_csv_text(EMAIL_CSV), EMAIL_CAMPAIGN_SCHEMA)

        second = records[1]
        self.assertEqual(second.name, "Unknown")
        self.assertEqual(second.date, "N/A")
        self.assertEqual(second.sent, 0)
        self.assertEqual(second.opened, 0)
        self.assertEqual(second.clicked, 5)
        self.assertEqual(second.bounces, 0)
        self.assertEqual(second.reported_open_rate, 0.0)

    def test_missing_name_and_date_columns_default_to_unknown(self) -> None:
        records = normalize([{"Emails sent": "10"}], EMAIL_CAMPAIGN_SCHEMA)

        self.assertEqual(records[0].name, "Unknown")
        self.assertEqual(records[0].date, "Unknown")
        self.assertEqual(records[0].sent, 10)

    def test_header_fallback_uses_normalized_alias(self) -> None:
        rows = [{"session default channel group": "Organic Search", "SESSIONS": "12"}]

        records = normalize(rows, TRAFFIC_ACQUISITION_SCHEMA)

        self.assertEqual(records[0].channel, "Organic Search")
        self.assertEqual(records[0].sessions, 12)

    def test_exact_header_wins_over_later_alias(self) -> None:
        rows = [{"Email opened": "9", "Email opened (MPP excluded)": "4"}]

        records = normalize(rows, EMAIL_CAMPAIGN_SCHEMA)

        self.assertEqual(records[0].opened, 4)

    def test_utm_rows_keep_compact_hour_date(self) -> None:
        rows = [
            {
                "Manual campaign name": "launch",
                "Manual source / medium": "newsletter / email",
                "Date + hour (YYYYMMDDHH)": "2024030514",
                "Sessions": "30",
                "Engaged sessions": "12",
                "Engagement rate": "0.4",
                "Key events": "1.5",
            }
        ]

        records = normalize(rows, UTM_SCHEMA)

        self.assertIsInstance(records[0], UTMRecord)
        self.assertEqual(records[0].date, "2024030514")
        self.assertAlmostEqual(records[0].engagement_rate, 40.0)
        self.assertAlmostEqual(records[0].key_events, 1.5)

    def test_empty_and_non_list_inputs_yield_empty_list(self) -> None:
        self.assertEqual(normalize([], EMAIL_CAMPAIGN_SCHEMA), [])
        self.assertEqual(normalize(None, EMAIL_CAMPAIGN_SCHEMA), [])
        self.assertEqual(normalize("Campaign,Date", EMAIL_CAMPAIGN_SCHEMA), [])

    def test_non_mapping_rows_are_skipped(self) -> None:
        records = normalize([["a", "b"], {"Campaign": "Kept"}], EMAIL_CAMPAIGN_SCHEMA)

        self.assertEqual([record.name for record in records], ["Kept"])


class TestSchemaRegistry(unittest.TestCase):
    def test_every_social_daily_file_has_a_dated_schema(self) -> None:
        for prefix in ("FB", "IG"):
            for metric in ("Follows", "Reach", "Visits", "Views", "Interactions"):
                schema = get_schema(f"{prefix}_{metric}.csv")
                self.assertIsNotNone(schema)
                self.assertTrue(schema.dated)

    def test_snapshot_exports_are_undated(self) -> None:
        for name in ("GA_Demographics.csv", "YouTube_Content.csv", "YouTube_Age.csv"):
            self.assertFalse(get_schema(name).dated)

    def test_unknown_file_has_no_schema(self) -> None:
        self.assertIsNone(get_schema("Unknown.csv"))

    def test_normalize_header(self) -> None:
        self.assertEqual(normalize_header(" Email Open-Rate (MPP) "), "emailopenratempp")


if __name__ == "__main__":
    unittest.main()
