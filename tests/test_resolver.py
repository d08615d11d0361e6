from __future__ import annotations

import unittest

from pulse.sources.errors import ResolutionFailure
from pulse.sources.resolver import resolve_download_url, resolve_source


class TestResolveSource(unittest.TestCase):
    def test_file_view_link_resolves_to_drive_download(self) -> None:
        resolution = resolve_source("https://drive.google.com/file/d/XYZ/view?usp=sharing")

        self.assertTrue(resolution.ok)
        self.assertEqual(resolution.file_id, "XYZ")
        self.assertEqual(
            resolution.download_url,
            "https://drive.google.com/uc?export=download&id=XYZ",
        )

    def test_open_id_link_resolves_to_drive_download(self) -> None:
        resolution = resolve_source("https://drive.google.com/open?id=abc-123&authuser=0")

        self.assertEqual(resolution.file_id, "abc-123")
        self.assertIn("id=abc-123", resolution.download_url)

    def test_spreadsheet_link_resolves_to_csv_export(self) -> None:
        resolution = resolve_source("https://docs.google.com/spreadsheets/d/ABC/edit#gid=0")

        self.assertEqual(resolution.file_id, "ABC")
        self.assertEqual(
            resolution.download_url,
            "https://docs.google.com/spreadsheets/d/ABC/export?format=csv",
        )

    def test_existing_download_url_is_returned_unchanged(self) -> None:
        url = "https://drive.google.com/uc?export=download&id=XYZ"

        resolution = resolve_source(url)

        self.assertTrue(resolution.ok)
        self.assertEqual(resolution.download_url, url)

    def test_unrecognized_url_is_returned_with_failure(self) -> None:
        url = "https://example.com/report.csv"

        with self.assertLogs("pulse.sources.resolver", level="WARNING"):
            resolution = resolve_source(url)

        self.assertFalse(resolution.ok)
        self.assertEqual(resolution.download_url, url)
        self.assertIsInstance(resolution.failure, ResolutionFailure)

    def test_shortcut_returns_only_the_url(self) -> None:
        self.assertEqual(
            resolve_download_url("https://drive.google.com/file/d/XYZ/view"),
            "https://drive.google.com/uc?export=download&id=XYZ",
        )


if __name__ == "__main__":
    unittest.main()
