from __future__ import annotations

import unittest

from metrics.ranking import compare_entities, compare_totals, percent_change, point_change, top_n


class TestTopN(unittest.TestCase):
    def test_returns_at_most_n_sorted_descending(self) -> None:
        items = [{"name": str(i), "views": i} for i in range(10)]

        ranked = top_n(items, "views", 3)

        self.assertEqual([item["views"] for item in ranked], [9, 8, 7])

    def test_shorter_input_is_returned_whole(self) -> None:
        items = [{"views": 1}, {"views": 4}]

        self.assertEqual(top_n(items, "views", 5), [{"views": 4}, {"views": 1}])

    def test_ties_keep_input_order(self) -> None:
        items = [{"name": "first", "views": 5}, {"name": "second", "views": 5}, {"name": "low", "views": 1}]

        ranked = top_n(items, "views", 2)

        self.assertEqual([item["name"] for item in ranked], ["first", "second"])

    def test_missing_metric_ranks_last(self) -> None:
        items = [{"name": "blank"}, {"name": "scored", "views": 2}]

        self.assertEqual(top_n(items, "views", 1)[0]["name"], "scored")

    def test_non_positive_n_yields_empty(self) -> None:
        self.assertEqual(top_n([{"views": 1}], "views", 0), [])


class TestChanges(unittest.TestCase):
    def test_percent_change(self) -> None:
        self.assertAlmostEqual(percent_change(150, 100), 50.0)
        self.assertAlmostEqual(percent_change(50, 100), -50.0)

    def test_percent_change_against_zero_prior_is_zero(self) -> None:
        self.assertEqual(percent_change(10, 0), 0.0)

    def test_unchanged_value_is_zero(self) -> None:
        self.assertEqual(percent_change(42, 42), 0.0)

    def test_point_change(self) -> None:
        self.assertAlmostEqual(point_change(12.5, 10.0), 2.5)


class TestCompareTotals(unittest.TestCase):
    def test_counts_use_percent_and_rates_use_points(self) -> None:
        result = compare_totals(
            {"sent": 200, "open_rate": 30.0},
            {"sent": 100, "open_rate": 25.0},
            rate_fields=("open_rate",),
        )

        self.assertAlmostEqual(result["sent"]["change"], 100.0)
        self.assertAlmostEqual(result["open_rate"]["change"], 5.0)

    def test_missing_prior_key_compares_to_zero(self) -> None:
        result = compare_totals({"sent": 10}, {})

        self.assertEqual(result["sent"], {"current": 10.0, "prior": 0.0, "change": 0.0})

    def test_non_numeric_values_are_skipped(self) -> None:
        self.assertEqual(compare_totals({"label": "x", "flag": True}, {}), {})


class TestCompareEntities(unittest.TestCase):
    def test_pairs_by_key_with_zero_baseline(self) -> None:
        current = [{"name": "Spring", "sent": 200}, {"name": "New", "sent": 50}]
        prior = [{"name": "Spring", "sent": 100}, {"name": "Gone", "sent": 80}]

        result = compare_entities(current, prior, "name", ["sent"])

        self.assertEqual([row["name"] for row in result], ["Spring", "New", "Gone"])
        spring, new, gone = result
        self.assertAlmostEqual(spring["metrics"]["sent"]["change"], 100.0)
        self.assertTrue(new["in_current"])
        self.assertFalse(new["in_prior"])
        self.assertEqual(new["metrics"]["sent"]["prior"], 0.0)
        self.assertEqual(gone["metrics"]["sent"]["current"], 0.0)
        self.assertAlmostEqual(gone["metrics"]["sent"]["change"], -100.0)

    def test_duplicate_keys_are_summed(self) -> None:
        current = [{"name": "A", "sent": 10}, {"name": "A", "sent": 5}]

        result = compare_entities(current, [], "name", ["sent"])

        self.assertEqual(len(result), 1)
        self.assertEqual(result[0]["metrics"]["sent"]["current"], 15.0)


if __name__ == "__main__":
    unittest.main()
