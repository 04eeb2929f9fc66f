import unittest

from sheet_normalizer import CandidateKeyFinder, identify_candidate_keys, select_key


class TestCandidateKeyFinder(unittest.TestCase):
    def test_independent_simple_keys_are_both_returned(self):
        rows = [
            {"A": 1, "B": "x", "C": "same"},
            {"A": 2, "B": "y", "C": "same"},
            {"A": 3, "B": "z", "C": "same"},
        ]
        keys = identify_candidate_keys(rows)
        self.assertEqual(keys, [("A",), ("B",)])
        self.assertNotIn(("A", "B"), keys)

    def test_composite_key_when_no_single_column_is_unique(self):
        rows = [
            {"A": 1, "B": 1},
            {"A": 1, "B": 2},
            {"A": 2, "B": 1},
        ]
        self.assertEqual(identify_candidate_keys(rows), [("A", "B")])

    def test_no_key_is_superset_of_another(self):
        rows = [
            {"A": 1, "B": 1, "C": "p", "D": 10},
            {"A": 1, "B": 2, "C": "q", "D": 10},
            {"A": 2, "B": 1, "C": "q", "D": 20},
            {"A": 2, "B": 2, "C": "p", "D": 20},
        ]
        keys = identify_candidate_keys(rows)
        self.assertTrue(keys)
        for key in keys:
            for other in keys:
                if key != other:
                    self.assertFalse(set(key).issubset(other), f"{key} is contained in {other}")

    def test_composite_values_containing_a_join_delimiter_do_not_collide(self):
        # Joined with "|" the first two rows would both read "a|b|c".
        rows = [
            {"A": "a|b", "B": "c"},
            {"A": "a", "B": "b|c"},
            {"A": "a|b", "B": "d"},
            {"A": "e", "B": "b|c"},
        ]
        finder = CandidateKeyFinder(rows)
        self.assertTrue(finder.is_superkey(("A", "B")))
        self.assertEqual(finder.find_candidates(), [("A", "B")])

    def test_values_of_different_types_are_distinct(self):
        rows = [{"A": 1}, {"A": "1"}, {"A": True}]
        self.assertEqual(identify_candidate_keys(rows), [("A",)])

    def test_null_counts_as_a_value(self):
        rows = [{"A": None, "B": 1}, {"A": None, "B": 2}, {"A": "x", "B": 2}]
        self.assertEqual(identify_candidate_keys(rows), [("A", "B")])

    def test_duplicate_rows_have_no_candidate_key(self):
        rows = [{"A": 1, "B": 2}, {"A": 1, "B": 2}]
        self.assertEqual(identify_candidate_keys(rows), [])

    def test_empty_relation(self):
        self.assertEqual(identify_candidate_keys([]), [])


class TestSelectKey(unittest.TestCase):
    def test_prefers_smallest_composite_key(self):
        keys = [("ID",), ("A", "B", "C"), ("A", "D")]
        self.assertEqual(select_key(keys), ("A", "D"))

    def test_ties_go_to_discovery_order(self):
        self.assertEqual(select_key([("A", "B"), ("A", "C"), ("B", "C")]), ("A", "B"))

    def test_falls_back_to_simple_key(self):
        self.assertEqual(select_key([("ID",), ("Email",)]), ("ID",))

    def test_no_keys(self):
        self.assertEqual(select_key([]), ())


if __name__ == "__main__":
    unittest.main()
