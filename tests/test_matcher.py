import unittest

from releasecheck.compliance.matcher import matches, parse_constraint, parse_version
from releasecheck.core.exceptions import InvalidConstraint, InvalidVersion


class TestMatches(unittest.TestCase):

    def test_range(self):
        self.assertTrue(matches("13.4.1", ">=13.0.0, <14.0.0"))
        self.assertFalse(matches("14.0.0", ">=13.0.0, <14.0.0"))
        self.assertFalse(matches("12.9.9", ">=13.0.0, <14.0.0"))

    def test_space_separated_comparators(self):
        self.assertTrue(matches("13.4.1", ">= 13.0.0 < 14.0.0"))
        self.assertFalse(matches("14.0.0", ">= 13.0.0 < 14.0.0"))

    def test_release_name_with_v_prefix(self):
        self.assertTrue(matches("v13.4.1", ">= 13.0.0"))
        self.assertTrue(matches("13.4.1", ">= v13.0.0"))

    def test_exact_version(self):
        self.assertTrue(matches("13.2.0", "13.2.0"))
        self.assertTrue(matches("v13.2.0", "=13.2.0"))
        self.assertFalse(matches("13.2.1", "13.2.0"))

    def test_not_equal(self):
        self.assertFalse(matches("13.2.0", "!=13.2.0"))
        self.assertTrue(matches("13.2.1", "!=13.2.0"))
        self.assertFalse(matches("13.2.5", "!=13.2.x"))
        self.assertTrue(matches("13.3.0", "!=13.2.x"))

    def test_wildcards(self):
        self.assertTrue(matches("13.9.9", "13.x"))
        self.assertTrue(matches("13.0.0", "13.*"))
        self.assertFalse(matches("14.0.0", "13.x"))
        self.assertTrue(matches("13.2.7", "13.2.X"))
        self.assertTrue(matches("1.0.0", "*"))

    def test_missing_parts_are_wildcards(self):
        self.assertTrue(matches("13.5.2", "13"))
        self.assertFalse(matches("14.0.0", "13"))
        self.assertTrue(matches("13.2.9", "13.2"))

    def test_comparisons_against_wildcards(self):
        self.assertTrue(matches("14.0.0", ">13.x"))
        self.assertFalse(matches("13.9.9", ">13.x"))
        self.assertTrue(matches("13.9.9", "<=13.x"))
        self.assertFalse(matches("14.0.0", "<=13.x"))
        self.assertTrue(matches("12.9.9", "<13.x"))
        self.assertTrue(matches("13.0.0", ">=13.x"))

    def test_tilde(self):
        self.assertTrue(matches("1.2.9", "~1.2.3"))
        self.assertFalse(matches("1.3.0", "~1.2.3"))
        self.assertFalse(matches("1.2.2", "~1.2.3"))
        self.assertTrue(matches("1.9.0", "~1"))
        self.assertTrue(matches("1.2.9", "~>1.2"))

    def test_caret(self):
        self.assertTrue(matches("1.9.0", "^1.2.3"))
        self.assertFalse(matches("2.0.0", "^1.2.3"))
        self.assertTrue(matches("0.2.9", "^0.2.3"))
        self.assertFalse(matches("0.3.0", "^0.2.3"))
        self.assertTrue(matches("0.0.3", "^0.0.3"))
        self.assertFalse(matches("0.0.4", "^0.0.3"))

    def test_hyphen_range(self):
        self.assertTrue(matches("1.2.0", "1.2 - 1.4.5"))
        self.assertTrue(matches("1.4.5", "1.2 - 1.4.5"))
        self.assertFalse(matches("1.4.6", "1.2 - 1.4.5"))

    def test_alternatives(self):
        constraint = "<13.0.0 || >=14.0.0"
        self.assertTrue(matches("12.0.0", constraint))
        self.assertFalse(matches("13.5.0", constraint))
        self.assertTrue(matches("14.1.0", constraint))

    def test_prerelease_needs_prerelease_in_constraint(self):
        self.assertFalse(matches("13.0.0-beta.1", ">=12.0.0"))
        self.assertTrue(matches("13.0.0-beta.1", ">=13.0.0-alpha.1"))
        self.assertTrue(matches("13.0.0", ">=13.0.0-alpha.1"))

    def test_prerelease_sorts_below_its_release(self):
        self.assertFalse(matches("1.0.0-1", ">=1.0.0"))
        self.assertTrue(matches("1.0.0-1", "<1.0.0, >=1.0.0-0"))
        self.assertTrue(matches("1.0.0", ">=1.0.0-0"))
        self.assertTrue(matches("1.0.0", ">1.0.0-rc.1"))

    def test_prerelease_identifiers_follow_semver_precedence(self):
        self.assertTrue(matches("1.0.0-dev.1", ">=1.0.0-beta.1"))
        self.assertTrue(matches("1.0.0-alpha.10", ">1.0.0-alpha.9"))
        self.assertTrue(matches("1.0.0-alpha.beta", ">1.0.0-alpha.1"))
        self.assertTrue(matches("1.0.0-alpha", "<1.0.0-alpha.1"))

    def test_arbitrary_prerelease_tags_are_valid(self):
        self.assertFalse(matches("1.2.3-gs1", ">=1.0.0"))
        self.assertTrue(matches("1.2.3-gs1", ">=1.2.3-gs0"))
        self.assertTrue(matches("2.0.0-5ab24fa0", "2.0.0-5ab24fa0"))

    def test_build_metadata_is_ignored_for_equality(self):
        self.assertTrue(matches("1.2.3+build.5", "1.2.3"))

    def test_is_deterministic(self):
        results = {matches("13.4.1", ">=13.0.0, <14.0.0") for _ in range(3)}
        self.assertEqual(results, {True})


class TestInvalidInput(unittest.TestCase):

    def test_invalid_constraints(self):
        for constraint in ["", "   ", "not-a-version", ">=", ">=13.0.0,", "13.0.0 <<14", "13.0.0 ||", ">=1.0.0 foo"]:
            with self.subTest(constraint=constraint):
                with self.assertRaises(InvalidConstraint):
                    matches("13.0.0", constraint)

    def test_invalid_versions(self):
        for version in ["latest", "1.2.3.4", "", "x.1.0", "1.2.3-", "1.2.3-beta..1", "01.2.3"]:
            with self.subTest(version=version):
                with self.assertRaises(InvalidVersion):
                    matches(version, ">=1.0.0")

    def test_constraint_is_checked_before_version(self):
        with self.assertRaises(InvalidConstraint) as ctx:
            matches("bogus", "bogus")
        self.assertEqual(ctx.exception.value, "bogus")

    def test_parse_constraint_returns_one_set_per_alternative(self):
        self.assertEqual(len(parse_constraint("1.x || 2.x || >=4.0.0")), 3)

    def test_parse_version(self):
        self.assertEqual(str(parse_version("v13.4")), "13.4.0")
        self.assertEqual(parse_version("13.0.0-beta.1").prerelease, "beta.1")
        self.assertEqual(parse_version("2.0.0-5ab24fa0").prerelease, "5ab24fa0")


if __name__ == '__main__':
    unittest.main()
