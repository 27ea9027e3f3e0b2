"""Tests for spex/ structure validation."""

import unittest
import tempfile
import shutil
from pathlib import Path

from spex.exit_codes import DATA_ERROR, ValidationError
from spex.services.validation_service import ValidationService


class TestValidationService(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        self.service = ValidationService()

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def make(self, *relative_files):
        for relative in relative_files:
            path = self.test_dir / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("# content\n")

    def assertIssues(self, expected_count):
        with self.assertRaises(ValidationError) as ctx:
            self.service.validate(self.test_dir)
        self.assertEqual(len(ctx.exception.issues), expected_count, ctx.exception.issues)
        self.assertEqual(ctx.exception.exit_code, DATA_ERROR)
        return ctx.exception.issues

    def test_valid_structure(self):
        self.make("spex/adr/0001.md", "spex/feature/login.md", "spex/feature/notes.txt")

        result = self.service.validate(self.test_dir)

        self.assertEqual(result.type_names, ["adr", "feature"])
        counts = {v.type: v.markdown_file_count for v in result.validated_types}
        self.assertEqual(counts, {"adr": 1, "feature": 1})

    def test_markdown_extension_is_case_insensitive(self):
        self.make("spex/instruction/STYLE.MD")

        result = self.service.validate(self.test_dir)

        self.assertEqual(result.type_names, ["instruction"])

    def test_missing_spex_directory(self):
        issues = self.assertIssues(1)

        self.assertIn("Missing spex directory", issues[0])

    def test_no_supported_type_directory(self):
        self.make("spex/other/readme.md")

        issues = self.assertIssues(1)

        self.assertIn("adr, instruction, dataformat, feature", issues[0])

    def test_empty_type_directory_reports_both_rules(self):
        (self.test_dir / "spex" / "adr").mkdir(parents=True)

        issues = self.assertIssues(2)

        self.assertIn("must not be empty", issues[0])
        self.assertIn("at least one .md file", issues[1])

    def test_issues_are_aggregated_across_types(self):
        self.make("spex/adr/0001.md", "spex/dataformat/schema.json")
        (self.test_dir / "spex" / "feature").mkdir()

        issues = self.assertIssues(3)

        self.assertTrue(any("spex/dataformat" in issue for issue in issues))
        self.assertTrue(any("spex/feature" in issue for issue in issues))

    def test_markdown_only_in_subdirectory_does_not_count(self):
        self.make("spex/adr/nested/0001.md")

        issues = self.assertIssues(1)

        self.assertIn("spex/adr", issues[0])


if __name__ == '__main__':
    unittest.main()
