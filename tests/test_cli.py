import shutil
import tempfile
import unittest
from pathlib import Path

from click.testing import CliRunner

# Import the main entry point
from wildignore.main import cli

FIXTURES = Path(__file__).parent / "fixtures"


class TestWildignoreCLI(unittest.TestCase):
    def setUp(self):
        """
        Set up a temporary working tree before each test.
        """
        self.test_dir = tempfile.mkdtemp()
        self.runner = CliRunner()
        root = Path(self.test_dir)
        (root / ".gitignore").write_text("*.log\n!keep.log\nbuild/\n")
        (root / "build").mkdir()
        (root / "build" / "out.o").write_text("x")
        (root / "debug.log").write_text("x")
        (root / "keep.log").write_text("x")
        (root / "main.py").write_text("print('hi')\n")

    def tearDown(self):
        """Clean up the temporary directory after each test."""
        shutil.rmtree(self.test_dir)

    def test_match_reports_each_path(self):
        result = self.runner.invoke(cli, ["match", "*.py", "main.py", "src/util.py", "main.c"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("match\tmain.py", result.output)
        self.assertIn("match\tsrc/util.py", result.output)
        self.assertIn("no match\tmain.c", result.output)

    def test_match_exits_1_without_matches(self):
        result = self.runner.invoke(cli, ["match", "/foo", "bar/foo"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("no match\tbar/foo", result.output)

    def test_match_directory_and_case_options(self):
        result = self.runner.invoke(cli, ["match", "Build/", "build"])
        self.assertEqual(result.exit_code, 1)
        result = self.runner.invoke(cli, ["match", "--dir", "-i", "Build/", "build"])
        self.assertEqual(result.exit_code, 0)

    def test_ignore_case_from_environment(self):
        result = self.runner.invoke(cli, ["match", "FOO", "foo"], env={"WILDIGNORE_IGNORE_CASE": "1"})
        self.assertEqual(result.exit_code, 0)

    def test_invalid_pattern_is_a_usage_error(self):
        result = self.runner.invoke(cli, ["match", "[abc", "a"])
        self.assertEqual(result.exit_code, 2)
        self.assertIn("character class", result.output)

    def test_check_ignore_lists_ignored_paths(self):
        result = self.runner.invoke(
            cli, ["check-ignore", "-C", self.test_dir, "debug.log", "keep.log", "main.py", "build/out.o"])
        self.assertEqual(result.exit_code, 0)
        self.assertEqual(result.output.splitlines(), ["debug.log", "build/out.o"])

    def test_check_ignore_verbose_non_matching(self):
        result = self.runner.invoke(
            cli, ["check-ignore", "-C", self.test_dir, "-v", "-n", "debug.log", "keep.log", "main.py"])
        self.assertEqual(result.exit_code, 0)
        self.assertEqual(result.output.splitlines(), [
            ".gitignore:1:*.log\tdebug.log",
            ".gitignore:2:!keep.log\tkeep.log",
            "::\tmain.py",
        ])

    def test_check_ignore_non_matching_needs_verbose(self):
        result = self.runner.invoke(cli, ["check-ignore", "-C", self.test_dir, "-n", "main.py"])
        self.assertEqual(result.exit_code, 2)
        self.assertIn("only valid with --verbose", result.output)

    def test_check_ignore_exits_1_when_nothing_is_ignored(self):
        result = self.runner.invoke(cli, ["check-ignore", "-C", self.test_dir, "main.py"])
        self.assertEqual(result.exit_code, 1)
        self.assertEqual(result.output, "")

    def test_tree(self):
        result = self.runner.invoke(cli, ["tree", self.test_dir])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("main.py", result.output)
        self.assertIn("keep.log", result.output)
        self.assertNotIn("debug.log", result.output)
        self.assertNotIn("build", result.output)

    def test_tree_show_ignored(self):
        result = self.runner.invoke(cli, ["tree", self.test_dir, "--show-ignored", "-a"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("debug.log [ignored: .gitignore:1:*.log]", result.output)
        self.assertIn(".gitignore", result.output)

    def test_baseline(self):
        result = self.runner.invoke(
            cli, ["baseline", str(FIXTURES / "git-baseline.match"), str(FIXTURES / "git-baseline.nmatch"),
                  "--min-agreement", "1.0"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("agreement: 36/36 (100.00%)", result.output)
        self.assertIn("errors: 0", result.output)

    def test_baseline_rejects_contradicting_files(self):
        # swapped: the match file cannot pass as a non-match file
        result = self.runner.invoke(
            cli, ["baseline", str(FIXTURES / "git-baseline.nmatch"), str(FIXTURES / "git-baseline.match")])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("should only contain", result.output)


if __name__ == '__main__':
    unittest.main()
