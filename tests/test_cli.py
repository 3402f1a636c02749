import io
import json
import os
import sys
import tempfile
import unittest
from unittest.mock import patch

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from dc_compiler.cli import default_output_dir, default_output_name, main


class TestCli(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.vault = self._tmp.name
        self._write("games/proj/A.js", 'const { helper } = dc.require("B.js");\nreturn { Main };')
        self._write("games/proj/lib/B.js", "return { helper: 1 };")
        self._write("games/proj/notes.txt", "not a module")

    def tearDown(self):
        self._tmp.cleanup()

    def _write(self, rel, content):
        path = os.path.join(self.vault, *rel.split("/"))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)

    def _run(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with patch("sys.stdout", out), patch("sys.stderr", err):
            code = main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_defaults(self):
        self.assertEqual(default_output_name("games/proj/"), "compiled-proj.md")
        self.assertEqual(default_output_dir("games/proj"), "games/proj/dist")

    def test_compile_with_defaults(self):
        code, _, err = self._run("games/proj", "A", "--vault", self.vault)
        self.assertEqual(code, 0, err)
        output = os.path.join(self.vault, "games", "proj", "dist", "compiled-proj.md")
        self.assertTrue(os.path.isfile(output))
        with open(output, encoding="utf-8") as f:
            bundle = f.read()
        self.assertIn('dc.require(dc.headerLink(dc.resolvePath("compiled-proj"), "B"))', bundle)

    def test_json_result(self):
        code, out, _ = self._run("games/proj", "A", "bundle", "--vault", self.vault,
                                 "--output-dir", "release", "--version-string", "2.0.0", "--json")
        self.assertEqual(code, 0)
        data = json.loads(out)
        self.assertTrue(data["success"])
        self.assertEqual(data["outputPath"], "release/bundle.md")
        self.assertEqual(data["modulesProcessed"], 2)
        self.assertEqual(data["versionPath"], "release/VERSION")

    def test_failure_exit_code(self):
        code, _, err = self._run("games/proj", "Missing", "--vault", self.vault)
        self.assertEqual(code, 1)
        self.assertIn("Main component 'Missing' not found", err)

    def test_entry_required(self):
        code, _, err = self._run("games/proj", "--vault", self.vault)
        self.assertEqual(code, 1)
        self.assertIn("entry module is required", err)

    def test_list_entries(self):
        code, out, _ = self._run("games/proj", "--list-entries", "--vault", self.vault)
        self.assertEqual(code, 0)
        self.assertEqual(out.split(), ["A"])

    def test_changelog_file(self):
        self._write("CHANGES.md", "# 2.0.0")
        code, _, err = self._run("games/proj", "A", "--vault", self.vault, "--changelog", "CHANGES.md")
        self.assertEqual(code, 0, err)
        changelog = os.path.join(self.vault, "games", "proj", "dist", "CHANGELOG.md")
        with open(changelog, encoding="utf-8") as f:
            self.assertEqual(f.read(), "# 2.0.0")


if __name__ == "__main__":
    unittest.main()
