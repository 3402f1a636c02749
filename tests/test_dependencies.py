import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from dc_compiler.core.dependencies import extract_dependencies
from dc_compiler.utils import extract_module_name, extract_note_name, get_stylesheet_module_name, join_path


class TestExtractDependencies(unittest.TestCase):

    def test_all_reference_idioms(self):
        content = "\n".join([
            'const { A } = await dc.require("lib/A.js");',
            'const B = dc.require(dc.resolvePath("B.jsx"));',
            'const C = await dc.require(dc.headerLink(activeFile, "C"));',
            'const D = requireModuleByName("D");',
        ])
        self.assertEqual(extract_dependencies(content), ["A", "B", "C", "D"])

    def test_commented_references_ignored(self):
        content = "\n".join([
            '// const E = dc.require("E.js");',
            '/* dc.require("F.js") */',
            'const G = dc.require("G.ts");',
        ])
        self.assertEqual(extract_dependencies(content), ["G"])

    def test_duplicates_keep_first_appearance(self):
        content = "\n".join([
            'const x = dc.require("B.js");',
            'const y = dc.require("A.js");',
            'const z = dc.require(dc.resolvePath("B.js"));',
        ])
        self.assertEqual(extract_dependencies(content), ["B", "A"])

    def test_reference_inside_string_is_still_code(self):
        content = 'const label = "see dc.require"; const m = dc.require(\'M.tsx\');'
        self.assertEqual(extract_dependencies(content), ["M"])

    def test_no_dependencies(self):
        self.assertEqual(extract_dependencies("return { View: () => null };"), [])

    def test_non_string_content(self):
        self.assertEqual(extract_dependencies(None), [])


class TestPathHelpers(unittest.TestCase):

    def test_extract_module_name(self):
        self.assertEqual(extract_module_name("lib/utils.js"), "utils")
        self.assertEqual(extract_module_name("lib\\Widget.TSX"), "Widget")
        self.assertEqual(extract_module_name("Widget"), "Widget")
        self.assertIsNone(extract_module_name(".js"))
        self.assertIsNone(extract_module_name(""))

    def test_stylesheet_module_name(self):
        self.assertEqual(get_stylesheet_module_name("styles/theme.css"), "theme")
        self.assertIsNone(get_stylesheet_module_name(None))

    def test_note_name_and_join(self):
        self.assertEqual(extract_note_name("out.md"), "out")
        self.assertEqual(extract_note_name("out"), "out")
        self.assertEqual(join_path("/proj/", "dist", "out.md"), "proj/dist/out.md")


if __name__ == "__main__":
    unittest.main()
