"""
End-to-end compilation against an in-memory vault.
"""
import os
import re
import sys
import unittest
from unittest.mock import patch

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from dc_compiler.core.compiler import compile_project
from dc_compiler.errors import StoreError
from dc_compiler.models import BundleOptions, CompileResult
from dc_compiler.store.memory import MemoryVaultStore

A_SOURCE = "\n".join([
    'const { helper } = await dc.require("lib/B.js");',
    'const styleCss = await app.vault.adapter.read("proj/styles/theme.css");',
    "function Main() {",
    "    // render",
    "    console.log(\"rendering\");",
    "    return <div><style>{styleCss}</style>{helper()}</div>;",
    "}",
    "return { Main };",
])
B_SOURCE = "function helper() { return 1; }\nreturn { helper };"
B_REF = 'await dc.require(dc.headerLink(dc.resolvePath("out"), "B"))'


def project_store(**extra):
    files = {
        "proj/A.jsx": A_SOURCE,
        "proj/lib/B.js": B_SOURCE,
        "proj/styles/theme.css": ".x { color: red; }",
    }
    files.update(extra)
    return MemoryVaultStore(files)


def strip_ws(text):
    return re.sub(r"\s+", "", text)


class TestCompileProject(unittest.TestCase):

    def test_successful_compile(self):
        store = project_store()
        result = compile_project(store, "proj", "A", "out.md")

        self.assertTrue(result.success, result.error)
        self.assertEqual(result.output_path, "dist/out.md")
        self.assertEqual(result.modules_processed, 2)
        self.assertEqual(result.stylesheets_processed, 1)

        bundle = store.files["dist/out.md"]
        self.assertLess(bundle.index("\n# B\n"), bundle.index("\n# A\n"))
        self.assertIn(f"const {{ helper }} = {B_REF};", bundle)
        self.assertIn('const styleCss = await dc.require(dc.headerLink(dc.resolvePath("out"), "theme"));', bundle)
        self.assertIn("## theme", bundle)
        self.assertIn("return { View: Main };", bundle)
        self.assertIn("<!-- Source: proj -->", bundle)

    def test_output_name_without_extension(self):
        store = project_store()
        result = compile_project(store, "proj", "A", "out", {"outputDir": "build/"})
        self.assertTrue(result.success, result.error)
        self.assertEqual(result.output_path, "build/out.md")
        self.assertIn("build/out.md", store.files)

    def test_cycle_fails_without_writing(self):
        store = MemoryVaultStore({
            "proj/A.js": 'dc.require("B.js");',
            "proj/B.js": 'dc.require("A.js");',
        })
        result = compile_project(store, "proj", "A", "out.md")
        self.assertFalse(result.success)
        self.assertEqual(result.error, "Circular dependency detected: A → B → A")
        self.assertFalse(store.exists("dist"))
        self.assertNotIn("dist/out.md", store.files)

    def test_missing_dependency(self):
        store = MemoryVaultStore({"proj/A.js": 'dc.require("Nope.js");'})
        result = compile_project(store, "proj", "A", "out.md")
        self.assertFalse(result.success)
        self.assertEqual(result.error, "Missing dependency: 'Nope' required by 'A'")

    def test_duplicate_names(self):
        store = MemoryVaultStore({"proj/A.js": "", "proj/x/A.ts": ""})
        result = compile_project(store, "proj", "A", "out.md")
        self.assertFalse(result.success)
        self.assertIn("Duplicate filename detected: A", result.error)

    def test_missing_directory(self):
        result = compile_project(MemoryVaultStore(), "nope", "A", "out.md")
        self.assertFalse(result.success)
        self.assertEqual(result.error, "Directory does not exist: nope")

    def test_entry_not_found(self):
        result = compile_project(project_store(), "proj", "Main", "out.md")
        self.assertFalse(result.success)
        self.assertEqual(result.error, "Main component 'Main' not found in project directory")

    def test_validation(self):
        store = project_store()
        self.assertEqual(compile_project(store, "", "A", "out.md").error,
                         "Project directory must be a non-empty string")
        self.assertEqual(compile_project(store, "proj", "", "out.md").error,
                         "Main component name must be a non-empty string")
        self.assertEqual(compile_project(store, "proj", "A", None).error,
                         "Output filename must be a non-empty string")

    def test_invalid_options(self):
        result = compile_project(project_store(), "proj", "A", "out.md", {"minify": "yes"})
        self.assertFalse(result.success)
        self.assertTrue(result.error.startswith("Invalid options"))

    def test_missing_stylesheet_is_soft(self):
        store = project_store()
        del store.files["proj/styles/theme.css"]
        result = compile_project(store, "proj", "A", "out.md")
        self.assertTrue(result.success, result.error)
        self.assertEqual(result.stylesheets_processed, 0)
        bundle = store.files["dist/out.md"]
        self.assertIn('app.vault.adapter.read("proj/styles/theme.css")', bundle)
        self.assertNotIn("# CSS Styles", bundle)

    def test_write_failure_reported(self):
        store = project_store()
        with patch.object(MemoryVaultStore, "write", side_effect=StoreError("disk full", "dist/out.md")):
            result = compile_project(store, "proj", "A", "out.md")
        self.assertFalse(result.success)
        self.assertEqual(result.error, "Failed to write file: disk full")
        self.assertEqual(result.modules_processed, 2)

    def test_minify_keeps_every_rewritten_reference(self):
        plain_store = project_store()
        compile_project(plain_store, "proj", "A", "out.md")
        min_store = project_store()
        result = compile_project(min_store, "proj", "A", "out.md", BundleOptions(minify=True))

        self.assertTrue(result.success, result.error)
        minified = min_store.files["dist/out.md"]
        self.assertIn("<!-- Minified: Yes -->", minified)
        self.assertNotIn("console.log", minified)
        self.assertNotIn("// render", minified)

        plain = plain_store.files["dist/out.md"]
        references = re.findall(r"dc\.require\(dc\.headerLink\(dc\.resolvePath\(\"out\"\), \"\w+\"\)\)", plain)
        self.assertTrue(references)
        for ref in references:
            self.assertIn(strip_ws(ref), strip_ws(minified))

    def test_obfuscate(self):
        store = project_store()
        result = compile_project(store, "proj", "A", "out.md", {"minify": True, "obfuscate": True})
        self.assertTrue(result.success, result.error)
        bundle = store.files["dist/out.md"]
        self.assertIn("<!-- Minified: Yes (Obfuscated) -->", bundle)
        self.assertIn('dc.require(dc.headerLink(dc.resolvePath("out"),"B"))', bundle)
        self.assertIn("function helper(", bundle)
        self.assertIn("return { View: Main };", bundle)
        self.assertNotIn("styleCss", bundle)

    def test_obfuscate_keeps_reference_targets(self):
        a_source = A_SOURCE.replace(
            "function Main() {",
            'const theme = "dark";\nconst widget = helper();\nfunction Main() {',
        )
        store = project_store(**{"proj/A.jsx": a_source})
        result = compile_project(store, "proj", "A", "compiled-widget.md", {"minify": True, "obfuscate": True})
        self.assertTrue(result.success, result.error)
        bundle = store.files["dist/compiled-widget.md"]
        self.assertIn('dc.require(dc.headerLink(dc.resolvePath("compiled-widget"),"B"))', bundle)
        self.assertIn('dc.require(dc.headerLink(dc.resolvePath("compiled-widget"),"theme"))', bundle)
        self.assertNotIn("const theme=", bundle)
        self.assertNotIn("const widget=", bundle)

    def test_minify_keeps_statement_after_template_stylesheet(self):
        store = MemoryVaultStore({
            "proj/A.jsx": "\n".join([
                'const base = "proj";',
                "const themeCss = await app.vault.adapter.read(`${base}/theme.css`);",
                "const other = 1;",
                "function Main() { return <div>{themeCss}{other}</div>; }",
                "return { Main };",
            ]),
            "proj/assets/theme.css": ".x { color: red; }",
        })
        result = compile_project(store, "proj", "A", "out.md", BundleOptions(minify=True))
        self.assertTrue(result.success, result.error)
        self.assertEqual(result.stylesheets_processed, 1)
        self.assertIn('"theme"));const other=1;', store.files["dist/out.md"])

    def test_auxiliary_outputs(self):
        store = project_store(**{"proj/README.md": "# Readme"})
        options = {
            "version": "1.2.0",
            "changelog": "# Changes",
            "outputDir": "proj/dist",
            "additionalFiles": ["proj/README.md", "proj/missing.txt"],
        }
        result = compile_project(store, "proj", "A", "out.md", options)

        self.assertTrue(result.success, result.error)
        self.assertEqual(result.version_path, "proj/dist/VERSION")
        self.assertEqual(result.changelog_path, "proj/dist/CHANGELOG.md")
        self.assertEqual(result.copied_files, ["proj/dist/README.md"])
        self.assertEqual(store.files["proj/dist/VERSION"], "1.2.0")
        self.assertEqual(store.files["proj/dist/README.md"], "# Readme")
        self.assertIn("<!-- Version: 1.2.0 -->", store.files["proj/dist/out.md"])

    def test_blank_version_ignored(self):
        store = project_store()
        result = compile_project(store, "proj", "A", "out.md", {"version": "   "})
        self.assertTrue(result.success, result.error)
        self.assertIsNone(result.version_path)
        self.assertNotIn("dist/VERSION", store.files)


class TestCompileResult(unittest.TestCase):

    def test_to_dict_success(self):
        result = CompileResult(success=True, output_path="dist/out.md", modules_processed=2,
                               stylesheets_processed=1, version_path="dist/VERSION")
        self.assertEqual(result.to_dict(), {
            "success": True,
            "outputPath": "dist/out.md",
            "modulesProcessed": 2,
            "stylesheetsProcessed": 1,
            "versionPath": "dist/VERSION",
        })

    def test_to_dict_failure(self):
        self.assertEqual(CompileResult(success=False, error="boom").to_dict(), {
            "success": False,
            "modulesProcessed": 0,
            "stylesheetsProcessed": 0,
            "error": "boom",
        })


if __name__ == "__main__":
    unittest.main()
