import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from dc_compiler.core.scanner import remove_comments


class TestRemoveComments(unittest.TestCase):

    def test_line_comment_keeps_newline(self):
        self.assertEqual(remove_comments("a // note\nb"), "a \nb")

    def test_block_comment(self):
        self.assertEqual(remove_comments("a /* x\ny */b"), "a b")

    def test_unterminated_block_comment_runs_to_end(self):
        self.assertEqual(remove_comments("a /* x"), "a ")

    def test_markers_inside_double_quoted_string(self):
        code = 'const u = "http://example.com/*x*/"; // trailing'
        self.assertEqual(remove_comments(code), 'const u = "http://example.com/*x*/"; ')

    def test_markers_inside_single_quoted_string(self):
        self.assertEqual(remove_comments("f('//not a comment')"), "f('//not a comment')")

    def test_markers_inside_template_literal(self):
        code = "const t = `/* keep */ // keep`;"
        self.assertEqual(remove_comments(code), code)

    def test_escaped_quote_does_not_close_string(self):
        code = '"a\\"//b" // c'
        self.assertEqual(remove_comments(code), '"a\\"//b" ')

    def test_escaped_backslash_before_closing_quote(self):
        code = "'a\\\\' // c"
        self.assertEqual(remove_comments(code), "'a\\\\' ")

    def test_commented_require_removed(self):
        code = '// dc.require("B.js")\nconst x = 1;'
        self.assertEqual(remove_comments(code), "\nconst x = 1;")


if __name__ == "__main__":
    unittest.main()
