import os
import tempfile
import unittest
from typing import List

import phlint
from phlint import NodeKind, RuleCode


def lint_source(source: str) -> List[phlint.Finding]:
    provider = phlint.TreeSitterTreeProvider()
    root = provider.parse_source(source, "sample.php")
    assert root is not None
    return phlint.PhutilLinter(provider).lint_tree(root)


class TranslationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.provider = phlint.TreeSitterTreeProvider()

    def test_call_shape(self) -> None:
        root = self.provider.parse_source("<?php\nqueryfx($conn, 'SELECT %d', $id);\n")
        calls = phlint.select_descendants_of_kind(root, NodeKind.CALL)
        self.assertEqual(len(calls), 1)
        self.assertEqual(phlint.callee_name(calls[0]), "queryfx")
        args = phlint.call_arguments(calls[0])
        self.assertEqual([arg.source_text for arg in args], ["$conn", "'SELECT %d'", "$id"])
        self.assertEqual(calls[0].source_range.line_start, 2)
        self.assertEqual(calls[0].source_range.col_start, 1)
        self.assertEqual(calls[0].source_range.file, "<source>")

    def test_constructor_shape(self) -> None:
        root = self.provider.parse_source("<?php\n$f = new ExecFuture('ls %s', $dir);\n")
        news = phlint.select_descendants_of_kind(root, NodeKind.NEW)
        self.assertEqual(len(news), 1)
        self.assertEqual(phlint.callee_name(news[0]), "ExecFuture")
        self.assertEqual(len(phlint.call_arguments(news[0])), 2)

    def test_string_classification(self) -> None:
        root = self.provider.parse_source(
            "<?php\n"
            "f('single', \"double\", \"hi $name\", 'a' . 'b', 'a' . $b, $c);\n"
        )
        call = phlint.select_descendants_of_kind(root, NodeKind.CALL)[0]
        flags = [phlint.is_constant_string(arg) for arg in phlint.call_arguments(call)]
        self.assertEqual(flags, [True, True, False, True, False, False])

    def test_heredoc_nowdoc_and_escape_classification(self) -> None:
        root = self.provider.parse_source(
            "<?php\n"
            "f(<<<EOT\nhello\nEOT\n);\n"
            "f(<<<'EOT'\nhi $x\nEOT\n);\n"
            "f(<<<EOT\nhi $x\nEOT\n);\n"
            "f(\"a\\$b\");\n"
            "f(\"{$a}\");\n"
        )
        calls = phlint.select_descendants_of_kind(root, NodeKind.CALL)
        flags = [phlint.is_constant_string(phlint.positional_argument(c, 0)) for c in calls]
        self.assertEqual(flags, [True, True, False, True, False])

    def test_deep_concatenation_chain(self) -> None:
        operands = 2500
        source = "<?php\n$x = pht(" + " . ".join(["'a'"] * operands) + ");\n"
        root = self.provider.parse_source(source)
        self.assertIsNotNone(root)
        call = phlint.select_descendants_of_kind(root, NodeKind.CALL)[0]
        self.assertTrue(phlint.is_constant_string(phlint.positional_argument(call, 0)))
        self.assertEqual(phlint.PhutilLinter(self.provider).lint_tree(root), [])

        dynamic = "<?php\n$x = pht(" + " . ".join(["'a'"] * operands + ["$b"]) + ");\n"
        findings = lint_source(dynamic)
        self.assertEqual([f.code for f in findings], [RuleCode.PHT_WITH_DYNAMIC_STRING])

    def test_deep_file_through_cli_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "deep.php")
            with open(path, "w", encoding="utf-8") as handle:
                handle.write("<?php\n$x = " + " . ".join(["$a"] * 2000) + ";\nexecx($cmd);\n")
            findings = phlint.PhutilLinter(self.provider).lint(path)
        self.assertEqual([f.code for f in findings], [RuleCode.UNSAFE_DYNAMIC_STRING])

    def test_columns_count_bytes(self) -> None:
        root = self.provider.parse_source("<?php\nf('é', pht($x));\n")
        pht_call = phlint.select_descendants_of_kind(root, NodeKind.CALL)[1]
        self.assertEqual(phlint.callee_name(pht_call), "pht")
        # "f('é', " is 8 bytes but 7 characters.
        self.assertEqual(pht_call.source_range.col_start, 9)

    def test_syntax_error_yields_no_tree(self) -> None:
        self.assertIsNone(self.provider.parse_source("<?php\npht(\n"))

    def test_missing_file_yields_no_tree(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertIsNone(
                self.provider.get_tree_for_source(os.path.join(tmp, "missing.php"))
            )

    def test_reads_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "a.php")
            with open(path, "w", encoding="utf-8") as handle:
                handle.write("<?php\npht($x);\n")
            findings = phlint.PhutilLinter(self.provider).lint(path)
        self.assertEqual(len(findings), 1)
        self.assertEqual(findings[0].location.source_range.file, path)


class ParsedRuleTests(unittest.TestCase):
    def test_pht(self) -> None:
        findings = lint_source(
            "<?php\n"
            "pht('literal');\n"
            "pht($var);\n"
            "pht();\n"
            "pht(\"Hello {$name}\");\n"
            "$obj->pht($var);\n"
        )
        self.assertEqual([f.code for f in findings], [RuleCode.PHT_WITH_DYNAMIC_STRING] * 2)
        self.assertEqual([f.location.source_range.line_start for f in findings], [3, 5])

    def test_nested_calls_in_source_order(self) -> None:
        findings = lint_source("<?php\npht(pht($x));\n")
        self.assertEqual(
            [f.location.source_text for f in findings], ["pht(pht($x))", "pht($x)"]
        )

    def test_unsafe_dynamic_string(self) -> None:
        findings = lint_source(
            "<?php\n"
            "execx('ls %s', $dir);\n"
            "execx($cmd);\n"
            "execx(/* cmd */ 'ls');\n"
            "qsprintf($conn, 'SELECT %d', $x);\n"
            "qsprintf($conn, $template);\n"
            "new ExecFuture($command);\n"
            "new ExecFuture('git status');\n"
            "foo($x);\n"
        )
        self.assertEqual(
            [f.message for f in findings],
            [
                "Parameter 1 of execx() should be a scalar string, otherwise it's not safe.",
                "Parameter 2 of qsprintf() should be a scalar string, otherwise it's not safe.",
                "Parameter 1 of ExecFuture() should be a scalar string, otherwise it's not safe.",
            ],
        )

    def test_named_and_spread_arguments(self) -> None:
        findings = lint_source(
            "<?php\n"
            "pht(text: $x);\n"
            "pht(text: 'x');\n"
            "execx(...$args);\n"
        )
        self.assertEqual(
            [(f.code, f.location.source_range.line_start) for f in findings],
            [
                (RuleCode.PHT_WITH_DYNAMIC_STRING, 2),
                (RuleCode.UNSAFE_DYNAMIC_STRING, 4),
            ],
        )
        self.assertIn("Parameter 1 of execx()", findings[1].message)

    def test_array_combine(self) -> None:
        findings = lint_source(
            "<?php\n"
            "array_combine($keys, $values);\n"
            "array_combine($x, $x);\n"
            "array_combine($a, $b, $c);\n"
        )
        self.assertEqual(len(findings), 1)
        self.assertEqual(findings[0].code, RuleCode.ARRAY_COMBINE)
        self.assertEqual(findings[0].location.source_text, "array_combine($x, $x)")

    def test_deprecated_function(self) -> None:
        findings = lint_source("<?php\nDeprecated_Function(1);\nphutil_tag('a');\n")
        self.assertEqual(len(findings), 1)
        self.assertEqual(findings[0].message, "This function is most likely deprecated.")

    def test_no_calls(self) -> None:
        self.assertEqual(lint_source("<?php\n$a = 'b';\necho $a;\n"), [])


if __name__ == "__main__":
    unittest.main()
