"""Test summarize."""

import unittest

from wtrexplorer import reportdef  # noqa: I100
from wtrexplorer import summarize
from wtrexplorer import testtree
from wtrexplorer.logdef import ParsedResult
from wtrexplorer.reportdef import Report, ReportStats, TestError, TestNode
from wtrexplorer.testcasedef import Outcome, TestState


class TestSummarize(unittest.TestCase):

    def setUp(self):
        super().setUp()
        self.maxDiff = 4000

    def test_totals(self):
        results = {
            'one': ParsedResult(True),
            'two': ParsedResult(False, 'Error: boom\n    at two.js:1:1'),
            'three': ParsedResult(False),
        }
        self.assertEqual(['OK: 1\n', 'FAILED: 2\n', 'TOTAL: 3\n'],
                         summarize.summarize_totals(results))
        self.assertEqual(['OK: 1\n', 'FAILED: 2\n', 'TOTAL: 3\n',
                          'FAILED two\n', '    Error: boom\n', '        at two.js:1:1\n',
                          'FAILED three\n'],
                         summarize.summarize_totals(results, details=True))

    def test_report(self):
        root = reportdef.new_root()
        suite = reportdef.add_suite(root, 'outer', 'outer')
        reportdef.add_test(suite, TestNode('ok', 'outer ok', TestState.PASSED))
        reportdef.add_test(suite, TestNode('bad', 'outer bad', TestState.FAILED,
                                           error=TestError('boom')))
        inner = reportdef.add_suite(suite, 'inner', 'outer inner')
        reportdef.add_test(inner, TestNode('later', 'outer inner later', TestState.PENDING))
        report = Report(ReportStats(1, 3, 1, 1, 1, duration=12), root)
        self.assertEqual([
            'SUITES: 1\n',
            'OK: 1\n',
            'FAILED: 1\n',
            'PENDING: 1\n',
            'TOTAL: 3\n',
            'DURATION: 12 ms\n',
            'outer\n',
            '  ✓ ok\n',
            '  𐄂 bad\n',
            '      boom\n',
            '  inner\n',
            '    - later\n',
        ], summarize.summarize_report(report))

    def test_tree(self):
        tree = testtree.group_item('default')
        suite = testtree.child_item(tree, 'suite')
        testtree.child_item(suite, 'a').set_outcome(Outcome.PASSED)
        testtree.child_item(suite, 'b').set_outcome(Outcome.FAILED, 'x')
        self.assertEqual([
            'default [not run]\n',
            '  suite [not run]\n',
            '    a [passed]\n',
            '    b [failed]\n',
            '        x\n',
        ], summarize.summarize_tree(tree))
