"""Test correlate."""

import unittest

from .util import open_data, patch_config_get, read_data

from wtrexplorer import correlate  # noqa: I100
from wtrexplorer import reportdef
from wtrexplorer import testtree
from wtrexplorer.logdef import ParsedResult, RunSummary
from wtrexplorer.logparser import wtrparse
from wtrexplorer.reporter import events
from wtrexplorer.reporter.hierarchical import collect_report
from wtrexplorer.testcasedef import Outcome
from wtrexplorer.testtree import TestItem


def outcomes(tree: TestItem) -> dict[str, tuple]:
    return {i.id: (i.outcome, i.message) for i in testtree.walk(tree) if i.outcome}


def make_tree(layout: dict) -> TestItem:
    """Build a tree from nested dicts of label: children."""
    def add(parent: TestItem, children: dict):
        for label, grandchildren in children.items():
            add(testtree.child_item(parent, label), grandchildren)
    root = testtree.group_item('default')
    add(root, layout)
    return root


class TestApplyResults(unittest.TestCase):
    """Test correlate.apply_results."""

    def setUp(self):
        super().setUp()
        self.maxDiff = 4000

    def test_suite_children(self):
        tree = make_tree({'suite': {'a': {}, 'b': {}, 'c': {}}})
        returned = correlate.apply_results(tree, {
            'a': ParsedResult(True),
            'b': ParsedResult(False, 'x'),
        })
        self.assertIs(tree, returned)
        self.assertDictEqual({
            'group:default::suite::a': (Outcome.PASSED, None),
            'group:default::suite::b': (Outcome.FAILED, 'x'),
        }, outcomes(tree))

    def test_shallow_match_stops(self):
        tree = make_tree({'same': {'same': {}}, 'other': {'deep': {'same': {}}}})
        correlate.apply_results(tree, {'same': ParsedResult(True)})
        self.assertDictEqual({
            'group:default::same': (Outcome.PASSED, None),
            'group:default::other::deep::same': (Outcome.PASSED, None),
        }, outcomes(tree))

    def test_duplicates(self):
        tree = make_tree({'s1': {'dup': {}, 'one': {}}, 's2': {'dup': {}}})
        results = {'dup': ParsedResult(False, 'boom'), 'one': ParsedResult(True)}
        correlate.apply_results(tree, results, strict=False)
        self.assertDictEqual({
            'group:default::s1::dup': (Outcome.FAILED, 'boom'),
            'group:default::s1::one': (Outcome.PASSED, None),
            'group:default::s2::dup': (Outcome.FAILED, 'boom'),
        }, outcomes(tree))

    def test_duplicates_strict(self):
        tree = make_tree({'s1': {'dup': {}, 'one': {}}, 's2': {'dup': {}}})
        results = {'dup': ParsedResult(False, 'boom'), 'one': ParsedResult(True)}
        with self.assertLogs(level='WARNING'):
            correlate.apply_results(tree, results, strict=True)
        self.assertDictEqual({
            'group:default::s1::one': (Outcome.PASSED, None),
        }, outcomes(tree))

    def test_strict_from_config(self):
        tree = make_tree({'s1': {'dup': {}}, 's2': {'dup': {}}})
        with patch_config_get('strict_correlation', True), self.assertLogs(level='WARNING'):
            correlate.apply_results(tree, {'dup': ParsedResult(True)})
        self.assertDictEqual({}, outcomes(tree))

    def test_empty_results(self):
        tree = make_tree({'suite': {'a': {}}})
        correlate.apply_results(tree, {}, strict=False)
        self.assertDictEqual({}, outcomes(tree))

    def test_parsed_output(self):
        tree = make_tree({'CookieSerializer': {
            'SimpleTestCookie': {'serializes all values to strings': {}},
            'loadAllMatching': {'finds all matching cookies': {}, 'not in output': {}},
        }})
        correlate.apply_results(tree, wtrparse.parse_test_results(read_data('wtr_failures.log')),
                                strict=False)
        found = outcomes(tree)
        self.assertEqual(2, len(found))
        self.assertEqual(
            Outcome.PASSED,
            found['group:default::CookieSerializer::SimpleTestCookie::'
                  'serializes all values to strings'][0])
        outcome, message = found[
            'group:default::CookieSerializer::loadAllMatching::finds all matching cookies']
        self.assertEqual(Outcome.FAILED, outcome)
        self.assertTrue(message.startswith('AssertionError'))


class TestApplyReport(unittest.TestCase):
    """Test correlate.apply_report."""

    def setUp(self):
        super().setUp()
        self.maxDiff = 4000

    def make_file_tree(self) -> TestItem:
        group = testtree.group_item('default')
        tfile = group.add(testtree.file_item('test/cookie.tests.js'))
        cookie = testtree.child_item(tfile, 'CookieSerializer')
        simple = testtree.child_item(cookie, 'SimpleTestCookie')
        testtree.child_item(simple, 'serializes all values to strings')
        testtree.child_item(simple, 'accepts custom deserialization')
        testtree.child_item(simple, 'removed since discovery')
        load = testtree.child_item(cookie, 'loadAllMatching')
        testtree.child_item(load, 'finds all matching cookies')
        return group

    def test_event_report(self):
        with open_data('events_cookies.jsonl') as f:
            report = collect_report(events.read_events(f), separator=' > ')
        tree = correlate.apply_report(self.make_file_tree(), report.root, separator=' > ')
        prefix = 'file:test/cookie.tests.js::CookieSerializer::'
        self.assertDictEqual({
            prefix + 'SimpleTestCookie::serializes all values to strings': (Outcome.PASSED, None),
            prefix + 'SimpleTestCookie::accepts custom deserialization': (Outcome.SKIPPED, None),
            prefix + 'loadAllMatching::finds all matching cookies': (
                Outcome.FAILED, 'expected [] to deeply equal [ Array(1) ]'),
        }, outcomes(tree))

    def test_runner_separator(self):
        report = reportdef.extract_report(read_data('mocha_dryrun.log'))
        tree = self.make_file_tree()
        correlate.apply_report(tree, report.root, separator=' ')
        self.assertEqual(
            {'file:test/cookie.tests.js::CookieSerializer::loadAllMatching::'
             'finds all matching cookies': (Outcome.SKIPPED, None)},
            outcomes(tree))

    def test_wrong_separator(self):
        report = reportdef.extract_report(read_data('mocha_dryrun.log'))
        tree = self.make_file_tree()
        correlate.apply_report(tree, report.root, separator=' > ')
        self.assertDictEqual({}, outcomes(tree))


class TestMarkSubtree(unittest.TestCase):
    """Test correlate.mark_subtree."""

    def test_mark(self):
        tree = make_tree({'suite': {'a': {}, 'b': {}}})
        correlate.mark_subtree(tree.children[0], Outcome.ERRORED, 'runner crashed')
        self.assertIsNone(tree.outcome)
        self.assertEqual(3, len(outcomes(tree)))
        self.assertTrue(all(v == (Outcome.ERRORED, 'runner crashed')
                            for v in outcomes(tree).values()))


class TestApplySummary(unittest.TestCase):
    """Test correlate.apply_summary and correlate.apply_error."""

    def setUp(self):
        super().setUp()
        self.maxDiff = 4000

    def test_passed(self):
        tree = make_tree({'suite': {'a': {}, 'b': {}}})
        correlate.apply_summary(tree, RunSummary(True, 2, 2, 0, '   ✓ a\n   ✓ b\n'))
        self.assertEqual([Outcome.PASSED] * 4, [i.outcome for i in testtree.walk(tree)])

    def test_failed_single_child(self):
        tree = make_tree({'suite': {'a': {}, 'b': {}}})
        summary = wtrparse.parse_run_summary(read_data('wtr_failures.log'), '', False)
        correlate.apply_summary(tree, summary)
        found = {i.id: i.outcome for i in testtree.walk(tree)}
        self.assertEqual({Outcome.FAILED}, set(found.values()))
        self.assertEqual(4, len(found))
        self.assertTrue(tree.children[0].children[1].message.startswith(
            'Test failed: 2 failure(s)\n\n'))
        self.assertNotIn('\x1b', tree.message)

    def test_failed_several_children(self):
        tree = make_tree({'a': {}, 'b': {}})
        summary = RunSummary(False, 1, 0, 1, '\x1b[31m  𐄂 a\x1b[39m\n', ['1 test(s) failed'])
        correlate.apply_summary(tree, summary)
        self.assertEqual((Outcome.FAILED, 'Test failed: 1 failure(s)\n\n𐄂 a'),
                         (tree.outcome, tree.message))
        self.assertEqual([None, None], [c.outcome for c in tree.children])

    def test_results_replace_verdict(self):
        tree = make_tree({'suite': {'a': {}, 'b': {}}})
        output = '   ✓ a\n   𐄂 b\nChromium: |███| 1/1 test files | 1 passed, 1 failed\n'
        correlate.apply_summary(tree, wtrparse.parse_run_summary(output))
        correlate.apply_results(tree, wtrparse.parse_test_results(output), strict=False)
        self.assertEqual(Outcome.PASSED, tree.children[0].children[0].outcome)
        self.assertEqual((Outcome.FAILED, None), (tree.children[0].children[1].outcome,
                                                  tree.children[0].children[1].message))
        self.assertEqual(Outcome.FAILED, tree.outcome)

    def test_error(self):
        tree = make_tree({'a': {}, 'b': {}})
        self.assertIs(tree, correlate.apply_error(tree, 'npx: command not found'))
        self.assertEqual({'group:default': (Outcome.ERRORED, 'npx: command not found')},
                         outcomes(tree))
