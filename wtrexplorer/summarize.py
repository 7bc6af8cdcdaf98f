"""Text summaries of parsed results, reports and test trees"""

import io
import json
from typing import List

from wtrexplorer import testtree
from wtrexplorer.logdef import ParsedResultMap
from wtrexplorer.reportdef import Report, SuiteNode
from wtrexplorer.testcasedef import TestState
from wtrexplorer.testtree import TestItem


def show_totals(results: ParsedResultMap, details: bool = False):
    print(''.join(summarize_totals(results, details)), end='')


def summarize_totals(results: ParsedResultMap, details: bool = False) -> List[str]:
    f = io.StringIO()
    print("OK:", len([1 for x in results.values() if x.passed]), file=f)
    print("FAILED:", len([1 for x in results.values() if not x.passed]), file=f)
    print("TOTAL:", len(results), file=f)
    if details:
        # Display the failures with their messages
        for title, result in results.items():
            if not result.passed:
                print(f'FAILED {title}', file=f)
                if result.message:
                    for l in result.message.splitlines():
                        print(f'    {l}', file=f)
    f.seek(0)
    return f.readlines()


def summarize_report(report: Report) -> List[str]:
    f = io.StringIO()
    print("SUITES:", report.stats.suites, file=f)
    print("OK:", report.stats.passes, file=f)
    print("FAILED:", report.stats.failures, file=f)
    print("PENDING:", report.stats.pending, file=f)
    print("TOTAL:", report.stats.tests, file=f)
    if report.stats.duration is not None:
        print(f"DURATION: {report.stats.duration} ms", file=f)
    _print_suite(report.root, 0, f)
    f.seek(0)
    return f.readlines()


STATE_SYMBOLS = {
    TestState.PASSED: '✓',
    TestState.FAILED: '𐄂',
    TestState.PENDING: '-',
}


def _print_suite(suite: SuiteNode, depth: int, f: io.StringIO):
    indent = '  ' * depth
    if suite.title:
        print(f'{indent}{suite.title}', file=f)
        indent += '  '
        depth += 1
    for test in suite.tests:
        print(f'{indent}{STATE_SYMBOLS[test.state]} {test.title}', file=f)
        if test.error:
            print(f'{indent}    {test.error.message}', file=f)
    for child in suite.suites:
        _print_suite(child, depth, f)


def show_tree(item: TestItem, as_json: bool = False):
    if as_json:
        print(json.dumps(testtree.item_to_dict(item), indent=2, ensure_ascii=False))
    else:
        print(''.join(summarize_tree(item)), end='')


def summarize_tree(item: TestItem, depth: int = 0) -> List[str]:
    """Show a test tree with the outcome of each node."""
    outcome = item.outcome.value if item.outcome else 'not run'
    lines = [f"{'  ' * depth}{item.label} [{outcome}]\n"]
    if item.message:
        lines.extend(f"{'  ' * depth}    {l}\n" for l in item.message.splitlines())
    for child in item.children:
        lines.extend(summarize_tree(child, depth + 1))
    return lines
