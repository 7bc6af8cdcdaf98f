"""Record test results on a previously discovered test tree.

The tree belongs to the caller. Only outcomes are written to it; its nodes and their ids are
never added, removed or changed. Nodes that no result matches are left without an outcome,
which callers should show as not run.
"""

import collections
import logging
from collections.abc import Sequence
from typing import Any, Optional, Protocol, TypeVar

from wtrexplorer import config
from wtrexplorer.logdef import ParsedResult, ParsedResultMap, RunSummary
from wtrexplorer.logparser.wtrparse import strip_ansi
from wtrexplorer.reportdef import SuiteNode
from wtrexplorer.testcasedef import STATE_OUTCOMES, Outcome


class TreeNode(Protocol):
    """The parts of a test tree node that correlation uses."""

    label: str
    children: Sequence[Any]

    def set_outcome(self, outcome: Optional[Outcome], message: Optional[str] = None):
        raise NotImplementedError


Node = TypeVar('Node', bound=TreeNode)


def result_outcome(result: ParsedResult) -> tuple[Outcome, Optional[str]]:
    if result.passed:
        return Outcome.PASSED, None
    return Outcome.FAILED, result.message


def _count_labels(node: TreeNode, counts: collections.Counter):
    for child in node.children:
        counts[child.label] += 1
        _count_labels(child, counts)


def duplicate_titles(node: TreeNode, results: ParsedResultMap) -> frozenset[str]:
    """Return the result titles that match more than one node below this one."""
    counts = collections.Counter()  # type: collections.Counter[str]
    _count_labels(node, counts)
    return frozenset(label for label, count in counts.items()
                     if count > 1 and label in results)


def _apply_results(node: TreeNode, results: ParsedResultMap, ignore: frozenset[str]):
    for child in node.children:
        if child.label not in ignore and (result := results.get(child.label)):
            child.set_outcome(*result_outcome(result))
        else:
            _apply_results(child, results, ignore)


def apply_results(node: Node, results: ParsedResultMap, strict: Optional[bool] = None) -> Node:
    """Record results parsed from console output on the tree below a node.

    Each child whose label is a title in the results gets that result. Other children are
    searched in the same way, depth first. Results are matched on test title alone, so every
    node with a matching title gets the same result.

    Args:
        node: top of the tree; its own label is not matched
        results: parsed results keyed by test title
        strict: if true, titles found on more than one node get no result at all; defaults to
            the strict_correlation config value

    Returns: the same node
    """
    if strict is None:
        strict = config.get('strict_correlation')
    ignore = frozenset()  # type: frozenset[str]
    if strict:
        ignore = duplicate_titles(node, results)
        for title in sorted(ignore):
            logging.warning('Not recording result for "%s" since the name is not unique', title)
    _apply_results(node, results, ignore)
    return node


def _apply_suite(node: TreeNode, suite: SuiteNode, separator: str):
    suites = {s.full_title: s for s in suite.suites}
    tests = {t.full_title: t for t in suite.tests}
    for child in node.children:
        full_title = (f'{suite.full_title}{separator}{child.label}'
                      if suite.full_title else child.label)
        if (child_suite := suites.get(full_title)) is not None:
            _apply_suite(child, child_suite, separator)
        elif (test := tests.get(full_title)) is not None:
            child.set_outcome(STATE_OUTCOMES[test.state],
                              test.error.message if test.error else None)
        elif not suite.full_title:
            # Groups and files sit above the top suites and aren't part of any full title
            _apply_suite(child, suite, separator)


def apply_report(node: Node, root: SuiteNode, separator: Optional[str] = None) -> Node:
    """Record the results of a hierarchical report on the tree below a node.

    Suites and tests are matched by full title, built from the labels of the nodes below
    the outermost matched suite. Pending tests are recorded as skipped.

    Args:
        node: top of the tree; its own label is not matched
        root: root suite of the report
        separator: placed between labels to make a full title; defaults to the
            full_title_separator config value and must be the one used when the report was built

    Returns: the same node
    """
    if separator is None:
        separator = config.get('full_title_separator')
    _apply_suite(node, root, separator)
    return node


def mark_subtree(node: Node, outcome: Optional[Outcome], message: Optional[str] = None) -> Node:
    """Record the same outcome on a node and everything below it."""
    node.set_outcome(outcome, message)
    for child in node.children:
        mark_subtree(child, outcome, message)
    return node


def summary_message(summary: RunSummary) -> str:
    message = f'Test failed: {summary.failed_count} failure(s)'
    if output := strip_ansi(summary.output).strip():
        message += '\n\n' + output
    return message


def apply_summary(node: Node, summary: RunSummary) -> Node:
    """Record the verdict of a whole test run on the node that was run.

    A passing run marks everything below the node as passed. A failing run marks only the node
    itself as failed, unless it has a single child, in which case the whole subtree is marked
    failed. Results of individual tests applied afterward replace this verdict.

    Returns: the same node
    """
    if summary.passed:
        return mark_subtree(node, Outcome.PASSED)
    message = summary_message(summary)
    if len(node.children) == 1:
        return mark_subtree(node, Outcome.FAILED, message)
    node.set_outcome(Outcome.FAILED, message)
    return node


def apply_error(node: Node, message: str) -> Node:
    """Record that the run of a node could not be completed."""
    node.set_outcome(Outcome.ERRORED, message)
    return node
