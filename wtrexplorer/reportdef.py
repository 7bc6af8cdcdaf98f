"""Type definitions of hierarchical test reports.

The JSON form of a report uses the same field names as the mocha hierarchical reporter
(fullTitle, suites, tests, stats) so reports written by a child process can be read back here.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from wtrexplorer.testcasedef import TestState


# Outermost JSON object in output that may have other text around it
JSON_OBJECT_RE = re.compile(r'\{.*\}', re.DOTALL)


@dataclass(frozen=True)
class TestError:
    """Error attached to a failed test."""
    __test__ = False

    message: str
    stack: Optional[str] = None


@dataclass(frozen=True)
class TestNode:
    """Class to hold the result of a single test."""
    __test__ = False

    title: str                          # test name, unique within its suite
    full_title: str                     # test name prefixed by all its suite names
    state: TestState                    # test result
    duration: Optional[float] = None    # test duration in milliseconds
    error: Optional[TestError] = None   # only for failed tests


@dataclass
class SuiteNode:
    """A suite holding nested suites and tests, in the order they were found."""

    title: str
    full_title: str
    suites: list['SuiteNode'] = field(default_factory=list)
    tests: list[TestNode] = field(default_factory=list)


@dataclass
class ReportStats:
    suites: int = 0
    tests: int = 0
    passes: int = 0
    pending: int = 0
    failures: int = 0
    start: Optional[str] = None       # ISO 8601 time stamps
    end: Optional[str] = None
    duration: Optional[float] = None  # milliseconds


@dataclass
class Report:
    """One complete hierarchical snapshot of a single test execution."""

    stats: ReportStats
    root: SuiteNode


def new_root() -> SuiteNode:
    """Create the unnamed root suite."""
    return SuiteNode('', '')


def add_suite(parent: SuiteNode, title: str, full_title: str) -> SuiteNode:
    suite = SuiteNode(title, full_title)
    parent.suites.append(suite)
    return suite


def add_test(parent: SuiteNode, test: TestNode):
    parent.tests.append(test)


def iter_tests(suite: SuiteNode) -> Iterator[TestNode]:
    """Return all tests in a suite and its descendants, depth first.

    A suite's own tests come before those of its child suites.
    """
    yield from suite.tests
    for child in suite.suites:
        yield from iter_tests(child)


def count_tests(suite: SuiteNode) -> int:
    return sum(1 for _ in iter_tests(suite))


def suite_depth(suite: SuiteNode) -> int:
    """Return the maximum number of nested suites below this one."""
    if not suite.suites:
        return 0
    return 1 + max(suite_depth(s) for s in suite.suites)


def _drop_none(d: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


def _test_to_dict(test: TestNode) -> dict[str, Any]:
    d = _drop_none({
        'title': test.title,
        'fullTitle': test.full_title,
        'state': test.state.value,
        'duration': test.duration,
    })
    if test.error:
        d['error'] = _drop_none({'message': test.error.message, 'stack': test.error.stack})
    return d


def _suite_to_dict(suite: SuiteNode) -> dict[str, Any]:
    return {
        'title': suite.title,
        'fullTitle': suite.full_title,
        'suites': [_suite_to_dict(s) for s in suite.suites],
        'tests': [_test_to_dict(t) for t in suite.tests],
    }


def report_to_dict(report: Report) -> dict[str, Any]:
    """Convert a report into a form that can be serialized as JSON."""
    return {
        'stats': _drop_none({
            'suites': report.stats.suites,
            'tests': report.stats.tests,
            'passes': report.stats.passes,
            'pending': report.stats.pending,
            'failures': report.stats.failures,
            'start': report.stats.start,
            'end': report.stats.end,
            'duration': report.stats.duration,
        }),
        'root': _suite_to_dict(report.root),
    }


def _test_from_dict(d: dict[str, Any]) -> TestNode:
    error = None
    if err := d.get('error'):
        error = TestError(err.get('message', ''), err.get('stack'))
    return TestNode(d['title'], d.get('fullTitle', d['title']), TestState(d['state']),
                    d.get('duration'), error)


def _suite_from_dict(d: dict[str, Any]) -> SuiteNode:
    return SuiteNode(d.get('title', ''), d.get('fullTitle', ''),
                     [_suite_from_dict(s) for s in d.get('suites') or []],
                     [_test_from_dict(t) for t in d.get('tests') or []])


def report_from_dict(d: dict[str, Any]) -> Report:
    """Convert a decoded JSON report into a Report.

    Raises KeyError or ValueError if the report is malformed.
    """
    s = d.get('stats') or {}
    stats = ReportStats(
        suites=s.get('suites', 0),
        tests=s.get('tests', 0),
        passes=s.get('passes', 0),
        pending=s.get('pending', 0),
        failures=s.get('failures', 0),
        start=s.get('start'),
        end=s.get('end'),
        duration=s.get('duration'))
    return Report(stats, _suite_from_dict(d['root']))


def extract_report(output: str) -> Optional[Report]:
    """Find a JSON report in process output that may also hold other text.

    Returns: the report, or None if no usable report is present
    """
    if not (r := JSON_OBJECT_RE.search(output)):
        logging.debug('No JSON object found in the output')
        return None
    try:
        return report_from_dict(json.loads(r.group(0)))
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        logging.warning('Output does not hold a valid report: %s', e)
        return None
