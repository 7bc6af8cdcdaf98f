"""Builds a hierarchical report from test run lifecycle events.

A reporter holds the state of exactly one run and is fed events in the order the test runner
emits them. The nesting of suites is tracked with a stack whose bottom is the unnamed root suite.
"""

import collections
import logging
from collections.abc import Iterable
from typing import Callable, Optional

from wtrexplorer import config
from wtrexplorer import reportdef
from wtrexplorer.reportdef import Report, ReportStats, SuiteNode, TestError, TestNode
from wtrexplorer.reporter.events import (Event, RunBegin, RunEnd, SuiteBegin, SuiteEnd,
                                         TestFail, TestPass, TestPending)
from wtrexplorer.testcasedef import TestState


class ReporterProtocolError(RuntimeError):
    """Raised when suite begin and end events don't nest properly.

    The report being built can no longer be trusted once this happens.
    """


class HierarchicalReporter:
    """Accumulates lifecycle events into a Report.

    Args:
        on_complete: called with the finished report when the run ends, exactly once
        separator: placed between names when building full titles; defaults to the
            full_title_separator config value
    """

    def __init__(self, on_complete: Callable[[Report], None], separator: Optional[str] = None):
        self.on_complete = on_complete
        if separator is None:
            separator = config.get('full_title_separator')
        self.separator = separator
        self.root = reportdef.new_root()
        self.suite_stack = [self.root]  # type: list[SuiteNode]
        self.suite_count = 0
        self.tally = collections.Counter()  # type: collections.Counter[TestState]
        self.finished = False

    @property
    def current_suite(self) -> SuiteNode:
        return self.suite_stack[-1]

    def full_title(self, title: str, given: Optional[str] = None) -> str:
        """Return the full title of a suite or test in the current suite."""
        if given is not None:
            return given
        if not self.current_suite.full_title:
            return title
        return f'{self.current_suite.full_title}{self.separator}{title}'

    def handle(self, event: Event):
        """Update the report with one event."""
        if self.finished:
            logging.warning('Ignoring %s event after the end of the run', type(event).__name__)
            return

        if isinstance(event, RunBegin):
            self.suite_count = 0
        elif isinstance(event, SuiteBegin):
            self.suite_begin(event)
        elif isinstance(event, SuiteEnd):
            self.suite_end(event)
        elif isinstance(event, TestPass):
            self.add_test(event.title, event.full_title, TestState.PASSED, event.duration)
        elif isinstance(event, TestFail):
            error = TestError(event.error.message, event.error.stack) if event.error else None
            self.add_test(event.title, event.full_title, TestState.FAILED, event.duration, error)
        elif isinstance(event, TestPending):
            self.add_test(event.title, event.full_title, TestState.PENDING)
        elif isinstance(event, RunEnd):
            self.run_end(event)
        else:
            logging.error('Unknown event type: %s', type(event).__name__)

    def consume(self, events: Iterable[Event]):
        for event in events:
            self.handle(event)

    def suite_begin(self, event: SuiteBegin):
        if event.root:
            return
        self.suite_count += 1
        suite = reportdef.add_suite(self.current_suite, event.title,
                                    self.full_title(event.title, event.full_title))
        self.suite_stack.append(suite)

    def suite_end(self, event: SuiteEnd):
        if event.root:
            return
        if len(self.suite_stack) <= 1:
            raise ReporterProtocolError(f'End of suite "{event.title}" that was never started')
        top = self.current_suite
        if (event.full_title is not None and event.full_title != top.full_title) or (
                event.full_title is None and event.title != top.title):
            raise ReporterProtocolError(
                f'End of suite "{event.title}" while in suite "{top.full_title}"')
        self.suite_stack.pop()

    def add_test(self, title: str, full_title: Optional[str], state: TestState,
                 duration: Optional[float] = None, error: Optional[TestError] = None):
        test = TestNode(title, self.full_title(title, full_title), state, duration, error)
        reportdef.add_test(self.current_suite, test)
        self.tally[state] += 1

    def run_end(self, event: RunEnd):
        if len(self.suite_stack) > 1:
            logging.warning('Run ended with %d suite(s) still open', len(self.suite_stack) - 1)

        def pick(given: Optional[int], counted: int) -> int:
            return counted if given is None else given

        stats = ReportStats(
            suites=self.suite_count,
            tests=pick(event.tests, sum(self.tally.values())),
            passes=pick(event.passes, self.tally[TestState.PASSED]),
            pending=pick(event.pending, self.tally[TestState.PENDING]),
            failures=pick(event.failures, self.tally[TestState.FAILED]),
            start=event.start,
            end=event.end,
            duration=event.duration)
        self.finished = True
        logging.debug('Run finished with %d suites and %d tests', stats.suites, stats.tests)
        self.on_complete(Report(stats, self.root))


def collect_report(events: Iterable[Event], separator: Optional[str] = None) -> Optional[Report]:
    """Build a report from a complete stream of events.

    Returns: the report, or None if the stream stopped before the end of the run
    """
    reports = []
    HierarchicalReporter(reports.append, separator).consume(events)
    if not reports:
        logging.info('Test run did not finish; no report available')
        return None
    return reports[0]
