"""Test case states and outcomes."""

from enum import Enum


class TestState(Enum):
    """State of a single test as reported by the test runner."""
    __test__ = False

    PASSED = 'passed'    # test succeeded
    FAILED = 'failed'    # test failed
    PENDING = 'pending'  # test was not run (it.skip() or no body)


class Outcome(Enum):
    """Result recorded on a node of a correlated test tree."""

    PASSED = 'passed'    # test succeeded
    FAILED = 'failed'    # test failed, possibly with a message
    ERRORED = 'errored'  # the run itself failed before the test could report
    SKIPPED = 'skipped'  # test was pending


# How the runner's test state is shown on a test tree node
STATE_OUTCOMES = {
    TestState.PASSED: Outcome.PASSED,
    TestState.FAILED: Outcome.FAILED,
    TestState.PENDING: Outcome.SKIPPED,
}
