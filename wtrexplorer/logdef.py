"""Type definitions of parsed console output."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ParsedResult:
    """Class to hold the result of a single test found in console output."""

    passed: bool                    # whether the test passed
    message: Optional[str] = None   # failure details (if any)


@dataclass(frozen=True)
class FailureBlock:
    """Details printed for one failed test."""

    path: str     # suite and test names, as printed
    title: str    # test name (last part of path)
    message: str  # failure details


@dataclass
class RunSummary:
    """Overall result of running a test command."""

    passed: bool
    test_count: int
    passed_count: int
    failed_count: int
    output: str
    errors: list[str] = field(default_factory=list)


# Test title -> result. Titles are not unique across suites; the last one found wins.
ParsedResultMap = dict[str, ParsedResult]
