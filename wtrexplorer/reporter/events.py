"""Test run lifecycle events.

These are the only events the hierarchical reporter consumes. A test runner in another process
can write them as JSON, one object per line, with an "event" member naming the event:

    {"event": "run-begin"}
    {"event": "suite-begin", "title": "CookieSerializer", "root": false}
    {"event": "test-fail", "title": "finds all matching cookies", "duration": 4,
     "error": {"message": "expected [] to deeply equal [...]", "stack": "..."}}
    {"event": "suite-end", "title": "CookieSerializer", "root": false}
    {"event": "run-end", "stats": {"start": "2024-05-01T10:00:00.000Z"}}

fullTitle may be given on suite and test events to use the runner's own full title.
"""

import json
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Optional, Union


@dataclass(frozen=True)
class RunBegin:
    pass


@dataclass(frozen=True)
class SuiteBegin:
    title: str
    full_title: Optional[str] = None
    root: bool = False


@dataclass(frozen=True)
class SuiteEnd:
    title: str
    full_title: Optional[str] = None
    root: bool = False


@dataclass(frozen=True)
class ErrorInfo:
    message: str
    stack: Optional[str] = None


@dataclass(frozen=True)
class TestPass:
    __test__ = False

    title: str
    full_title: Optional[str] = None
    duration: Optional[float] = None


@dataclass(frozen=True)
class TestFail:
    __test__ = False

    title: str
    full_title: Optional[str] = None
    duration: Optional[float] = None
    error: Optional[ErrorInfo] = None


@dataclass(frozen=True)
class TestPending:
    __test__ = False

    title: str
    full_title: Optional[str] = None


@dataclass(frozen=True)
class RunEnd:
    """End of the run, with the runner's totals if it has them."""

    tests: Optional[int] = None
    passes: Optional[int] = None
    pending: Optional[int] = None
    failures: Optional[int] = None
    start: Optional[str] = None
    end: Optional[str] = None
    duration: Optional[float] = None


Event = Union[RunBegin, SuiteBegin, SuiteEnd, TestPass, TestFail, TestPending, RunEnd]


def _error_from_json(err: Any) -> Optional[ErrorInfo]:
    if not err:
        return None
    if isinstance(err, str):
        return ErrorInfo(err)
    if not isinstance(err, dict):
        raise ValueError(f'error must be a string or an object, not {type(err).__name__}')
    return ErrorInfo(str(err.get('message', '')), err.get('stack'))


def event_from_json(obj: dict[str, Any]) -> Optional[Event]:
    """Convert one decoded JSON event into an Event.

    Raises KeyError if a required member is missing, or ValueError if a member is malformed.

    Returns: the event, or None if the event name is not known
    """
    name = obj.get('event')
    if name == 'run-begin':
        return RunBegin()
    if name == 'suite-begin':
        return SuiteBegin(obj.get('title', ''), obj.get('fullTitle'), bool(obj.get('root')))
    if name == 'suite-end':
        return SuiteEnd(obj.get('title', ''), obj.get('fullTitle'), bool(obj.get('root')))
    if name == 'test-pass':
        return TestPass(obj['title'], obj.get('fullTitle'), obj.get('duration'))
    if name == 'test-fail':
        return TestFail(obj['title'], obj.get('fullTitle'), obj.get('duration'),
                        _error_from_json(obj.get('error')))
    if name == 'test-pending':
        return TestPending(obj['title'], obj.get('fullTitle'))
    if name == 'run-end':
        stats = obj.get('stats') or {}
        if not isinstance(stats, dict):
            raise ValueError(f'stats must be an object, not {type(stats).__name__}')
        return RunEnd(
            tests=stats.get('tests'),
            passes=stats.get('passes'),
            pending=stats.get('pending'),
            failures=stats.get('failures'),
            start=stats.get('start'),
            end=stats.get('end'),
            duration=stats.get('duration'))
    logging.warning('Unknown test run event: %s', name)
    return None


def read_events(lines: Iterable[str]) -> Iterator[Event]:
    """Decode a stream of JSON events, one per line.

    Blank lines and unknown events are skipped. Raises ValueError on a line that isn't a valid
    event object.
    """
    for num, l in enumerate(lines, 1):
        if not l.strip():
            continue
        try:
            obj = json.loads(l)
        except json.JSONDecodeError as e:
            raise ValueError(f'Invalid event on line {num}: {e}') from e
        if not isinstance(obj, dict):
            raise ValueError(f'Invalid event on line {num}: not an object')
        try:
            event = event_from_json(obj)
        except KeyError as e:
            raise ValueError(f'Missing {e} in event on line {num}') from e
        except ValueError as e:
            raise ValueError(f'Invalid event on line {num}: {e}') from e
        if event:
            yield event
