"""Parses web-test-runner console output.

web-test-runner prints one line per test, indented below the names of its suites, starting with
a symbol giving the result:

    CookieSerializer [Chromium]
      loadAllMatching [Chromium]
        𐄂 finds all matching cookies

After the tests it prints a block of details for each failure, headed by the full test path:

    ❌ CookieSerializer > loadAllMatching > finds all matching cookies
          AssertionError: expected [] to deeply equal [...]

    Chromium: |██████████████████████████████| 1/1 test files | 4 passed, 1 failed

These are handled by two independent passes over the text. Result lines only show the test name
and not its suites, so results are keyed by the bare test name.
"""

import logging
import re
from collections.abc import Collection, Iterable
from typing import Optional

from wtrexplorer import config
from wtrexplorer.logdef import FailureBlock, ParsedResult, ParsedResultMap, RunSummary


# Indented result symbol followed by the test name.
# The symbol must be a single non-ASCII glyph so that indented error text, including diff lines
# starting with + or -, is never taken as a result.
RESULT_RE = re.compile(r'^\s+(?P<symbol>[^\x00-\x7f\w\s])\s+(?P<title>\S.*)$')

# Test counts from the progress line near the end
PASSED_COUNT_RE = re.compile(r'(\d+) passed')
FAILED_COUNT_RE = re.compile(r'(\d+) failed')

# capture ANSI X3.64 escape sequences added by the color output
STRIP_ANSI_RE = re.compile(
    '\x1b[- #%()*+./]|'
    '(?:\x1b\\[|\x9b)[ -?]*[@-~]|'  # CSI ... Cmd
    '(?:\x1b\\]|\x9d).*?(?:\x1b\\|[\x07\x9c])|'  # OSC ... (ST|BEL)
    '(?:\x1b[P^_]|[\x90\x9e\x9f]).*?(?:\x1b\\|\x9c)|'  # (DCS|PM|APC) ... ST
    '\x1b.|[\x80-\x9f]'
)


def strip_ansi(s: str) -> str:
    """Strip ANSI X3.64 escape sequences from string."""
    if not s:
        return s
    return STRIP_ANSI_RE.sub('', s)


def failure_block_re(marker: str, terminators: Iterable[str]) -> re.Pattern:
    """Build the expression matching one block of failure details.

    A block ends before a line starting with a terminator or with the failure marker of the next
    block, or at the end of the text.
    """
    ends = [re.escape(marker)] + [re.escape(t) for t in terminators if t]
    return re.compile(
        rf'{re.escape(marker)}[ \t]+(?P<path>[^\n]+?)[ \t]*\n'
        rf'(?P<body>.+?)(?=\n\s*(?:{"|".join(ends)}|\Z)|\Z)',
        re.DOTALL)


def parse_result_lines(text: str, pass_symbols: Optional[Collection[str]] = None
                       ) -> ParsedResultMap:
    """Find the pass/fail result lines.

    Lines starting with the failure marker or one of the ignored symbols look the same but
    don't hold test results.

    Returns: dict of test name to result; no messages are attached
    """
    if pass_symbols is None:
        pass_symbols = config.get('result_pass_symbols')
    skip_symbols = {config.get('failure_marker'), *config.get('result_ignore_symbols')}
    results = {}  # type: ParsedResultMap
    for l in strip_ansi(text).splitlines():
        if not l.strip():
            continue
        if (r := RESULT_RE.search(l)) and r.group('symbol') not in skip_symbols:
            title = r.group('title').strip()
            # A later test with the same name replaces an earlier one
            results[title] = ParsedResult(r.group('symbol') in pass_symbols)
    return results


def parse_failure_blocks(text: str,
                         marker: Optional[str] = None,
                         terminators: Optional[Iterable[str]] = None,
                         separator: Optional[str] = None) -> list[FailureBlock]:
    """Find the blocks of failure details.

    An unterminated block at the end of the text is still returned.
    """
    if marker is None:
        marker = config.get('failure_marker')
    if terminators is None:
        terminators = config.get('failure_terminators')
    if separator is None:
        separator = config.get('failure_path_separator')

    blocks = []
    for r in failure_block_re(marker, terminators).finditer(strip_ansi(text)):
        path = r.group('path').strip()
        title = path.split(separator)[-1].strip() or path
        blocks.append(FailureBlock(path, title, r.group('body').strip()))
    return blocks


def parse_test_results(output: str) -> ParsedResultMap:
    """Parse individual test results from web-test-runner output.

    Returns: dict of test name to result, with failure details attached where found.
      The dict is empty if no tests could be found.
    """
    clean = strip_ansi(output)
    results = parse_result_lines(clean)
    for block in parse_failure_blocks(clean):
        if result := results.get(block.title):
            result.message = block.message
        else:
            logging.debug('No test result found for failure %s', block.path)

    if not results:
        logging.debug('No web-test-runner test results could be found in the output')
    return results


def parse_run_summary(output: str, error_output: str = '', success: bool = True) -> RunSummary:
    """Summarize a complete test run.

    The counts come from the last progress line in the output, since earlier ones show
    a run still in progress.

    Args:
        output: captured standard output
        error_output: captured standard error
        success: whether the test command exited successfully
    """
    clean = strip_ansi(output)
    passed = PASSED_COUNT_RE.findall(clean)
    failed = FAILED_COUNT_RE.findall(clean)
    passed_count = int(passed[-1]) if passed else 0
    failed_count = int(failed[-1]) if failed else 0

    errors = []
    if error_output:
        errors.append(error_output)
    if failed_count > 0:
        errors.append(f'{failed_count} test(s) failed')

    return RunSummary(
        passed=success and failed_count == 0,
        test_count=passed_count + failed_count,
        passed_count=passed_count,
        failed_count=failed_count,
        output=output,
        errors=errors)
