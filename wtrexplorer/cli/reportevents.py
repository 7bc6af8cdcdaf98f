"""Builds a hierarchical test report from a captured test run.

The input is either a stream of lifecycle events, one JSON object per line, or the output of a
discovery run holding a JSON report among other text.
"""

import argparse
import itertools
import json
import logging
import sys
from typing import Optional

from wtrexplorer import argparsing
from wtrexplorer import correlate
from wtrexplorer import log
from wtrexplorer import reportdef
from wtrexplorer import summarize
from wtrexplorer import testtree
from wtrexplorer.reportdef import Report
from wtrexplorer.reporter import events
from wtrexplorer.reporter import hierarchical


def parse_args(args=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Build a hierarchical test report from a captured test run')
    argparsing.arguments_logging(parser)
    argparsing.arguments_config(parser)
    argparsing.arguments_tree(parser)
    parser.add_argument(
        '--format',
        choices=['events', 'report'],
        default='events',
        help='Input format: JSON lifecycle events, or output holding a JSON report')
    parser.add_argument(
        '--separator',
        help='Separator between names in full titles, if not the configured one')
    parser.add_argument(
        '--discover',
        metavar='TESTFILE',
        help='Write a test tree for this test file holding the suites and tests in the report')
    parser.add_argument('files', nargs='*', type=argparse.FileType('r', encoding='utf-8'),
                        default=[sys.stdin])
    return parser.parse_args(args=args)


def read_report(args: argparse.Namespace) -> Optional[Report]:
    """Read the report in the requested input format.

    Raises ValueError or ReporterProtocolError if the events are not valid.
    """
    if args.format == 'report':
        return reportdef.extract_report(''.join(f.read() for f in args.files))
    lines = itertools.chain.from_iterable(args.files)
    return hierarchical.collect_report(events.read_events(lines), args.separator)


def main(args=None) -> int:
    args = parse_args(args)
    log.setup(args)

    try:
        report = read_report(args)
    except (ValueError, hierarchical.ReporterProtocolError) as e:
        logging.error('Invalid test run events: %s', e)
        return 1
    if not report:
        logging.error('No complete test report was found')
        return 1

    if args.discover:
        tree = testtree.file_item(args.discover)
        testtree.populate_from_report(tree, report.root)
        summarize.show_tree(tree, as_json=True)
    elif args.tree:
        try:
            tree = testtree.load_tree(args.tree)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logging.error('Cannot read test tree %s: %s', args.tree, e)
            return 1
        correlate.apply_report(tree, report.root, args.separator)
        summarize.show_tree(tree, args.json)
    elif args.json:
        print(json.dumps(reportdef.report_to_dict(report), indent=2, ensure_ascii=False))
    else:
        print(''.join(summarize.summarize_report(report)), end='')
    return 0


if __name__ == '__main__':
    sys.exit(main())
