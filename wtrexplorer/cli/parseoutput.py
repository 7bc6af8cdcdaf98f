"""Parses captured web-test-runner console output into test results."""

import argparse
import dataclasses
import json
import logging
import sys

from wtrexplorer import argparsing
from wtrexplorer import correlate
from wtrexplorer import log
from wtrexplorer import netreq
from wtrexplorer import outputcache
from wtrexplorer import summarize
from wtrexplorer import testtree
from wtrexplorer.logparser import wtrparse


def parse_args(args=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Parse web-test-runner console output into test results')
    argparsing.arguments_logging(parser)
    argparsing.arguments_config(parser)
    argparsing.arguments_tree(parser)
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        '--url',
        help='Retrieve the output from this URL instead of from files')
    source.add_argument(
        '--cached',
        metavar='RUNID',
        help='Parse the output stored earlier with --save')
    parser.add_argument(
        '--save',
        metavar='RUNID',
        help='Store the output in the output cache under this run ID')
    parser.add_argument(
        '--strict',
        action='store_true',
        default=None,
        help="Don't record results on tests whose names are not unique in the tree")
    parser.add_argument(
        '--details',
        action='store_true',
        help='Show the failure details of each failed test')
    parser.add_argument(
        '--exit-status',
        type=int,
        default=0,
        help='Exit status of the test command that wrote the output; nonzero fails the whole run')
    parser.add_argument('files', nargs='*', type=argparse.FileType('r', encoding='utf-8'),
                        default=[sys.stdin])
    return parser.parse_args(args=args)


def read_output(args: argparse.Namespace) -> str:
    if args.url:
        return netreq.fetch_text(args.url)
    if args.cached:
        return outputcache.load_output(args.cached)
    return ''.join(f.read() for f in args.files)


def main(args=None) -> int:
    args = parse_args(args)
    log.setup(args)

    tree = None
    if args.tree:
        try:
            tree = testtree.load_tree(args.tree)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logging.error('Cannot read test tree %s: %s', args.tree, e)
            return 1

    try:
        output = read_output(args)
    except (OSError, RuntimeError) as e:
        # requests exceptions are OSErrors, too
        logging.error('Cannot read test output: %s', e)
        if tree:
            summarize.show_tree(correlate.apply_error(tree, str(e)), args.json)
        return 1

    if args.save:
        outputcache.store_output(args.save, output)
        logging.info('Stored output as run %s', args.save)

    results = wtrparse.parse_test_results(output)
    if tree:
        # The verdict of the whole run is replaced by any individual results
        summary = wtrparse.parse_run_summary(output, success=args.exit_status == 0)
        correlate.apply_summary(tree, summary)
        correlate.apply_results(tree, results, args.strict)
        summarize.show_tree(tree, args.json)
    elif results:
        if args.json:
            print(json.dumps({title: dataclasses.asdict(result)
                              for title, result in results.items()},
                             indent=2, ensure_ascii=False))
        else:
            summarize.show_totals(results, details=args.details)

    if not results:
        logging.error('No test results could be found in the output')
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
