"""Tree of known tests that results are recorded on.

Each node has a stable id built from its position:
    group:<name>                a group of test files
    file:<path>                 a test file
    <parent id>::<title>        a suite or test inside a file or suite
"""

import json
import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Optional

from wtrexplorer.reportdef import SuiteNode
from wtrexplorer.testcasedef import Outcome


# Separator between a parent id and the title of a child suite or test
ID_SEPARATOR = '::'

# Name of the group holding files that aren't in an explicit group
DEFAULT_GROUP = 'default'


@dataclass(eq=False)
class TestItem:
    """A node in the test tree."""
    __test__ = False

    id: str  # noqa: A003
    label: str
    children: list['TestItem'] = field(default_factory=list)
    outcome: Optional[Outcome] = None
    message: Optional[str] = None

    def set_outcome(self, outcome: Optional[Outcome], message: Optional[str] = None):
        self.outcome = outcome
        self.message = message

    def add(self, child: 'TestItem') -> 'TestItem':
        self.children.append(child)
        return child


def group_item(name: str, label: Optional[str] = None) -> TestItem:
    return TestItem(f'group:{name}', label or name)


def file_item(path: str) -> TestItem:
    return TestItem(f'file:{path}', os.path.basename(path))


def child_item(parent: TestItem, title: str) -> TestItem:
    """Add a suite or test with the given title to a parent node."""
    return parent.add(TestItem(f'{parent.id}{ID_SEPARATOR}{title}', title))


def populate_from_report(parent: TestItem, suite: SuiteNode):
    """Add the suites and tests of a discovery report below a node.

    Suites are added before tests, as they appear in the report.
    """
    for child_suite in suite.suites:
        populate_from_report(child_item(parent, child_suite.title), child_suite)
    for test in suite.tests:
        child_item(parent, test.title)


def walk(item: TestItem) -> Iterator[TestItem]:
    """Return this node and all its descendants, depth first."""
    yield item
    for child in item.children:
        yield from walk(child)


def find(item: TestItem, item_id: str) -> Optional[TestItem]:
    return next((i for i in walk(item) if i.id == item_id), None)


def clear_outcomes(item: TestItem):
    for i in walk(item):
        i.set_outcome(None)


def item_from_dict(d: dict[str, Any]) -> TestItem:
    """Create a tree from its decoded JSON form.

    Nodes without a label use their id. Recorded outcomes are kept.
    """
    item = TestItem(d['id'], d.get('label', d['id']))
    if 'outcome' in d:
        item.set_outcome(Outcome(d['outcome']), d.get('message'))
    item.children = [item_from_dict(c) for c in d.get('children') or []]
    return item


def item_to_dict(item: TestItem) -> dict[str, Any]:
    d = {'id': item.id, 'label': item.label}  # type: dict[str, Any]
    if item.outcome:
        d['outcome'] = item.outcome.value
    if item.message is not None:
        d['message'] = item.message
    if item.children:
        d['children'] = [item_to_dict(c) for c in item.children]
    return d


def load_tree(fn: str) -> TestItem:
    """Read a tree from a JSON file, without any outcomes from an earlier run.

    Raises OSError, or ValueError, KeyError or TypeError if the file does not hold a valid tree.
    """
    with open(fn, encoding='utf-8') as f:
        tree = item_from_dict(json.load(f))
    clear_outcomes(tree)
    return tree
