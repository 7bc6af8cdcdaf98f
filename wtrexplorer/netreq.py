"""Network API functions
"""

import functools
import logging
import time
from typing import Callable, Optional, Type

import requests
from requests import adapters

import wtrexplorer
from wtrexplorer import config


HTTPError = requests.exceptions.HTTPError

# The User-Agent: header to use
USER_AGENT = f'wtrexplorer/{wtrexplorer.__version__}'


class Session(requests.Session):
    """Set up a requests session with a standard configuration"""

    def __init__(self, total: int = 4, backoff_factor: int = 10,
                 status_forcelist: Optional[list[int]] = None,
                 allowed_methods: Optional[list[str]] = None):
        super().__init__()
        if not status_forcelist:
            status_forcelist = [429, 500, 502, 503, 504]
        if not allowed_methods:
            allowed_methods = ['HEAD', 'GET', 'OPTIONS']

        # This should delay a total of 10+20+40+80 seconds before aborting
        retry_strategy = adapters.Retry(
            total=total, backoff_factor=backoff_factor, status_forcelist=status_forcelist,
            allowed_methods=allowed_methods)
        adapter = adapters.HTTPAdapter(max_retries=retry_strategy)
        self.mount('https://', adapter)
        self.mount('http://', adapter)
        self.headers['User-Agent'] = USER_AGENT


def retry_on_exception(func: Callable, exception: Type[Exception],
                       retries: int = 10, delay: float = 10):
    """Retry a function call on an exception, with fixed delay"""
    for attempt in range(retries):
        try:
            return func()
        except exception as e:
            exc = e
            if attempt + 1 < retries:
                logging.info(f'Download attempt {attempt} failed; retrying after delay')
                time.sleep(delay)

    # all attempts raised an exception, so raise it now
    raise exc


def fetch_text_onetry(session: requests.Session, url: str) -> str:
    resp = session.get(url, timeout=config.get('fetch_timeout_secs'))
    resp.raise_for_status()
    if not resp.encoding:
        # Console output is almost always UTF-8, and guessing gets the result symbols wrong
        resp.encoding = 'utf-8'
    return resp.text


def fetch_text(url: str, session: Optional[requests.Session] = None) -> str:
    """Retrieve captured test output from a URL.

    The download is retried if the connection drops part way through.
    """
    if not session:
        session = Session()
    logging.info('Retrieving %s', url)
    return retry_on_exception(functools.partial(fetch_text_onetry, session, url),
                              requests.exceptions.ChunkedEncodingError, retries=3)
