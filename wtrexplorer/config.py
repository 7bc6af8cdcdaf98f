"""Configuration lookup.

Values come from, in increasing priority: the process environment, the defaults in configdef,
the user's wtrexplorerrc file and --set overrides given on the command line.
"""

import functools
import importlib.machinery
import importlib.util
import logging
import os
import sys
from types import ModuleType
from typing import Any, Optional

from wtrexplorer import configdef


CONFIG_FILE = 'wtrexplorerrc'

# User configuration file, loaded on first use
config_module = None  # type: Optional[ModuleType]

# Values set with --set
overrides = {}  # type: dict[str, Any]


def xdg_dir(var: str, home_subdir: str) -> str:
    """Return an XDG base directory, falling back to its usual place under $HOME."""
    if var in os.environ:
        return os.environ[var]
    if 'HOME' in os.environ:
        return os.path.join(os.environ['HOME'], home_subdir)
    return '.'


def config_dir() -> str:
    return xdg_dir('XDG_CONFIG_HOME', '.config')


def cache_dir() -> str:
    return xdg_dir('XDG_CACHE_HOME', '.cache')


def environ() -> dict[str, Any]:
    """Return every value that config strings may refer to.

    XDG_CONFIG_HOME and XDG_CACHE_HOME are always present, so the cache path can use them.
    """
    env = {**os.environ, **configdef.__dict__, **config().__dict__, **overrides}
    env.setdefault('XDG_CONFIG_HOME', config_dir())
    env.setdefault('XDG_CACHE_HOME', cache_dir())
    return env


def expandstr(var: str) -> str:
    """Expand {NAME} references in a string."""
    return var.format(**environ())


@functools.lru_cache(maxsize=None)
def expand(var: str) -> str:
    """Get a config value with its {NAME} references expanded."""
    return expandstr(get(var))


@functools.lru_cache(maxsize=None)
def get(var: str) -> Any:
    return environ()[var]


def load_config_file(configfn: str) -> ModuleType:
    """Execute a Python config file and return it as a module."""
    loader = importlib.machinery.SourceFileLoader(CONFIG_FILE, configfn)
    spec = importlib.util.spec_from_loader(CONFIG_FILE, loader)
    module = importlib.util.module_from_spec(spec)
    # No bytecode file is left next to the user's config file
    saved = sys.dont_write_bytecode
    sys.dont_write_bytecode = True
    try:
        loader.exec_module(module)
    finally:
        sys.dont_write_bytecode = saved
    return module


def config() -> ModuleType:
    """Return the user's config file as a module, or an empty one if there is none."""
    global config_module
    if config_module is None:
        configfn = os.path.join(config_dir(), CONFIG_FILE)
        if os.access(configfn, os.R_OK):
            logging.debug('Loading configuration from %s', configfn)
            config_module = load_config_file(configfn)
        else:
            logging.info('Configuration file %s not found', configfn)
            config_module = ModuleType('empty')
    return config_module


def reset():
    """Forget the loaded config file and all cached values."""
    global config_module
    config_module = None
    get.cache_clear()
    expand.cache_clear()


def add_override(name: str, value: Any):
    """Set a value that takes priority over every other source."""
    overrides[name] = value
    get.cache_clear()
    expand.cache_clear()
