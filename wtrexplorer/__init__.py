"""Test result model and console output parser for web-test-runner."""

__version__ = '0.3'
