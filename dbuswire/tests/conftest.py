"""Shared fixtures for dbuswire tests."""

import pytest

from dbuswire.tests.wire import message


def pytest_configure(config):
    """Keep test output short."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture
def make_message():
    """Build a Message from a signature and Python values."""
    return message
