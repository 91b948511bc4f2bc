"""Tests for the Rich logging helpers."""

import logging

import pytest
from rich.console import Console
from rich.logging import RichHandler

from content_mapper.logging_utils import get_logger, setup_logging


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    httpx_level = logging.getLogger("httpx").level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("httpx").setLevel(httpx_level)


def test_get_logger_namespaces_names():
    assert get_logger().name == "content_mapper"
    assert get_logger("content_mapper.session").name == "content_mapper.session"
    assert get_logger("plugins").name == "content_mapper.plugins"


def test_setup_logging_installs_rich_handler(restore_root):
    setup_logging("warning", console=Console(stderr=True))
    assert restore_root.level == logging.WARNING
    assert [type(handler) for handler in restore_root.handlers] == [RichHandler]
    assert logging.getLogger("httpx").level == logging.WARNING


def test_unknown_level_falls_back_to_info(restore_root):
    setup_logging("chatty")
    assert restore_root.level == logging.INFO


def test_debug_keeps_request_logging(restore_root):
    setup_logging(logging.DEBUG)
    assert logging.getLogger("httpx").level == logging.DEBUG
