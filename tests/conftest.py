# tests/conftest.py

import logging
from collections.abc import Iterator

import pytest


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    """
    Undo configure_logging after each test so caplog keeps seeing records.
    """
    yield

    package_logger = logging.getLogger("modularguard_action")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)
