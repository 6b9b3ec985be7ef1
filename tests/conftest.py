"""Pytest configuration for agentzero tests.

Shared configuration for all test suites.
"""

import logging
import pathlib
import sys

import pytest

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Add project root to path for all tests to ensure imports work
PROJECT_ROOT = pathlib.Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))
sys.path.insert(0, str(PROJECT_ROOT / "tests"))


@pytest.fixture
def user_dir(tmp_path, monkeypatch) -> pathlib.Path:
    """An empty agentzero user directory, so tests never read ~/.agentzero."""
    path = tmp_path / "agentzero-home"
    path.mkdir()
    monkeypatch.setenv("AGENTZERO_HOME", str(path))
    return path


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "solver: test runs the Z3 solver")


_AGENTZERO_LOGGERS = ("", "AgentZero", "AgentZero.translator", "AgentZero.solver", "AgentZero.smt2")


@pytest.fixture
def restore_logging():
    """Undo configure_loggers() so file handlers do not outlive the test."""
    saved = {}
    for name in _AGENTZERO_LOGGERS:
        log = logging.getLogger(name)
        saved[name] = (list(log.handlers), log.level, log.propagate)
    yield
    for name, (handlers, level, propagate) in saved.items():
        log = logging.getLogger(name)
        for handler in log.handlers:
            if handler not in handlers:
                handler.close()
        log.handlers = handlers
        log.setLevel(level)
        log.propagate = propagate


@pytest.fixture
def agentzero_caplog(caplog):
    """caplog that also sees records of AgentZero loggers with propagate off."""
    attached = []
    for name in _AGENTZERO_LOGGERS[1:]:
        log = logging.getLogger(name)
        if caplog.handler not in log.handlers:
            log.addHandler(caplog.handler)
            attached.append(log)
    yield caplog
    for log in attached:
        log.removeHandler(caplog.handler)
