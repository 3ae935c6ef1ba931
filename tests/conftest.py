import logging

import pytest

from statekeeper import State


@pytest.fixture
def make_state():
    def _make(**kwargs):
        return State({"UNKNOWN": {"id": 0}, "OK": {"id": 1}, "NOT_OK": {"id": 2}}, **kwargs)

    return _make


@pytest.fixture
def state(make_state):
    return make_state()


class Listener:
    def __init__(self):
        self.last_target = None
        self.invocation_count = 0
        self.seen = []

    def callback(self, target):
        self.last_target = target
        self.invocation_count += 1
        self.seen.append(target.current_name)


@pytest.fixture
def listener():
    return Listener()


@pytest.fixture(autouse=True)
def _reset_statekeeper_logger():
    yield
    # setup_logging() turns propagation off; restore it for caplog
    logger = logging.getLogger("statekeeper")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("LOG_LEVEL", "STATEKEEPER_CONFIG", "STATEKEEPER_MAX_DEPTH", "STATEKEEPER_INITIAL"):
        monkeypatch.delenv(name, raising=False)
