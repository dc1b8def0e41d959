"""
Pytest configuration for the feedback desk tests.
Points storage at a temp directory and disables the Anthropic key
before the services are imported.
"""

import importlib.util
import os
import sys
import tempfile

_test_data_dir = tempfile.mkdtemp(prefix="artwin_test_")
os.environ["FEEDBACK_DATA_DIR"] = _test_data_dir
os.environ.pop("ANTHROPIC_API_KEY", None)

import pytest

from intake import (
    Department,
    FeedbackItem,
    FeedbackStore,
    FeedbackType,
    JsonFileStore,
    Role,
    Status,
    Urgency,
)

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def load_service_app(name):
    """Import <name>/app.py under a unique module name"""
    module_name = f"{name}_app"
    if module_name in sys.modules:
        return sys.modules[module_name]
    spec = importlib.util.spec_from_file_location(module_name, os.path.join(ROOT, name, "app.py"))
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def store(tmp_path):
    return FeedbackStore(JsonFileStore(str(tmp_path / "data")))


@pytest.fixture
def make_item():
    """Factory for feedback items with sensible defaults"""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        fields = dict(
            id=f"item-{counter['n']}",
            role=Role.EMPLOYEE,
            type=FeedbackType.COMPLAINT,
            department=Department.HR,
            message=f"Message number {counter['n']}",
            urgency=Urgency.NORMAL,
            status=Status.NEW,
            created_at=1_700_000_000_000 + counter["n"] * 1000,
            is_anonymous=False,
            name="Ivan Petrov",
            contact="+7 900 000 00 00",
        )
        fields.update(overrides)
        return FeedbackItem(**fields)

    return _make


@pytest.fixture
def sheets():
    """Sheet client double; no network"""
    from unittest.mock import MagicMock
    from intake import SheetsClient

    client = MagicMock(spec=SheetsClient)
    client.fetch_all.return_value = []
    return client


@pytest.fixture
def submit_app(store, sheets, monkeypatch):
    from intake import FallbackAssistant, FeedbackService

    module = load_service_app("submit")
    monkeypatch.setattr(module, "service", FeedbackService(store, sheets))
    monkeypatch.setattr(module, "assistant", FallbackAssistant())
    module.app.config["TESTING"] = True
    return module


@pytest.fixture
def dashboard_app(store, sheets, monkeypatch):
    from unittest.mock import MagicMock
    from intake import FallbackAssistant, FeedbackService, TelegramNotifier

    module = load_service_app("dashboard")
    monkeypatch.setattr(module, "service", FeedbackService(store, sheets))
    monkeypatch.setattr(module, "notifier", MagicMock(spec=TelegramNotifier))
    monkeypatch.setattr(module, "assistant", FallbackAssistant())
    module.app.config["TESTING"] = True
    return module
