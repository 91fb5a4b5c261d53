"""Common test fixtures for onboarding tests."""

from datetime import date
from typing import Optional

import pytest

from newhire import storage
from newhire.collaborators import ContractHandle, ContractInitiationError, NotificationError
from newhire.config import get_settings
from newhire.controller import DialogueController
from newhire.state import OnboardingState

CEO_EMAIL = "ceo@example.com"
DEV_EMAIL = "dev@example.com"
TODAY = date(2024, 5, 17)


class FakeStore:
    """Session store that remembers every call."""

    def __init__(self, state: Optional[OnboardingState] = None) -> None:
        self.state = state.model_copy(deep=True) if state else None
        self.saved: list[OnboardingState] = []
        self.clears = 0

    def load(self) -> Optional[OnboardingState]:
        return self.state.model_copy(deep=True) if self.state else None

    def save(self, state: OnboardingState) -> None:
        self.state = state.model_copy(deep=True)
        self.saved.append(self.state)

    def clear(self) -> None:
        self.state = None
        self.clears += 1

    def is_closed(self) -> bool:
        return self.state is None and self.clears > 0


class FakeInitiator:
    def __init__(self, handle: Optional[ContractHandle] = None, error: Optional[Exception] = None, store=None):
        self.handle = handle or ContractHandle(agreement_id="A1", signing_url="http://sign")
        self.error = error
        self.store = store
        self.calls: list[dict] = []
        self.stored_during_call: list[Optional[OnboardingState]] = []

    async def initiate(self, email, first_name, last_name, agreement_title):
        self.calls.append(
            {
                "email": email,
                "first_name": first_name,
                "last_name": last_name,
                "agreement_title": agreement_title,
            }
        )
        if self.store is not None:
            self.stored_during_call.append(self.store.load())
        if self.error is not None:
            raise self.error
        return self.handle


class FakeNotifier:
    def __init__(self, failing: tuple[str, ...] = ()):
        self.failing = set(failing)
        self.calls: list[tuple[str, str, str]] = []

    async def notify(self, recipient, subject, html_body):
        self.calls.append((recipient, subject, html_body))
        if recipient in self.failing:
            raise NotificationError(f"mailbox {recipient} unavailable")


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def initiator(store):
    return FakeInitiator(store=store)


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def controller(store, initiator, notifier):
    ctrl = DialogueController(
        store,
        initiator,
        notifier,
        recipients=[CEO_EMAIL, DEV_EMAIL],
        today=TODAY,
    )
    ctrl.start()
    return ctrl


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Keep settings independent of the developer's environment."""
    for var in ("STAFF_CEO_EMAIL", "STAFF_DEV_EMAIL", "REDIS_URL", "DISCORD_INVITE_URL"):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def memory_sessions():
    storage._memory.clear()
    storage._closed.clear()
    yield storage._memory
    storage._memory.clear()
    storage._closed.clear()


def failing_initiator(message: str, store=None) -> FakeInitiator:
    return FakeInitiator(error=ContractInitiationError(message), store=store)
