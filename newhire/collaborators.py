"""Contracts for the capabilities the dialogue depends on but does not own.

The controller talks to three collaborators:

- a session store that keeps the in-progress record between turns and
  remembers sessions it cleared,
- a contract initiator that creates a signable agreement,
- a staff notifier that delivers an informational message to one address.

Implementations live in ``newhire.storage`` and ``newhire.backend``; tests
provide in-memory fakes.
"""

from __future__ import annotations

from typing import Optional, Protocol

from pydantic import BaseModel

from newhire.state import OnboardingState


class ContractInitiationError(Exception):
    """The remote signing service was unreachable or rejected the request."""


class NotificationError(Exception):
    """A staff notification could not be delivered."""


class ContractHandle(BaseModel):
    agreement_id: str
    signing_url: str


class SessionStore(Protocol):
    def load(self) -> Optional[OnboardingState]: ...

    def save(self, state: OnboardingState) -> None: ...

    def clear(self) -> None: ...

    def is_closed(self) -> bool: ...


class ContractInitiator(Protocol):
    async def initiate(
        self, email: str, first_name: str, last_name: str, agreement_title: str
    ) -> ContractHandle: ...


class StaffNotifier(Protocol):
    async def notify(self, recipient: str, subject: str, html_body: str) -> None: ...
