from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from pydantic import BaseModel, Field

from newhire import catalog, engine
from newhire.collaborators import ContractInitiator, SessionStore, StaffNotifier
from newhire.graph import Turn, turn_graph
from newhire.logging import get_logger
from newhire.state import OnboardingState, Step

logger = get_logger(__name__)


class Reply(BaseModel):
    message: str
    step: Step
    data: dict[str, Any] = Field(default_factory=dict)
    input_enabled: bool = True
    busy: bool = False
    warnings: list[str] = Field(default_factory=list)


class DialogueController:
    """Drives one user's onboarding conversation.

    The hosting layer creates a controller per session and hands it that
    session's store and collaborators. The controller is the only writer of
    the session's ``OnboardingState``; inputs must not be processed
    concurrently for the same session.
    """

    def __init__(
        self,
        store: SessionStore,
        initiator: ContractInitiator,
        notifier: Optional[StaffNotifier] = None,
        *,
        recipients: Sequence[str] = (),
        state: Optional[OnboardingState] = None,
        today: Optional[date] = None,
    ) -> None:
        self.store = store
        self.initiator = initiator
        self.notifier = notifier
        self.recipients = list(recipients)
        self.state = state or engine.initial_state()
        self.today = today

    def _reply(self, message: str, warnings: Sequence[str] = ()) -> Reply:
        return Reply(
            message=message,
            step=self.state.step,
            data=dict(self.state.data),
            input_enabled=self.state.input_enabled,
            busy=self.state.busy,
            warnings=list(warnings),
        )

    def start(self) -> Reply:
        self.state = engine.initial_state()
        self.store.save(self.state)
        return self._reply(catalog.prompt_for(self.state.step, self.state.data))

    def resume(self) -> Reply:
        stored = self.store.load()
        if stored is None or stored.terminal:
            return self.start()
        self.state = stored
        if self.state.busy:
            # the request that set it did not finish; let the user issue the command again
            self.state.busy = False
            self.store.save(self.state)
        return self._reply(catalog.prompt_for(self.state.step, self.state.data))

    def closed(self) -> Reply:
        """Reply for input on a session whose record was cleared by a disqualification."""
        self.state = OnboardingState(step=Step.COMPLETED, input_enabled=False)
        return self._reply(engine.ALREADY_COMPLETE_MESSAGE)

    async def handle_input(self, raw_text: str | None) -> Reply:
        config = {
            "configurable": {
                "store": self.store,
                "initiator": self.initiator,
                "notifier": self.notifier,
                "recipients": self.recipients,
                "today": self.today,
            }
        }
        result = await turn_graph.ainvoke(Turn(session=self.state, text=raw_text or ""), config=config)
        turn = result if isinstance(result, Turn) else Turn.model_validate(result)
        self.state = turn.session
        message = engine.reply_text(engine.Transition(state=turn.session, message=turn.message))
        return self._reply(message, turn.warnings)
