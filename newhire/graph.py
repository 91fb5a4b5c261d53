"""One conversational turn as a LangGraph pipeline.

    transition -> [initiate_contract] -> enter_step -> persist -> notify_staff

``transition`` and ``enter_step`` are pure (see ``newhire.engine``); the other
nodes carry out the effects those produce. The collaborators for the session
come in through the run config::

    await turn_graph.ainvoke(
        Turn(session=state, text=text),
        config={"configurable": {"store": ..., "initiator": ..., "notifier": ..., "recipients": [...]}},
    )
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, StateGraph
from pydantic import BaseModel, Field

from newhire import engine
from newhire.engine import ClearSession, Effect, InitiateContract, NotifyStaff
from newhire.logging import get_logger
from newhire.state import OnboardingState

logger = get_logger(__name__)


class Turn(BaseModel):
    session: OnboardingState
    text: str = ""
    message: Optional[str] = None
    effects: list[Effect] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    entered: bool = False


def _configurable(config: RunnableConfig) -> dict[str, Any]:
    return dict((config or {}).get("configurable") or {})


def _as_transition(turn: Turn) -> engine.Transition:
    return engine.Transition(
        state=turn.session, message=turn.message, effects=turn.effects, entered=turn.entered
    )


def _updates(result: engine.Transition) -> dict[str, Any]:
    return {
        "session": result.state,
        "message": result.message,
        "effects": result.effects,
        "entered": result.entered,
    }


def transition(turn: Turn, config: RunnableConfig) -> dict[str, Any]:
    today: date | None = _configurable(config).get("today")
    before = turn.session.step
    result = engine.advance(turn.session, turn.text, today=today)
    if result.state.step != before:
        logger.info("Step %s -> %s", before.value, result.state.step.value)
    return _updates(result)


def route_after_transition(turn: Turn) -> str:
    if any(isinstance(e, InitiateContract) for e in turn.effects):
        return "initiate_contract"
    return "enter_step"


async def initiate_contract(turn: Turn, config: RunnableConfig) -> dict[str, Any]:
    deps = _configurable(config)
    store = deps["store"]
    initiator = deps["initiator"]

    request = next(e for e in turn.effects if isinstance(e, InitiateContract))
    remaining = [e for e in turn.effects if e is not request]

    # a reload during the call should show the request as in flight
    store.save(turn.session)
    try:
        handle = await initiator.initiate(
            request.email, request.first_name, request.last_name, request.agreement_title
        )
    except Exception as exc:
        logger.warning("Contract initiation failed for %s: %s", request.email, exc, exc_info=True)
        result = engine.contract_failed(turn.session, str(exc) or exc.__class__.__name__)
    else:
        logger.info("Contract %s created for %s", handle.agreement_id, request.email)
        result = engine.contract_ready(turn.session, handle)

    result.effects = remaining + result.effects
    return _updates(result)


def enter_step(turn: Turn) -> dict[str, Any]:
    before = turn.session.step
    result = engine.enter_step(_as_transition(turn))
    if result.state.step != before:
        logger.info("Step %s -> %s", before.value, result.state.step.value)
    return _updates(result)


def persist(turn: Turn, config: RunnableConfig) -> dict[str, Any]:
    store = _configurable(config)["store"]
    if any(isinstance(e, ClearSession) for e in turn.effects):
        store.clear()
    else:
        store.save(turn.session)
    return {}


async def notify_staff(turn: Turn, config: RunnableConfig) -> dict[str, Any]:
    deps = _configurable(config)
    notifier = deps.get("notifier")
    recipients = [r for r in (deps.get("recipients") or []) if r]

    alerts = [e for e in turn.effects if isinstance(e, NotifyStaff)]
    if not alerts:
        return {}
    if notifier is None:
        logger.warning("No staff notifier configured, skipping %d alert(s)", len(alerts))
        return {}

    warnings = list(turn.warnings)
    for alert in alerts:
        for recipient in recipients:
            try:
                await notifier.notify(recipient, alert.subject, alert.html_body)
            except Exception as exc:
                logger.warning("Failed to send %s notification to %s: %s", alert.alert, recipient, exc)
                warnings.append(f"Error sending notification: {exc}. Please inform admin.")
    return {"warnings": warnings}


builder = StateGraph(Turn)
builder.add_node("transition", transition)
builder.add_node("initiate_contract", initiate_contract)
builder.add_node("enter_step", enter_step)
builder.add_node("persist", persist)
builder.add_node("notify_staff", notify_staff)

builder.set_entry_point("transition")
builder.add_conditional_edges(
    "transition",
    route_after_transition,
    {"initiate_contract": "initiate_contract", "enter_step": "enter_step"},
)
builder.add_edge("initiate_contract", "enter_step")
builder.add_edge("enter_step", "persist")
builder.add_edge("persist", "notify_staff")
builder.add_edge("notify_staff", END)

turn_graph = builder.compile()
