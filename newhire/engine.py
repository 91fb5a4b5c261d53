from __future__ import annotations

import re
from datetime import date
from typing import Any, Callable, Literal, Optional, Union

from pydantic import BaseModel, Field

from newhire import catalog
from newhire.collaborators import ContractHandle
from newhire.state import OnboardingState, Step

RESET_KEYWORD = "reset"
SIGN_CONTRACT_COMMAND = "sign contract"
CONTRACT_SIGNED_COMMAND = "contract signed"

RESTRICTED_STATES = frozenset({"oregon", "or", "washington", "wa", "california", "ca"})

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

NO_COMPUTER_MESSAGE = "A computer or laptop is required. Onboarding cannot continue."
RESTRICTED_STATE_MESSAGE = (
    "Unfortunately, we cannot proceed with applications from Oregon, Washington, "
    "or California at this time."
)
YES_NO_MESSAGE = "Invalid input. Please answer Y or N."
INVALID_EMAIL_MESSAGE = "That doesn't look like a valid email. Please try again."
SIGNATURE_PENDING_MESSAGE = "Please use the Adobe Sign link. Once signed, type `contract signed` back here."
ALREADY_COMPLETE_MESSAGE = "Your onboarding is already complete. Type `reset` to start over."


class InitiateContract(BaseModel):
    kind: Literal["initiate_contract"] = "initiate_contract"
    email: str
    first_name: str
    last_name: str
    agreement_title: str


class NotifyStaff(BaseModel):
    kind: Literal["notify_staff"] = "notify_staff"
    alert: Literal["contract_signed", "onboarding_complete"]
    subject: str
    html_body: str


class ClearSession(BaseModel):
    kind: Literal["clear_session"] = "clear_session"


Effect = Union[InitiateContract, NotifyStaff, ClearSession]


class Transition(BaseModel):
    """Outcome of one pure step: the new record, what to say and what to do.

    ``message`` is None when the standard prompt of the new step applies; a
    transient message (validation hint, termination notice, signing link)
    otherwise. ``entered`` is set when the step changed during this transition;
    entry rules only run for such transitions.
    """

    state: OnboardingState
    message: Optional[str] = None
    effects: list[Effect] = Field(default_factory=list)
    entered: bool = False


def normalize(text: str | None) -> str:
    return (text or "").strip().lower()


def is_reset(text: str | None) -> bool:
    return normalize(text) == RESET_KEYWORD


def is_valid_email(text: str) -> bool:
    return bool(EMAIL_RE.match(text or ""))


def _yes_no(lowered: str) -> bool | None:
    if lowered == "y":
        return True
    if lowered == "n":
        return False
    return None


def initial_state() -> OnboardingState:
    return OnboardingState(step=Step.START, data={})


def _stay(state: OnboardingState, message: str) -> Transition:
    return Transition(state=state, message=message)


def _move(record: OnboardingState, step: Step, message: str | None = None, **values: Any) -> Transition:
    record.data.update(values)
    record.step = step
    return Transition(state=record, message=message, entered=True)


def _disqualify(record: OnboardingState, message: str, **values: Any) -> Transition:
    record.data.update(values)
    record.step = Step.COMPLETED
    record.input_enabled = False
    return Transition(state=record, message=message, effects=[ClearSession()])


def _on_start(state: OnboardingState, text: str, today: date) -> Transition:
    if not text:
        return _stay(state, "Please provide your legal first name.")
    return _move(state, Step.COLLECT_FIRST_NAME, first_name=text)


def _on_collect_first_name(state: OnboardingState, text: str, today: date) -> Transition:
    if not text:
        return _stay(state, "Please provide your legal last name.")
    return _move(state, Step.COLLECT_LAST_NAME, last_name=text)


def _on_collect_last_name(state: OnboardingState, text: str, today: date) -> Transition:
    answer = _yes_no(text.lower())
    if answer is None:
        return _stay(state, YES_NO_MESSAGE)
    if not answer:
        return _disqualify(state, NO_COMPUTER_MESSAGE, has_computer=False)
    return _move(state, Step.CHECK_COMPUTER_RESPONSE, has_computer=True)


def _on_check_computer_response(state: OnboardingState, text: str, today: date) -> Transition:
    answer = _yes_no(text.lower())
    if answer is None:
        return _stay(state, YES_NO_MESSAGE)
    if answer:
        return _move(state, Step.ASK_LANGUAGES, bilingual=True)
    return _move(state, Step.ASK_STATE, bilingual=False)


def _on_ask_languages(state: OnboardingState, text: str, today: date) -> Transition:
    return _move(state, Step.ASK_STATE, languages=text)


def _on_ask_state(state: OnboardingState, text: str, today: date) -> Transition:
    if not text:
        return _stay(state, "Please tell me which state you are located in.")
    if text.lower() in RESTRICTED_STATES:
        return _disqualify(state, RESTRICTED_STATE_MESSAGE)
    return _move(state, Step.ASK_EMAIL, state=text)


def _on_ask_email(state: OnboardingState, text: str, today: date) -> Transition:
    if not is_valid_email(text):
        return _stay(state, INVALID_EMAIL_MESSAGE)
    return _move(state, Step.FINAL_INSTRUCTIONS_PRE_CONTRACT, email=text)


def _on_awaiting_sign_contract(state: OnboardingState, text: str, today: date) -> Transition:
    if text.lower() != SIGN_CONTRACT_COMMAND:
        return _stay(state, catalog.SIGN_CONTRACT_HINT)
    data = state.data
    request = InitiateContract(
        email=str(data.get("email") or ""),
        first_name=str(data.get("first_name") or ""),
        last_name=str(data.get("last_name") or ""),
        agreement_title=catalog.agreement_title(data, today.isoformat()),
    )
    state.busy = True
    return Transition(state=state, effects=[request])


def _on_awaiting_signature(state: OnboardingState, text: str, today: date) -> Transition:
    if text.lower() != CONTRACT_SIGNED_COMMAND:
        return _stay(state, SIGNATURE_PENDING_MESSAGE)
    transition = _move(state, Step.FINAL_WELCOME_AND_DISCORD_LINK, contract_process_completed_by_user=True)
    subject, body = catalog.contract_signed_alert(state.data)
    transition.effects.append(NotifyStaff(alert="contract_signed", subject=subject, html_body=body))
    return transition


def _on_unexpected(state: OnboardingState, text: str, today: date) -> Transition:
    return _stay(state, f"I'm a bit confused. Type `reset` to start over. (Current step: {state.step.value})")


def _on_completed(state: OnboardingState, text: str, today: date) -> Transition:
    return _stay(state, ALREADY_COMPLETE_MESSAGE)


Handler = Callable[[OnboardingState, str, date], Transition]

_HANDLERS: dict[Step, Handler] = {
    Step.START: _on_start,
    Step.COLLECT_FIRST_NAME: _on_collect_first_name,
    Step.COLLECT_LAST_NAME: _on_collect_last_name,
    Step.CHECK_COMPUTER_RESPONSE: _on_check_computer_response,
    Step.ASK_LANGUAGES: _on_ask_languages,
    Step.ASK_STATE: _on_ask_state,
    Step.ASK_EMAIL: _on_ask_email,
    Step.FINAL_INSTRUCTIONS_PRE_CONTRACT: _on_awaiting_sign_contract,
    Step.AWAITING_SIGN_CONTRACT_COMMAND: _on_awaiting_sign_contract,
    Step.AWAITING_ADOBE_SIGNATURE_COMPLETION: _on_awaiting_signature,
    # entered and left within a single turn; input only arrives here from a hand-edited record
    Step.FINAL_WELCOME_AND_DISCORD_LINK: _on_unexpected,
    Step.COMPLETED: _on_completed,
}

_unhandled = set(Step) - set(_HANDLERS)
if _unhandled:
    raise RuntimeError(f"No input handler for steps: {sorted(s.value for s in _unhandled)}")


def advance(state: OnboardingState, raw_text: str | None, today: date | None = None) -> Transition:
    """Apply one user input to ``state`` without touching the outside world.

    The input record is left untouched; the returned transition carries a copy.
    """
    text = (raw_text or "").strip()
    if text.lower() == RESET_KEYWORD:
        return Transition(state=initial_state())
    working = state.model_copy(deep=True)
    return _HANDLERS[working.step](working, text, today or date.today())


def contract_ready(state: OnboardingState, handle: ContractHandle) -> Transition:
    working = state.model_copy(deep=True)
    working.busy = False
    message = (
        "Your Independent Contractor Agreement is ready.\n\n"
        f"Please click this link to review and sign: {handle.signing_url}\n\n"
        "(The link will open in a new tab. If your browser blocks pop-ups, you may need "
        "to allow it or copy the link.)\n\n"
        "Once you have COMPLETED the signing process via Adobe, please return here and "
        "type `contract signed`."
    )
    return _move(working, Step.AWAITING_ADOBE_SIGNATURE_COMPLETION, message, adobe_agreement_id=handle.agreement_id)


def contract_failed(state: OnboardingState, reason: str) -> Transition:
    working = state.model_copy(deep=True)
    working.busy = False
    working.data.pop("adobe_agreement_id", None)
    message = (
        f"Error preparing contract: {reason}. Please contact an administrator "
        "or type 'reset' to try again."
    )
    return _move(working, Step.FINAL_INSTRUCTIONS_PRE_CONTRACT, message)


def enter_step(transition: Transition) -> Transition:
    """Run the entry rules of the step the transition landed on.

    Entering the welcome step composes the welcome text, queues the staff
    summary and moves on to ``completed`` in the same turn, so the summary goes
    out once per entry. A transition that stayed on its step (input arriving at
    a step that should already have been left) is returned unchanged.
    """
    state = transition.state
    successor = catalog.auto_successor(state.step)
    if successor is None or not transition.entered:
        return transition

    working = state.model_copy(deep=True)
    message = catalog.prompt_for(working.step, working.data)
    effects = list(transition.effects)
    if working.step == Step.FINAL_WELCOME_AND_DISCORD_LINK:
        subject, body = catalog.onboarding_complete_summary(working.data)
        effects.append(NotifyStaff(alert="onboarding_complete", subject=subject, html_body=body))
    working.step = successor
    return Transition(state=working, message=message, effects=effects)


def reply_text(transition: Transition) -> str:
    if transition.message is not None:
        return transition.message
    return catalog.prompt_for(transition.state.step, transition.state.data)
