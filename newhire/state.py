from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field


class Step(str, Enum):
    START = "start"
    COLLECT_FIRST_NAME = "collect_first_name"
    COLLECT_LAST_NAME = "collect_last_name"
    CHECK_COMPUTER_RESPONSE = "check_computer_response"
    ASK_LANGUAGES = "ask_languages"
    ASK_STATE = "ask_state"
    ASK_EMAIL = "ask_email"
    FINAL_INSTRUCTIONS_PRE_CONTRACT = "final_instructions_pre_contract"
    AWAITING_SIGN_CONTRACT_COMMAND = "awaiting_sign_contract_command"
    AWAITING_ADOBE_SIGNATURE_COMPLETION = "awaiting_adobe_signature_completion"
    FINAL_WELCOME_AND_DISCORD_LINK = "final_welcome_and_discord_link"
    COMPLETED = "completed"


class OnboardingState(BaseModel):
    version: str = "1.0"
    flow_name: str = "new_hire_onboarding"

    step: Step = Step.START
    data: Dict[str, Any] = Field(default_factory=dict)

    # transient status for the presentation layer
    busy: bool = False
    input_enabled: bool = True

    @property
    def terminal(self) -> bool:
        return self.step == Step.COMPLETED
