from __future__ import annotations

import html
from typing import Any, Callable, Optional

from newhire.config import Settings, get_settings
from newhire.state import Step

PromptFn = Callable[[dict[str, Any], Settings], str]

SIGN_CONTRACT_HINT = "Please type `sign contract` to proceed or `reset` to start over."


def _start(data: dict[str, Any], settings: Settings) -> str:
    return (
        "Welcome to the New Hire Onboarding Process!\n"
        "I'll guide you through the initial steps.\n\n"
        "Please type your responses in the box below and click 'Send'.\n\n"
        "Let's start with your name. What is your legal first name?"
    )


def _collect_first_name(data: dict[str, Any], settings: Settings) -> str:
    first_name = str(data.get("first_name") or "").strip()
    if first_name:
        return f"Thank you, {first_name}. And what is your legal last name?"
    return "Thank you. And what is your legal last name?"


def _collect_last_name(data: dict[str, Any], settings: Settings) -> str:
    return (
        "1. Do you have a computer or laptop (not an iPad or tablet) and headset "
        "that you will be using for work? (Y/N)"
    )


def _check_computer_response(data: dict[str, Any], settings: Settings) -> str:
    return "2. Are you bilingual? (Y/N)"


def _ask_languages(data: dict[str, Any], settings: Settings) -> str:
    return "Great! What languages do you speak fluently (besides English, if applicable)?"


def _ask_state(data: dict[str, Any], settings: Settings) -> str:
    if data.get("bilingual") and data.get("languages"):
        return "Thanks for sharing that.\n\n3. In which state are you located?"
    return "3. In which state are you located?"


def _ask_email(data: dict[str, Any], settings: Settings) -> str:
    return "4. What is your primary email address? (This is where your contract will be sent)"


def _final_instructions_pre_contract(data: dict[str, Any], settings: Settings) -> str:
    return (
        "DECLARATION. I hereby declare that the information I am providing is true "
        "and complete to the best of my knowledge.\n\n"
        "To proceed with your Independent Contractor Agreement using Adobe Sign, "
        "please type `sign contract`."
    )


def _awaiting_sign_contract_command(data: dict[str, Any], settings: Settings) -> str:
    return SIGN_CONTRACT_HINT


def _awaiting_adobe_signature_completion(data: dict[str, Any], settings: Settings) -> str:
    return (
        "Please use the Adobe Sign link provided. Once you have COMPLETED the signing "
        "process via Adobe, please return here and type `contract signed`."
    )


def _final_welcome_and_discord_link(data: dict[str, Any], settings: Settings) -> str:
    lines = [
        "Welcome aboard officially!",
        "",
        "Your contract process has been initiated. Here's what's next and key information:",
        "",
        f"1. **Join our Discord Server**: {settings.discord_invite_url}",
        "   Once on the server, please locate the channel(s) containing our training "
        "materials (e.g., #training-materials, #guides).",
        "   You'll find:",
        "   - Training Manual",
        "   - Training Video",
        "   - Training Recordings",
        "   Please complete these materials at your earliest convenience.",
        "",
        "2. **Key People**:",
    ]
    if settings.staff_ceo_email and settings.ceo_contact_display_name:
        lines.append(
            f"- {settings.ceo_contact_display_name}: Please await contact from them for your next assignments."
        )
    lines.append(
        f"- {settings.support_contact_name} (Support): Your human contact for "
        "project-specific questions and quality control."
    )
    lines.append("- Samantha: Your Discord training and agent support bot on the main server (if applicable).")
    lines.append("")
    lines.append("3. **What we have on file**:")
    lines.extend(f"- {label}: {value}" for label, value in summary_fields(data))
    lines.append("")
    lines.append("This fully concludes your automated onboarding. Welcome officially to the team!")
    return "\n".join(lines)


def _completed(data: dict[str, Any], settings: Settings) -> str:
    return "Your onboarding is complete! You can close this page or type `reset` to start over."


STEPS: list[Step] = list(Step)

PROMPTS: dict[Step, PromptFn] = {
    Step.START: _start,
    Step.COLLECT_FIRST_NAME: _collect_first_name,
    Step.COLLECT_LAST_NAME: _collect_last_name,
    Step.CHECK_COMPUTER_RESPONSE: _check_computer_response,
    Step.ASK_LANGUAGES: _ask_languages,
    Step.ASK_STATE: _ask_state,
    Step.ASK_EMAIL: _ask_email,
    Step.FINAL_INSTRUCTIONS_PRE_CONTRACT: _final_instructions_pre_contract,
    Step.AWAITING_SIGN_CONTRACT_COMMAND: _awaiting_sign_contract_command,
    Step.AWAITING_ADOBE_SIGNATURE_COMPLETION: _awaiting_adobe_signature_completion,
    Step.FINAL_WELCOME_AND_DISCORD_LINK: _final_welcome_and_discord_link,
    Step.COMPLETED: _completed,
}

# Steps that move on by themselves once their prompt has been composed.
AUTO_SUCCESSORS: dict[Step, Step] = {
    Step.FINAL_WELCOME_AND_DISCORD_LINK: Step.COMPLETED,
}


def prompt_for(step: Step, data: dict[str, Any], settings: Optional[Settings] = None) -> str:
    """Standard message shown while the conversation sits at ``step``."""
    return PROMPTS[step](data or {}, settings or get_settings())


def auto_successor(step: Step) -> Step | None:
    return AUTO_SUCCESSORS.get(step)


def get_steps() -> list[dict[str, Any]]:
    settings = get_settings()
    return [
        {
            "id": step.value,
            "order": i,
            "prompt": prompt_for(step, {}, settings),
            "auto_successor": AUTO_SUCCESSORS[step].value if step in AUTO_SUCCESSORS else None,
        }
        for i, step in enumerate(STEPS)
    ]


def _yes_no(value: Any) -> str:
    return "Yes" if value else "No"


def summary_fields(data: dict[str, Any]) -> list[tuple[str, str]]:
    fields = [
        ("Name", f"{data.get('first_name') or 'N/A'} {data.get('last_name') or 'N/A'}"),
        ("Has Computer/Laptop", _yes_no(data.get("has_computer"))),
        ("Bilingual", _yes_no(data.get("bilingual"))),
    ]
    if data.get("languages"):
        fields.append(("Languages", str(data["languages"])))
    fields.append(("State", str(data.get("state") or "N/A")))
    fields.append(("Email", str(data.get("email") or "N/A")))
    return fields


def full_name(data: dict[str, Any]) -> str:
    return f"{data.get('first_name') or ''} {data.get('last_name') or ''}".strip()


def agreement_title(data: dict[str, Any], day: str) -> str:
    return f"Independent Contractor Agreement - {full_name(data)} - {day}"


def contract_signed_alert(data: dict[str, Any]) -> tuple[str, str]:
    """Subject and HTML body for the signed-contract staff alert."""
    name = html.escape(full_name(data))
    email = html.escape(str(data.get("email") or "N/A"))
    agreement_id = html.escape(str(data.get("adobe_agreement_id") or "N/A"))
    subject = f"Contract Signed: {full_name(data)}"
    body = (
        f"<p>ALERT: User <b>{name}</b> (Email: {email}) has indicated they have SIGNED "
        "the Independent Contractor Agreement.</p>"
        f"<p>Adobe Agreement ID: {agreement_id}</p>"
        "<p>Please verify the document status in Adobe Sign. They have now been provided "
        "with the Discord link and final instructions.</p>"
    )
    return subject, body


def onboarding_complete_summary(data: dict[str, Any]) -> tuple[str, str]:
    """Subject and HTML body for the onboarding-complete staff summary."""
    lines = [
        f"User {data.get('first_name') or 'N/A'} {data.get('last_name') or 'N/A'} has completed the "
        "automated onboarding process and has been provided with the Discord link and final instructions.",
        "",
        "Summary of collected information:",
        "-" * 50,
    ]
    lines.extend(f"{label}: {value}" for label, value in summary_fields(data)[1:])
    lines.append(
        "Contract Process Initiated: Yes "
        f"(Adobe Agreement ID: {data.get('adobe_agreement_id') or 'N/A'})"
    )
    lines.append("-" * 50)
    subject = f"Automated Onboarding Complete: {full_name(data)}"
    body = "<p>" + "<br>".join(html.escape(line) for line in lines) + "</p>"
    return subject, body
