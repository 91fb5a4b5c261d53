from __future__ import annotations

import uuid
from pathlib import Path
from typing import Any, Callable, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from newhire import catalog, engine
from newhire.backend import HttpContractInitiator, HttpStaffNotifier
from newhire.collaborators import ContractInitiator, SessionStore, StaffNotifier
from newhire.config import Settings, get_settings
from newhire.controller import DialogueController, Reply
from newhire.logging import configure_logging
from newhire.storage import open_session_store

configure_logging()

app = FastAPI(title="New Hire Onboarding")

_static_dir = Path(__file__).parent / "static"
if _static_dir.exists():
    app.mount("/static", StaticFiles(directory=str(_static_dir)), name="static")


StoreFactory = Callable[[str], SessionStore]


def get_store_factory() -> StoreFactory:
    return open_session_store


def get_contract_initiator() -> ContractInitiator:
    return HttpContractInitiator()


def get_staff_notifier() -> StaffNotifier:
    return HttpStaffNotifier()


def _controller(
    session_id: str,
    store_factory: StoreFactory,
    initiator: ContractInitiator,
    notifier: StaffNotifier,
    settings: Settings,
) -> DialogueController:
    return DialogueController(
        store_factory(session_id),
        initiator,
        notifier,
        recipients=settings.staff_recipients,
    )


def _response(session_id: str, reply: Reply) -> dict[str, Any]:
    return {"session_id": session_id, **reply.model_dump(mode="json")}


@app.get("/", response_class=HTMLResponse)
def index() -> HTMLResponse:
    index_path = _static_dir / "index.html"
    if not index_path.exists():
        raise HTTPException(status_code=404, detail="Frontend not built")
    return HTMLResponse(index_path.read_text(encoding="utf-8"))


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/steps")
def steps() -> dict[str, Any]:
    return {"steps": catalog.get_steps()}


class StartRequest(BaseModel):
    session_id: Optional[str] = None


class ResumeRequest(BaseModel):
    session_id: str


class ChatRequest(BaseModel):
    session_id: str
    message: str = ""


@app.post("/start")
def start(
    req: Optional[StartRequest] = None,
    store_factory: StoreFactory = Depends(get_store_factory),
    initiator: ContractInitiator = Depends(get_contract_initiator),
    notifier: StaffNotifier = Depends(get_staff_notifier),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    session_id = (req.session_id if req else None) or str(uuid.uuid4())
    controller = _controller(session_id, store_factory, initiator, notifier, settings)
    return _response(session_id, controller.start())


@app.post("/resume")
def resume(
    req: ResumeRequest,
    store_factory: StoreFactory = Depends(get_store_factory),
    initiator: ContractInitiator = Depends(get_contract_initiator),
    notifier: StaffNotifier = Depends(get_staff_notifier),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    controller = _controller(req.session_id, store_factory, initiator, notifier, settings)
    return _response(req.session_id, controller.resume())


@app.post("/chat")
async def chat(
    req: ChatRequest,
    store_factory: StoreFactory = Depends(get_store_factory),
    initiator: ContractInitiator = Depends(get_contract_initiator),
    notifier: StaffNotifier = Depends(get_staff_notifier),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    controller = _controller(req.session_id, store_factory, initiator, notifier, settings)
    state = controller.store.load()
    if state is None:
        if engine.is_reset(req.message):
            return _response(req.session_id, controller.start())
        if controller.store.is_closed():
            return _response(req.session_id, controller.closed())
        raise HTTPException(status_code=404, detail="Session not found")

    controller.state = state
    reply = await controller.handle_input(req.message)
    return _response(req.session_id, reply)
