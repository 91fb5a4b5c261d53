"""Tests for the ``python -m newhire`` development server launcher."""

import socket

import pytest

from newhire import __main__ as launcher
from newhire.config import get_settings


class FakeTimer:
    started: list["FakeTimer"] = []

    def __init__(self, interval, function, args=()):
        self.interval = interval
        self.function = function
        self.args = args
        self.daemon = False

    def start(self):
        FakeTimer.started.append(self)


@pytest.fixture
def runs(monkeypatch):
    calls = []
    monkeypatch.setattr(launcher.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    monkeypatch.setattr(launcher.threading, "Timer", FakeTimer)
    monkeypatch.setattr(launcher, "configure_logging", lambda: None)
    FakeTimer.started = []
    return calls


@pytest.fixture
def busy_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(1)
    yield sock.getsockname()[1]
    sock.close()


class TestSettings:
    def test_defaults(self, monkeypatch):
        for var in ("HOST", "PORT", "PORT_TRIES", "OPEN_BROWSER", "RELOAD"):
            monkeypatch.delenv(var, raising=False)
        settings = get_settings()
        assert settings.host == "127.0.0.1"
        assert settings.port == 8002
        assert settings.port_tries == 20
        assert settings.open_browser is True
        assert settings.reload is False

    def test_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("HOST", "0.0.0.0")
        monkeypatch.setenv("PORT", "9100")
        monkeypatch.setenv("OPEN_BROWSER", "0")
        monkeypatch.setenv("RELOAD", "true")
        settings = get_settings()
        assert settings.host == "0.0.0.0"
        assert settings.port == 9100
        assert settings.open_browser is False
        assert settings.reload is True


class TestFindFreePort:
    def test_skips_busy_port(self, busy_port):
        assert launcher.find_free_port("127.0.0.1", busy_port, 5) != busy_port

    def test_falls_back_to_first_when_all_busy(self, busy_port):
        assert launcher.find_free_port("127.0.0.1", busy_port, 1) == busy_port


class TestMain:
    def test_runs_uvicorn_with_settings(self, monkeypatch, runs):
        monkeypatch.setenv("HOST", "127.0.0.1")
        monkeypatch.setenv("OPEN_BROWSER", "false")
        monkeypatch.delenv("PORT", raising=False)
        monkeypatch.setenv("RELOAD", "1")
        monkeypatch.setenv("NEWHIRE_LOG_LEVEL", "WARNING")
        monkeypatch.setattr(launcher, "find_free_port", lambda host, first, tries: first)

        launcher.main()

        [(app, kwargs)] = runs
        assert app == "newhire.main:app"
        assert kwargs == {"host": "127.0.0.1", "port": 8002, "reload": True, "log_level": "warning"}
        assert FakeTimer.started == []

    def test_opens_browser_on_chosen_port(self, monkeypatch, runs):
        monkeypatch.setenv("HOST", "127.0.0.1")
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.delenv("OPEN_BROWSER", raising=False)
        monkeypatch.setattr(launcher, "find_free_port", lambda host, first, tries: first + 1)

        launcher.main()

        [timer] = FakeTimer.started
        assert timer.function is launcher.webbrowser.open
        assert timer.args == ("http://127.0.0.1:9001/",)
        assert timer.daemon is True
        assert runs[0][1]["port"] == 9001
