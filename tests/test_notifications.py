# Email tests: template rendering, offline mode and SMTP delivery/failure handling.
from __future__ import annotations

import smtplib

import pytest

from yallambee import notifications


class FakeSMTP:
    """Records what would be sent over SMTP."""

    instances: list = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.started_tls = False
        self.logged_in = None
        self.messages = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.started_tls = True

    def login(self, user, password):
        self.logged_in = (user, password)

    def send_message(self, msg):
        self.messages.append(msg)


@pytest.fixture()
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setenv("SMTP_HOST", "smtp.example.com")
    monkeypatch.setenv("SMTP_PORT", "2525")
    monkeypatch.setenv("SMTP_USER", "bookings@yallambee.test")
    monkeypatch.setenv("SMTP_PASSWORD", "hunter2")
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def test_render_template_fills_placeholders():
    rendered = notifications.render_template(
        "booking_received",
        {"name": "Jamie", "booking_id": 7, "start_date": "2024-09-01", "end_date": "2024-09-05"},
    )
    assert rendered["subject"] == "Your Booking Request - Yallambee Tiny Homes"
    assert "Dear Jamie," in rendered["text"]
    assert "Booking Reference: 7" in rendered["text"]
    assert "2024-09-01 to 2024-09-05" in rendered["html"]


def test_render_template_keeps_missing_placeholders():
    rendered = notifications.render_template("welcome", {})
    assert "Hello {{name}}," in rendered["text"]


def test_unknown_template_raises():
    with pytest.raises(KeyError):
        notifications.render_template("nope", {})


def test_send_email_offline_is_skipped():
    assert notifications.smtp_enabled() is False
    assert notifications.send_email("guest@example.com", "Hi", "Body") is False


def test_send_template_over_smtp(fake_smtp):
    ok = notifications.send_template("guest@example.com", "welcome", {"name": "Jamie"})
    assert ok is True

    (server,) = fake_smtp.instances
    assert (server.host, server.port) == ("smtp.example.com", 2525)
    assert server.started_tls is True
    assert server.logged_in == ("bookings@yallambee.test", "hunter2")
    (msg,) = server.messages
    assert msg["To"] == "guest@example.com"
    assert msg["From"] == "bookings@yallambee.test"
    assert msg["Subject"] == "Welcome to Yallambee Tiny Homes!"
    assert msg.is_multipart()


def test_send_email_failure_is_reported_not_raised(monkeypatch):
    def refuse(*args, **kwargs):
        raise ConnectionRefusedError("no mail server")

    monkeypatch.setenv("SMTP_HOST", "smtp.example.com")
    monkeypatch.setattr(smtplib, "SMTP", refuse)
    assert notifications.send_email("guest@example.com", "Hi", "Body") is False
