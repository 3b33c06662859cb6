"""Shared test fixtures for the mailreply test suite."""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timedelta, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import pytest
import structlog

from mailreply import config as config_module
from mailreply.config import ReplyConfig
from mailreply.identity import Identity
from mailreply.parser import ParsedMessage

FIXED_NOW = datetime(2025, 6, 2, 9, 30, 0, tzinfo=timezone(timedelta(hours=2)))


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keep the real environment and git configuration out of every test."""
    for name in list(os.environ):
        if name.startswith("MAILREPLY_"):
            monkeypatch.delenv(name)
    monkeypatch.setattr(config_module, "read_git_config", lambda key, *, as_path=False: None)


@pytest.fixture(autouse=True)
def quiet_structlog():
    """Drop info and debug events so they never reach a captured stdout."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def reply_config() -> ReplyConfig:
    return ReplyConfig(user_name="U", user_email="u@x.com")


@pytest.fixture
def user() -> Identity:
    return Identity(name="U", address="u@x.com")


@pytest.fixture
def author() -> Identity:
    return Identity(name="A", address="a@x.com")


# ------------------------------------------------------------------
# Sample EML builders
# ------------------------------------------------------------------


def _build_plain_email(
    *,
    subject: str | None = "[PATCH] Fix the frobnicator",
    from_addr: str | None = "A <a@x.com>",
    to_addr: str | None = "B <b@x.com>",
    body: str = "Line one\nLine two\n",
    message_id: str | None = "<patch-001@x.com>",
    date: str | None = "Sun, 01 Jun 2025 12:00:00 +0000",
    cc: str | None = "C <c@x.com>",
) -> bytes:
    """Build a simple plain-text email as raw bytes; pass None to drop a header."""
    msg = MIMEText(body, "plain", "utf-8")
    for header, value in (
        ("Subject", subject),
        ("From", from_addr),
        ("To", to_addr),
        ("Cc", cc),
        ("Message-ID", message_id),
        ("Date", date),
    ):
        if value is not None:
            msg[header] = value
    return msg.as_bytes()


def _build_html_email(*, body_html: str = "<p>Hello</p>") -> bytes:
    msg = MIMEText(body_html, "html")
    msg["Subject"] = "HTML Email"
    msg["From"] = "a@x.com"
    msg["To"] = "b@x.com"
    msg["Message-ID"] = "<html-001@x.com>"
    msg["Date"] = "Sun, 01 Jun 2025 12:00:00 +0000"
    return msg.as_bytes()


def _build_multipart_email(
    *,
    body_text: str = "Plain body",
    body_html: str = "<p>HTML body</p>",
) -> bytes:
    """Build a multipart/alternative email with a text and an HTML part."""
    msg = MIMEMultipart("alternative")
    msg["Subject"] = "Multipart Email"
    msg["From"] = "A <a@x.com>"
    msg["To"] = "b@x.com"
    msg["Message-ID"] = "<multi-001@x.com>"
    msg["Date"] = "Sun, 01 Jun 2025 12:00:00 +0000"
    msg.attach(MIMEText(body_html, "html"))
    msg.attach(MIMEText(body_text, "plain"))
    return msg.as_bytes()


def make_parsed_message(
    *,
    author: Identity | None = None,
    to: tuple[Identity, ...] | None = None,
    cc: tuple[Identity, ...] | None = None,
    body_lines: tuple[str, ...] = ("Line one", "Line two"),
) -> ParsedMessage:
    return ParsedMessage(
        author=author or Identity(name="A", address="a@x.com"),
        to=to,
        cc=cc,
        subject="[PATCH] Fix the frobnicator",
        date=datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc),
        message_id="patch-001@x.com",
        body_lines=body_lines,
    )


@pytest.fixture
def plain_eml_bytes() -> bytes:
    return _build_plain_email()


@pytest.fixture
def parsed_message() -> ParsedMessage:
    return make_parsed_message(
        to=(Identity(name="B", address="b@x.com"),),
        cc=(Identity(name="C", address="c@x.com"),),
    )
