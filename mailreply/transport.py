"""Delivery through a local sendmail-compatible command."""

from __future__ import annotations

import os
import shlex
import subprocess
from dataclasses import dataclass
from email.message import EmailMessage
from enum import Enum
from pathlib import Path

import structlog

from .config import ReplyConfig
from .errors import ConfigurationError, TransportError, UnsupportedConfigurationError

logger = structlog.get_logger()

DEFAULT_SENDMAIL = "sendmail"


class TransportKind(str, Enum):
    """How the reply is handed over for delivery."""

    COMMAND = "command"
    LOCAL_DEFAULT = "local_default"


@dataclass(frozen=True)
class TransportConfig:
    """Resolved delivery mechanism: an argv prefix and where it came from."""

    kind: TransportKind
    command: tuple[str, ...]

    @property
    def executable(self) -> str:
        return self.command[0]


def _command_from_template(template: str) -> tuple[str, ...]:
    try:
        argv = shlex.split(template)
    except ValueError as exc:
        raise ConfigurationError(f"Malformed sendmail command {template!r}: {exc}") from exc
    if not argv:
        raise ConfigurationError("Configured sendmail command is empty")
    argv[0] = os.path.expanduser(argv[0])
    return tuple(argv)


def resolve_transport(config: ReplyConfig) -> TransportConfig:
    """Pick the delivery mechanism from *config*.

    Precedence: an explicit sendmail command, then a relay setting naming an
    existing local program, then the platform ``sendmail``.  A relay setting
    that is not a local path would need network delivery, which is not
    supported.
    """
    if config.sendmail_cmd:
        transport = TransportConfig(
            kind=TransportKind.COMMAND,
            command=_command_from_template(config.sendmail_cmd),
        )
    elif config.smtp_server:
        path = Path(os.path.expanduser(config.smtp_server))
        if not path.exists():
            raise UnsupportedConfigurationError(
                f"Relay {config.smtp_server!r} is not a local program; "
                "network relay delivery is not supported"
            )
        transport = TransportConfig(kind=TransportKind.COMMAND, command=(str(path),))
    else:
        transport = TransportConfig(
            kind=TransportKind.LOCAL_DEFAULT,
            command=(DEFAULT_SENDMAIL,),
        )

    logger.debug("transport_resolved", kind=transport.kind.value, executable=transport.executable)
    return transport


def envelope_recipients(message: EmailMessage) -> list[str]:
    """Collect the To and Cc addresses of *message* in header order."""
    recipients: list[str] = []
    for header in ("To", "Cc"):
        value = message[header]
        if value is None:
            continue
        recipients.extend(addr.addr_spec for addr in value.addresses)
    return recipients


def envelope_sender(message: EmailMessage) -> str:
    return message["From"].addresses[0].addr_spec


class SendmailTransport:
    """Hands a message to a sendmail-compatible program on stdin.

    The program is invoked as ``<command> -i -f <from> -- <recipients...>``
    and runs to completion; there is no timeout.
    """

    def __init__(self, config: TransportConfig) -> None:
        self._config = config

    def build_argv(self, message: EmailMessage) -> list[str]:
        return [
            *self._config.command,
            "-i",
            "-f",
            envelope_sender(message),
            "--",
            *envelope_recipients(message),
        ]

    def send(self, message: EmailMessage) -> None:
        argv = self.build_argv(message)
        try:
            result = subprocess.run(argv, input=message.as_bytes(), capture_output=True, check=False)
        except OSError as exc:
            raise TransportError(f"Couldn't run {self._config.executable}: {exc}") from exc

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise TransportError(
                f"{self._config.executable} exited with status {result.returncode}: {stderr}"
            )

        logger.info(
            "reply_delivered",
            executable=self._config.executable,
            recipients=len(envelope_recipients(message)),
        )
