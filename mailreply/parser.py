"""Message interpreter: raw RFC 822 bytes to a read-only ParsedMessage.

Structural decoding is left to :mod:`email` with ``policy.default``; this
module checks that every field a reply needs is present and turns the
first text/plain body into lines.
"""

from __future__ import annotations

import email
import email.errors
import email.policy
import email.utils
from dataclasses import dataclass
from datetime import datetime
from email.message import EmailMessage

import structlog

from .errors import ParseError
from .identity import Identity, make_identity

logger = structlog.get_logger()


@dataclass(frozen=True)
class ParsedMessage:
    """The inbound message fields a reply is built from."""

    author: Identity
    to: tuple[Identity, ...] | None
    cc: tuple[Identity, ...] | None
    subject: str
    date: datetime
    message_id: str
    body_lines: tuple[str, ...]


def split_lines(text: str) -> tuple[str, ...]:
    """Split on ``\\n``, dropping a trailing ``\\r`` per line and the empty
    remainder after a final newline."""
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return tuple(line[:-1] if line.endswith("\r") else line for line in lines)


class MessageInterpreter:
    """Stateless parser: raw RFC 822 bytes → ParsedMessage."""

    def interpret(self, raw_bytes: bytes) -> ParsedMessage:
        msg = email.message_from_bytes(raw_bytes, policy=email.policy.default)

        authors = self._parse_address_list(msg, "From")
        if not authors:
            raise ParseError("Message has no author (From header)")

        parsed = ParsedMessage(
            author=authors[0],
            to=self._parse_address_list(msg, "To"),
            cc=self._parse_address_list(msg, "Cc"),
            subject=self._require_header(msg, "Subject"),
            date=self._parse_date(msg),
            message_id=self._parse_message_id(msg),
            body_lines=split_lines(self._extract_text_body(msg)),
        )
        logger.debug(
            "message_interpreted",
            message_id=parsed.message_id,
            body_lines=len(parsed.body_lines),
        )
        return parsed

    # ------------------------------------------------------------------
    # Headers
    # ------------------------------------------------------------------

    @staticmethod
    def _header(msg: EmailMessage, name: str):
        try:
            return msg[name]
        except (email.errors.HeaderParseError, ValueError, IndexError) as exc:
            raise ParseError(f"Malformed {name} header: {exc}") from exc

    def _require_header(self, msg: EmailMessage, name: str) -> str:
        value = self._header(msg, name)
        if value is None:
            raise ParseError(f"Message has no {name} header")
        return str(value)

    def _parse_address_list(self, msg: EmailMessage, name: str) -> tuple[Identity, ...] | None:
        header = self._header(msg, name)
        if header is None:
            return None
        return tuple(
            make_identity(addr.display_name, addr.addr_spec) for addr in header.addresses
        )

    def _parse_date(self, msg: EmailMessage) -> datetime:
        raw = self._require_header(msg, "Date")
        try:
            date = email.utils.parsedate_to_datetime(raw)
        except (TypeError, ValueError) as exc:
            raise ParseError(f"Unparsable Date header {raw!r}") from exc
        if date is None:
            raise ParseError(f"Unparsable Date header {raw!r}")
        return date

    def _parse_message_id(self, msg: EmailMessage) -> str:
        message_id = email.utils.unquote(self._require_header(msg, "Message-ID").strip())
        if not message_id:
            raise ParseError("Message has an empty Message-ID header")
        return message_id

    # ------------------------------------------------------------------
    # Body
    # ------------------------------------------------------------------

    @staticmethod
    def _extract_text_body(msg: EmailMessage) -> str:
        """Return the first text/plain body of *msg*."""
        part = msg.get_body(preferencelist=("plain",))
        if part is None:
            raise ParseError("Message has no text/plain body")
        try:
            payload = part.get_content()
        except (LookupError, UnicodeDecodeError) as exc:
            raise ParseError(f"Couldn't decode text body: {exc}") from exc
        if not isinstance(payload, str):
            raise ParseError("Message text body is not text")
        return payload
