"""Outgoing message assembly and serialization."""

from __future__ import annotations

import email.errors
import email.policy
from datetime import datetime
from email.message import EmailMessage

import structlog

from .composer import ReplyDraft
from .errors import AssemblyError
from .identity import Identity, check_address
from .parser import ParsedMessage
from .recipients import RecipientSet

logger = structlog.get_logger()


def _revalidate(role: str, identities: tuple[Identity, ...]) -> None:
    for identity in identities:
        try:
            check_address(identity.address)
        except ValueError as exc:
            raise AssemblyError(f"Invalid {role} address: {exc}") from exc


def assemble(
    user: Identity,
    msg: ParsedMessage,
    recipients: RecipientSet,
    draft: ReplyDraft,
    *,
    now: datetime | None = None,
) -> EmailMessage:
    """Build the reply to *msg* from *user*, Cc'ing *recipients*.

    *now* fixes the Date header; it defaults to the current local time.
    """
    _revalidate("From", (user,))
    _revalidate("To", (msg.author,))
    _revalidate("Cc", recipients)

    message_ref = f"<{msg.message_id}>"
    message = EmailMessage(policy=email.policy.default)
    try:
        message["Date"] = now or datetime.now().astimezone()
        message["From"] = user.to_header_address()
        message["To"] = msg.author.to_header_address()
        message["Subject"] = f"Re: {msg.subject}"
        message["In-Reply-To"] = message_ref
        message["References"] = message_ref
        if recipients:
            message["Cc"] = tuple(identity.to_header_address() for identity in recipients)
        message.set_content(draft.text)
    except (email.errors.HeaderParseError, ValueError, TypeError) as exc:
        raise AssemblyError(f"Couldn't assemble reply: {exc}") from exc

    logger.info("reply_assembled", in_reply_to=message_ref, cc=len(recipients))
    return message


def render(message: EmailMessage) -> str:
    """Serialize *message* (headers and body) as text."""
    return message.as_string()
