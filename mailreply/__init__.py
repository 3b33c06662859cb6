"""mailreply: quote an email and reply with Acked-by / Reviewed-by / Tested-by trailers."""

from .assembler import assemble, render
from .composer import MAX_LINES, ReplyDraft, ReplyFlags, TrailerKind, compose_body
from .config import ReplyConfig, load_config
from .errors import (
    AssemblyError,
    ConfigurationError,
    MailReplyError,
    ParseError,
    TransportError,
    UnsupportedConfigurationError,
    ValidationError,
)
from .identity import Identity, make_identity, resolve_identity
from .parser import MessageInterpreter, ParsedMessage
from .recipients import RecipientSet, build_recipients
from .transport import SendmailTransport, TransportConfig, TransportKind, resolve_transport

__all__ = [
    "MAX_LINES",
    "AssemblyError",
    "ConfigurationError",
    "Identity",
    "MailReplyError",
    "MessageInterpreter",
    "ParseError",
    "ParsedMessage",
    "RecipientSet",
    "ReplyConfig",
    "ReplyDraft",
    "ReplyFlags",
    "SendmailTransport",
    "TrailerKind",
    "TransportConfig",
    "TransportError",
    "TransportKind",
    "UnsupportedConfigurationError",
    "ValidationError",
    "assemble",
    "build_recipients",
    "compose_body",
    "load_config",
    "make_identity",
    "render",
    "resolve_identity",
    "resolve_transport",
]
