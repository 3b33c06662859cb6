"""Error taxonomy for the reply pipeline.

Every error is fatal: the CLI reports it and exits non-zero.
"""

from __future__ import annotations


class MailReplyError(Exception):
    """Base class for all errors raised by mailreply."""


class ConfigurationError(MailReplyError):
    """Operator identity or transport settings are missing or malformed."""


class UnsupportedConfigurationError(ConfigurationError):
    """The configuration asks for a delivery mode that is not implemented."""


class ParseError(MailReplyError):
    """The inbound message lacks a mandatory field or a text body."""


class ValidationError(MailReplyError, ValueError):
    """An email address does not satisfy addr-spec syntax."""


class AssemblyError(ValidationError):
    """The outgoing message could not be assembled."""


class TransportError(MailReplyError):
    """The delivery command failed to run or reported failure."""
