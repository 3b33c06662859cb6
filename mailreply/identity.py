"""Participant identities: an optional display name plus a validated address."""

from __future__ import annotations

from email.headerregistry import Address

import email_validator
import pydantic
import structlog
from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import ReplyConfig
from .errors import ConfigurationError, ValidationError

logger = structlog.get_logger()

# Host names that only make sense on a local or test network, where a
# sendmail-driven reply is routinely addressed (root@localhost, box.local).
LOCAL_DOMAIN_NAMES = ("localhost", "local", "test")

for _name in LOCAL_DOMAIN_NAMES:
    if _name in email_validator.SPECIAL_USE_DOMAIN_NAMES:
        email_validator.SPECIAL_USE_DOMAIN_NAMES.remove(_name)


def check_address(address: str) -> str:
    """Validate *address* as an addr-spec and return it stripped.

    Deliverability is not checked; dotless host names and local-network
    domains such as ``localhost`` and ``.local`` are accepted.
    """
    address = address.strip()
    try:
        validate_email(address, check_deliverability=False, globally_deliverable=False)
    except EmailNotValidError as exc:
        raise ValueError(f"{address!r} is not a valid email address: {exc}") from exc
    return address


class Identity(BaseModel):
    """A message participant.

    Identities sort by address, then display name, both case-insensitively.
    Two identities refer to the same participant when their addresses match
    case-insensitively.
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = Field(default=None, description="Display name")
    address: str = Field(description="addr-spec email address")

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not value or "\r" in value or "\n" in value:
            raise ValueError("display name must be a non-empty single line")
        return value

    @field_validator("address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        return check_address(value)

    @property
    def address_key(self) -> str:
        return self.address.casefold()

    @property
    def sort_key(self) -> tuple[str, str]:
        return (self.address_key, (self.name or "").casefold())

    def same_address(self, other: Identity) -> bool:
        return self.address_key == other.address_key

    def to_header_address(self) -> Address:
        return Address(display_name=self.name or "", addr_spec=self.address)

    def __str__(self) -> str:
        if self.name is None:
            return self.address
        return str(self.to_header_address())


def make_identity(name: str | None, address: str | None) -> Identity:
    """Build an :class:`Identity`, raising :class:`ValidationError` if malformed."""
    try:
        return Identity(name=(name or "").strip() or None, address=address or "")
    except pydantic.ValidationError as exc:
        raise ValidationError(f"Invalid identity {name!r} <{address}>: {exc}") from exc


def resolve_identity(config: ReplyConfig) -> Identity:
    """Return the operator's identity from *config*.

    The address is mandatory; the display name is optional but must be
    well-formed when given.
    """
    if not config.user_email:
        raise ConfigurationError("No operator email address configured (user.email)")
    if config.user_name is not None and not config.user_name.strip():
        raise ConfigurationError("Configured operator name (user.name) is empty")

    try:
        identity = make_identity(config.user_name, config.user_email)
    except ValidationError as exc:
        raise ConfigurationError(f"Malformed operator identity: {exc}") from exc

    logger.debug("identity_resolved", address=identity.address)
    return identity
