"""Reply body composition: attribution, quoted excerpt, trailers, signature."""

from __future__ import annotations

import email.utils
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

import structlog

from .identity import Identity
from .parser import ParsedMessage

logger = structlog.get_logger()

MAX_LINES = 5
SIGNATURE_CUT = "---"
QUOTE_PREFIX = "> "
TRUNCATION_MARKER = "> [ ... ]"


class TrailerKind(str, Enum):
    """Attestation trailers, in the order they appear in a reply."""

    ACKED = "Acked-by"
    REVIEWED = "Reviewed-by"
    TESTED = "Tested-by"


@dataclass(frozen=True)
class ReplyFlags:
    """Which trailers the operator asked for."""

    acked: bool = False
    reviewed: bool = False
    tested: bool = False

    def trailer_kinds(self) -> list[TrailerKind]:
        selected = {
            TrailerKind.ACKED: self.acked,
            TrailerKind.REVIEWED: self.reviewed,
            TrailerKind.TESTED: self.tested,
        }
        return [kind for kind in TrailerKind if selected[kind]]


@dataclass(frozen=True)
class ReplyDraft:
    """Composed reply body, kept in sections until rendered."""

    attribution: str
    quoted: tuple[str, ...]
    trailers: tuple[str, ...]
    signature: tuple[str, ...]

    @property
    def lines(self) -> list[str]:
        return [
            self.attribution,
            *self.quoted,
            "",
            *self.trailers,
            "",
            *self.signature,
        ]

    @property
    def text(self) -> str:
        return "\n".join(self.lines) + "\n"


def attribution_line(msg: ParsedMessage) -> str:
    author = msg.author.name or msg.author.address
    return f"On {email.utils.format_datetime(msg.date)}, {author} wrote:"


def quote_lines(body_lines: Iterable[str], max_lines: int = MAX_LINES) -> list[str]:
    """Quote the body up to the signature cut, at most *max_lines* lines.

    When more lines follow the last quoted one, an empty quoted line and a
    truncation marker are appended.
    """
    quoted: list[str] = []
    for line in body_lines:
        if line == SIGNATURE_CUT:
            break
        if len(quoted) >= max_lines:
            quoted.extend([QUOTE_PREFIX, TRUNCATION_MARKER])
            break
        quoted.append(f"{QUOTE_PREFIX}{line}")
    return quoted


def trailer_lines(user: Identity, flags: ReplyFlags) -> list[str]:
    return [f"{kind.value}: {user}" for kind in flags.trailer_kinds()]


def signature_lines(user: Identity) -> list[str]:
    # First word of the display name, e.g. "Jane" for "Jane Doe".
    sign_off = user.name.split(" ", 1)[0] if user.name else user.address
    return ["Thanks!", sign_off]


def compose_body(user: Identity, msg: ParsedMessage, flags: ReplyFlags) -> ReplyDraft:
    draft = ReplyDraft(
        attribution=attribution_line(msg),
        quoted=tuple(quote_lines(msg.body_lines)),
        trailers=tuple(trailer_lines(user, flags)),
        signature=tuple(signature_lines(user)),
    )
    logger.debug(
        "reply_composed",
        quoted_lines=len(draft.quoted),
        trailers=[kind.value for kind in flags.trailer_kinds()],
    )
    return draft
