"""Cc list for the reply: everyone on the thread except the author."""

from __future__ import annotations

import itertools

from .identity import Identity
from .parser import ParsedMessage

RecipientSet = tuple[Identity, ...]


def build_recipients(user: Identity, msg: ParsedMessage) -> RecipientSet:
    """Return the reply's Cc list in sorted canonical order.

    The operator, the original To list and the original Cc list are sorted
    by address (then display name), collapsed to one entry per address, and
    stripped of the original author.  Arrival order is not preserved.
    """
    candidates = [user, *(msg.to or ()), *(msg.cc or ())]
    candidates.sort(key=lambda identity: identity.sort_key)

    # After sorting, entries for the same address are adjacent; keep the first.
    unique = [
        next(group)
        for _, group in itertools.groupby(candidates, key=lambda identity: identity.address_key)
    ]

    return tuple(identity for identity in unique if not identity.same_address(msg.author))
