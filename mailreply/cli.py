"""Command-line entry point: reply to the message on stdin."""

from __future__ import annotations

from datetime import datetime

import click
import structlog

from .assembler import assemble, render
from .composer import ReplyFlags, compose_body
from .config import ReplyConfig, load_config
from .errors import ConfigurationError, MailReplyError
from .identity import resolve_identity
from .logging import setup_logging
from .parser import MessageInterpreter
from .recipients import build_recipients
from .transport import SendmailTransport, resolve_transport

logger = structlog.get_logger()


def run_reply(
    config: ReplyConfig,
    raw_bytes: bytes,
    flags: ReplyFlags,
    *,
    dry_run: bool,
    now: datetime | None = None,
) -> str | None:
    """Compose the reply to *raw_bytes* and deliver it.

    On a dry run nothing is delivered and the serialized reply is returned
    instead.
    """
    user = resolve_identity(config)
    msg = MessageInterpreter().interpret(raw_bytes)
    recipients = build_recipients(user, msg)
    draft = compose_body(user, msg, flags)
    message = assemble(user, msg, recipients, draft, now=now)

    if dry_run:
        return render(message)

    SendmailTransport(resolve_transport(config)).send(message)
    return None


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(None, "-V", "--version", package_name="mailreply")
@click.option("-a", "--acked", is_flag=True, help="Add an Acked-by trailer.")
@click.option(
    "-n",
    "--dry-run",
    "dry_run",
    is_flag=True,
    help="Print the reply instead of sending it.",
)
@click.option("-r", "--reviewed", is_flag=True, help="Add a Reviewed-by trailer.")
@click.option("-t", "--tested", is_flag=True, help="Add a Tested-by trailer.")
def main(acked: bool, dry_run: bool, reviewed: bool, tested: bool) -> None:
    """Reply to the email read from stdin, optionally with review trailers.

    Examples:

        mailreply --reviewed --dry-run < patch.eml

        mailreply -at < patch.eml
    """
    try:
        config = load_config()
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc

    setup_logging(json=config.log_json, level=config.log_level)

    raw_bytes = click.get_binary_stream("stdin").read()
    flags = ReplyFlags(acked=acked, reviewed=reviewed, tested=tested)

    try:
        output = run_reply(config, raw_bytes, flags, dry_run=dry_run)
    except MailReplyError as exc:
        logger.error("reply_failed", error_type=type(exc).__name__, error=str(exc))
        raise click.ClickException(str(exc)) from exc

    if output is not None:
        click.echo(output, nl=False)
