# -*- coding: utf-8 -*-
import json
import logging
from typing import Dict, Optional, Tuple

import click

from datalyr.client import Datalyr
from datalyr.constants import (
    CLI_API_KEY_HELP,
    CLI_DEBUG_HELP,
    CLI_HOST_HELP,
    CLI_MAIN_INTRODUCTION,
    EXIT_CODE_DELIVERY_FAILED,
)
from datalyr.error_handlers import handle_cmd_exception
from datalyr.logs_helpers import LOG_FORMAT
from datalyr.meta import get_version

LOG = logging.getLogger(__name__)


def configure_logger(ctx, param, debug):
    level = logging.CRITICAL

    if debug:
        level = logging.DEBUG

    logging.basicConfig(format=LOG_FORMAT, level=level)
    return debug


def parse_pairs(ctx, param, values: Tuple[str, ...]) -> Dict[str, object]:
    """
    Turn ``key=value`` options into a mapping. Values are decoded as JSON
    when possible and kept as plain strings otherwise.
    """
    pairs = {}
    for item in values:
        key, sep, raw = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {item!r}")
        try:
            pairs[key] = json.loads(raw)
        except json.JSONDecodeError:
            pairs[key] = raw
    return pairs


def send(ctx: click.Context, action) -> None:
    """
    Build a client from the group options, run ``action`` with it and close
    it, which performs the final flush.
    """
    options = ctx.find_object(dict) or {}
    if not options.get("api_key"):
        raise click.UsageError(
            "Missing API key. Use --api-key or set DATALYR_API_KEY.", ctx=ctx
        )

    failures = []

    def on_error(record, error):
        failures.append((record, error))

    with Datalyr(
        {"api_key": options["api_key"], "host": options.get("host")},
        on_error=on_error,
    ) as client:
        action(client)

    for record, error in failures:
        click.secho(f"Failed to send {record.event}: {error}", fg="red", err=True)

    if failures:
        ctx.exit(EXIT_CODE_DELIVERY_FAILED)


@click.group(help=CLI_MAIN_INTRODUCTION)
@click.option("--api-key", envvar="DATALYR_API_KEY", help=CLI_API_KEY_HELP)
@click.option("--host", envvar="DATALYR_HOST", default=None, help=CLI_HOST_HELP)
@click.option("--debug", is_flag=True, help=CLI_DEBUG_HELP, callback=configure_logger)
@click.version_option(version=get_version())
@click.pass_context
def cli(ctx, api_key: Optional[str], host: Optional[str], debug: bool):
    ctx.ensure_object(dict)
    ctx.obj.update(api_key=api_key, host=host)
    LOG.debug("Using collector %s", host or "default host")


@cli.command()
@click.argument("event")
@click.option("--user-id", default=None, help="Known user id. An anonymous id is generated otherwise.")
@click.option("-p", "--property", "properties", multiple=True, callback=parse_pairs,
              help="Event property as key=value. Repeatable.")
@click.pass_context
@handle_cmd_exception
def track(ctx, event, user_id, properties):
    """
    Track an EVENT.
    """
    send(ctx, lambda client: client.track(user_id, event, properties))
    click.echo(f"Tracked {event}")


@cli.command()
@click.argument("user_id")
@click.option("-t", "--trait", "traits", multiple=True, callback=parse_pairs,
              help="User trait as key=value. Repeatable.")
@click.pass_context
@handle_cmd_exception
def identify(ctx, user_id, traits):
    """
    Attach traits to USER_ID.
    """
    send(ctx, lambda client: client.identify(user_id, traits))
    click.echo(f"Identified {user_id}")


@cli.command()
@click.argument("name", required=False)
@click.option("--user-id", default=None, help="Known user id. An anonymous id is generated otherwise.")
@click.option("-p", "--property", "properties", multiple=True, callback=parse_pairs,
              help="Page property as key=value. Repeatable.")
@click.pass_context
@handle_cmd_exception
def page(ctx, name, user_id, properties):
    """
    Record a view of page NAME.
    """
    send(ctx, lambda client: client.page(user_id, name, properties))
    click.echo(f"Tracked page {name or ''}".rstrip())


@cli.command()
@click.argument("user_id")
@click.argument("group_id")
@click.option("-t", "--trait", "traits", multiple=True, callback=parse_pairs,
              help="Group trait as key=value. Repeatable.")
@click.pass_context
@handle_cmd_exception
def group(ctx, user_id, group_id, traits):
    """
    Add USER_ID to GROUP_ID.
    """
    send(ctx, lambda client: client.group(user_id, group_id, traits or None))
    click.echo(f"Grouped {user_id} into {group_id}")
