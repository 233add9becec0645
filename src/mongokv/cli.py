#!/usr/bin/env python3
"""
mongokv CLI - put, get and ping against a MongoDB-backed key-value store.

Each command connects, runs one operation and disconnects.
"""

import json
import sys
from typing import Callable, Optional, TypeVar

import click
from rich.console import Console

from mongokv import client
from mongokv._version import __version__
from mongokv.core.exceptions import MongoKVError, ValidationError, from_exception

T = TypeVar("T")

TYPE_CHOICES = click.Choice(["int", "text"], case_sensitive=False)


def _parse_value(raw: str, value_type: str):
    if value_type == "int":
        try:
            return int(raw)
        except ValueError as e:
            raise ValidationError(
                f"value is not an integer: {raw}",
                context={"field": "value", "reason": "not_an_integer"},
                cause=e,
            ) from e
    return raw


def _run(uri: Optional[str], operation: Callable[[], T]) -> T:
    """Connect the default session, run `operation`, always disconnect."""
    try:
        client.create_client(uri)
        try:
            return operation()
        finally:
            client.destroy_client()
    except MongoKVError as e:
        click.echo(from_exception(e).model_dump_json(exclude_none=True), err=True)
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="mongokv")
def cli():
    """mongokv - key-value storage on MongoDB"""
    pass


@cli.command()
@click.argument("collection")
@click.argument("key")
@click.argument("value")
@click.option("--type", "value_type", type=TYPE_CHOICES, default="text", help="Value type")
@click.option("--uri", envvar="MONGOKV_URI", help="MongoDB URI including the database")
def put(collection: str, key: str, value: str, value_type: str, uri: Optional[str]):
    """Store VALUE under KEY in COLLECTION."""
    value_type = value_type.lower()

    def operation():
        client.put(collection, key, _parse_value(value, value_type), value_type)

    _run(uri, operation)
    click.echo("OK")


@cli.command()
@click.argument("collection")
@click.argument("key")
@click.option("--type", "value_type", type=TYPE_CHOICES, default="text", help="Value type")
@click.option("--uri", envvar="MONGOKV_URI", help="MongoDB URI including the database")
def get(collection: str, key: str, value_type: str, uri: Optional[str]):
    """Print the value stored under KEY in COLLECTION."""
    value = _run(uri, lambda: client.get(collection, key, value_type.lower()))
    click.echo(value)


@cli.command()
@click.option("--uri", envvar="MONGOKV_URI", help="MongoDB URI including the database")
def ping(uri: Optional[str]):
    """Connect and print a health report."""
    health = _run(uri, lambda: client.get_session().health_check())
    Console().print_json(json.dumps(health))


def main():
    cli()


if __name__ == "__main__":
    main()
