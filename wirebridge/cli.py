"""wirebridge CLI.

Commands:
    check         - Load config and compile the container
    debug-events  - Show listener/subscriber wiring per connection
"""

from typing import Optional, Tuple
import logging
import sys

import click

from . import __version__
from .config import ConfigError, ConfigLoader
from .di.builder import ContainerBuilder
from .di.definitions import Reference
from .di.errors import DIError
from .orm.extension import OrmEventsExtension
from .orm.passes import format_manager_id


def _compile(paths: Tuple[str, ...], env_file: Optional[str]) -> Tuple[ContainerBuilder, OrmEventsExtension]:
    config = ConfigLoader.load(paths=list(paths), env_file=env_file)
    extension = OrmEventsExtension(config)
    builder = ContainerBuilder()
    extension.load(builder)
    builder.compile()
    return builder, extension


def _fail(kind: str, exc: Exception) -> None:
    click.echo(click.style(f"✗ {kind}:", fg="red", bold=True), err=True)
    click.echo(f"  {exc}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="wirebridge")
@click.option('--verbose', '-v', is_flag=True, help='Log compilation at DEBUG level')
@click.pass_context
def cli(ctx, verbose: bool):
    """Inspect ORM event wiring of a container config."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command('check')
@click.argument('configs', nargs=-1, required=True)
@click.option('--env-file', type=click.Path(dir_okay=False), help='.env file with WB_* overrides')
def check(configs: Tuple[str, ...], env_file: Optional[str]):
    """
    Compile the container and report problems.

    Examples:
      wirebridge check config/services.yaml
      wirebridge check base.yaml prod.yaml --env-file .env
    """
    try:
        builder, extension = _compile(configs, env_file)
    except ConfigError as e:
        _fail("Config error", e)
    except DIError as e:
        _fail("Container error", e)

    click.echo(click.style("✓ Container compiled", fg="green", bold=True))
    click.echo(f"  connections: {', '.join(map(str, extension.connections)) or '(none)'}")
    click.echo(f"  services:    {len(builder.get_definitions())}")


@cli.command('debug-events')
@click.argument('configs', nargs=-1, required=True)
@click.option('--connection', '-c', help='Only show this connection')
@click.option('--event', '-e', help='Only show listeners of this event')
@click.option('--env-file', type=click.Path(dir_okay=False), help='.env file with WB_* overrides')
def debug_events(configs: Tuple[str, ...], connection: Optional[str], event: Optional[str], env_file: Optional[str]):
    """
    Show, per connection, the listeners and subscribers in dispatch order.

    Examples:
      wirebridge debug-events services.yaml
      wirebridge debug-events services.yaml -c default -e post_persist
    """
    try:
        builder, extension = _compile(configs, env_file)
    except ConfigError as e:
        _fail("Config error", e)
    except DIError as e:
        _fail("Container error", e)

    names = list(extension.connections)
    if connection is not None:
        if connection not in names:
            _fail("Unknown connection", ValueError(
                f'"{connection}" (available: {", ".join(map(str, names))})'
            ))
        names = [connection]

    for name in names:
        manager_id = format_manager_id(extension.manager_template, name)
        definition = builder.get_definition(manager_id)
        click.echo(click.style(f"[{name}] {manager_id}", fg="cyan", bold=True))

        rows = 0
        for call in definition.get_method_calls():
            if call.method == "add_event_listener":
                events, service_id = call.arguments
                if event is not None and event not in events:
                    continue
                click.echo(f"  listener    {service_id}  ({', '.join(map(str, events))})")
                rows += 1
            elif call.method == "add_event_subscriber" and event is None:
                (ref,) = call.arguments
                click.echo(f"  subscriber  {ref.id if isinstance(ref, Reference) else ref}")
                rows += 1

        if not rows:
            click.echo(click.style("  (nothing registered)", dim=True))


def main():
    cli(obj={})


if __name__ == '__main__':
    main()
