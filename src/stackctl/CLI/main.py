# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Command Line Interface for stackctl.
"""
import logging
import os
from datetime import datetime
from urllib.request import urlopen

import click

from .. import __version__
from ..exceptions import ConfigError, CredentialsUnavailable, RuntimeUnavailable, UnknownMode
from ..MANAGERS.backup_manager import BackupManager
from ..MANAGERS.confirmation_gate import ConfirmationGate, terminal_ask
from ..MANAGERS.environment_manager import EnvironmentResolver
from ..MANAGERS.health_monitor import HealthChecker
from ..MODELS.invocation import ConfirmationPrompt, Invocation, Verb
from ..PARSERS.compose_parser import ComposeParser
from ..PARSERS.config_parser import ConfigParser
from ..PARSERS.env_parser import EnvParser
from ..RUNNERS import database_commands
from ..RUNNERS.command_builder import CommandBuilder
from ..RUNNERS.command_dispatcher import CommandDispatcher

logger = logging.getLogger(__name__)

EXIT_CANCELLED = 3
EXIT_RUNTIME_UNAVAILABLE = 127

PASSTHROUGH = {"ignore_unknown_options": True}


def _invocation(ctx, verb, service=None, args=(), environment=None) -> Invocation:
    return Invocation(
        verb=verb,
        environment=environment or ctx.obj['environment'],
        service=service,
        extra_args=tuple(args),
    )


def _dispatch(ctx, invocation: Invocation, stdout=None) -> int:
    try:
        return ctx.obj['dispatcher'].dispatch(invocation, stdout=stdout)
    except RuntimeUnavailable as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(EXIT_RUNTIME_UNAVAILABLE)


def _exit_status(code: int) -> int:
    # a child killed by signal N reports -N; shells report 128+N
    return 128 - code if code < 0 else code


def _finish(ctx, code: int, success_message: str):
    if code == 0:
        click.echo(success_message)
    ctx.exit(_exit_status(code))


def _guarded(ctx, prompt: ConfirmationPrompt, action) -> int:
    """
    Runs action behind a fresh confirmation gate; exits on refusal.
    """
    result = ConfirmationGate(ctx.obj['ask']).run(prompt, action)
    if result.cancelled:
        click.echo("Operation cancelled.")
        ctx.exit(EXIT_CANCELLED)
    return result.exit_code


def _credentials(ctx):
    config = ctx.obj['config']
    try:
        return database_commands.read_credentials(ctx.obj['environment'].env_file, config.database)
    except CredentialsUnavailable as e:
        raise click.ClickException(str(e))


@click.group()
@click.option('--mode', '-m', envvar='STACKCTL_MODE', default=None,
              help='Environment to operate on: dev or prod (default dev).')
@click.option('--config', '-c', 'config_path', default=None, help='Project config file path')
@click.option('--verbose', '-v', is_flag=True, help='Log runtime commands to stderr.')
@click.version_option(__version__, prog_name='stackctl')
@click.pass_context
def cli(ctx, mode, config_path, verbose):
    """
    stackctl - manage a compose-based stack across environments.

    Every command runs against the environment selected with --mode.
    Arguments after the command's own options are passed through to the
    container runtime unchanged.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = ctx.obj.get('config') or ConfigParser().load(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e))

    resolver = EnvironmentResolver(config)
    try:
        environment = resolver.resolve(mode)
    except UnknownMode as e:
        raise click.BadParameter(str(e), param_hint="'--mode'")

    logger.debug("Environment %s: compose=%s env=%s", environment.name.value,
                 environment.compose_file, environment.env_file)

    ctx.obj['config'] = config
    ctx.obj['resolver'] = resolver
    ctx.obj['environment'] = environment
    ctx.obj.setdefault('dispatcher', CommandDispatcher(
        CommandBuilder(runtime=config.runtime, shell_command=config.shell_command)))
    ctx.obj.setdefault('ask', terminal_ask)
    ctx.obj.setdefault('health_opener', urlopen)
    ctx.obj.setdefault('clock', datetime.now)


@cli.command(context_settings=PASSTHROUGH)
@click.argument('args', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def up(ctx, args):
    """Start services in the background (e.g. up --build)."""
    env = ctx.obj['environment']
    click.echo(f"Starting {env.name.value} environment...")
    code = _dispatch(ctx, _invocation(ctx, Verb.UP, args=args))
    _finish(ctx, code, "Services started successfully!")


@cli.command(context_settings=PASSTHROUGH)
@click.argument('args', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def down(ctx, args):
    """Stop services."""
    env = ctx.obj['environment']
    click.echo(f"Stopping {env.name.value} environment...")
    code = _dispatch(ctx, _invocation(ctx, Verb.DOWN, args=args))
    _finish(ctx, code, "Services stopped successfully!")


@cli.command(context_settings=PASSTHROUGH)
@click.option('--service', '-s', default=None, help='Service to build (default all).')
@click.argument('args', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def build(ctx, service, args):
    """Build service images."""
    env = ctx.obj['environment']
    click.echo(f"Building {env.name.value} containers...")
    code = _dispatch(ctx, _invocation(ctx, Verb.BUILD, service, args))
    _finish(ctx, code, "Build completed successfully!")


@cli.command(context_settings=PASSTHROUGH)
@click.option('--service', '-s', default=None, help='Service to follow (default from config).')
@click.argument('args', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def logs(ctx, service, args):
    """Follow the logs of one service until interrupted."""
    service = service or ctx.obj['config'].default_service
    click.echo(f"Showing logs for {service}...")
    ctx.exit(_exit_status(_dispatch(ctx, _invocation(ctx, Verb.LOGS, service, args))))


@cli.command(context_settings=PASSTHROUGH)
@click.option('--service', '-s', default=None, help='Service to restart (default all).')
@click.argument('args', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def restart(ctx, service, args):
    """Restart services."""
    env = ctx.obj['environment']
    click.echo(f"Restarting {env.name.value} services...")
    code = _dispatch(ctx, _invocation(ctx, Verb.RESTART, service, args))
    _finish(ctx, code, "Services restarted successfully!")


@cli.command(context_settings=PASSTHROUGH)
@click.option('--service', '-s', default=None, help='Service to attach to (default from config).')
@click.argument('args', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def shell(ctx, service, args):
    """Open an interactive shell in a service container."""
    service = service or ctx.obj['config'].default_service
    click.echo(f"Opening shell in {service} container...")
    ctx.exit(_exit_status(_dispatch(ctx, _invocation(ctx, Verb.SHELL, service, args))))


@cli.command(context_settings=PASSTHROUGH)
@click.argument('args', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def ps(ctx, args):
    """Show running containers."""
    env = ctx.obj['environment']
    click.echo(f"Running containers ({env.name.value}):")
    ctx.exit(_exit_status(_dispatch(ctx, _invocation(ctx, Verb.PS, args=args))))


cli.add_command(ps, name='status')


@cli.command('db-shell', context_settings=PASSTHROUGH)
@click.argument('args', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def db_shell(ctx, args):
    """Open an authenticated database shell."""
    creds = _credentials(ctx)
    click.echo("Opening database shell...")
    invocation = database_commands.db_shell(
        ctx.obj['environment'], ctx.obj['config'].database, creds, args)
    ctx.exit(_exit_status(_dispatch(ctx, invocation)))


@cli.command('reset-data')
@click.pass_context
def reset_data(ctx):
    """Drop the database (asks for confirmation)."""
    creds = _credentials(ctx)
    invocation = database_commands.reset_data(
        ctx.obj['environment'], ctx.obj['config'].database, creds)
    prompt = ConfirmationPrompt(
        message="Are you sure?",
        warning=f"WARNING: This will delete all data in '{creds.database}'!",
    )

    def action():
        click.echo("Resetting database...")
        return _dispatch(ctx, invocation)

    _finish(ctx, _guarded(ctx, prompt, action), "Database reset complete!")


@cli.command('remove-volumes')
@click.pass_context
def remove_volumes(ctx):
    """Stop services and delete their volumes (asks for confirmation)."""
    invocation = _invocation(ctx, Verb.DOWN, args=('-v',))
    prompt = ConfirmationPrompt(
        message="Are you sure?",
        warning="WARNING: This will delete all persistent data!",
    )

    def action():
        click.echo("Removing volumes...")
        return _dispatch(ctx, invocation)

    _finish(ctx, _guarded(ctx, prompt, action), "Volumes removed!")


@cli.command('remove-all')
@click.pass_context
def remove_all(ctx):
    """Delete containers, networks, volumes and images (asks for confirmation)."""
    invocation = _invocation(ctx, Verb.DOWN, args=('-v', '--rmi', 'all'))
    prompt = ConfirmationPrompt(
        message="Are you sure?",
        warning="WARNING: This will remove all containers, networks, volumes, and images!",
    )

    def action():
        click.echo("Removing all resources...")
        return _dispatch(ctx, invocation)

    _finish(ctx, _guarded(ctx, prompt, action), "All resources removed!")


@cli.command('backup-data')
@click.pass_context
def backup_data(ctx):
    """Dump the database to a new timestamped archive."""
    config = ctx.obj['config']
    creds = _credentials(ctx)
    click.echo("Creating database backup...")

    manager = BackupManager(config.backup_dir, clock=ctx.obj['clock'])
    invocation = database_commands.backup_dump(ctx.obj['environment'], config.database, creds)
    try:
        result = manager.create(ctx.obj['dispatcher'], invocation)
    except RuntimeUnavailable as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(EXIT_RUNTIME_UNAVAILABLE)

    if result.succeeded:
        click.echo(f"Backup created: {result.path}")
        click.echo(f"{len(manager.list_backups())} backup(s) in {config.backup_dir}")
    ctx.exit(_exit_status(result.exit_code))


@cli.command()
@click.pass_context
def health(ctx):
    """Query the HTTP health endpoints of the environment."""
    env = ctx.obj['environment']
    click.echo(f"Checking service health ({env.name.value})...")

    checker = HealthChecker(env.health_endpoints,
                            timeout=ctx.obj['config'].health_timeout,
                            opener=ctx.obj['health_opener'])

    results = checker.check_all()
    for result in results:
        click.echo(f"{result.name.capitalize()} ({result.url}):")
        click.echo(result.describe())
    ctx.exit(0 if all(r.healthy for r in results) else 1)


@cli.command()
@click.pass_context
def services(ctx):
    """List the services defined by the environment's compose file."""
    env = ctx.obj['environment']
    context = dict(os.environ)
    if os.path.isfile(env.env_file):
        context.update(EnvParser.parse(env.env_file))

    try:
        compose = ComposeParser(context).parse(env.compose_file)
    except FileNotFoundError:
        raise click.ClickException(f"Compose file not found: {env.compose_file}")
    except ConfigError as e:
        raise click.ClickException(str(e))

    click.echo(f"{'SERVICE':15} {'IMAGE/BUILD':30} PORTS")
    click.echo("-" * 60)
    for name, svc in compose.services.items():
        source = svc.image or (f"build: {svc.build_context}" if svc.build_context else "-")
        click.echo(f"{name:15} {source:30} {', '.join(svc.ports)}")
    if compose.volumes:
        click.echo(f"\nVolumes: {', '.join(compose.volumes)}")


@cli.command()
@click.pass_context
def clean(ctx):
    """Stop every environment's containers and networks, ignoring failures."""
    click.echo("Cleaning up containers and networks...")
    for environment in ctx.obj['resolver'].resolve_all():
        code = _dispatch(ctx, _invocation(ctx, Verb.DOWN, environment=environment))
        if code != 0:
            click.echo(f"Warning: {environment.name.value} teardown exited with {code}", err=True)
    click.echo("Cleanup complete!")


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={}, prog_name='stackctl')


if __name__ == '__main__':
    main()
