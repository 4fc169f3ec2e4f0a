"""
Command Line Interface for deployctl.
"""
import logging
import os

import click

from .dispatcher import Dispatcher
from ..PARSERS.config_parser import ConfigParser
from ..RUNNERS.compose_platform import ComposePlatform
from ..RUNNERS.process_runner import ProcessRunner
from ..UTILS.console import Console
from ..exceptions import ConfigError

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

@click.command(add_help_option=False, context_settings={"ignore_unknown_options": True})
@click.argument('command', required=False)
@click.argument('service', required=False)
@click.option('--config', '-c', 'config_path', default='deployctl.yml', envvar='DEPLOYCTL_CONFIG',
              help='Configuration file path')
@click.option('--project-dir', default='.', type=click.Path(file_okay=False),
              help='Directory holding the compose and env files')
@click.option('--debug', is_flag=True, envvar='DEPLOYCTL_DEBUG', help='Verbose logging')
@click.pass_context
def cli(ctx, command, service, config_path, project_dir, debug):
    """
    deployctl - build, deploy and health-check the application services.

    COMMAND is one of deploy, build, start, stop, restart, status, logs,
    health, clean or help (default: deploy). SERVICE narrows the command
    to one service.
    """
    logging.basicConfig(level=logging.DEBUG if debug else logging.WARNING, format=LOG_FORMAT)

    if not os.path.isabs(config_path):
        config_path = os.path.join(project_dir, config_path)
    try:
        config = ConfigParser().load(config_path)
    except ConfigError as e:
        Console().error(e.message)
        ctx.exit(1)

    platform = ComposePlatform(
        compose_file=config.compose_file,
        project_name=config.project_name,
        runner=ProcessRunner(working_dir=project_dir),
    )
    dispatcher = Dispatcher(config, platform, base_dir=project_dir)
    try:
        code = dispatcher.dispatch(command, service)
    except KeyboardInterrupt:
        click.echo("\nInterrupted.")
        code = 130
    ctx.exit(code)

def main():
    """
    Main entry point for the CLI.
    """
    cli()

if __name__ == '__main__':
    main()
