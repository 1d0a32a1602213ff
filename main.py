import sys

import click

from base_classes import ConsoleError
from catalog import AVAILABLE_COMMANDS, describe_parameter
from config_manager import ConfigManager
from utils.log_viewer import resolve_log_files, show_events
from utils.logging_utils import LoggingHandler

SHOWN_SECTIONS = ('XRPC', 'CONSOLE', 'KEYS')


@click.group(invoke_without_command=True)
@click.option('-c', '--conf', default=None, help='Path to a custom configuration file')
@click.option('--host', default=None, help='PDS host to talk to (overrides [XRPC] host)')
@click.option('--mock', default=False, is_flag=True, help='Use the offline mock provider')
@click.option('-v', '--verbose', default=False, is_flag=True, help='Show effective settings before starting')
@click.pass_context
def cli(ctx, conf, host, mock, verbose):
    """
    the main entry point for the CLI click interface
    """
    ctx.ensure_object(dict)  # set up the context object to be passed around

    try:
        config_manager = ConfigManager(conf)
    except FileNotFoundError as e:
        raise click.ClickException(str(e))

    overrides = {}
    if host:
        overrides['host'] = host
    if mock:
        overrides['provider'] = 'mock'
    config = config_manager.create_console_config(overrides)
    ctx.obj['CONFIG_MANAGER'] = config_manager
    ctx.obj['CONFIG'] = config

    if ctx.invoked_subcommand is not None:
        return

    logger = LoggingHandler(config)
    effective = {section: config.get_all_options_from_section(section) for section in SHOWN_SECTIONS}
    logger.settings(effective)
    if verbose:
        _print_settings(effective)
        if logger.active():
            print(f'log file = {logger.log_path}')

    try:
        from tui.mode import ConsoleMode
        mode = ConsoleMode(config, logger)
        code = mode.start()
    except ConsoleError as e:
        logger.error('main', e)
        print(f"Application error: {e.user_message}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.error('main', e)
        print(f"Application error: {e}", file=sys.stderr)
        sys.exit(1)
    if code:
        sys.exit(code)


def _print_settings(effective):
    for section, options in effective.items():
        print(f'[ {section} ]')
        for option, value in options.items():
            print(f'{option} = {value}')
        print()


@cli.command()
@click.option('-d', '--details', is_flag=True, help="Show parameters for each method")
def list_methods(details):
    """
    list the XRPC methods the console can build
    """
    for command in AVAILABLE_COMMANDS:
        if not details:
            print(command.method)
            continue
        print(command.method)
        print(f'  {command.description}')
        for param in command.parameters:
            print(f'    {param.name}: {describe_parameter(param)}')
        print()


@cli.command()
@click.pass_context
def show_config(ctx):
    """
    show the effective console settings
    """
    config = ctx.obj['CONFIG']
    _print_settings({section: config.get_all_options_from_section(section) for section in SHOWN_SECTIONS})


@cli.group()
def logs():
    """
    inspect console log files
    """


@logs.command('show')
@click.pass_context
@click.option('--aspect', default=None, help='Only records for this aspect (auth, dispatch, ...)')
@click.option('--event', default=None, help='Only records with this event name')
@click.option('--method', default=None, help='Only records for this XRPC method')
@click.option('--file', 'log_file', default=None, help='Read this log file instead of the per-run logs')
@click.option('-n', '--limit', type=int, default=200, help='Show at most this many of the latest records')
@click.option('--json', 'json_output', is_flag=True, default=False, help='Print raw JSON lines')
def logs_show(ctx, aspect, event, method, log_file, limit, json_output):
    """Print matching records from the JSON logs."""
    config = ctx.obj['CONFIG']
    where = {}
    if aspect:
        where['aspect'] = aspect
    if event:
        where['event'] = event
    if method:
        where['data.method'] = method
    lines = show_events(paths=resolve_log_files(config, log_file), limit=limit, where=where, json_output=json_output)
    if not lines:
        print("No matching log records")
        return
    for line in lines:
        print(line)


# take care of business
if __name__ == "__main__":
    cli(obj={})
