import click
import logging
import traceback
from pathlib import Path as StdPath

from .config import Config
from .validators import validate_config
from .builder import Builder
from . import emit
from .utils import setup_logger, parse_module_levels
from .exceptions import (
    MailuBuilderError,
    ConfigurationError,
    DefinitionError,
    BuildError,
)
from . import __version__


def complete_config_files(ctx, param, incomplete):
    """Auto-complete .yml and .yaml config files in current directory"""
    try:
        cwd = StdPath.cwd()
        yml_files = list(cwd.glob('*.yml')) + list(cwd.glob('*.yaml'))
        return sorted(f.name for f in yml_files if f.name.startswith(incomplete))
    except OSError as e:
        logging.debug(f"Config file auto-completion failed: {e}")
        return []


def setup_logging(debug: bool, log_levels: str = None, log_file: str = None):
    """Setup logger with debug and module-level configuration"""
    setup_logger(debug=debug, module_levels=parse_module_levels(log_levels), log_file=log_file)


def _abort(label: str, error: Exception):
    logging.error(f"{label}: {error}")
    ctx = click.get_current_context()
    if ctx.obj.get('debug'):
        traceback.print_exc()
    raise click.Abort()


def handle_errors(func):
    """Decorator to handle common exceptions"""
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ConfigurationError as e:
            field = f" (field: {e.field})" if e.field else ""
            _abort(f"Configuration error{field}", e)
        except DefinitionError as e:
            _abort("Definition error", e)
        except BuildError as e:
            _abort("Build error", e)
        except MailuBuilderError as e:
            _abort("An unexpected application error occurred", e)
        except OSError as e:
            _abort("File error", e)
    return wrapper


@handle_errors
def do_build(config_file: str, output: str):
    """Execute build command"""
    config = Config(config_file)
    graph = Builder(config).run()
    if output:
        emit.write(graph, output)
    else:
        click.echo(emit.render(graph), nl=False)


@handle_errors
def do_validate(config_file: str):
    """Execute validate command"""
    config = Config(config_file)
    validate_config(config.model)
    logging.info(f"Configuration '{config_file}' is valid.")


@handle_errors
def do_env(config_file: str):
    """Print the final shared environment"""
    graph = Builder(Config(config_file)).run()
    for key, value in graph.environment.items():
        click.echo(f"{key}={value}")


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('-l', '--log-levels', help="Comma-separated per-module log levels (e.g., 'disc=DEBUG,comp=INFO')")
@click.option('-f', '--log-file', help='Path to log file')
@click.version_option(version=__version__, prog_name='mailubuilder')
@click.pass_context
def cli(ctx, debug, log_levels, log_file):
    """Mailu Builder - Compile a Mailu deployment into Kubernetes manifests

    \b
    Examples:
      mailub build mailu.yml              Print manifests to stdout
      mailub build mailu.yml -o out.yml   Write manifests to a file
      mailub env mailu.yml                Show the shared environment
    """
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug
    setup_logging(debug, log_levels, log_file)


@cli.command()
@click.argument('config_file', shell_complete=complete_config_files)
@click.option('-o', '--output', help='Write manifests to this file instead of stdout')
@click.pass_context
def build(ctx, config_file, output):
    """Build Kubernetes manifests from config file"""
    do_build(config_file, output)


@cli.command()
@click.argument('config_file', shell_complete=complete_config_files)
@click.pass_context
def validate(ctx, config_file):
    """Validate config file without building"""
    do_validate(config_file)


@cli.command()
@click.argument('config_file', shell_complete=complete_config_files)
@click.pass_context
def env(ctx, config_file):
    """Print the shared environment (KEY=VALUE per line)"""
    do_env(config_file)


if __name__ == '__main__':
    cli()
