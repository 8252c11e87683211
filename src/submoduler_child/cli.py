"""Command-line interface for submoduler-child

Provides commands for init, status, test, version, build,
symlink_build and update.
"""
import logging
import sys
from typing import Any, List, Optional, Sequence

import click

from submoduler_child import __version__
from submoduler_child.commands import CommandKind, dispatch
from submoduler_child.core.config import Config
from submoduler_child.core.version import BumpKind
from submoduler_child.errors import ConfigError, SubmodulerError

logger = logging.getLogger(__name__)

PROG_NAME = "submoduler-child"


def _print_error(message: str) -> None:
    click.secho(f"✗ Error: {message}", fg="red", err=True)


def _child_header(project: str = ".") -> Optional[str]:
    """Help header naming the child, None outside a named child project"""
    config = Config(project)
    if not config.exists():
        return None
    try:
        name = config.get("submoduler.childname")
    except ConfigError:
        return None
    return f"Submoduler Child - {name}" if name else None


class SubmodulerGroup(click.Group):
    """Click group that reports every handled failure with exit status 1

    Running without a subcommand prints usage, an unknown subcommand or
    bad option prints the error with usage, and a SubmodulerError raised
    by a handler is printed as a red error line.
    """

    def list_commands(self, ctx: click.Context) -> List[str]:
        return [kind.value for kind in CommandKind if kind.value in self.commands]

    def main(
        self,
        args: Optional[Sequence[str]] = None,
        prog_name: Optional[str] = None,
        complete_var: Optional[str] = None,
        standalone_mode: bool = True,
        **extra: Any,
    ) -> Any:
        argv = list(sys.argv[1:] if args is None else args)
        prog_name = prog_name or PROG_NAME

        if not argv:
            header = _child_header()
            if header:
                click.echo(header)
                click.echo("")
            click.echo(self.get_help(click.Context(self, info_name=prog_name)))
            sys.exit(1)

        try:
            rv = super().main(
                args=argv,
                prog_name=prog_name,
                complete_var=complete_var,
                standalone_mode=False,
                **extra,
            )
        except click.ClickException as e:
            e.show()
            sys.exit(1)
        except click.Abort:
            click.echo("\nInterrupted", err=True)
            sys.exit(130)
        except SubmodulerError as e:
            _print_error(str(e))
            sys.exit(1)
        except Exception as e:
            logger.debug("Unhandled error", exc_info=True)
            _print_error(str(e) or e.__class__.__name__)
            sys.exit(1)

        sys.exit(rv if isinstance(rv, int) else 0)


def project_option(func):
    """Add the --project/-p option shared by all commands"""
    return click.option(
        "--project", "-p", default=".", show_default=True,
        help="Path to the child submodule root",
    )(func)


@click.group(cls=SubmodulerGroup)
@click.version_option(version=__version__, prog_name=PROG_NAME)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
def cli(verbose: bool):
    """Submoduler Child - Manage child submodule operations

    Run a command with --help for command-specific options.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


@cli.command("init", help=CommandKind.INIT.description)
@project_option
@click.option("--name", "-n", default=None, help="Child submodule name")
def init(project: str, name: Optional[str]):
    return dispatch(CommandKind.INIT, project, name=name)


@cli.command("status", help=CommandKind.STATUS.description)
@project_option
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def status(project: str, output_json: bool):
    return dispatch(CommandKind.STATUS, project, output_json=output_json)


@cli.command("test", help=CommandKind.TEST.description)
@project_option
def test(project: str):
    return dispatch(CommandKind.TEST, project)


@cli.command("version", help=CommandKind.VERSION.description)
@project_option
@click.option(
    "--bump", "-b",
    type=click.Choice([kind.value for kind in BumpKind]),
    default=None,
    help="Bump the version and write it back",
)
def version(project: str, bump: Optional[str]):
    return dispatch(CommandKind.VERSION, project, bump=bump)


@cli.command("build", help=CommandKind.BUILD.description)
@project_option
def build(project: str):
    return dispatch(CommandKind.BUILD, project)


@cli.command("symlink_build", help=CommandKind.SYMLINK_BUILD.description)
@project_option
@click.option("--dry-run", is_flag=True, help="Report changes without touching the filesystem")
def symlink_build(project: str, dry_run: bool):
    return dispatch(CommandKind.SYMLINK_BUILD, project, dry_run=dry_run)


@cli.command("update", help=CommandKind.UPDATE.description)
@project_option
@click.option("--message", "-m", required=True, help="Commit message for pending changes")
@click.option(
    "--release/--no-release", default=False,
    help="Create a GitHub release (requires GITHUB_TOKEN)",
)
def update(project: str, message: str, release: bool):
    return dispatch(CommandKind.UPDATE, project, message=message, release=release)


def main():
    """Main entry point"""
    cli()


if __name__ == "__main__":
    main()
