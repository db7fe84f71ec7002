"""Command line interface for git-warp-time."""

import logging
import sys
from pathlib import Path
from typing import NoReturn, Optional, Set, Tuple

import click
from rich.console import Console

from . import __version__
from .config import WarpOptions
from .errors import PathNotFound, WarpTimeError
from .services.filesystem import FilesystemAdapter
from .warp import get_repo, reset_mtimes, resolve_repo_path

logger = logging.getLogger(__name__)

console = Console()
error_console = Console(stderr=True)


def _fail(context: Optional[str], error: WarpTimeError) -> NoReturn:
    """Print one descriptive error message and exit non-zero."""
    if context:
        error_console.print(f"❌ {context}", style="red", soft_wrap=True)
    error_console.print(str(error), style="red", markup=False, soft_wrap=True)
    if error.user_guidance:
        error_console.print(
            error.user_guidance, style="dim", markup=False, soft_wrap=True
        )
    sys.exit(1)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--dirty",
    "-d",
    is_flag=True,
    help="Include files tracked by Git but with modifications in the working tree",
)
@click.option(
    "--ignored",
    "-i",
    is_flag=True,
    help="Include files tracked by Git but also ignored",
)
@click.option(
    "--ignore-older",
    "-o",
    is_flag=True,
    help="Only touch files newer than their history, ignore ones that are older",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Don't print any output about files touched or skipped",
)
@click.argument("paths", nargs=-1, type=click.Path())
@click.version_option(version=__version__, prog_name="git-warp-time")
def cli(
    dirty: bool,
    ignored: bool,
    ignore_older: bool,
    quiet: bool,
    paths: Tuple[str, ...],
):
    """Reset file timestamps to the time of the last commit that changed them.

    \b
    Every file tracked by Git in the working directory gets its modification
    time set to the commit time of the newest commit on the first-parent
    history that introduced its current content, following renames.

    \b
    EXAMPLES:
      git-warp-time                 # All clean tracked files
      git-warp-time --dirty         # Include locally modified files too
      git-warp-time -o README.md    # Only rewind README.md if it is newer

    PATHS restricts the run to the given files, relative to the current
    directory; each one must be tracked in HEAD.
    """
    logging.basicConfig(
        level=logging.WARNING, format="%(levelname)s:%(name)s:%(message)s"
    )

    try:
        repo = get_repo()
    except WarpTimeError as e:
        _fail("Current working directory is not a valid Git repository.", e)

    explicit_paths: Optional[Set[str]] = None
    if paths:
        explicit_paths = set()
        cwd = FilesystemAdapter(Path.cwd())
        for path in paths:
            if not cwd.exists(path):
                _fail(None, PathNotFound(path))
            try:
                explicit_paths.add(resolve_repo_path(repo, path))
            except WarpTimeError as e:
                _fail("Unable to access repository history.", e)

    options = WarpOptions(
        explicit_paths=explicit_paths,
        include_dirty=dirty,
        include_ignored=ignored,
        ignore_older=ignore_older,
        verbose=not quiet,
    )

    try:
        touched = reset_mtimes(repo, options, console)
    except WarpTimeError as e:
        _fail("Unable to change modification time of files.", e)

    logger.debug("Touched %d files", len(touched))


def main():
    """Main entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        error_console.print("\n❌ Interrupted by user", style="red")
        sys.exit(1)


if __name__ == "__main__":
    main()
