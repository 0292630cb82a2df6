from __future__ import annotations

import logging

import typer

from xtags import __version__
from xtags import TagStore

DefaultPath = '.'

LogFormat = '%(asctime)s %(levelname)s %(message)s'

logger = logging.getLogger('xtags')

app = typer.Typer(help="xtags: tag files and directories with extended attributes")


def setup_logging(verbose: bool = False, log_file: str | None = None) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    if log_file:
        logging.basicConfig(level=level, format=LogFormat,
                            filename=log_file, filemode='w')
    else:
        logging.basicConfig(level=level, format=LogFormat)
    logger.setLevel(level)


def _store() -> TagStore.TagStore:
    return TagStore.TagStore(logger)


def _fail(path: str, e: Exception) -> None:
    if isinstance(e, TagStore.TagStoreException):
        msg = e.msg
    else:
        msg = path + ': ' + (e.strerror or str(e))
    logger.error(msg)
    typer.echo('xtags: ' + msg, err=True)
    raise typer.Exit(code=1)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug messages"),
    log_file: str = typer.Option(None, help="Write log messages to this file"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version"
    ),
) -> None:
    setup_logging(verbose, log_file)


@app.command("find")
def find_cmd(
    path: str = typer.Argument(DefaultPath, help="Directory or file to search"),
    tags: list[str] = typer.Argument(None, help="Tag patterns to look for"),
    fixed_strings: bool = typer.Option(
        False, "--fixed-strings", "-F", help="Match tags literally instead of as regexes"
    ),
) -> None:
    """Print paths under PATH whose tags match any of TAGS, with the matches indented."""
    try:
        for found, matches in _store().find_tags(path, tags or [], literal=fixed_strings):
            typer.echo(found)
            for m in matches:
                typer.echo('  ' + m)
    except (TagStore.TagStoreException, OSError) as e:
        _fail(path, e)


def list_cmd(
    path: str = typer.Argument(DefaultPath, help="File or directory"),
) -> None:
    """Print the tags of PATH, one per line."""
    try:
        tags = _store().get_tags(path)
    except (TagStore.TagStoreException, OSError) as e:
        _fail(path, e)
    for tag in tags:
        typer.echo(tag)


app.command("ls")(list_cmd)
app.command("list", hidden=True)(list_cmd)


@app.command("set")
def set_cmd(
    path: str = typer.Argument(DefaultPath, help="File or directory"),
    tags: list[str] = typer.Argument(None, help="Tags to add"),
) -> None:
    """Add TAGS to PATH. Tags are lower-cased and stored once."""
    try:
        _store().set_tags(path, tags or [])
    except (TagStore.TagStoreException, OSError) as e:
        _fail(path, e)


@app.command("rm")
def remove_cmd(
    path: str = typer.Argument(DefaultPath, help="File or directory"),
    tags: list[str] = typer.Argument(None, help="Tags to remove, matched exactly"),
) -> None:
    """Remove TAGS from PATH. Tags are compared exactly as given."""
    try:
        _store().remove_tags(path, tags or [])
    except (TagStore.TagStoreException, OSError) as e:
        _fail(path, e)


if __name__ == "__main__":
    app()
