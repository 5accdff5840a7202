"""
lyrics-sync-maker - Main Entry Point
"""

import logging
import sys
from pathlib import Path

import click

import config
from core.exceptions import LyricsSyncError
from core.library import JsonDirectoryStore, LyricsLibrary
from core.lrc import format_timecode
from pipeline import LyricsWorkflow


def setup_logging(verbose: bool = False, log_file: Path = config.LOG_FILE):
    """設定 logging（檔案 + terminal）"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),  # 寫到檔案
            logging.StreamHandler(sys.stderr),  # 也輸出到 terminal
        ],
        force=True,
    )


def _echo_entries(entries):
    for entry in entries:
        marker = '*' if entry.is_built_in else ' '
        audio = 'audio' if entry.has_audio else '-'
        click.echo(
            f"{marker} {entry.key}  {entry.title} / {entry.artist}"
            f"  [{format_timecode(entry.duration_ms)}, {entry.line_count} lines, {audio}]"
        )


@click.group()
@click.option('--data-dir', type=click.Path(file_okay=False, path_type=Path), default=config.DATA_DIR,
              show_default=True, help='Library directory')
@click.option('--log-file', type=click.Path(dir_okay=False, path_type=Path), default=config.LOG_FILE,
              show_default=True, help='Log file path')
@click.option('-v', '--verbose', is_flag=True, help='Debug logging')
@click.pass_context
def cli(ctx, data_dir, log_file, verbose):
    """Synchronized lyrics library tool."""
    setup_logging(verbose, log_file)
    try:
        library = LyricsLibrary(JsonDirectoryStore(data_dir))
    except LyricsSyncError as e:
        raise click.ClickException(str(e))
    ctx.obj = {'library': library, 'workflow': LyricsWorkflow(library)}


@cli.command('list')
@click.pass_obj
def list_songs(obj):
    """List all songs."""
    _echo_entries(obj['library'].list_all())


@cli.command()
@click.argument('term')
@click.pass_obj
def search(obj, term):
    """Search title, artist and album."""
    _echo_entries(obj['library'].search(term))


@cli.command('import-lrc')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def import_lrc(obj, path):
    """Import an LRC file as a new song."""
    try:
        key = obj['workflow'].import_lrc_file(path)
    except (LyricsSyncError, ValueError) as e:
        raise click.ClickException(str(e))
    click.echo(key)


@cli.command('export-lrc')
@click.argument('key')
@click.argument('path', type=click.Path(dir_okay=False))
@click.pass_obj
def export_lrc(obj, key, path):
    """Write a song as an LRC file."""
    try:
        obj['workflow'].export_lrc_file(key, path)
    except LyricsSyncError as e:
        raise click.ClickException(str(e))
    click.echo(f"LRC written: {path}")


@cli.command('export-bundle')
@click.argument('path', type=click.Path(dir_okay=False))
@click.pass_obj
def export_bundle(obj, path):
    """Export the whole library as JSON."""
    try:
        count = obj['workflow'].export_bundle_file(path)
    except LyricsSyncError as e:
        raise click.ClickException(str(e))
    click.echo(f"{count} song(s) exported to {path}")


@cli.command('import-bundle')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--overwrite', is_flag=True, help='Replace songs that already exist')
@click.option('--built-in', 'built_in', is_flag=True, help='Mark imported songs as built-in')
@click.pass_obj
def import_bundle(obj, path, overwrite, built_in):
    """Import songs from a JSON bundle."""
    try:
        result = obj['workflow'].import_bundle_file(path, overwrite=overwrite, mark_built_in=built_in)
    except LyricsSyncError as e:
        raise click.ClickException(str(e))
    click.echo(f"imported={result.imported} skipped={result.skipped} errors={result.error_count}")
    for error in result.errors:
        click.echo(f"  {error}", err=True)


@cli.command()
@click.pass_context
def validate(ctx):
    """Check every song and report issues."""
    issues = ctx.obj['library'].validate_library()
    for issue in issues:
        location = f"line {issue.line_index + 1}" if issue.line_index >= 0 else 'song'
        click.echo(f"{issue.key} {location}: {issue.error_type} {issue.message}")
    click.echo(f"{len(issues)} issue(s)")
    if issues:
        ctx.exit(1)


@cli.command()
@click.pass_obj
def stats(obj):
    """Show library statistics."""
    for name, value in obj['library'].get_stats().items():
        if name in ('newest_song', 'oldest_song'):
            value = value.title if value else '-'
        click.echo(f"{name}: {value}")


@cli.command()
@click.argument('key')
@click.pass_obj
def delete(obj, key):
    """Delete a song by key."""
    if not obj['library'].delete(key):
        raise click.ClickException(f"Song not found: {key}")
    click.echo(f"Deleted {key}")


def main():
    cli()


if __name__ == '__main__':
    main()
