"""
logstash-hook CLI - send a test entry through a configured hook
"""
import sys

import click

from logstash_hook import __version__
from logstash_hook.config import build_hook, load_config
from logstash_hook.entry import Entry
from logstash_hook.errors import ConfigError, HookError
from logstash_hook.formatter import LogstashFormatter
from logstash_hook.levels import ALL_LEVELS, Level


def _parse_fields(pairs):
    fields = {}
    for pair in pairs:
        key, sep, value = pair.partition('=')
        if not sep or not key:
            raise click.BadParameter(f'Expected key=value, got {pair!r}', param_hint='--field')
        fields[key] = value
    return fields


@click.group()
@click.version_option(version=__version__)
def cli():
    """Logstash hook CLI"""
    pass


@cli.command()
@click.option('--config', 'config_path', type=click.Path(exists=True), required=True, help='Path to config.yml')
@click.option('--level', type=click.Choice([level.label for level in ALL_LEVELS]), default='info', help='Entry level')
@click.option('--field', 'field_pairs', multiple=True, help='Entry field as key=value (repeatable)')
@click.option('--dry-run', is_flag=True, help='Print the document instead of sending it')
@click.argument('message')
def send(config_path, level, field_pairs, dry_run, message):
    """
    Send one entry to the configured Logstash input

    MESSAGE: Text of the entry
    """
    try:
        config = load_config(config_path)
    except ConfigError as e:
        click.echo(click.style(f'❌ {e}', fg='red'), err=True)
        sys.exit(1)

    entry = Entry(message=message, level=Level.parse(level), data=_parse_fields(field_pairs))

    if dry_run:
        try:
            document = LogstashFormatter(config.fields).format_entry(entry)
        except HookError as e:
            click.echo(click.style(f'❌ {e}', fg='red'), err=True)
            sys.exit(1)
        click.echo(document.decode('utf-8'), nl=False)
        return

    if not config.enabled:
        click.echo(click.style('⚠ Logstash shipping is not enabled in config.yml', fg='yellow'))
        return

    if entry.level not in config.levels:
        click.echo(click.style(f'⚠ Level {entry.level.label} is not enabled, entry skipped', fg='yellow'))
        return

    try:
        hook = build_hook(config)
    except (ConfigError, OSError) as e:
        click.echo(click.style(f'❌ Cannot connect to {config.address}: {e}', fg='red'), err=True)
        sys.exit(1)

    try:
        hook.fire(entry)
    except HookError as e:
        click.echo(click.style(f'❌ {e}', fg='red'), err=True)
        sys.exit(1)
    finally:
        hook.stream.close()

    click.echo(click.style(f'✓ Sent {entry.level.label} entry to {config.protocol}://{config.address}', fg='green'))


if __name__ == '__main__':
    cli()
