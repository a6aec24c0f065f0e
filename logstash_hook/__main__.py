"""
Allow running the CLI as a module: python -m logstash_hook
"""
from logstash_hook.cli import cli


if __name__ == '__main__':
    cli()
