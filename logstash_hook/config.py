"""
YAML configuration for building a hook.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import yaml

from logstash_hook.errors import ConfigError
from logstash_hook.hook import LogstashHook, Stream, new_hook
from logstash_hook.levels import ALL_LEVELS, Level
from logstash_hook.transport import PROTOCOLS, dial

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HookConfig:
    address: str
    protocol: str = 'tcp'
    enabled: bool = True
    levels: Tuple[Level, ...] = ALL_LEVELS
    fields: Dict[str, Any] = field(default_factory=dict)
    timeout: float = 5.0


def load_config(config_path) -> HookConfig:
    """
    Parse and validate the ``logstash`` section of a config.yml

    Args:
        config_path: Path to config.yml file

    Returns:
        HookConfig: Validated configuration

    Raises:
        ConfigError: If configuration is invalid
    """
    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {config_path}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}")

    if not isinstance(config, dict) or 'logstash' not in config:
        raise ConfigError("Missing required section: logstash")

    section = config['logstash'] or {}
    if not isinstance(section, dict):
        raise ConfigError("logstash section must be a mapping")

    if 'address' not in section:
        raise ConfigError("Missing required field: address")
    address = os.path.expandvars(str(section['address']))

    protocol = str(section.get('protocol', 'tcp')).lower()
    if protocol not in PROTOCOLS:
        raise ConfigError(f"Invalid protocol: {protocol}. Must be one of {list(PROTOCOLS)}")

    raw_levels = section.get('levels')
    if raw_levels is None:
        levels = ALL_LEVELS
    elif isinstance(raw_levels, list):
        try:
            levels = tuple(Level.parse(name) for name in raw_levels)
        except ValueError as e:
            raise ConfigError(str(e))
    else:
        raise ConfigError("levels must be a list of level names")

    fields = section.get('fields') or {}
    if not isinstance(fields, dict):
        raise ConfigError("fields must be a mapping")

    try:
        timeout = float(section.get('timeout', 5.0))
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid timeout: {section.get('timeout')!r}")

    logger.debug("Loaded logstash config from %s", config_path)

    return HookConfig(
        address=address,
        protocol=protocol,
        enabled=bool(section.get('enabled', True)),
        levels=levels,
        fields=dict(fields),
        timeout=timeout,
    )


def build_hook(config: HookConfig, stream: Optional[Stream] = None) -> LogstashHook:
    """Create a hook from config, dialing the configured address unless a stream is given"""
    if stream is None:
        stream = dial(config.protocol, config.address, timeout=config.timeout)
    return new_hook(stream, config.fields, config.levels)
