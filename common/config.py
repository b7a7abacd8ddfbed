#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import json
import logging
import sys

import yaml

DEFAULT_LOG_FORMAT = '[%(asctime).19s] [%(name)s] [%(levelname)s] %(message)s'


class ConfigError(Exception):
    """Raised when a configuration file cannot be used."""


class RobustFileHandler(logging.FileHandler):
    """FileHandler that gracefully handles flush errors on Windows"""

    def flush(self):
        """Flush the stream, ignoring EINVAL from stale Windows file handles"""
        try:
            super().flush()
        except OSError as e:
            if e.errno != 22:  # EINVAL
                raise


def configure_logger(logger,
                     log_file=None,
                     log_format=None,
                     log_level=logging.INFO):
    """Configure a logger with a file or stream handler

    Args:
        logger: Logger instance or logger name string
        log_file: File path string or file-like object (None for stderr)
        log_format: Format string for log messages
        log_level: Logging level (e.g., logging.INFO, logging.DEBUG)

    Returns:
        Configured logger instance
    """
    if isinstance(log_file, str):
        handler = RobustFileHandler(
            log_file,
            mode='a',
            encoding='utf-8',
            errors='replace'
        )
    else:
        handler = logging.StreamHandler(log_file)  # Default to stderr if None

    handler.setFormatter(logging.Formatter(log_format))

    if isinstance(logger, str):
        logger = logging.getLogger(logger)

    logger.addHandler(handler)
    logger.setLevel(log_level)

    return logger


def parse_log_level(level):
    """Turn 'info', 'DEBUG', 10 etc. into a logging level constant

    Raises:
        ConfigError: If the name is not a logging level
    """
    if isinstance(level, int):
        return level
    value = getattr(logging, str(level).upper(), None)
    if not isinstance(value, int):
        raise ConfigError(f'Unknown log level: {level!r}')
    return value


def load_config(config_file):
    """Load a configuration mapping from a JSON or YAML file

    The format is chosen by extension: .yaml/.yml are YAML, anything else
    is JSON.

    Args:
        config_file: Path to the configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigError: If the file cannot be parsed or is not a mapping
    """
    with open(config_file, 'r', encoding='utf-8') as fp:
        try:
            if str(config_file).endswith(('.yaml', '.yml')):
                conf = yaml.safe_load(fp)
            else:
                conf = json.load(fp)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(f'Cannot parse {config_file}: {e}') from e

    if conf is None:
        conf = {}
    if not isinstance(conf, dict):
        raise ConfigError(f'{config_file} must contain a mapping, got {type(conf).__name__}')
    return conf


def get_plugin_config(conf, namespace):
    """Return the config section for one plugin (empty if absent)"""
    section = conf.get('plugins', {}).get(namespace, {})
    if not isinstance(section, dict):
        raise ConfigError(f'plugins.{namespace} must be a mapping')
    return section


def get_config(argv=None):
    """Load configuration from the file named on the command line

    Also configures the root logger from the 'logging' section:
    level (default 'info'), format, and an optional file.

    Args:
        argv: Argument vector, defaults to sys.argv

    Returns:
        Configuration dictionary

    Exits:
        Exits with status 1 on a usage error or an unusable config file
    """
    argv = sys.argv if argv is None else argv
    if len(argv) != 2:
        print('usage: %s <config file>' % argv[0], file=sys.stderr)
        sys.exit(1)

    try:
        conf = load_config(argv[1])
        logging_config = conf.get('logging', {})
        log_level = parse_log_level(logging_config.get('level', 'info'))
    except (OSError, ConfigError) as e:
        print(f'ERROR: {e}', file=sys.stderr)
        sys.exit(1)

    log_format = logging_config.get('format', DEFAULT_LOG_FORMAT)
    logging.basicConfig(level=log_level, format=log_format)

    # Optional plugin log file alongside the console output
    plugin_log_file = logging_config.get('plugin_log_file')
    if plugin_log_file:
        configure_logger('plugin', log_file=plugin_log_file,
                         log_format=log_format, log_level=log_level)

    return conf
