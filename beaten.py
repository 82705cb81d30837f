#!/usr/bin/env python3
"""
Beaten Games - a personal log of the video games you have finished.
Shared setup: logging and configuration loading.
"""

import json
import logging
import os
import sys
from typing import Dict

from colorama import init, Fore
from dotenv import load_dotenv

# Initialize colorama for cross-platform colored terminal output
init(autoreset=True)

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def setup_logging(level: str = 'WARNING') -> logging.Logger:
    """Configure the root Beaten Games logger.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to WARNING so normal use is quiet.

    Returns:
        Configured logger instance.
    """
    numeric = getattr(logging, level.upper(), logging.WARNING)
    logger = logging.getLogger('beaten')
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('[%(levelname)s] %(name)s: %(message)s'))
        logger.addHandler(handler)
    logger.setLevel(numeric)
    return logger


logger = logging.getLogger('beaten.config')

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

DEFAULT_CONFIG = {
    'database_url': 'sqlite:///beaten_games.db',
    'log_level': 'INFO',
    'host': '127.0.0.1',
    'port': 8080,
    'search_timeout': 10,
}

# Environment variable -> config key.  Environment wins over the file.
_ENV_OVERRIDES = {
    'GIANT_BOMB_API_KEY': 'giant_bomb_api_key',
    'DATABASE_URL': 'database_url',
    'BEATEN_LOG_LEVEL': 'log_level',
}

_PLACEHOLDER_VALUES = {'DEMO_MODE', 'DEMO_KEY', 'YOUR_GIANT_BOMB_API_KEY_HERE'}


def is_placeholder_value(value: str) -> bool:
    """Check if a value is a placeholder that should not be used for real API calls."""
    if not value or not isinstance(value, str):
        return True
    return value.startswith('YOUR_') or value in _PLACEHOLDER_VALUES


def load_config(config_path: str = 'config.json') -> Dict:
    """Load configuration from a JSON file with environment variable support.

    Environment variables (including those from a ``.env`` file) take
    precedence over config file values:

    - GIANT_BOMB_API_KEY overrides giant_bomb_api_key
    - DATABASE_URL overrides database_url
    - BEATEN_LOG_LEVEL overrides log_level

    Missing keys fall back to :data:`DEFAULT_CONFIG`.  A missing or unreadable
    file, or a missing Giant Bomb API key, is fatal: an error is printed and
    the process exits with status 1.
    """
    load_dotenv()

    if not os.path.exists(config_path):
        print(f"{Fore.RED}Error: Config file '{config_path}' not found!")
        print(f"{Fore.YELLOW}Please copy 'config_template.json' to 'config.json' and add your Giant Bomb API key.")
        sys.exit(1)

    try:
        with open(config_path, 'r') as f:
            loaded = json.load(f)
    except json.JSONDecodeError as e:
        print(f"{Fore.RED}Error parsing config file: {e}")
        sys.exit(1)

    if not isinstance(loaded, dict):
        print(f"{Fore.RED}Error parsing config file: expected a JSON object")
        sys.exit(1)

    config = dict(DEFAULT_CONFIG)
    config.update(loaded)
    for env_name, key in _ENV_OVERRIDES.items():
        if os.getenv(env_name):
            config[key] = os.getenv(env_name)

    if is_placeholder_value(config.get('giant_bomb_api_key', '')):
        print(f"{Fore.RED}Error: Please configure your Giant Bomb API key in {config_path} "
              f"or set GIANT_BOMB_API_KEY environment variable")
        print(f"{Fore.YELLOW}Get a key at: https://www.giantbomb.com/api/")
        sys.exit(1)

    try:
        config['port'] = int(config['port'])
        config['search_timeout'] = int(config['search_timeout'])
    except (TypeError, ValueError) as e:
        print(f"{Fore.RED}Error: Invalid number in config file: {e}")
        sys.exit(1)

    logger.debug("Loaded configuration from %s", config_path)
    return config
