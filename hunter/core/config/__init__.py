"""
Configuration subsystem.

- ``Config``: static, environment-driven settings (database, logging).
- ``ConfigManager`` (``hunter.core.config.manager``): dot-notation
  game-balance tunables backed by YAML. Imported from its module directly,
  since it depends on the logging subsystem which itself reads ``Config``.
"""

from hunter.core.config.config import Config, Environment

__all__ = ["Config", "Environment"]
