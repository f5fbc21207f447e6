"""Interpreter configuration.

Settings come from keyword arguments, with `InterpreterConfig.from_env`
layering the PTBR_* environment variables underneath them:

  PTBR_RECURSION_LIMIT     maximum nesting depth of function calls
  PTBR_STRICT_DEFINITIONS  "1"/"true"/"yes" rejects same-scope redefinition
  PTBR_DEBUG               debug verbosity (0-3)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Optional


DEBUG_RECURSION_LIMIT = 64
RELEASE_RECURSION_LIMIT = 256

_TRUTHY = ('1', 'true', 'yes', 'on')


def default_recursion_limit() -> int:
    # `python -O` clears __debug__, the closest thing to a release build
    return DEBUG_RECURSION_LIMIT if __debug__ else RELEASE_RECURSION_LIMIT


def int_from_env(var: str, default: int) -> int:
    raw = os.environ.get(var)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{var} must be an integer, got {raw!r}") from None


def flag_from_env(var: str, default: bool) -> bool:
    raw = os.environ.get(var)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass
class InterpreterConfig:
    recursion_limit: int = field(default_factory=default_recursion_limit)
    allow_redefinition: bool = True
    debug_level: int = 0
    debug_file: Optional[str] = None

    def __post_init__(self):
        if self.recursion_limit < 0:
            raise ValueError(f"recursion_limit must be >= 0, got {self.recursion_limit}")
        if self.debug_level < 0:
            raise ValueError(f"debug_level must be >= 0, got {self.debug_level}")

    @classmethod
    def from_env(cls, **overrides: Any) -> 'InterpreterConfig':
        """Build a config from PTBR_* variables; non-None overrides win."""
        values = {
            'recursion_limit': int_from_env('PTBR_RECURSION_LIMIT', default_recursion_limit()),
            'allow_redefinition': not flag_from_env('PTBR_STRICT_DEFINITIONS', False),
            'debug_level': int_from_env('PTBR_DEBUG', 0),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
