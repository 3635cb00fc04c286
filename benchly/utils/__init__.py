"""Benchly utilities - shared helper functions and utilities."""

from benchly.utils.env import (
    EnvVarError,
    EnvVarTypeError,
    get_env,
)
from benchly.utils.logger import (
    Logger,
    LoggerNotConfiguredError,
    LogLevel,
)

__all__ = [
    # Env
    "EnvVarError",
    "EnvVarTypeError",
    "LogLevel",
    # Logger
    "Logger",
    "LoggerNotConfiguredError",
    "get_env",
]
