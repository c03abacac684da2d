#!/usr/bin/env python3
"""
QShield Exceptions Module

Custom exception classes for the QShield post-quantum migration pipeline.
Centralized exception definitions for consistent error handling.
"""

__all__ = [
    "QShieldError",
    "InputError",
    "InternalError",
    "SimulatedExecutionError",
    "UnsupportedLanguageError",
    "ConfigError",
]


class QShieldError(Exception):
    """Base exception for all QShield-related errors"""
    pass


class InputError(QShieldError):
    """Raised when the submitted code is missing, not text, or too large"""
    pass


class InternalError(QShieldError):
    """Raised when a scan, rewrite or scaffold stage fails unexpectedly"""

    def __init__(self, message: str, stage: str = ""):
        super().__init__(message)
        self.stage = stage


class SimulatedExecutionError(QShieldError):
    """Raised inside the test execution simulator; never escapes it"""
    pass


class UnsupportedLanguageError(QShieldError, ValueError):
    """Raised when a language tag has no registered capability bundle"""
    pass


class ConfigError(QShieldError):
    """Raised when a configuration profile cannot be loaded"""
    pass
