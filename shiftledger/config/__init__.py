"""
Configuration module for ShiftLedger.
"""
from .logging_config import LoggingConfig, configure_logging, reset_logging
from .settings import ShiftLedgerConfig, get_config, load_config, reload_config

__all__ = [
    'LoggingConfig',
    'ShiftLedgerConfig',
    'configure_logging',
    'get_config',
    'load_config',
    'reload_config',
    'reset_logging',
]
