"""
Mailu Builder Utils Module

- logger: Logging setup and configuration
- resources: CPU/size quantity checks

Usage:
    from mailubuilder.utils import setup_logger, quantities
"""

from .logger import setup_logger, parse_module_levels
from .resources import check_size, check_cpu, quantities

__all__ = [
    'setup_logger',
    'parse_module_levels',
    'check_size',
    'check_cpu',
    'quantities',
]
