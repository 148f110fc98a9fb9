"""
Utility modules for Gravity.

This package contains helpers for logging, platform detection, path expansion
and content hashing used throughout Gravity.
"""

from .logger import get_logger, setup_logging
from .platform import platform_detector, get_os_type, get_config_dir, OSType
from .hashing import hash_bytes, hash_string, hash_file
from .path import expand_path, collapse_home

__all__ = [
    'get_logger',
    'setup_logging',
    'platform_detector',
    'get_os_type',
    'get_config_dir',
    'OSType',
    'hash_bytes',
    'hash_string',
    'hash_file',
    'expand_path',
    'collapse_home',
]
