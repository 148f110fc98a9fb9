#!/usr/bin/env python3
"""
Platform detection and OS-specific locations for Gravity.

Gravity only needs to know where the user's configuration directory lives
on the current operating system; everything else is driven by the manifest.
"""

import os
import platform
from pathlib import Path
from enum import Enum


class OSType(Enum):
    """Supported operating system types."""
    LINUX = "linux"
    MACOS = "darwin"
    WINDOWS = "windows"
    UNKNOWN = "unknown"


class PlatformDetector:
    """Handles platform detection and OS-specific locations."""

    def __init__(self):
        self._os_type = self._detect_os()

    @staticmethod
    def _detect_os() -> OSType:
        """Detect the current operating system."""
        system = platform.system().lower()

        if system == "linux":
            return OSType.LINUX
        elif system == "darwin":
            return OSType.MACOS
        elif system == "windows":
            return OSType.WINDOWS
        else:
            return OSType.UNKNOWN

    @property
    def os_type(self) -> OSType:
        """Get the detected OS type."""
        return self._os_type

    @property
    def is_windows(self) -> bool:
        """Check if running on Windows."""
        return self._os_type == OSType.WINDOWS

    @property
    def home_dir(self) -> Path:
        """Get the user's home directory (read on every access)."""
        return Path.home()

    def get_config_dir(self) -> Path:
        """Get the base configuration directory for the current OS."""
        if self.is_windows:
            return Path(os.environ.get('APPDATA', str(self.home_dir / 'AppData' / 'Roaming')))

        xdg = os.environ.get('XDG_CONFIG_HOME')
        if xdg:
            return Path(xdg)
        return self.home_dir / '.config'


# Global platform detector instance
platform_detector = PlatformDetector()


def get_os_type() -> OSType:
    """Get the current OS type."""
    return platform_detector.os_type


def get_config_dir() -> Path:
    """Get the base configuration directory."""
    return platform_detector.get_config_dir()
