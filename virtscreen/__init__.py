"""
VirtScreen provisions ephemeral virtual screens: an Xvfb display server,
optionally shared read-only over VNC through x11vnc, managed as one unit.
"""

from .config import ScreenConfig, generate_password
from .errors import (
    ConfigurationError,
    DiscoveryCancelled,
    DiscoveryError,
    DiscoveryTimeout,
    ResourceSetupError,
    SpawnError,
    StartupVerificationError,
    TerminationError,
    VirtScreenError,
)
from .screen import VirtScreen

__version__ = "0.1.0"

__all__ = [
    "VirtScreen",
    "ScreenConfig",
    "generate_password",
    "VirtScreenError",
    "ConfigurationError",
    "ResourceSetupError",
    "SpawnError",
    "DiscoveryError",
    "DiscoveryTimeout",
    "DiscoveryCancelled",
    "StartupVerificationError",
    "TerminationError",
]
