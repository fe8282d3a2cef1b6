"""
Exception types raised by the VirtScreen package.

Every error raised while creating or stopping a virtual screen derives from
VirtScreenError, so a host application can catch a single type.
"""
from typing import List


class VirtScreenError(Exception):
    """Base class for all virtual screen errors."""


class ConfigurationError(VirtScreenError, ValueError):
    """The supplied screen configuration is invalid."""


class ResourceSetupError(VirtScreenError):
    """A resource needed before spawning (e.g. the discovery pipe) could not be created."""


class SpawnError(VirtScreenError):
    """The operating system refused to start a managed executable."""


class DiscoveryError(VirtScreenError):
    """The display server never reported a usable display number."""


class DiscoveryTimeout(DiscoveryError):
    """The display server stayed silent for the whole discovery window."""


class DiscoveryCancelled(DiscoveryError):
    """Startup was aborted by the caller while waiting for the display number."""


class StartupVerificationError(VirtScreenError):
    """A managed process exited during its post-start grace period."""


class TerminationError(VirtScreenError):
    """
    One or more signals failed while stopping managed processes.

    :param errors: Every failure collected during the shutdown sequence.
    """

    def __init__(self, errors: List[Exception]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(str(e) for e in self.errors))
