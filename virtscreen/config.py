import logging
import secrets
from dataclasses import dataclass, replace

from virtscreen import settings
from virtscreen.errors import ConfigurationError

log = logging.getLogger(__name__)


def generate_password(length: int = settings.VNC_PASSWORD_LENGTH) -> str:
    """Generates a random password of lowercase letters and digits."""
    alphabet = settings.VNC_PASSWORD_ALPHABET
    return "".join(secrets.choice(alphabet) for _ in range(length))


@dataclass(frozen=True)
class ScreenConfig:
    """
    User-provided configuration for a single virtual screen.

    The executable fields default to the values in `settings.py` and exist so a
    host can point the session at binaries outside of PATH.
    """
    width: int = settings.DEFAULT_WIDTH
    height: int = settings.DEFAULT_HEIGHT
    enable_vnc: bool = False
    vnc_password: str = ""
    color_depth: int = settings.DEFAULT_COLOR_DEPTH
    xvfb_executable: str = settings.XVFB_EXECUTABLE
    x11vnc_executable: str = settings.X11VNC_EXECUTABLE

    @classmethod
    def default(cls) -> "ScreenConfig":
        """Returns a 640x480 configuration with VNC disabled."""
        return cls()

    def validate(self) -> None:
        """
        Checks the screen geometry.

        :raises ConfigurationError: If either dimension is not a positive integer.
        """
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"invalid screen geometry: {name}={value!r}")
        if self.color_depth <= 0:
            raise ConfigurationError(f"invalid color depth: {self.color_depth!r}")

    def with_generated_password(self) -> "ScreenConfig":
        """
        Returns a copy with a generated VNC password if VNC is enabled and no
        usable password was supplied. Otherwise returns self unchanged.
        """
        if not self.enable_vnc or self.vnc_password.strip():
            return self
        log.debug("No VNC password supplied, generating one.")
        return replace(self, vnc_password=generate_password())
