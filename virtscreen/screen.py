import os
import time
import logging
import threading
from typing import Dict, Optional

from virtscreen import settings
from virtscreen.config import ScreenConfig
from virtscreen.errors import StartupVerificationError
from virtscreen.supervisor import discovery, process_utils
from virtscreen.supervisor.process_utils import ProcessHandle
from virtscreen.supervisor.shutdown import terminate_processes

log = logging.getLogger(__name__)


class VirtScreen:
    """
    A single virtual screen: an Xvfb display server and, optionally, a
    view-only x11vnc server exposing it.

    Instances come from `VirtScreen.create()`, which only returns sessions that
    are fully started. The caller owns the session and must call `stop()`;
    using the session as a context manager does that automatically. A session
    is not safe to share between threads.
    """

    def __init__(self, config: ScreenConfig) -> None:
        self.config = config
        self.display_number: Optional[int] = None
        self.xvfb: Optional[ProcessHandle] = None
        self.vnc: Optional[ProcessHandle] = None

    @classmethod
    def create(
        cls,
        config: Optional[ScreenConfig] = None,
        cancel: Optional[threading.Event] = None,
    ) -> "VirtScreen":
        """
        Creates and starts a new virtual screen.

        :param config: Screen configuration. A 640x480 screen without VNC if omitted.
        :param cancel: Optional event that aborts startup while waiting for Xvfb.
        :return: A running session with its display number assigned.
        :raises ConfigurationError: If the geometry is invalid. Nothing is spawned.
        :raises VirtScreenError: If any startup step fails. Started processes are stopped first.
        """
        if config is None:
            config = ScreenConfig.default()
        config.validate()
        config = config.with_generated_password()

        screen = cls(config)
        start_time = time.monotonic()
        try:
            screen._start_display_server(cancel)
            if config.enable_vnc:
                screen._start_vnc_server()
        except BaseException as e:
            log.error(f"Virtual screen startup failed: {e}")
            screen._cleanup_after_failure()
            raise

        log.info(
            f"Virtual screen :{screen.display_number} ({config.width}x{config.height}) "
            f"started in {time.monotonic() - start_time:.2f} seconds."
        )
        return screen

    def _start_display_server(self, cancel: Optional[threading.Event]) -> None:
        self.xvfb, results = discovery.start_display_server(self.config)
        self.display_number = discovery.wait_for_display(self.xvfb, results, cancel=cancel)

    def _start_vnc_server(self) -> None:
        args = process_utils.get_x11vnc_args(self.config, self.display_number, self.port())
        self.vnc = process_utils.launch_process("x11vnc", args, env=process_utils.get_x11vnc_env())

        # An immediate exit is almost always fatal misconfiguration, e.g. the port is taken.
        # A process that crashes after the grace period still passes this check.
        time.sleep(settings.VNC_STARTUP_GRACE_PERIOD)
        if not self.vnc.is_alive():
            raise StartupVerificationError("vnc server exited on launch")

    def _cleanup_after_failure(self) -> None:
        try:
            self.stop()
        except Exception as e:
            log.error(f"Cleanup after failed startup was incomplete: {e}")

    @property
    def display_name(self) -> Optional[str]:
        """The X display name, e.g. ':1', or None if no display is assigned."""
        if self.display_number is None:
            return None
        return f":{self.display_number}"

    def env(self) -> Dict[str, str]:
        """Returns a copy of the current environment with DISPLAY pointing at this screen."""
        env = dict(os.environ)
        if self.display_name is not None:
            env["DISPLAY"] = self.display_name
        return env

    def port(self) -> int:
        """The VNC port for this display, or 0 if no display is assigned."""
        if self.display_number is None:
            return 0
        return settings.VNC_BASE_PORT + self.display_number

    def password(self) -> str:
        """The VNC password, or an empty string when VNC is disabled."""
        if self.config.enable_vnc:
            return self.config.vnc_password
        return ""

    def alive(self) -> bool:
        """
        Whether the display is assigned, Xvfb is running and, if enabled,
        x11vnc is running. This is a snapshot only.
        """
        if self.display_number is None:
            return False
        if self.xvfb is None or not self.xvfb.is_alive():
            return False
        if self.config.enable_vnc and (self.vnc is None or not self.vnc.is_alive()):
            return False
        return True

    def stop(self) -> None:
        """
        Stops Xvfb and x11vnc. Safe to call more than once.

        :raises TerminationError: If a process could not be signalled.
        """
        log.info(f"Stopping virtual screen {self.display_name or '(unassigned)'}...")
        terminate_processes(settings.GRACEFUL_SHUTDOWN_TIMEOUT, [self.xvfb, self.vnc])

    def __enter__(self) -> "VirtScreen":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.stop()

    def __repr__(self) -> str:
        return f"VirtScreen(display={self.display_name}, vnc={self.config.enable_vnc})"
