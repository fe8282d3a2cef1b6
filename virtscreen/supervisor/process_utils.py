import os
import psutil
import logging
import threading
import subprocess
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from virtscreen import settings
from virtscreen.errors import SpawnError

if TYPE_CHECKING:
    from virtscreen.config import ScreenConfig

log = logging.getLogger(__name__)


#* --- Process Status ---
def pid_alive(pid: int) -> bool:
    """
    Probes a pid with signal 0 to decide whether the process exists.

    A permission error means the process exists but belongs to another user,
    so it counts as alive. Any other probe failure counts as dead.
    """
    if pid is None or pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    except OSError as e:
        log.debug(f"Signal probe for PID {pid} failed: {e}")
        return False
    return not _is_zombie(pid)


def _is_zombie(pid: int) -> bool:
    """A zombie has exited and is only waiting to be reaped."""
    try:
        return psutil.Process(pid).status() == psutil.STATUS_ZOMBIE
    except psutil.NoSuchProcess:
        return True
    except psutil.Error:
        return False


class ProcessHandle:
    """
    A managed OS process spawned by this package.

    Once a handle reports that its process is gone it keeps reporting so;
    the handle is never pointed at a different process.
    """

    def __init__(self, name: str, process: Optional[subprocess.Popen], group_leader: bool = False) -> None:
        self.name = name
        self.process = process
        self.group_leader = group_leader
        self._exited = False

    def __repr__(self) -> str:
        return f"ProcessHandle(name={self.name!r}, pid={self.pid}, group_leader={self.group_leader})"

    @property
    def pid(self) -> Optional[int]:
        if self.process is None:
            return None
        return self.process.pid

    def is_alive(self) -> bool:
        if self._exited or self.process is None:
            return False
        # poll() reaps our own child so it never lingers as a zombie
        if self.process.poll() is not None or not pid_alive(self.pid):
            self._exited = True
            return False
        return True

    def send_signal(self, sig: int, whole_group: bool = False) -> None:
        """
        Sends a signal to the process, or to its whole process group when
        `whole_group` is set and the process leads its own group.
        """
        if whole_group and self.group_leader:
            log.debug(f"Sending signal {sig} to process group {self.pid} ({self.name})")
            os.killpg(self.pid, sig)
        else:
            log.debug(f"Sending signal {sig} to {self.name} (PID {self.pid})")
            os.kill(self.pid, sig)


#* --- Process Arguments ---
def get_xvfb_args(config: "ScreenConfig", display_fd: int) -> List[str]:
    """
    Returns the Xvfb command line.

    :param config: The screen configuration.
    :param display_fd: The inherited descriptor Xvfb writes its display number to.
    """
    return [
        config.xvfb_executable,
        "-displayfd", str(display_fd),
        "-screen", "0", f"{config.width}x{config.height}x{config.color_depth}",
        "-nocursor",
    ]


def get_x11vnc_args(config: "ScreenConfig", display_number: int, port: int) -> List[str]:
    """
    Returns the x11vnc command line.

    Every way of interacting with the display is disabled; the session is
    view-only.
    """
    return [
        config.x11vnc_executable,
        "-display", f":{display_number}",
        "-noremote", "-noclipboard", "-nosel",
        "-many", "-norc", "-no6", "-reopen",
        "-viewonly", "-shared", "-loop",
        "-nocmds", "-passwd", config.vnc_password,
        "-quiet", "-nocursor",
        "-rfbport", str(port),
    ]


def get_x11vnc_env() -> Dict[str, str]:
    """Returns the inherited environment extended with x11vnc's reopen interval."""
    env = dict(os.environ)
    env["X11VNC_REOPEN_DISPLAY"] = settings.X11VNC_REOPEN_DISPLAY
    return env


#* --- Process Output ---
def _read_pipe(pipe, process_name: str, level: int) -> None:
    """Forwards each non-blank line of a child's output stream to the `proc.<name>` logger."""
    child_log = logging.getLogger(f"proc.{process_name}")
    with pipe:
        try:
            for raw in pipe:
                text = raw.decode("utf-8", errors="replace").rstrip()
                if text:
                    child_log.log(level, text)
        except (OSError, ValueError) as e:
            # The stream was closed underneath the reader.
            child_log.debug(f"Output reader for {process_name} stopped: {e}")


def log_process_output(process: subprocess.Popen, name: str) -> None:
    """Starts background threads to consume and log a process's stdout/stderr."""
    if process.stdout:
        threading.Thread(
            target=_read_pipe, args=(process.stdout, name, logging.DEBUG),
            daemon=True, name=f"{name}-stdout",
        ).start()
    if process.stderr:
        threading.Thread(
            target=_read_pipe, args=(process.stderr, name, logging.WARNING),
            daemon=True, name=f"{name}-stderr",
        ).start()


#* --- Process Creation ---
def launch_process(
    name: str,
    args: List[str],
    env: Optional[Dict[str, str]] = None,
    pass_fds: Sequence[int] = (),
) -> ProcessHandle:
    """
    Launches a managed process as the leader of a new process group.

    :param name: Logical name used for logging.
    :param args: Full command line, executable first.
    :param env: Environment for the child; the current one if omitted.
    :param pass_fds: Extra descriptors the child inherits under the same numbers.
    :raises SpawnError: If the operating system cannot start the executable.
    """
    log.info(f"Starting process: {name}...")
    try:
        p = subprocess.Popen(
            args,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=env,
            pass_fds=tuple(pass_fds),
            start_new_session=True,
        )
    except OSError as e:
        log.error(f"Failed to start process '{name}': {e}")
        raise SpawnError(f"could not start {name}: {e}") from e

    log_process_output(p, name)
    log.info(f"{name} started with PID: {p.pid}")
    return ProcessHandle(name, p, group_leader=True)

