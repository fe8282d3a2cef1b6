import time
import signal
import logging
from typing import List, Optional, Sequence

from virtscreen import settings
from virtscreen.errors import TerminationError
from .process_utils import ProcessHandle

log = logging.getLogger(__name__)


def _managed(handles: Sequence[Optional[ProcessHandle]]) -> List[ProcessHandle]:
    """Drops handles that were never started."""
    return [h for h in handles if h is not None and h.pid is not None and h.pid > 0]


def _terminate_processes(handles: List[ProcessHandle], errors: List[Exception]) -> None:
    """Sends SIGTERM to every handle that is still running."""
    for handle in handles:
        if not handle.is_alive():
            continue
        try:
            handle.send_signal(signal.SIGTERM)
        except ProcessLookupError:
            log.debug(f"{handle.name} (PID {handle.pid}) exited before SIGTERM.")
        except OSError as e:
            log.error(f"Failed to send SIGTERM to {handle.name} (PID {handle.pid}): {e}")
            errors.append(OSError(e.errno, f"failed to send SIGTERM to {handle.name}: {e.strerror}"))


def _await_exit(handle: ProcessHandle, limit: float) -> bool:
    """Polls a handle until it exits or `limit` seconds pass. Returns True if it exited."""
    deadline = time.monotonic() + limit
    while handle.is_alive():
        if time.monotonic() >= deadline:
            return False
        time.sleep(settings.TERMINATE_POLL_INTERVAL)
    return True


def _wait_or_kill(handle: ProcessHandle, timeout: float, errors: List[Exception]) -> None:
    """
    Polls a handle until it exits, killing it (and its group, if it leads one)
    once `timeout` seconds have passed. A killed handle is polled again until
    it has been reaped, so it reads as dead when this returns.
    """
    if _await_exit(handle, timeout):
        return

    log.warning(f"Killing stubborn process {handle.name} (PID {handle.pid}).")
    try:
        handle.send_signal(signal.SIGKILL, whole_group=True)
    except ProcessLookupError:
        log.debug(f"{handle.name} (PID {handle.pid}) exited before SIGKILL.")
    except OSError as e:
        log.error(f"SIGKILL failed for {handle.name} (PID {handle.pid}): {e}")
        errors.append(OSError(e.errno, f"SIGKILL failed for {handle.name}: {e.strerror}"))
        return

    if not _await_exit(handle, settings.KILL_REAP_TIMEOUT):
        log.error(f"{handle.name} (PID {handle.pid}) is still running after SIGKILL.")
        errors.append(TimeoutError(f"{handle.name} did not exit after SIGKILL"))


def terminate_processes(timeout: float, handles: Sequence[Optional[ProcessHandle]]) -> None:
    """
    Runs the full shutdown sequence for the given handles.

    Every live handle is sent SIGTERM first, then each one still alive is given
    up to `timeout` seconds before being killed. A failed signal does not stop
    the sequence; all failures are raised together at the end.

    :param timeout: Seconds each process gets to exit after SIGTERM.
    :param handles: Handles to stop. None entries are skipped.
    :raises TerminationError: If any signal could not be delivered or a killed
        process did not exit.
    """
    managed = _managed(handles)
    errors: List[Exception] = []

    _terminate_processes(managed, errors)
    for handle in managed:
        _wait_or_kill(handle, timeout, errors)

    if errors:
        raise TerminationError(errors)
    log.debug(f"Shutdown sequence completed for {len(managed)} processes.")
