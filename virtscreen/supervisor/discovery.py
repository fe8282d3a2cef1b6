"""
Display discovery for the Xvfb display server.

Xvfb picks a free display number itself and writes it, followed by a newline,
to the descriptor named by `-displayfd`. This module spawns Xvfb with the
write end of a pipe as that descriptor and waits for the number to arrive.
"""
import os
import time
import queue
import logging
import threading
from typing import TYPE_CHECKING, BinaryIO, Optional, Tuple

from virtscreen import settings
from virtscreen.errors import DiscoveryCancelled, DiscoveryError, DiscoveryTimeout, ResourceSetupError
from .process_utils import ProcessHandle, get_xvfb_args, launch_process

if TYPE_CHECKING:
    from virtscreen.config import ScreenConfig

log = logging.getLogger(__name__)

# Published when the pipe closes without a usable display number.
DISCOVERY_FAILED = -1


def _read_display_number(pipe: BinaryIO, results: "queue.Queue[int]") -> None:
    """
    Target function for the discovery reader thread.

    Publishes the first integer line read from the pipe, or DISCOVERY_FAILED if
    the pipe reaches EOF first. Lines that are not integers are skipped.
    """
    try:
        for line_bytes in iter(pipe.readline, b""):
            line = line_bytes.decode("utf-8", errors="replace").strip()
            try:
                display = int(line)
            except ValueError:
                log.debug(f"Ignoring unexpected display pipe output: {line!r}")
                continue
            results.put_nowait(display)
            return
    except (OSError, ValueError) as e:
        log.debug(f"Display pipe reader exited: {e}")
    finally:
        pipe.close()
    results.put_nowait(DISCOVERY_FAILED)


def start_display_server(config: "ScreenConfig") -> Tuple[ProcessHandle, "queue.Queue[int]"]:
    """
    Spawns Xvfb and starts a reader thread for its display number.

    The parent's copy of the write end is closed once Xvfb has it, so the
    reader sees EOF as soon as Xvfb exits.

    :param config: A validated screen configuration.
    :return: The Xvfb handle and the single-slot queue the display number is published to.
    :raises ResourceSetupError: If the pipe cannot be created.
    :raises SpawnError: If Xvfb cannot be started.
    """
    try:
        read_fd, write_fd = os.pipe()
    except OSError as e:
        raise ResourceSetupError(f"could not create pipe for retrieving X display id: {e}") from e

    try:
        handle = launch_process("xvfb", get_xvfb_args(config, write_fd), pass_fds=(write_fd,))
    except BaseException:
        os.close(read_fd)
        raise
    finally:
        os.close(write_fd)

    results: "queue.Queue[int]" = queue.Queue(maxsize=1)
    threading.Thread(
        target=_read_display_number,
        args=(os.fdopen(read_fd, "rb"), results),
        daemon=True,
        name="DisplayDiscoveryThread",
    ).start()
    return handle, results


def wait_for_display(
    handle: ProcessHandle,
    results: "queue.Queue[int]",
    timeout: Optional[float] = None,
    poll_interval: Optional[float] = None,
    cancel: Optional[threading.Event] = None,
) -> int:
    """
    Waits for the display number while watching the display server.

    Returns as soon as a display number arrives. Gives up when the reader
    reports failure, when the process is found dead on a poll tick, when
    `timeout` seconds pass, or when `cancel` is set. The reader thread is
    left to finish on its own.

    :param timeout: Seconds to wait. Defaults to DISPLAY_DISCOVERY_TIMEOUT.
    :param poll_interval: Seconds between liveness checks. Defaults to DISCOVERY_POLL_INTERVAL.
    :return: The display number, which may be 0.
    :raises DiscoveryError: If no usable display number was reported.
    """
    if timeout is None:
        timeout = settings.DISPLAY_DISCOVERY_TIMEOUT
    if poll_interval is None:
        poll_interval = settings.DISCOVERY_POLL_INTERVAL

    deadline = time.monotonic() + timeout
    while True:
        try:
            display = results.get(timeout=poll_interval)
        except queue.Empty:
            pass
        else:
            if display < 0:
                raise DiscoveryError("failed to start xvfb: no display number reported")
            log.info(f"Xvfb reported display :{display}")
            return display

        if cancel is not None and cancel.is_set():
            raise DiscoveryCancelled("xvfb startup cancelled")
        if not handle.is_alive():
            raise DiscoveryError("xvfb exited on launch")
        if time.monotonic() >= deadline:
            raise DiscoveryTimeout(f"xvfb did not report a display within {timeout} seconds")
