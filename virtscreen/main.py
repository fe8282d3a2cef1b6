import sys
import time
import logging
import argparse
import setproctitle
from typing import List, Optional

from virtscreen import settings
from virtscreen.config import ScreenConfig
from virtscreen.errors import VirtScreenError
from virtscreen.log.setup import setup_logging
from virtscreen.screen import VirtScreen

log = logging.getLogger("virtscreen.console")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="virtscreen",
        description="Run a virtual screen until interrupted.",
    )
    parser.add_argument("--width", type=int, default=settings.DEFAULT_WIDTH)
    parser.add_argument("--height", type=int, default=settings.DEFAULT_HEIGHT)
    parser.add_argument("--vnc", action="store_true", help="share the screen read-only over VNC")
    parser.add_argument("--password", default="", help="VNC password (generated if omitted)")
    parser.add_argument("--verbose", action="store_true", help="log debug output, including child process output")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """The entry point for running a single virtual screen from the command line."""
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    setproctitle.setproctitle("VirtScreen - Host")

    config = ScreenConfig(
        width=args.width,
        height=args.height,
        enable_vnc=args.vnc,
        vnc_password=args.password,
    )
    try:
        screen = VirtScreen.create(config)
    except VirtScreenError as e:
        log.critical(f"Could not start virtual screen: {e}")
        return 1

    print(f"DISPLAY={screen.display_name}")
    if config.enable_vnc:
        print(f"VNC port: {screen.port()}")
        print(f"VNC password: {screen.password()}")

    exit_code = 0
    try:
        while screen.alive():
            time.sleep(settings.HOST_WATCH_INTERVAL)
        log.error("Virtual screen exited unexpectedly.")
        exit_code = 1
    except KeyboardInterrupt:
        log.info("Interrupted by user.")

    try:
        screen.stop()
    except VirtScreenError as e:
        log.error(f"Virtual screen did not stop cleanly: {e}")
        exit_code = 1
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
