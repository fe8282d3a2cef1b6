"""
This module contains the configuration settings for the VirtScreen package.
It defines the managed executables, screen defaults and the timing constants
used by startup discovery and shutdown supervision.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

#* --- External Executables ---
XVFB_EXECUTABLE = os.getenv("VIRTSCREEN_XVFB", "Xvfb")
X11VNC_EXECUTABLE = os.getenv("VIRTSCREEN_X11VNC", "x11vnc")

#* --- Screen Defaults ---
DEFAULT_WIDTH = 640
DEFAULT_HEIGHT = 480
DEFAULT_COLOR_DEPTH = 8

#* --- VNC Settings ---
VNC_BASE_PORT = 5900
VNC_PASSWORD_LENGTH = 12
VNC_PASSWORD_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"
# Seconds between x11vnc attempts to re-open a display it lost.
X11VNC_REOPEN_DISPLAY = "5"

#* --- Startup Settings ---
DISPLAY_DISCOVERY_TIMEOUT = float(os.getenv("VIRTSCREEN_DISCOVERY_TIMEOUT", "5"))  # seconds
DISCOVERY_POLL_INTERVAL = 0.01  # seconds
VNC_STARTUP_GRACE_PERIOD = 0.1  # seconds

#* --- Shutdown Settings ---
GRACEFUL_SHUTDOWN_TIMEOUT = float(os.getenv("VIRTSCREEN_SHUTDOWN_TIMEOUT", "2"))  # seconds before force-killing
TERMINATE_POLL_INTERVAL = 0.01  # seconds
KILL_REAP_TIMEOUT = 1.0  # seconds to wait for a killed process to be reaped

#* --- Host Settings ---
HOST_WATCH_INTERVAL = 1  # seconds between liveness checks in the console host
