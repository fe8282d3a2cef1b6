"""
Shared fixtures for the virtscreen test suite.

The integration tests never run the real Xvfb or x11vnc. Instead they point
ScreenConfig at small executable Python scripts that speak the same
`-displayfd` protocol. The scripts read their behaviour from FAKE_* environment
variables, which the spawned processes inherit.
"""

import os
import stat
import sys
import time
from pathlib import Path

import pytest

from virtscreen.config import ScreenConfig

FAKE_XVFB = """\
import os, signal, sys, time
mode = os.environ.get("FAKE_XVFB_MODE", "report")
if mode == "stubborn":
    signal.signal(signal.SIGTERM, signal.SIG_IGN)
fd = int(sys.argv[sys.argv.index("-displayfd") + 1])
args_file = os.environ.get("FAKE_XVFB_ARGS_FILE")
if args_file:
    with open(args_file, "w") as f:
        f.write("\\n".join(sys.argv[1:]))
if mode == "exit":
    sys.exit(1)
if mode == "garbage":
    os.write(fd, b"starting up\\n")
if mode in ("report", "garbage", "stubborn"):
    os.write(fd, os.environ.get("FAKE_XVFB_DISPLAY", "0").encode() + b"\\n")
if mode == "negative":
    os.write(fd, b"-3\\n")
while True:
    time.sleep(0.05)
"""

FAKE_X11VNC = """\
import os, sys, time
args_file = os.environ.get("FAKE_VNC_ARGS_FILE")
if args_file:
    with open(args_file, "w") as f:
        f.write("\\n".join(sys.argv[1:]))
        f.write("\\nREOPEN=" + os.environ.get("X11VNC_REOPEN_DISPLAY", ""))
mode = os.environ.get("FAKE_VNC_MODE", "run")
if mode == "exit":
    sys.exit(1)
if mode == "slow-crash":
    time.sleep(0.5)
    sys.exit(1)
while True:
    time.sleep(0.05)
"""

# Ignores SIGTERM and starts a helper child in its own process group.
STUBBORN = """\
import signal, subprocess, sys, time
signal.signal(signal.SIGTERM, signal.SIG_IGN)
child = subprocess.Popen([sys.executable, "-c", "import time\\nwhile True: time.sleep(0.05)"])
with open(sys.argv[1], "w") as f:
    f.write(str(child.pid))
while True:
    time.sleep(0.05)
"""

posix_only = pytest.mark.skipif(os.name != "posix", reason="requires POSIX process groups")


def write_script(path: Path, body: str) -> str:
    """Writes an executable Python script and returns its path."""
    path.write_text(f"#!{sys.executable}\n{body}")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


def wait_until(predicate, timeout: float = 2.0, interval: float = 0.01) -> bool:
    """Polls `predicate` until it returns True or `timeout` seconds pass."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture(autouse=True)
def clean_fake_env(monkeypatch):
    """Keep FAKE_* settings from leaking between tests."""
    for key in list(os.environ):
        if key.startswith("FAKE_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def fake_xvfb(tmp_path) -> str:
    return write_script(tmp_path / "Xvfb", FAKE_XVFB)


@pytest.fixture
def fake_x11vnc(tmp_path) -> str:
    return write_script(tmp_path / "x11vnc", FAKE_X11VNC)


@pytest.fixture
def stubborn_script(tmp_path) -> str:
    return write_script(tmp_path / "stubborn", STUBBORN)


@pytest.fixture
def make_config(fake_xvfb, fake_x11vnc):
    """Builds a ScreenConfig that launches the fake binaries."""
    def _make(**kwargs) -> ScreenConfig:
        kwargs.setdefault("xvfb_executable", fake_xvfb)
        kwargs.setdefault("x11vnc_executable", fake_x11vnc)
        return ScreenConfig(**kwargs)
    return _make


@pytest.fixture
def screens():
    """Collects sessions created by a test and stops any left running."""
    created = []
    yield created
    for screen in created:
        screen.stop()
