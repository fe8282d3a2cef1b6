"""
The Supervisor package.
Starts, watches and stops the processes behind a virtual screen.

It contains the process helpers, the Xvfb display discovery routine and the
two-phase shutdown sequence used by VirtScreen.
"""
from .process_utils import ProcessHandle, pid_alive
from .shutdown import terminate_processes

__all__ = ['ProcessHandle', 'pid_alive', 'terminate_processes']
