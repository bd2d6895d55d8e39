"""Process supervision - spawning tasks and capturing their output.

PUBLIC API:
  - Task: Runtime state for one task definition
  - ProcessHandle: Lock-guarded process wrapper
  - spawn: Start one task
  - spawn_all: Start every task after pre-flight workdir checks
  - resolve_workdir: Canonicalize a working directory
"""

from .handle import STREAM_LIMIT, ProcessHandle, shell_argv
from .task import Task, decode_line, resolve_workdir, spawn, spawn_all

__all__ = [
    "Task",
    "ProcessHandle",
    "STREAM_LIMIT",
    "shell_argv",
    "decode_line",
    "resolve_workdir",
    "spawn",
    "spawn_all",
]
