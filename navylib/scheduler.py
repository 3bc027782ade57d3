"""Round-robin task scheduling and message passing between tasks."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from navylib.pmm import STACK_SIZE

SWITCH_TICK = 8


class TaskState(Enum):
    RUNNING = 0
    IDLE = 1
    BLOCKED = 2
    DEAD = 3
    GONNADIE = 4


class IpcType(Enum):
    STR = 0
    SHARED_MEMORY = 1


@dataclass
class Ipc:
    """A message addressed to the task with pid ``receiver``."""

    receiver: int
    type: IpcType = IpcType.STR
    payload: Union[str, int] = ""
    sender: int = 0


@dataclass
class Task:
    """A schedulable task with its mailbox and kernel stack."""

    name: str
    state: TaskState = TaskState.RUNNING
    return_value: int = 0
    mailbox: List[Ipc] = field(default_factory=list)
    kernel_stack: Optional[bytearray] = field(
        default_factory=lambda: bytearray(STACK_SIZE), repr=False
    )


class Scheduler:
    """Switches between running tasks every ``SWITCH_TICK`` timer ticks.

    The scheduler starts with a single task, ``Boot``, as pid 0; each pushed
    task takes the next pid.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tasks: List[Task] = [Task("Boot", kernel_stack=None)]
        self._current = 0
        self._ticks = 0

    def push_task(self, task: Task) -> int:
        """Add ``task`` to the run queue and return its pid."""
        with self._lock:
            self._tasks.append(task)
            return len(self._tasks) - 1

    def current_task(self) -> Task:
        return self._tasks[self._current]

    def current_pid(self) -> int:
        return self._current

    def _next_running(self) -> int:
        count = len(self._tasks)
        for step in range(1, count + 1):
            pid = (self._current + step) % count
            if self._tasks[pid].state is TaskState.RUNNING:
                return pid
        raise RuntimeError("no runnable task")

    def tick(self) -> bool:
        """Count one timer tick; return True when it switched tasks."""
        with self._lock:
            self._ticks += 1
            if self._ticks < SWITCH_TICK:
                return False
            self._ticks = 0
            self._current = self._next_running()
            return True

    def force_yield(self) -> None:
        """Make the next tick switch tasks."""
        with self._lock:
            self._ticks = SWITCH_TICK

    def get_by_pid(self, pid: int) -> Optional[Task]:
        """The running task with ``pid``, or None."""
        with self._lock:
            if 0 <= pid < len(self._tasks):
                task = self._tasks[pid]
                if task.state is TaskState.RUNNING:
                    return task
            return None

    def idle(self) -> int:
        """Release the kernel stacks and mailboxes of dead tasks; return how many."""
        reclaimed = 0
        with self._lock:
            for task in self._tasks:
                if task.state is TaskState.DEAD and task.kernel_stack is not None:
                    task.kernel_stack = None
                    task.mailbox.clear()
                    reclaimed += 1
        return reclaimed

    def exit_current(self, code: int) -> None:
        """Mark the current task dead with exit ``code`` and yield."""
        with self._lock:
            task = self.current_task()
            task.return_value = code
            task.state = TaskState.DEAD
            self.force_yield()

    def ipc_send(self, msg: Ipc) -> None:
        """Deliver ``msg`` from the current task to its receiver's mailbox."""
        with self._lock:
            msg.sender = self._current
            receiver = self.get_by_pid(msg.receiver)
            if receiver is None:
                raise ProcessLookupError(f"no running task with pid {msg.receiver}")
            receiver.mailbox.append(msg)

    def ipc_receive(self) -> Optional[Ipc]:
        """Take the most recently delivered message of the current task.

        With an empty mailbox the task yields and None is returned.
        """
        with self._lock:
            mailbox = self.current_task().mailbox
            if not mailbox:
                self.force_yield()
                return None
            return mailbox.pop()