"""Pure data types for taskweave.core.

These are simple enums and dataclasses with no behavior coupling.
"""

from enum import Enum


class TaskStatus(Enum):
    """Task lifecycle states.

    PENDING -> RUNNING -> COMPLETED | FAILED. CANCELLED is only reached
    when sibling cancellation is enabled and another task failed first.
    """

    PENDING = "pending"  # Waiting on dependencies
    RUNNING = "running"  # Task body is executing
    COMPLETED = "completed"  # Result written to the result set
    FAILED = "failed"  # Task raised
    CANCELLED = "cancelled"  # Stopped because a sibling failed

    @property
    def is_terminal(self) -> bool:
        """Whether the task can no longer change state."""
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED, TaskStatus.CANCELLED)
