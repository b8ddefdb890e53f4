"""JobScheduler protocol - recurring cron-style callbacks."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Protocol

JobCallback = Callable[[], Awaitable[None]]


class JobScheduler(Protocol):
    """Starts, pauses, resumes and stops recurring jobs. Handles are opaque."""

    def start(self, cron_expression: str, callback: JobCallback, job_id: str) -> Any:
        """Schedule `callback` on `cron_expression`. Returns the job handle."""
        ...

    def pause(self, handle: Any) -> None:
        ...

    def resume(self, handle: Any) -> None:
        ...

    def stop(self, handle: Any) -> None:
        """Stop and dispose the job. Stopping twice is a no-op."""
        ...

    def shutdown(self) -> None:
        ...
