#!/usr/bin/env python3
"""
Progress tracking for a clone run.

The ProgressManager consumes ProjectAction events, keeps the run counters,
prints one line per resolved project and decides when the run is complete.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

import click

from .channel import Channel
from .models import Cloned, DiscoveryFinished, Failed, ProjectAction, ToClone


def format_bytes(size: int) -> str:
    """Format a byte count with a binary unit, e.g. 1.50 MiB."""
    value = float(size)
    for unit in ('B', 'KiB', 'MiB', 'GiB', 'TiB'):
        if value < 1024 or unit == 'TiB':
            break
        value /= 1024
    if unit == 'B':
        return f"{int(value)} B"
    return f"{value:.2f} {unit}"


@dataclass(frozen=True)
class RunSummary:
    """Totals of a clone run."""

    total: int
    cloned: int
    failed: int
    total_bytes: int
    elapsed: float
    completed: bool

    @property
    def success(self) -> bool:
        return self.completed and self.failed == 0


class ProgressManager:
    """Aggregates pipeline events into counters and console output."""

    def __init__(self, quiet: bool = False, logger: Optional[logging.Logger] = None):
        """
        Initialize the progress manager.

        Args:
            quiet: If True, print only failures and the final summary
            logger: Optional logger instance
        """
        self.quiet = quiet
        self.logger = logger or logging.getLogger('gitlab_clone_all.progress')

        self.todo_count = 0
        self.total_count = 0
        self.cloned_count = 0
        self.failed_count = 0
        self.total_bytes = 0
        self.discovery_finished = False
        self.completed = False
        self.start_time = time.monotonic()
        self.end_time: Optional[float] = None

    @property
    def elapsed(self) -> float:
        return (self.end_time or time.monotonic()) - self.start_time

    def handle(self, action: ProjectAction) -> bool:
        """
        Apply one event to the counters.

        Returns:
            True once discovery has finished and no announced project is outstanding
        """
        if isinstance(action, ToClone):
            self.todo_count += 1
            self.total_count += 1
        elif isinstance(action, Cloned):
            self.cloned_count += 1
            self.total_bytes += action.received_bytes
            self.todo_count -= 1
            if not self.quiet:
                click.secho(
                    f"✓ {action.project_path} "
                    f"({format_bytes(action.received_bytes)}, {action.received_objects} objects)",
                    fg='green',
                )
        elif isinstance(action, Failed):
            self.failed_count += 1
            self.todo_count -= 1
            click.secho(f"✗ {action.project_path}: {action.err}", fg='red', err=True)
        elif isinstance(action, DiscoveryFinished):
            self.discovery_finished = True
            self.logger.debug(f"Discovery announced {action.discovered} projects")
        else:
            raise TypeError(f"Unknown project action: {action!r}")

        if self.todo_count < 0:
            self.logger.warning(f"More projects resolved than announced (todo={self.todo_count})")

        self.completed = self.discovery_finished and self.todo_count <= 0
        if self.completed and self.end_time is None:
            self.end_time = time.monotonic()
        return self.completed

    def run(self, events: Channel[ProjectAction]) -> RunSummary:
        """
        Consume events until the run completes or the channel is closed.

        The summary line is printed only for a completed run; a closed channel
        before completion means the run was aborted.
        """
        self.start_time = time.monotonic()
        self.end_time = None
        for action in events:
            if self.handle(action):
                self.print_summary()
                break
        else:
            self.logger.debug("Event channel closed before the run completed")

        return self.summary()

    def summary(self) -> RunSummary:
        return RunSummary(
            total=self.total_count,
            cloned=self.cloned_count,
            failed=self.failed_count,
            total_bytes=self.total_bytes,
            elapsed=self.elapsed,
            completed=self.completed,
        )

    def print_summary(self):
        """Print the final totals of the run."""
        color = 'green' if self.failed_count == 0 else 'yellow'
        click.secho(
            f"\n{self.cloned_count}/{self.total_count} cloned, "
            f"{self.failed_count} failed, {format_bytes(self.total_bytes)} received "
            f"in {self.elapsed:.1f}s",
            fg=color, bold=True,
        )
