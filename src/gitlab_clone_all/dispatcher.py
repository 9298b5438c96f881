#!/usr/bin/env python3
"""
Clone dispatcher: fans discovered projects out to clone workers.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from .channel import Channel
from .models import Failed, Project
from .worker import CloneWorker

CONCURRENT_CLONES = 8


class CloneDispatcher:
    """Runs one clone per project on a bounded pool of threads."""

    def __init__(self, worker: CloneWorker, max_workers: int = CONCURRENT_CLONES,
                 logger: Optional[logging.Logger] = None):
        if max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {max_workers}")
        self.worker = worker
        self.max_workers = max_workers
        self.logger = logger or logging.getLogger('gitlab_clone_all.dispatcher')
        self.dispatched = 0

    def run(self, projects: Channel[Project]) -> int:
        """
        Consume projects until the channel is closed.

        Dispatch blocks while max_workers clones are in flight, so a full pool
        throttles discovery through the project channel. Returns after every
        dispatched clone has finished.

        Returns:
            Number of projects dispatched
        """
        slots = threading.BoundedSemaphore(self.max_workers)

        def clone_one(project: Project) -> None:
            try:
                self.worker.clone(project)
            except Exception as e:
                # the announced project must still resolve
                self.logger.exception(f"Clone worker crashed for {project.path_with_namespace}")
                self.worker.events.send(Failed(project_path=project.path_with_namespace, err=str(e) or type(e).__name__))
            finally:
                slots.release()

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix='clone') as executor:
            for project in projects:
                slots.acquire()
                self.logger.debug(f"Dispatching clone of {project.path_with_namespace}")
                executor.submit(clone_one, project)
                self.dispatched += 1

        self.logger.debug(f"Finished dispatching {self.dispatched} clones")
        return self.dispatched
