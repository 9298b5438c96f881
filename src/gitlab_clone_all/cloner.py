#!/usr/bin/env python3
"""
GitLab Clone All

Clones every repository visible to an account on a GitLab instance. Discovery,
cloning and progress tracking run as three concurrent stages connected by
bounded channels.
"""

import logging
import threading
from typing import Optional

from .channel import Channel
from .config import CloneSettings
from .directory import ProjectDirectoryClient
from .discovery import DiscoveryProducer
from .dispatcher import CloneDispatcher
from .models import Project, ProjectAction
from .progress import ProgressManager, RunSummary
from .worker import CloneWorker


class GitLabCloner:
    """Main class wiring the clone pipeline for one run."""

    def __init__(self, settings: CloneSettings, quiet: bool = False,
                 client: Optional[ProjectDirectoryClient] = None):
        """
        Initialize the GitLab cloner.

        Args:
            settings: Resolved run settings
            quiet: If True, suppress detailed logging and per-project success lines
            client: Directory client to use instead of one built from settings
        """
        self.settings = settings
        self.quiet = quiet

        # Setup logging
        self.logger = self._setup_logging()

        self.client = client or ProjectDirectoryClient(
            settings.gitlab_url,
            settings.access_token,
            timeout=settings.api_timeout,
            page_size=settings.page_size,
            logger=self.logger.getChild('directory'),
        )

    def _setup_logging(self) -> logging.Logger:
        """Setup logging configuration."""
        logger = logging.getLogger('gitlab_clone_all')

        # In quiet mode, only show WARNING and ERROR level logs
        log_level = logging.WARNING if self.quiet else logging.INFO
        logger.setLevel(log_level)

        if not logger.handlers:
            # Create console handler
            handler = logging.StreamHandler()

            # Create formatter
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)

            logger.addHandler(handler)
        return logger

    def clone_all(self) -> RunSummary:
        """
        Discover and clone every visible project.

        Returns:
            Totals of the run

        Raises:
            TransportError, DecodeError: If the project listing fails; clones
                already dispatched are allowed to finish first
            Exception: Whatever broke progress output (e.g. BrokenPipeError), raised
                once every dispatched clone has finished
        """
        settings = self.settings
        projects: Channel[Project] = Channel(settings.channel_capacity)
        events: Channel[ProjectAction] = Channel(settings.channel_capacity)

        worker = CloneWorker(
            settings.destination_path,
            settings.clone_method,
            events,
            credential=settings.credential,
            logger=self.logger.getChild('worker'),
        )
        dispatcher = CloneDispatcher(worker, settings.concurrent_clones, logger=self.logger.getChild('dispatcher'))
        producer = DiscoveryProducer(self.client, projects, events, logger=self.logger.getChild('discovery'))
        progress = ProgressManager(quiet=self.quiet, logger=self.logger.getChild('progress'))

        settings.destination_path.mkdir(parents=True, exist_ok=True)
        self.logger.info(
            f"Cloning all projects from {settings.gitlab_url} to {settings.destination_path} "
            f"using {settings.clone_method.value.upper()}"
        )

        summaries = []
        progress_errors = []

        def track_progress():
            try:
                summaries.append(progress.run(events))
            except Exception as e:
                progress_errors.append(e)
                self.logger.error(f"Progress reporting failed: {e}")
                # discovery and clone workers block while the channel is full
                for _ in events:
                    pass

        progress_thread = threading.Thread(
            target=track_progress,
            name='progress',
            daemon=True,
        )
        dispatch_thread = threading.Thread(target=dispatcher.run, args=(projects,), name='dispatcher', daemon=True)
        progress_thread.start()
        dispatch_thread.start()

        try:
            producer.run()
        finally:
            # the producer has closed the project channel; wait for in-flight clones
            dispatch_thread.join()
            events.close()
            progress_thread.join()

        if progress_errors:
            raise progress_errors[0]

        return summaries[0] if summaries else progress.summary()
