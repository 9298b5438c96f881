#!/usr/bin/env python3
"""
Discovery stage: walks the project listing and feeds the clone pipeline.
"""

import logging
from typing import Optional

from .channel import Channel
from .directory import ProjectDirectoryClient
from .models import DiscoveryFinished, Project, ProjectAction, ToClone


class DiscoveryProducer:
    """Publishes every project visible through the directory client."""

    def __init__(self, client: ProjectDirectoryClient, projects: Channel[Project],
                 events: Channel[ProjectAction], logger: Optional[logging.Logger] = None):
        self.client = client
        self.projects = projects
        self.events = events
        self.logger = logger or logging.getLogger('gitlab_clone_all.discovery')
        self.discovered = 0

    def run(self) -> int:
        """
        Walk the listing to exhaustion.

        Each project is announced with a ToClone event before it is handed to
        the project channel. The walk stops on an empty page, or when a page
        ends on the same id as the previous one; such a repeated page is
        not published again. The project channel is closed whether the walk
        succeeds or not. Listing errors are not retried and propagate to the
        caller.

        Returns:
            Number of projects discovered
        """
        try:
            cursor: Optional[int] = None
            while True:
                page = self.client.list_page(cursor)
                last_id = page[-1].id if page else None
                if last_id is None or last_id == cursor:
                    # a repeated tail page has already been published
                    break

                for project in page:
                    self.logger.debug(f"Discovered project: {project.path_with_namespace} (ID: {project.id})")
                    self.events.send(ToClone())
                    self.projects.send(project)
                    self.discovered += 1

                cursor = last_id

            self.logger.info(f"Discovery finished: {self.discovered} projects")
            self.events.send(DiscoveryFinished(discovered=self.discovered))
            return self.discovered
        finally:
            self.projects.close()
