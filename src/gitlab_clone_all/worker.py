#!/usr/bin/env python3
"""
Clone worker: mirrors one GitLab project onto local disk.
"""

import logging
import re
from pathlib import Path
from typing import Optional

from git import GitCommandError, RemoteProgress, Repo

from .channel import Channel
from .credentials import SshKeyCredential
from .models import Cloned, CloneMethod, Failed, Project, ProjectAction

_SIZE_RE = re.compile(r'(\d+(?:\.\d+)?)\s*(bytes|KiB|MiB|GiB|TiB)\b')
_UNITS = {
    'bytes': 1,
    'KiB': 1024,
    'MiB': 1024 ** 2,
    'GiB': 1024 ** 3,
    'TiB': 1024 ** 4,
}

_EXISTS_MARKER = 'already exists and is not an empty directory'


def parse_transferred_bytes(message: str) -> Optional[int]:
    """
    Extract the amount received so far from a git progress message.

    git reports e.g. '1.25 MiB | 640.00 KiB/s'; the first size is the
    cumulative amount, the second the rate.
    """
    match = _SIZE_RE.search(message or '')
    if not match:
        return None
    value, unit = match.groups()
    return int(float(value) * _UNITS[unit])


class TransferProgress(RemoteProgress):
    """Tracks received objects and bytes of a single clone."""

    def __init__(self, project_path: str, logger: logging.Logger):
        super().__init__()
        self.project_path = project_path
        self.logger = logger
        self.received_objects = 0
        self.received_bytes = 0

    def update(self, op_code, cur_count, max_count=None, message=''):
        if op_code & RemoteProgress.RECEIVING:
            self.received_objects = max(self.received_objects, int(cur_count or 0))
            received = parse_transferred_bytes(message)
            if received is not None:
                self.received_bytes = max(self.received_bytes, received)
        elif op_code & RemoteProgress.CHECKING_OUT:
            self.logger.debug(f"{self.project_path}: checking out {cur_count}/{max_count}")


class CloneWorker:
    """Clones one project and reports the outcome on the event channel."""

    def __init__(self, destination_path: Path, clone_method: CloneMethod, events: Channel[ProjectAction],
                 credential: Optional[SshKeyCredential] = None, logger: Optional[logging.Logger] = None):
        """
        Initialize the clone worker.

        Args:
            destination_path: Root directory receiving all clones
            clone_method: Transport selecting the clone URL
            events: Channel receiving the terminal Cloned or Failed event
            credential: SSH key used when clone_method is SSH
            logger: Optional logger instance
        """
        self.destination_path = Path(destination_path)
        self.clone_method = clone_method
        self.events = events
        self.credential = credential or SshKeyCredential()
        self.logger = logger or logging.getLogger('gitlab_clone_all.worker')

    def target_path(self, project: Project) -> Path:
        return self.destination_path / project.path_with_namespace

    def _already_present(self, path: Path) -> bool:
        return path.is_dir() and any(path.iterdir())

    def clone(self, project: Project) -> ProjectAction:
        """
        Clone project below the destination root.

        A destination that already holds content counts as cloned and is not
        fetched again. Every other failure is reported, never raised.

        Returns:
            The Cloned or Failed event that was sent
        """
        action = self._clone(project)
        self.events.send(action)
        return action

    def _clone(self, project: Project) -> ProjectAction:
        repo_path = self.target_path(project)
        project_path = project.path_with_namespace

        if self._already_present(repo_path):
            self.logger.info(f"Repository already exists, skipping: {repo_path}")
            return Cloned(project_path=project_path)

        progress = TransferProgress(project_path, self.logger)
        try:
            env = self.credential.git_env() if self.clone_method is CloneMethod.SSH else None
            clone_url = self.clone_method.url_for(project)

            repo_path.parent.mkdir(parents=True, exist_ok=True)
            self.logger.debug(f"Cloning {project_path} using {self.clone_method.value.upper()}: {clone_url}")
            Repo.clone_from(clone_url, str(repo_path), progress=progress, env=env)

        except GitCommandError as e:
            # another clone may have populated the directory in the meantime
            if _EXISTS_MARKER in str(e.stderr) and self._already_present(repo_path):
                self.logger.info(f"Repository already exists, skipping: {repo_path}")
                return Cloned(project_path=project_path,
                              received_bytes=progress.received_bytes,
                              received_objects=progress.received_objects)
            self.logger.error(f"Git error cloning {project_path}: {e}")
            return Failed(project_path=project_path, err=_describe(e))
        except Exception as e:
            self.logger.error(f"Error cloning {project_path}: {e}")
            return Failed(project_path=project_path, err=str(e) or type(e).__name__)

        self.logger.info(f"Successfully cloned: {repo_path}")
        return Cloned(project_path=project_path,
                      received_bytes=progress.received_bytes,
                      received_objects=progress.received_objects)


def _describe(error: GitCommandError) -> str:
    """Return the most useful line of a git failure."""
    stderr = re.sub(r"^\s*stderr:\s*'?", '', error.stderr or '').rstrip().rstrip("'")
    lines = [line.strip() for line in stderr.splitlines() if line.strip()]
    if lines:
        return lines[-1]
    return str(error)
