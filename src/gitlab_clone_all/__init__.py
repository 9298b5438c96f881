"""
GitLab Clone All - clone every repository visible on a GitLab instance.

This package provides:
- GitLabCloner: Discover and clone all projects concurrently
- ProjectDirectoryClient: Keyset-paginated access to the project listing
- Config: Configuration file and defaults
"""

__version__ = "1.0.0"

from .cloner import GitLabCloner
from .config import Config, CloneSettings
from .directory import ProjectDirectoryClient
from .models import CloneMethod, Project

__all__ = ["GitLabCloner", "Config", "CloneSettings", "ProjectDirectoryClient", "CloneMethod", "Project"]
