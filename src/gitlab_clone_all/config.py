"""
Configuration module for GitLab Clone All.

This module provides configuration management and validation for the clone tool.
"""

import os
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any

from .credentials import DEFAULT_SSH_KEY, SshKeyCredential
from .models import CloneMethod


# Default configuration values
DEFAULT_CONFIG = {
    "api_timeout": 120,        # seconds per listing request
    "page_size": 100,          # projects per listing page
    "channel_capacity": 500,   # buffered items between pipeline stages
    "concurrent_clones": 8,    # clone operations running at once
    "clone_method": "https",   # https or ssh
    "ssh_key_path": str(DEFAULT_SSH_KEY),
}


class Config:
    """Configuration file manager for GitLab Clone All."""

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to configuration file (optional)
        """
        self.config_file = config_file or self._get_default_config_path()
        self.config = self._load_config()

    def _get_default_config_path(self) -> str:
        """Get default configuration file path."""
        return os.path.join(os.path.expanduser("~"), ".gitlab_clone_all.json")

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file; a missing or unreadable file yields no values."""
        if os.path.exists(self.config_file):
            try:
                with open(self.config_file, 'r') as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    return data
            except (json.JSONDecodeError, IOError):
                pass
        return {}

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value, falling back to DEFAULT_CONFIG.

        Args:
            key: Configuration key
            default: Default value if key is neither configured nor a known default

        Returns:
            Configuration value or default
        """
        if key in self.config:
            return self.config[key]
        return DEFAULT_CONFIG.get(key, default)

    def validate_gitlab_url(self, url: str) -> bool:
        """
        Validate GitLab URL format.

        Args:
            url: GitLab URL to validate

        Returns:
            True if valid, False otherwise
        """
        if not url:
            return False

        url = url.lower()
        return url.startswith(('http://', 'https://'))

    def validate_access_token(self, token: str) -> bool:
        """
        Validate GitLab access token format.

        Args:
            token: Access token to validate

        Returns:
            True if valid, False otherwise
        """
        if not token:
            return False

        # GitLab personal access tokens typically start with 'glpat-'
        # But we'll accept any non-empty string for flexibility
        return len(token.strip()) > 0

    def validate_destination_path(self, path: str) -> bool:
        """
        Validate destination path.

        Args:
            path: Destination path to validate

        Returns:
            True if valid, False otherwise
        """
        if not path:
            return False

        try:
            path_obj = Path(path).expanduser()
            if path_obj.exists():
                return path_obj.is_dir()
            # The nearest existing ancestor must be a directory for mkdir to succeed
            for parent in path_obj.parents:
                if parent.exists():
                    return parent.is_dir()
            return False
        except (OSError, ValueError):
            return False


@dataclass
class CloneSettings:
    """Everything a clone run needs, resolved once at startup."""

    gitlab_url: str
    destination_path: Path
    access_token: Optional[str] = None
    clone_method: CloneMethod = CloneMethod.HTTPS
    credential: SshKeyCredential = field(default_factory=SshKeyCredential)
    api_timeout: float = DEFAULT_CONFIG["api_timeout"]
    page_size: int = DEFAULT_CONFIG["page_size"]
    channel_capacity: int = DEFAULT_CONFIG["channel_capacity"]
    concurrent_clones: int = DEFAULT_CONFIG["concurrent_clones"]

    @classmethod
    def resolve(cls, config: Config, gitlab_url: Optional[str] = None, access_token: Optional[str] = None,
                destination: Optional[str] = None, clone_method: Optional[str] = None,
                ssh_key: Optional[str] = None, concurrent_clones: Optional[int] = None) -> 'CloneSettings':
        """
        Merge explicit values with the configuration file and defaults.

        Raises:
            ValueError: If a required value is missing or invalid
        """
        gitlab_url = gitlab_url or config.get("gitlab_url")
        if not config.validate_gitlab_url(gitlab_url):
            raise ValueError(f"Invalid GitLab URL: {gitlab_url!r} (expected http:// or https://)")

        destination = destination or config.get("destination")
        if not config.validate_destination_path(destination):
            raise ValueError(f"Invalid destination directory: {destination!r}")

        access_token = access_token or config.get("access_token")
        if access_token is not None and not config.validate_access_token(access_token):
            access_token = None

        return cls(
            gitlab_url=gitlab_url.rstrip('/'),
            destination_path=Path(destination).expanduser().resolve(),
            access_token=access_token,
            clone_method=CloneMethod.from_str(clone_method or config.get("clone_method")),
            credential=SshKeyCredential.from_path(ssh_key or config.get("ssh_key_path")),
            api_timeout=float(config.get("api_timeout")),
            page_size=int(config.get("page_size")),
            channel_capacity=int(config.get("channel_capacity")),
            concurrent_clones=int(concurrent_clones or config.get("concurrent_clones")),
        )
