"""
SSH credentials for clone workers.
"""

import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

from .exceptions import CredentialError

DEFAULT_SSH_KEY = Path('~/.ssh/id_rsa_gitlab')


@dataclass(frozen=True)
class SshKeyCredential:
    """A private key file used for every SSH clone of a run."""

    key_path: Path = DEFAULT_SSH_KEY

    @classmethod
    def from_path(cls, key_path: str) -> 'SshKeyCredential':
        return cls(Path(key_path).expanduser())

    def git_env(self) -> Dict[str, str]:
        """
        Build the environment for one git invocation.

        The key file is checked on every call, so a key that appears or
        disappears during a run affects only later clones.

        Raises:
            CredentialError: If the key file is missing or unreadable
        """
        key_path = self.key_path.expanduser()
        if not key_path.is_file():
            raise CredentialError(f"SSH key not found: {key_path}")
        if not os.access(key_path, os.R_OK):
            raise CredentialError(f"SSH key is not readable: {key_path}")

        command = f"ssh -i {shlex.quote(str(key_path))} -o IdentitiesOnly=yes"
        return {'GIT_SSH_COMMAND': command}
