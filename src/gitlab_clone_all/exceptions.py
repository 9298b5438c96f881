"""
Exception hierarchy for GitLab Clone All.
"""


class GitLabCloneError(Exception):
    """Base class for all errors raised by gitlab_clone_all."""


class TransportError(GitLabCloneError):
    """The listing endpoint could not be reached or answered with an error."""


class DecodeError(GitLabCloneError):
    """The listing endpoint returned a body that is not a list of projects."""


class CredentialError(GitLabCloneError):
    """Clone credentials are missing or unusable."""
