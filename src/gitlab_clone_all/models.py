#!/usr/bin/env python3
"""
Data model shared by the clone pipeline.

A Project is discovered once, handed to exactly one clone worker and never
mutated. ProjectAction events describe pipeline progress and are consumed
by the progress manager.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from .exceptions import DecodeError


@dataclass(frozen=True)
class Project:
    """One repository visible through the project listing."""

    id: int
    ssh_url_to_repo: str
    http_url_to_repo: str
    path_with_namespace: str

    @classmethod
    def from_dict(cls, data: Any) -> 'Project':
        """
        Create a project from one element of the listing response.

        Args:
            data: Decoded JSON object

        Returns:
            Project instance

        Raises:
            DecodeError: If the object lacks a field or a field has the wrong type
        """
        if not isinstance(data, dict):
            raise DecodeError(f"Expected a project object, got {type(data).__name__}")

        try:
            project_id = data['id']
            fields = {name: data[name] for name in ('ssh_url_to_repo', 'http_url_to_repo', 'path_with_namespace')}
        except KeyError as e:
            raise DecodeError(f"Project object is missing field {e}") from e

        # bool is an int subclass but never a valid id
        if not isinstance(project_id, int) or isinstance(project_id, bool) or project_id < 0:
            raise DecodeError(f"Invalid project id: {project_id!r}")
        for name, value in fields.items():
            if not isinstance(value, str):
                raise DecodeError(f"Invalid value for '{name}' on project {project_id}: {value!r}")

        return cls(id=project_id, **fields)


class CloneMethod(Enum):
    """Transport used to clone every repository of a run."""

    SSH = 'ssh'
    HTTPS = 'https'

    @classmethod
    def from_str(cls, value: str) -> 'CloneMethod':
        """Parse 'ssh' or 'https' (case-insensitive)."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            accepted = ', '.join(method.value for method in cls)
            raise ValueError(f"Unknown clone method '{value}' (expected one of: {accepted})") from None

    def url_for(self, project: Project) -> str:
        """Return the clone URL of project for this transport."""
        if self is CloneMethod.SSH:
            return project.ssh_url_to_repo
        return project.http_url_to_repo


@dataclass(frozen=True)
class ToClone:
    """One more unit of work exists."""


@dataclass(frozen=True)
class Cloned:
    """A project is available locally, either freshly cloned or already present."""

    project_path: str
    received_bytes: int = 0
    received_objects: int = 0


@dataclass(frozen=True)
class Failed:
    """A project could not be cloned."""

    project_path: str
    err: str


@dataclass(frozen=True)
class DiscoveryFinished:
    """Discovery walked the listing to the end; no further ToClone will follow."""

    discovered: int


ProjectAction = Union[ToClone, Cloned, Failed, DiscoveryFinished]
