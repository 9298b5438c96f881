#!/usr/bin/env python3
"""
GitLab project directory client.

Lists the projects visible to the configured account, one keyset page at a
time, ordered by ascending project id.
"""

import logging
from typing import Any, Dict, List, Optional

import gitlab
import requests

from .exceptions import DecodeError, TransportError
from .models import Project

PAGE_SIZE = 100
API_TIMEOUT = 120


class ProjectDirectoryClient:
    """Paginated access to the GitLab /projects listing."""

    def __init__(self, gitlab_url: str, access_token: Optional[str] = None, timeout: float = API_TIMEOUT,
                 page_size: int = PAGE_SIZE, logger: Optional[logging.Logger] = None):
        """
        Initialize the directory client.

        Args:
            gitlab_url: Base URL of the GitLab instance
            access_token: GitLab API access token, sent as PRIVATE-TOKEN (optional)
            timeout: Per-request timeout in seconds
            page_size: Number of projects requested per page
            logger: Optional logger instance
        """
        self.gitlab_url = gitlab_url.rstrip('/')
        self.page_size = page_size
        self.logger = logger or logging.getLogger('gitlab_clone_all.directory')

        self.gl = gitlab.Gitlab(self.gitlab_url, private_token=access_token or None, timeout=timeout)

    def _query(self, after_id: Optional[int]) -> Dict[str, Any]:
        return {
            'statistics': 'false',
            'with_custom_attributes': 'false',
            'all_available': 'true',
            'order_by': 'id',
            'sort': 'asc',
            'pagination': 'keyset',
            'per_page': self.page_size,
            'id_after': after_id or 0,
        }

    def list_page(self, after_id: Optional[int] = None) -> List[Project]:
        """
        Fetch one page of projects whose id is greater than after_id.

        Args:
            after_id: Exclusive lower bound on project ids (None or 0 for the first page)

        Returns:
            Projects of the page, in ascending id order

        Raises:
            TransportError: On network, timeout, HTTP or authentication failure
            DecodeError: If the response is not an array of project objects
        """
        self.logger.debug(f"Fetching projects page: id_after={after_id or 0}")

        try:
            # get_all=False returns this page only, without following Link headers;
            # rate limits and transient errors are not retried
            items = self.gl.http_list('/projects', query_data=self._query(after_id), get_all=False,
                                     obey_rate_limit=False, retry_transient_errors=False)
        except (KeyError, TypeError) as e:
            # a JSON object or scalar where an array was expected
            raise DecodeError(f"Expected a JSON array of projects from {self.gitlab_url}") from e
        except gitlab.exceptions.GitlabParsingError as e:
            raise DecodeError(f"Failed to parse projects from {self.gitlab_url}: {e}") from e
        except gitlab.exceptions.GitlabError as e:
            raise TransportError(f"Failed to fetch projects from {self.gitlab_url}: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Failed to fetch projects from {self.gitlab_url}: {e}") from e

        if not isinstance(items, list):
            raise DecodeError(f"Expected a JSON array of projects, got {type(items).__name__}")

        projects = [Project.from_dict(item) for item in items]
        self.logger.debug(f"Fetched projects: count={len(projects)}")
        return projects
