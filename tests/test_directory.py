#!/usr/bin/env python3
"""
Unit tests for the project directory client.
"""

import json
import threading
import unittest
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs
from unittest.mock import Mock, patch

import gitlab
import requests

from gitlab_clone_all.directory import ProjectDirectoryClient
from gitlab_clone_all.exceptions import DecodeError, TransportError
from gitlab_clone_all.models import Project


def project_json(project_id):
    return {
        "id": project_id,
        "ssh_url_to_repo": f"git@gitlab.example.com:group/repo{project_id}.git",
        "http_url_to_repo": f"https://gitlab.example.com/group/repo{project_id}.git",
        "path_with_namespace": f"group/repo{project_id}",
    }


class TestProjectDirectoryClient(unittest.TestCase):
    """Test cases for ProjectDirectoryClient."""

    def setUp(self):
        """Set up test fixtures."""
        patcher = patch('gitlab_clone_all.directory.gitlab.Gitlab')
        self.mock_gitlab = patcher.start()
        self.addCleanup(patcher.stop)
        self.gl = Mock()
        self.mock_gitlab.return_value = self.gl

        self.client = ProjectDirectoryClient("https://gitlab.example.com/", "test-token")

    def test_init(self):
        """Test the GitLab connection is built with token and timeout."""
        self.assertEqual(self.client.gitlab_url, "https://gitlab.example.com")
        self.mock_gitlab.assert_called_once_with(
            "https://gitlab.example.com", private_token="test-token", timeout=120
        )

    def test_init_without_token(self):
        """Test an empty token is not sent."""
        ProjectDirectoryClient("https://gitlab.example.com", "")
        self.mock_gitlab.assert_called_with("https://gitlab.example.com", private_token=None, timeout=120)

    def test_list_first_page(self):
        """Test the first page starts after id 0 with keyset pagination."""
        self.gl.http_list.return_value = [project_json(1), project_json(2)]

        projects = self.client.list_page()

        self.assertEqual([p.id for p in projects], [1, 2])
        self.assertIsInstance(projects[0], Project)
        path = self.gl.http_list.call_args[0][0]
        kwargs = self.gl.http_list.call_args[1]
        self.assertEqual(path, '/projects')
        self.assertFalse(kwargs['get_all'])
        self.assertFalse(kwargs['obey_rate_limit'])
        self.assertFalse(kwargs['retry_transient_errors'])
        query = kwargs['query_data']
        self.assertEqual(query['id_after'], 0)
        self.assertEqual(query['pagination'], 'keyset')
        self.assertEqual(query['order_by'], 'id')
        self.assertEqual(query['sort'], 'asc')
        self.assertEqual(query['per_page'], 100)

    def test_list_page_after_cursor(self):
        """Test the cursor is sent as id_after."""
        self.gl.http_list.return_value = []

        self.assertEqual(self.client.list_page(100), [])
        self.assertEqual(self.gl.http_list.call_args[1]['query_data']['id_after'], 100)

    def test_timeout_raises_transport_error(self):
        """Test network failures map to TransportError."""
        self.gl.http_list.side_effect = requests.exceptions.Timeout("read timed out")

        with self.assertRaises(TransportError):
            self.client.list_page()

    def test_http_error_raises_transport_error(self):
        """Test HTTP status failures map to TransportError."""
        self.gl.http_list.side_effect = gitlab.exceptions.GitlabHttpError("boom", response_code=500)

        with self.assertRaises(TransportError):
            self.client.list_page()

    def test_authentication_error_raises_transport_error(self):
        """Test a rejected token maps to TransportError."""
        self.gl.http_list.side_effect = gitlab.exceptions.GitlabAuthenticationError("401 Unauthorized")

        with self.assertRaises(TransportError):
            self.client.list_page()

    def test_invalid_json_raises_decode_error(self):
        """Test an unparsable body maps to DecodeError."""
        self.gl.http_list.side_effect = gitlab.exceptions.GitlabParsingError("Failed to parse the server message")

        with self.assertRaises(DecodeError):
            self.client.list_page()

    def test_malformed_project_raises_decode_error(self):
        """Test a project without clone URLs maps to DecodeError."""
        self.gl.http_list.return_value = [{"id": 1, "path_with_namespace": "a/b"}]

        with self.assertRaises(DecodeError):
            self.client.list_page()



class ListingHandler(BaseHTTPRequestHandler):
    """Answers every request with the server's queued responses."""

    def do_GET(self):
        self.server.requests.append(self.path)
        status, body = self.server.responses.pop(0)
        payload = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format, *args):
        pass


class TestProjectDirectoryClientHttp(unittest.TestCase):
    """Test ProjectDirectoryClient against a local GitLab-like server."""

    def setUp(self):
        """Start a local HTTP server."""
        self.server = ThreadingHTTPServer(("127.0.0.1", 0), ListingHandler)
        self.server.requests = []
        self.server.responses = []
        thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        thread.start()
        self.addCleanup(self.server.server_close)
        self.addCleanup(self.server.shutdown)

        host, port = self.server.server_address
        self.client = ProjectDirectoryClient(f"http://{host}:{port}", "test-token", timeout=5)

    def serve(self, *responses):
        self.server.responses.extend(responses)

    def test_list_page(self):
        """Test a project array is decoded and the cursor is sent."""
        self.serve((200, json.dumps([project_json(3)])))

        projects = self.client.list_page(2)

        self.assertEqual(projects, [Project(3, "git@gitlab.example.com:group/repo3.git",
                                            "https://gitlab.example.com/group/repo3.git", "group/repo3")])
        path, _, query = self.server.requests[0].partition("?")
        self.assertEqual(path, "/api/v4/projects")
        params = parse_qs(query)
        self.assertEqual(params["id_after"], ["2"])
        self.assertEqual(params["pagination"], ["keyset"])
        self.assertEqual(params["per_page"], ["100"])

    def test_non_array_bodies_raise_decode_error(self):
        """Test bodies other than a JSON array of projects map to DecodeError."""
        for body in ("{}", "null", '"abc"', "[1, 2]", "{not json"):
            with self.subTest(body=body):
                self.serve((200, body))
                with self.assertRaises(DecodeError):
                    self.client.list_page()

    def test_rate_limit_is_not_retried(self):
        """Test a 429 answer fails at once instead of being retried."""
        self.serve((429, json.dumps({"message": "429 Too Many Requests"})),
                   (200, json.dumps([project_json(1)])))

        with self.assertRaises(TransportError):
            self.client.list_page()

        self.assertEqual(len(self.server.requests), 1)

    def test_server_error_is_not_retried(self):
        """Test a 502 answer fails at once instead of being retried."""
        self.serve((502, json.dumps({"message": "502 Bad Gateway"})),
                   (200, json.dumps([project_json(1)])))

        with self.assertRaises(TransportError):
            self.client.list_page()

        self.assertEqual(len(self.server.requests), 1)


if __name__ == '__main__':
    unittest.main(verbosity=2)
