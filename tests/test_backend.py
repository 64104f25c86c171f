"""Tests for backend submission."""

import unittest
from unittest.mock import MagicMock, patch

import requests

from sbomgraph.backend import ANALYSIS_PATH, USER_AGENT, get_default_headers, submit_sbom
from sbomgraph.exceptions import BackendError


class TestGetDefaultHeaders(unittest.TestCase):
    """Tests for get_default_headers function."""

    def test_default_headers_minimal(self):
        headers = get_default_headers()
        self.assertEqual(headers["User-Agent"], USER_AGENT)
        self.assertNotIn("Content-Type", headers)

    def test_content_type(self):
        headers = get_default_headers("application/vnd.cyclonedx+json")
        self.assertEqual(headers["Content-Type"], "application/vnd.cyclonedx+json")

    def test_user_agent_format(self):
        self.assertTrue(USER_AGENT.startswith("sbomgraph/"))


class TestSubmitSbom(unittest.TestCase):
    """Tests for submit_sbom."""

    def response(self, ok=True, status_code=200, payload=None):
        response = MagicMock()
        response.ok = ok
        response.status_code = status_code
        response.text = "rejected"
        response.json.return_value = payload if payload is not None else {"dependencies": []}
        return response

    @patch("sbomgraph.backend.requests.post")
    def test_posts_document(self, mock_post):
        mock_post.return_value = self.response(payload={"summary": {"total": 0}})
        result = submit_sbom("https://backend.example.com/", '{"bomFormat": "CycloneDX"}')
        self.assertEqual(result, {"summary": {"total": 0}})
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], "https://backend.example.com" + ANALYSIS_PATH)
        self.assertEqual(kwargs["data"], b'{"bomFormat": "CycloneDX"}')
        self.assertEqual(kwargs["headers"]["Content-Type"], "application/vnd.cyclonedx+json")

    @patch("sbomgraph.backend.requests.post")
    def test_rejected(self, mock_post):
        mock_post.return_value = self.response(ok=False, status_code=400)
        with self.assertRaises(BackendError) as ctx:
            submit_sbom("https://backend.example.com", "{}")
        self.assertIn("[400]", str(ctx.exception))

    @patch("sbomgraph.backend.requests.post")
    def test_connection_error(self, mock_post):
        mock_post.side_effect = requests.exceptions.ConnectionError("refused")
        with self.assertRaises(BackendError):
            submit_sbom("https://backend.example.com", "{}")

    @patch("sbomgraph.backend.requests.post")
    def test_timeout(self, mock_post):
        mock_post.side_effect = requests.exceptions.Timeout()
        with self.assertRaises(BackendError):
            submit_sbom("https://backend.example.com", "{}")

    @patch("sbomgraph.backend.requests.post")
    def test_invalid_json_response(self, mock_post):
        response = self.response()
        response.json.side_effect = ValueError("no json")
        mock_post.return_value = response
        with self.assertRaises(BackendError):
            submit_sbom("https://backend.example.com", "{}")
