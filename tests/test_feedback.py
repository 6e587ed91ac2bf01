"""
Tests for feedback module.

Tests the feedback service including:
- Successful chat completion responses
- Fallback on HTTP errors, timeouts and malformed bodies
- Service selection from configuration and environment
"""

import pytest
import requests
from unittest.mock import Mock, patch
from pathlib import Path

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from judge.feedback import (
    ChatFeedbackClient, StaticFeedback, build_feedback_service, FALLBACK_MESSAGE,
)
from judge.models import JudgeConfig


def make_response(payload=None, status_error=None):
    response = Mock()
    response.json.return_value = payload
    if status_error:
        response.raise_for_status.side_effect = status_error
    return response


class TestChatFeedbackClient:
    """Test the HTTP feedback client."""

    def test_returns_hint(self):
        session = Mock()
        session.post.return_value = make_response({"choices": [{"message": {"content": "  Off by one.  "}}]})
        client = ChatFeedbackClient("key-123", session=session, timeout=3.0)

        hint = client.explain("print(1)", "Print two", "Expected: 2, Got: 1")

        assert hint == "Off by one."
        args, kwargs = session.post.call_args
        assert args[0] == "https://api.openai.com/v1/chat/completions"
        assert kwargs["headers"] == {"Authorization": "Bearer key-123"}
        assert kwargs["timeout"] == 3.0
        prompt = kwargs["json"]["messages"][1]["content"]
        assert "Problem: Print two" in prompt
        assert "print(1)" in prompt
        assert "Error/Issue: Expected: 2, Got: 1" in prompt

    def test_http_error_falls_back(self):
        session = Mock()
        session.post.return_value = make_response(status_error=requests.HTTPError("500"))
        client = ChatFeedbackClient("key", session=session)

        assert client.explain("c", "q", "e") == FALLBACK_MESSAGE

    def test_timeout_falls_back(self):
        session = Mock()
        session.post.side_effect = requests.Timeout("slow")
        client = ChatFeedbackClient("key", session=session)

        assert client.explain("c", "q", "e") == FALLBACK_MESSAGE

    @pytest.mark.parametrize("payload", [{}, {"choices": []}, {"choices": [{"message": {"content": ""}}]}, None])
    def test_malformed_body_falls_back(self, payload):
        session = Mock()
        session.post.return_value = make_response(payload)
        client = ChatFeedbackClient("key", session=session)

        assert client.explain("c", "q", "e") == FALLBACK_MESSAGE


class TestBuildFeedbackService:
    """Test service selection."""

    @patch.dict("os.environ", {"OPENAI_API_KEY": "abc"}, clear=True)
    def test_http_client_when_key_present(self):
        config = JudgeConfig.from_dict({"feedback_model": "gpt-4o-mini", "feedback_timeout_seconds": 4})
        service = build_feedback_service(config)

        assert isinstance(service, ChatFeedbackClient)
        assert service.api_key == "abc"
        assert service.model == "gpt-4o-mini"
        assert service.timeout == 4.0

    @patch.dict("os.environ", {"OPENAI_KEY": "legacy"}, clear=True)
    def test_legacy_key_name(self):
        service = build_feedback_service(JudgeConfig.default())
        assert service.api_key == "legacy"

    @patch.dict("os.environ", {}, clear=True)
    def test_static_without_key(self):
        assert isinstance(build_feedback_service(JudgeConfig.default()), StaticFeedback)

    @patch.dict("os.environ", {"OPENAI_API_KEY": "abc"}, clear=True)
    def test_static_when_disabled(self):
        config = JudgeConfig.from_dict({"feedback_enabled": False})
        assert isinstance(build_feedback_service(config), StaticFeedback)

    def test_static_feedback_message(self):
        assert StaticFeedback().explain("c", "q", "e") == FALLBACK_MESSAGE
        assert StaticFeedback("Try again").explain("c", "q", "e") == "Try again"
