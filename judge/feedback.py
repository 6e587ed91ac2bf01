"""
Feedback text service used for hints on failed submissions.

ChatFeedbackClient asks an OpenAI-compatible chat completions endpoint for
a short hint. Any failure degrades to FALLBACK_MESSAGE; a submission never
fails because feedback could not be generated.
"""

import os
from typing import Optional

import requests

from .models import JudgeConfig


FALLBACK_MESSAGE = "Unable to generate feedback at this time. Please review your code and try again."

SYSTEM_PROMPT = "You are a helpful coding mentor. Provide constructive feedback on coding problems."


class StaticFeedback:
    """Feedback service returning a fixed hint. Used when feedback is disabled."""

    def __init__(self, message: str = FALLBACK_MESSAGE):
        self.message = message

    def explain(self, code: str, question_description: str, diagnostic_message: str) -> str:
        return self.message


class ChatFeedbackClient:
    """HTTP client for a chat completions feedback service."""

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.openai.com/v1/chat/completions",
        model: str = "gpt-3.5-turbo",
        timeout: float = 15.0,
        session: Optional[requests.Session] = None
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()

    def _build_prompt(self, code: str, question_description: str, diagnostic_message: str) -> str:
        return (
            "A user submitted the following code for this problem:\n\n"
            f"Problem: {question_description}\n\n"
            f"Code:\n{code}\n\n"
            f"Error/Issue: {diagnostic_message}\n\n"
            "Provide a helpful hint or explanation of what might be wrong with the code. "
            "Be constructive and educational."
        )

    def explain(self, code: str, question_description: str, diagnostic_message: str) -> str:
        """Return a hint for the failed submission, or the fallback message."""
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": self._build_prompt(code, question_description, diagnostic_message)},
            ],
            "temperature": 0.5,
            "max_tokens": 500,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            response = self.session.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            content = response.json()["choices"][0]["message"]["content"]
        except (requests.RequestException, ValueError, KeyError, IndexError, TypeError):
            return FALLBACK_MESSAGE

        if not isinstance(content, str) or not content.strip():
            return FALLBACK_MESSAGE
        return content.strip()


def build_feedback_service(config: JudgeConfig):
    """Pick the feedback service for a config: HTTP when enabled and a key is set."""
    api_key = os.environ.get("OPENAI_API_KEY") or os.environ.get("OPENAI_KEY")
    if not config.feedback_enabled or not api_key:
        return StaticFeedback()
    return ChatFeedbackClient(
        api_key=api_key,
        api_url=config.feedback_api_url,
        model=config.feedback_model,
        timeout=config.feedback_timeout_seconds,
    )
