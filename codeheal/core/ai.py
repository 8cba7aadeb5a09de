"""AI client initialization."""

from google import genai

from codeheal.core.config import settings

__all__ = ("get_ai_client",)

_ai_client = None


def get_ai_client():
    """Lazy-initialize the Gemini client. Returns None if no API key configured."""
    global _ai_client  # noqa: PLW0603
    if _ai_client is None and settings.GOOGLE_API_KEY:
        _ai_client = genai.Client(api_key=settings.GOOGLE_API_KEY)
    return _ai_client
