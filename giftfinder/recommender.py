from typing import Any, Optional
from urllib.parse import quote_plus

import openai

from .config import MAX_SUGGESTIONS, get_api_key
from .errors import ConfigurationError, UpstreamAuthError, UpstreamRequestError
from .llm import search_grounded_text
from .models import FormData, SuggestionResponse
from .parsing import parse_suggestions
from .prompts import build_gift_prompt
from .slog import log_event, qhash

_INVALID_KEY_MARKERS = ("API_KEY_INVALID", "API key not valid", "Incorrect API key")


def _is_auth_failure(exc: Exception) -> bool:
    if isinstance(exc, openai.AuthenticationError):
        return True
    msg = str(exc)
    return any(m in msg for m in _INVALID_KEY_MARKERS)


def generate_gift_suggestions(form: FormData, client: Optional[Any] = None) -> SuggestionResponse:
    """
    Prompts the model for gift ideas about the given recipient.
    Raises ConfigurationError when no key is set (before any network call),
    UpstreamAuthError when the key is rejected and UpstreamRequestError otherwise.
    An empty SuggestionResponse is a normal result, not an error.
    """
    api_key = get_api_key()
    if not api_key:
        raise ConfigurationError()

    prompt = build_gift_prompt(form)
    log_event(
        "suggestions.requested",
        characteristics=sum(1 for c in form.recipient_characteristics if c.strip()),
        location=qhash(form.location),
        budget=[form.min_budget, form.max_budget],
    )

    try:
        text, sources = search_grounded_text(prompt, client=client, api_key=api_key)
    except Exception as e:
        log_event("suggestions.failed", error=type(e).__name__)
        if _is_auth_failure(e):
            raise UpstreamAuthError() from e
        raise UpstreamRequestError(f"Failed to get gift suggestions: {e}") from e

    suggestions = parse_suggestions(text, limit=MAX_SUGGESTIONS)
    log_event("suggestions.received", suggestions=len(suggestions), sources=len(sources))
    return SuggestionResponse(suggestions=suggestions, sources=sources)


def google_search_url(name: str) -> str:
    return f"https://www.google.com/search?q={quote_plus(name.strip())}"
