"""Shared pytest fixtures for giftfinder tests."""

from types import SimpleNamespace

import pytest

from giftfinder.models import FormData, GiftSuggestion


class FakeResponses:
    """Stands in for client.responses; records each create() call."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def make_response(text, citations=()):
    annotations = [
        SimpleNamespace(type="url_citation", url=url, title=title)
        for url, title in citations
    ]
    message = SimpleNamespace(
        type="message",
        content=[SimpleNamespace(type="output_text", text=text, annotations=annotations)],
    )
    search_call = SimpleNamespace(type="web_search_call", status="completed")
    return SimpleNamespace(output_text=text, output=[search_call, message])


@pytest.fixture
def fake_client():
    def _make(text="", citations=(), error=None):
        return SimpleNamespace(responses=FakeResponses(make_response(text, citations), error))
    return _make


@pytest.fixture
def valid_form():
    return FormData(
        recipient_characteristics=["Loves gardening", "Big sci-fi fan"],
        year_of_birth="1990",
        location="Leeds, UK",
        min_budget=20,
        max_budget=60,
        occasion="Birthday",
    )


@pytest.fixture
def make_suggestions():
    def _make(n):
        return [GiftSuggestion(name=f"Gift {i}", reason=f"Reason {i}") for i in range(n)]
    return _make
