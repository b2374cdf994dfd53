import json

import httpx
import openai
import pytest

from giftfinder import recommender
from giftfinder.errors import ConfigurationError, UpstreamAuthError, UpstreamRequestError
from giftfinder.llm import extract_sources
from giftfinder.recommender import generate_gift_suggestions, google_search_url

from conftest import make_response


@pytest.fixture(autouse=True)
def api_key(monkeypatch):
    monkeypatch.setattr(recommender, "get_api_key", lambda: "sk-test")


def test_missing_key_raises_before_any_call(monkeypatch, valid_form, fake_client):
    monkeypatch.setattr(recommender, "get_api_key", lambda: "")
    client = fake_client(text="[]")
    with pytest.raises(ConfigurationError) as exc:
        generate_gift_suggestions(valid_form, client=client)
    assert "API key is not configured" in str(exc.value)
    assert client.responses.calls == []


def test_success_returns_suggestions_and_sources(valid_form, fake_client):
    ideas = [{"name": f"Idea {i}", "reason": "fits", "price": "£20"} for i in range(7)]
    client = fake_client(
        text="```json\n" + json.dumps(ideas) + "\n```",
        citations=[("https://shop.example/a", "Shop A"), ("https://shop.example/a", "dupe"),
                   ("https://blog.example/b", "")],
    )

    resp = generate_gift_suggestions(valid_form, client=client)

    assert [s.name for s in resp.suggestions] == [f"Idea {i}" for i in range(5)]
    assert [(s.uri, s.title) for s in resp.sources] == [
        ("https://shop.example/a", "Shop A"),
        ("https://blog.example/b", "https://blog.example/b"),
    ]
    call = client.responses.calls[0]
    assert call["tools"] == [{"type": "web_search"}]
    assert call["temperature"] == 0.7
    assert "Leeds, UK" in call["input"]


def test_empty_result_is_not_an_error(valid_form, fake_client):
    resp = generate_gift_suggestions(valid_form, client=fake_client(text="Nothing useful."))
    assert resp.is_empty


def test_auth_error_from_sdk(valid_form, fake_client):
    request = httpx.Request("POST", "https://api.openai.com/v1/responses")
    err = openai.AuthenticationError(
        "Incorrect API key provided", response=httpx.Response(401, request=request), body=None
    )
    with pytest.raises(UpstreamAuthError) as exc:
        generate_gift_suggestions(valid_form, client=fake_client(error=err))
    assert str(exc.value) == "The API key is invalid. Please check your configuration."


def test_auth_error_detected_from_message(valid_form, fake_client):
    with pytest.raises(UpstreamAuthError):
        generate_gift_suggestions(valid_form, client=fake_client(error=RuntimeError("API_KEY_INVALID")))


def test_other_errors_are_wrapped_with_message(valid_form, fake_client):
    with pytest.raises(UpstreamRequestError) as exc:
        generate_gift_suggestions(valid_form, client=fake_client(error=RuntimeError("connection reset")))
    assert str(exc.value) == "Failed to get gift suggestions: connection reset"


def test_extract_sources_accepts_dicts_and_skips_other_items():
    resp = {
        "output": [
            {"type": "web_search_call"},
            {"type": "message", "content": [
                {"type": "output_text", "annotations": [
                    {"type": "url_citation", "url": "https://a.example", "title": "A"},
                    {"type": "file_citation", "file_id": "f1"},
                ]},
            ]},
        ]
    }
    assert [(s.uri, s.title) for s in extract_sources(resp)] == [("https://a.example", "A")]
    assert extract_sources(make_response("text")) == []


def test_google_search_url():
    assert google_search_url(" Seed library ") == "https://www.google.com/search?q=Seed+library"


def test_deeply_nested_model_text_is_an_empty_result(valid_form, fake_client):
    resp = generate_gift_suggestions(valid_form, client=fake_client(text="[" * 100000))
    assert resp.is_empty
