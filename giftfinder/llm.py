# giftfinder/llm.py

from typing import Any, List, Optional, Tuple

from openai import OpenAI

from .config import MODEL_TEMPERATURE, get_model
from .models import GroundingSource


def make_client(api_key: str) -> OpenAI:
    return OpenAI(api_key=api_key)


def _get(obj: Any, key: str, default: Any = None) -> Any:
    # SDK objects and plain dicts (as in recorded responses) both appear here
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def extract_sources(resp: Any) -> List[GroundingSource]:
    """Collects url_citation annotations from the output messages, deduplicated by uri."""
    sources: List[GroundingSource] = []
    seen = set()
    for item in _get(resp, "output", None) or []:
        if _get(item, "type") != "message":
            continue
        for part in _get(item, "content", None) or []:
            for ann in _get(part, "annotations", None) or []:
                if _get(ann, "type") != "url_citation":
                    continue
                uri = _get(ann, "url") or ""
                if not uri or uri in seen:
                    continue
                seen.add(uri)
                sources.append(GroundingSource(uri=uri, title=_get(ann, "title") or uri))
    return sources


def search_grounded_text(prompt: str, client: Optional[Any] = None, api_key: str = "") -> Tuple[str, List[GroundingSource]]:
    """One web-search-grounded call. Returns the output text and its citations."""
    client = client or make_client(api_key)
    resp = client.responses.create(
        model=get_model(),
        input=prompt,
        tools=[{"type": "web_search"}],
        temperature=MODEL_TEMPERATURE,
    )
    return (_get(resp, "output_text", "") or ""), extract_sources(resp)
