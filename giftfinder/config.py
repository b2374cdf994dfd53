import os
from dotenv import load_dotenv

load_dotenv()

OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini").strip()
MODEL_TEMPERATURE = 0.7

INITIAL_CHARACTERISTICS_COUNT = 2
MAX_CHARACTERISTICS_COUNT = 5
SINGLE_CHARACTERISTIC_CHAR_LIMIT = 50

MIN_BUDGET_ABSOLUTE = 5
MAX_BUDGET_ABSOLUTE = 250  # shown as £250+
BUDGET_STEP = 5
CURRENCY_SYMBOL = "£"

MIN_BIRTH_YEAR = 1900

MAX_SUGGESTIONS = 5
SUGGESTION_MARKER = "###Suggestion"


def get_api_key() -> str:
    """Reads the API key at call time: env first, then Streamlit secrets."""
    key = os.getenv("OPENAI_API_KEY", "").strip()
    if key:
        return key

    try:
        import streamlit as st
        key = st.secrets.get("OPENAI_API_KEY") or ""
    except Exception:
        # No secrets.toml, or not running under Streamlit
        key = ""
    return key.strip() if isinstance(key, str) else ""


def get_model() -> str:
    return os.getenv("OPENAI_MODEL", OPENAI_MODEL).strip() or OPENAI_MODEL
