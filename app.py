# app.py
# Esme gift finder: profile form -> loading -> one card at a time -> favourites.
# All state lives in a single GiftSession in st.session_state; callbacks only
# call its transition methods and this script renders whichever view it reports.

import datetime
from typing import Dict

import streamlit as st

from giftfinder.config import (
    BUDGET_STEP,
    CURRENCY_SYMBOL,
    INITIAL_CHARACTERISTICS_COUNT,
    MAX_BUDGET_ABSOLUTE,
    MAX_CHARACTERISTICS_COUNT,
    MIN_BUDGET_ABSOLUTE,
    SINGLE_CHARACTERISTIC_CHAR_LIMIT,
)
from giftfinder.models import FormData, Gender
from giftfinder.recommender import generate_gift_suggestions, google_search_url
from giftfinder.session import GiftSession, View
from giftfinder.validation import (
    add_characteristic,
    budget_label,
    remove_characteristic,
    shift_characteristic_errors,
    validate_form,
    with_budget,
)


st.set_page_config(page_title="Esme - Gift Finder", page_icon="🎁", layout="centered")

PLACEHOLDERS = [
    "e.g., Loves gardening (required)",
    "e.g., Big sci-fi fan (optional)",
    "e.g., Collects vintage maps (optional)",
    "e.g., Learning to play guitar (optional)",
    "e.g., Passionate about cooking (optional)",
]


def _session() -> GiftSession:
    if "gift_session" not in st.session_state:
        st.session_state["gift_session"] = GiftSession()
    if "form_errors" not in st.session_state:
        st.session_state["form_errors"] = {}
    return st.session_state["gift_session"]


def _char_key(i: int) -> str:
    return f"characteristic_{i}"


def _write_widgets(form: FormData, overwrite: bool = False) -> None:
    # Streamlit drops widget keys for widgets not rendered on a run, so the
    # form is re-seeded from the session whenever it comes back into view.
    values = {
        "gender": form.gender.value,
        "year_of_birth": form.year_of_birth,
        "location": form.location,
        "occasion": form.occasion,
        "budget": (form.min_budget, form.max_budget),
    }
    for i, c in enumerate(form.recipient_characteristics):
        values[_char_key(i)] = c
    for k, v in values.items():
        if overwrite or k not in st.session_state:
            st.session_state[k] = v
    for i in range(len(form.recipient_characteristics), MAX_CHARACTERISTICS_COUNT):
        st.session_state.pop(_char_key(i), None)


def _read_widgets(session: GiftSession) -> FormData:
    n = len(session.form.recipient_characteristics)
    lo, hi = st.session_state.get("budget", (session.form.min_budget, session.form.max_budget))
    return FormData(
        recipient_characteristics=[st.session_state.get(_char_key(i), "") or "" for i in range(n)],
        gender=Gender(st.session_state.get("gender", Gender.PREFER_NOT_TO_SAY.value)),
        year_of_birth=st.session_state.get("year_of_birth", "") or "",
        location=st.session_state.get("location", "") or "",
        min_budget=int(lo),
        max_budget=int(hi),
        occasion=st.session_state.get("occasion", "") or "",
    )


# --- callbacks ---------------------------------------------------------------

def _on_add_characteristic() -> None:
    session = _session()
    session.form = add_characteristic(_read_widgets(session))
    _write_widgets(session.form, overwrite=True)


def _on_remove_characteristic(index: int) -> None:
    session = _session()
    session.form = remove_characteristic(_read_widgets(session), index)
    _write_widgets(session.form, overwrite=True)
    st.session_state["form_errors"] = shift_characteristic_errors(st.session_state["form_errors"], index)


def _on_budget_change() -> None:
    session = _session()
    lo, hi = st.session_state["budget"]
    session.form = with_budget(session.form, lo, hi)
    st.session_state["budget"] = (session.form.min_budget, session.form.max_budget)
    st.session_state["form_errors"].pop("budget", None)


def _on_submit() -> None:
    session = _session()
    form = _read_widgets(session)
    session.form = form
    errors = validate_form(form)
    st.session_state["form_errors"] = errors
    if not errors and session.view == View.FORM:
        session.submit(form)


def _on_back_to_form() -> None:
    _session().back_to_form()


def _on_cancel(generation: int) -> None:
    _session().cancel(generation)


def _on_show_favourites() -> None:
    _session().show_favourites()


def _on_dismiss(suggestion_id: str) -> None:
    _session().dismiss(suggestion_id)


def _on_favourite(suggestion_id: str) -> None:
    _session().favourite(suggestion_id)


def _on_unfavourite(suggestion_id: str) -> None:
    _session().unfavourite(suggestion_id)


# --- views -------------------------------------------------------------------

def _field_error(errors: Dict[str, str], key: str) -> None:
    if errors.get(key):
        st.caption(f":red[{errors[key]}]")


def _render_form(session: GiftSession) -> None:
    _write_widgets(session.form)
    errors = st.session_state["form_errors"]
    current_year = datetime.date.today().year

    st.subheader("Tell me about them")
    n = len(session.form.recipient_characteristics)
    for i in range(n):
        if i >= INITIAL_CHARACTERISTICS_COUNT:
            c1, c2 = st.columns([5, 1])
        else:
            c1, c2 = st.container(), None
        with c1:
            st.text_input(
                f"Detail {i + 1}",
                key=_char_key(i),
                max_chars=SINGLE_CHARACTERISTIC_CHAR_LIMIT,
                placeholder=PLACEHOLDERS[i] if i < len(PLACEHOLDERS) else "Another detail about them (optional)",
                label_visibility="collapsed",
            )
            _field_error(errors, f"characteristic{i}")
        if c2 is not None:
            with c2:
                st.button("Remove", key=f"remove_{i}", on_click=_on_remove_characteristic, args=(i,))

    if n < MAX_CHARACTERISTICS_COUNT:
        st.button("+ Add another detail", on_click=_on_add_characteristic)

    col_a, col_b = st.columns(2)
    with col_a:
        st.selectbox("Gender", [g.value for g in Gender], key="gender")
    with col_b:
        st.text_input("Year of birth (optional)", key="year_of_birth", placeholder=f"e.g., {current_year - 30}")
        _field_error(errors, "year_of_birth")

    st.slider(
        f"Budget range ({CURRENCY_SYMBOL})",
        min_value=MIN_BUDGET_ABSOLUTE,
        max_value=MAX_BUDGET_ABSOLUTE,
        step=BUDGET_STEP,
        key="budget",
        on_change=_on_budget_change,
    )
    lo, hi = st.session_state["budget"]
    st.caption(budget_label(lo, hi))
    _field_error(errors, "budget")

    st.text_input("Location (required)", key="location", placeholder="e.g., City, State or Country")
    _field_error(errors, "location")
    st.text_input("Occasion (optional)", key="occasion", placeholder="e.g., Birthday, Anniversary, Thank You")

    st.button("Find gift ideas", type="primary", use_container_width=True, on_click=_on_submit)

    if not session.fetch_done and not errors:
        st.info("Fill out the form above and let Esme find the perfect gift!")


def _run_pending_request(session: GiftSession) -> None:
    gen = session.generation
    if st.session_state.get("requested_generation") == gen:
        return
    st.session_state["requested_generation"] = gen

    with st.status("Esme is finding gift ideas...", expanded=False):
        session.run_request(gen, lambda: generate_gift_suggestions(session.form))
    st.rerun()


def _render_loading(session: GiftSession) -> None:
    if session.awaiting_result:
        st.markdown(
            "Esme is searching for ideas. When they arrive, press **Favourite** to keep one "
            "or **Dismiss** to skip it."
        )
    if session.error:
        st.error(session.error)
    elif session.notice:
        st.info(session.notice)

    label = "Back to Form" if (session.error or session.notice) else "Cancel"
    st.button(label, on_click=_on_cancel, args=(session.generation,))

    if session.awaiting_result:
        _run_pending_request(session)


def _render_suggestions(session: GiftSession) -> None:
    head = session.current()
    if head is None:
        st.subheader("All suggestions viewed!")
        st.write("You've viewed all suggestions! Check your Favourites.")
    else:
        st.subheader("Here's a thoughtful idea:")
        with st.container(border=True):
            st.markdown(f"### {head.name}")
            st.write(head.reason)
            if head.price:
                st.write(f"**Price:** {head.price}")
            st.caption(f"{len(session.queue)} idea(s) left")
        c1, c2 = st.columns(2)
        with c1:
            st.button("✕ Dismiss", key=f"dismiss_{head.id}", use_container_width=True,
                      on_click=_on_dismiss, args=(head.id,))
        with c2:
            st.button("♥ Favourite", key=f"favourite_{head.id}", use_container_width=True,
                      on_click=_on_favourite, args=(head.id,))

    if session.sources:
        with st.expander("Sources", expanded=head is None):
            for s in session.sources:
                st.markdown(f"- [{s.title}]({s.uri})")


def _render_favourites(session: GiftSession) -> None:
    st.button("← Back to Gift Finder", on_click=_on_back_to_form)
    st.subheader(f"Your favourites ({len(session.favourites)})")

    if not len(session.favourites):
        st.info("You haven't favourited any gifts yet. Favourite gift ideas to save them here!")
        return

    for s in session.favourites:
        with st.container(border=True):
            st.markdown(f"**{s.name}**")
            st.write(s.reason)
            if s.price:
                st.write(f"**Price:** {s.price}")
            c1, c2 = st.columns(2)
            with c1:
                st.button("Remove", key=f"unfavourite_{s.id}", use_container_width=True,
                          on_click=_on_unfavourite, args=(s.id,))
            with c2:
                st.link_button("Find gift", google_search_url(s.name), use_container_width=True)


session = _session()

st.title("🎁 Esme")
st.caption("Personalised gift ideas, one card at a time.")

if session.view != View.FAVOURITES:
    st.button(
        f"☆ Favourites ({len(session.favourites)})",
        on_click=_on_show_favourites,
        disabled=session.awaiting_result,
    )

if session.view == View.FORM:
    _render_form(session)
elif session.view == View.LOADING:
    _render_loading(session)
elif session.view == View.SUGGESTIONS:
    _render_suggestions(session)
else:
    _render_favourites(session)
