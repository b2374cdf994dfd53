# giftfinder/session.py
#
# One GiftSession per browser session. All UI intents go through its methods;
# the Streamlit script only renders whatever view it reports.

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from .errors import FormValidationError, GiftFinderError, InvalidTransition
from .models import FormData, GiftSuggestion, GroundingSource, SuggestionResponse
from .slog import log_event
from .validation import validate_form

NO_RESULTS_MESSAGE = (
    "No gift ideas found this time. Try adjusting your search criteria or broadening your budget!"
)
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred. Please try again."


class View(str, Enum):
    FORM = "form"
    LOADING = "loading"
    SUGGESTIONS = "suggestions"
    FAVOURITES = "favourites"


class SuggestionQueue:
    """Unreviewed suggestions, reviewed head first. Ids are unique within a batch."""

    def __init__(self, suggestions: Iterable[GiftSuggestion] = ()):
        self._items: List[GiftSuggestion] = []
        self.load(suggestions)

    def load(self, suggestions: Iterable[GiftSuggestion]) -> None:
        seen = set()
        items = []
        for s in suggestions:
            if s.id in seen:
                continue
            seen.add(s.id)
            items.append(s)
        self._items = items

    def clear(self) -> None:
        self._items = []

    @property
    def head(self) -> Optional[GiftSuggestion]:
        return self._items[0] if self._items else None

    def take(self, suggestion_id: str) -> Optional[GiftSuggestion]:
        for i, s in enumerate(self._items):
            if s.id == suggestion_id:
                return self._items.pop(i)
        return None

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[GiftSuggestion]:
        return iter(list(self._items))


class FavouritesSet:
    """Favourited suggestions keyed by id, kept in the order they were added."""

    def __init__(self) -> None:
        self._items: Dict[str, GiftSuggestion] = {}

    def add(self, suggestion: GiftSuggestion) -> bool:
        if suggestion.id in self._items:
            return False
        self._items[suggestion.id] = suggestion
        return True

    def remove(self, suggestion_id: str) -> bool:
        return self._items.pop(suggestion_id, None) is not None

    def __contains__(self, suggestion_id: object) -> bool:
        return suggestion_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[GiftSuggestion]:
        return iter(list(self._items.values()))


@dataclass
class SwipeOutcome:
    removed: Optional[GiftSuggestion]
    auto_navigated: bool = False


@dataclass
class GiftSession:
    form: FormData = field(default_factory=FormData)
    queue: SuggestionQueue = field(default_factory=SuggestionQueue)
    favourites: FavouritesSet = field(default_factory=FavouritesSet)
    sources: List[GroundingSource] = field(default_factory=list)
    view: View = View.FORM
    is_loading: bool = False
    error: Optional[str] = None
    notice: Optional[str] = None
    generation: int = 0
    fetch_done: bool = False

    # --- request lifecycle -------------------------------------------------

    def submit(self, form: Optional[FormData] = None) -> int:
        """
        Starts a new search from the form view. Returns the request generation
        the caller must hand back to complete()/fail().
        """
        if self.view != View.FORM:
            raise InvalidTransition(f"cannot submit from {self.view.value}")
        form = form or self.form
        errors = validate_form(form)
        if errors:
            raise FormValidationError(errors)

        self.form = form
        self.view = View.LOADING
        self.is_loading = True
        self.error = None
        self.notice = None
        self.fetch_done = False
        self.queue.clear()
        self.sources = []
        self.generation += 1
        return self.generation

    def run_request(self, generation: int, fetch: Callable[[], SuggestionResponse]) -> bool:
        """Calls fetch and applies its outcome; every failure becomes one message."""
        try:
            response = fetch()
        except GiftFinderError as e:
            return self.fail(generation, str(e))
        except Exception as e:
            log_event("session.request_crashed", level=logging.ERROR, error=type(e).__name__)
            return self.fail(generation, UNKNOWN_ERROR_MESSAGE)
        return self.complete(generation, response)

    @property
    def awaiting_result(self) -> bool:
        return self.view == View.LOADING and self.is_loading

    def _is_current(self, generation: int) -> bool:
        if generation != self.generation or not self.awaiting_result:
            log_event("session.stale_result", level=logging.DEBUG,
                      generation=generation, current=self.generation)
            return False
        return True

    def complete(self, generation: int, response: SuggestionResponse) -> bool:
        if not self._is_current(generation):
            return False
        self.is_loading = False
        self.fetch_done = True
        if response.is_empty:
            # Stays on the loading view showing the notice; user cancels back
            self.notice = NO_RESULTS_MESSAGE
            return True
        self.queue.load(response.suggestions)
        self.sources = list(response.sources)
        self.view = View.SUGGESTIONS
        return True

    def fail(self, generation: int, message: str) -> bool:
        if not self._is_current(generation):
            return False
        self.is_loading = False
        self.fetch_done = True
        self.error = message or UNKNOWN_ERROR_MESSAGE
        return True

    # --- navigation ----------------------------------------------------------

    def back_to_form(self) -> None:
        """Cancel from loading, or back from favourites. Favourites are kept."""
        if self.awaiting_result:
            # The in-flight result will come back with an old generation
            self.generation += 1
        self.view = View.FORM
        self.error = None
        self.notice = None
        self.is_loading = False

    def cancel(self, generation: int) -> None:
        """
        Cancel pressed on the loading view of request `generation`. Streamlit
        only runs the click after the blocking call returns, so the result may
        already be on the suggestions view; it is thrown away unseen.
        """
        if generation == self.generation and self.view == View.SUGGESTIONS:
            self.queue.clear()
            self.sources = []
        self.back_to_form()

    def show_favourites(self) -> None:
        if self.awaiting_result:
            raise InvalidTransition("favourites are unavailable while loading")
        self.view = View.FAVOURITES

    # --- swipe resolution ------------------------------------------------------

    def current(self) -> Optional[GiftSuggestion]:
        return self.queue.head

    def _resolve(self, removed: Optional[GiftSuggestion], before: int) -> SwipeOutcome:
        auto = (
            removed is not None
            and self.view == View.SUGGESTIONS
            and before == 1
            and len(self.queue) == 0
        )
        if auto:
            self.view = View.FAVOURITES
        return SwipeOutcome(removed=removed, auto_navigated=auto)

    def dismiss(self, suggestion_id: str) -> SwipeOutcome:
        before = len(self.queue)
        return self._resolve(self.queue.take(suggestion_id), before)

    def favourite(self, suggestion_id: str) -> SwipeOutcome:
        before = len(self.queue)
        removed = self.queue.take(suggestion_id)
        if removed is not None:
            self.favourites.add(removed)
        return self._resolve(removed, before)

    def unfavourite(self, suggestion_id: str) -> bool:
        return self.favourites.remove(suggestion_id)
