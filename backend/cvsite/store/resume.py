"""
CV Site Backend — Resume Section Store
========================================

What:  Holds the seven resume sections and applies fetch lifecycle actions
       to them.
How:   A pure reducer over immutable ResumeSnapshot objects. The store is
       seeded once from bootstrap data (the `cv` object of INITIAL_STATE)
       deep-merged over an empty skeleton; afterwards each successful fetch
       replaces exactly one section.
Who:   ResumeStore is the owning runtime; it serializes dispatches and
       passes its notification sink into the reducer explicitly.

Transitions:
    REQUEST  → shallow copy, no field changes
    SUCCESS  → section named by action.meta["section"] replaced by payload
    ERROR    → notify(action.payload), state returned unchanged
"""

import copy
import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Callable, Dict, Iterator, Optional

from cvsite.config import settings
from cvsite.store.actions import FETCH_CV_STATE, SECTIONS, FetchAction

logger = logging.getLogger(__name__)

Notifier = Callable[[Any], None]


def empty_sections() -> Dict[str, Any]:
    return {
        "summary": "",
        "contacts": [],
        "languages": [],
        "hobbies": [],
        "education": [],
        "skills": [],
        "projects": [],
    }


class ResumeSnapshot(Mapping):
    """
    Immutable section → value mapping.

    Supports the read-only Mapping protocol; changes go through replace(),
    which returns a new snapshot and leaves this one untouched.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Optional[Mapping] = None):
        self._data = dict(data or {})

    def __getitem__(self, section: str) -> Any:
        return self._data[section]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ResumeSnapshot({self._data!r})"

    def replace(self, section: str, value: Any) -> "ResumeSnapshot":
        data = dict(self._data)
        data[section] = value
        return ResumeSnapshot(data)

    def copy(self) -> "ResumeSnapshot":
        return ResumeSnapshot(self._data)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)


# ══════════════════════════════════════════════════════════════════════════
# Bootstrap
# ══════════════════════════════════════════════════════════════════════════


def defaults_deep(data: Mapping, defaults: Mapping) -> Dict[str, Any]:
    """
    Fills keys missing from `data` with (copies of) `defaults`.

    Values present in `data` win; nested mappings are merged recursively.
    A `None` value counts as missing.
    """
    merged = dict(data)
    for key, default in defaults.items():
        current = merged.get(key)
        if current is None:
            merged[key] = copy.deepcopy(default)
        elif isinstance(current, Mapping) and isinstance(default, Mapping):
            merged[key] = defaults_deep(current, default)
    return merged


def cv_bootstrap(state: Any) -> Dict[str, Any]:
    """Returns the `cv` object of a decoded initial state, or an empty dict."""
    cv = state.get("cv") if isinstance(state, Mapping) else None
    return dict(cv) if isinstance(cv, Mapping) else {}


def load_bootstrap(raw: Optional[str]) -> Dict[str, Any]:
    """Extracts the `cv` object from a serialized INITIAL_STATE blob."""
    if not raw:
        return {}
    return cv_bootstrap(json.loads(raw))


def initial_snapshot(bootstrap: Optional[Mapping] = None) -> ResumeSnapshot:
    merged = defaults_deep(bootstrap or {}, empty_sections())
    unknown = sorted(set(merged) - set(SECTIONS))
    if unknown:
        logger.warning("Ignoring unknown resume sections in bootstrap data: %s", unknown)
    return ResumeSnapshot({section: merged[section] for section in SECTIONS})


# ══════════════════════════════════════════════════════════════════════════
# Reducer
# ══════════════════════════════════════════════════════════════════════════


def _fetch_request(state: ResumeSnapshot, action: FetchAction, notify: Notifier) -> ResumeSnapshot:
    return state.copy()


def _fetch_success(state: ResumeSnapshot, action: FetchAction, notify: Notifier) -> ResumeSnapshot:
    section = action.section
    if section not in SECTIONS:
        logger.warning("Dropping fetch result for unknown resume section %r", section)
        return state
    return state.replace(section, action.payload)


def _fetch_error(state: ResumeSnapshot, action: FetchAction, notify: Notifier) -> ResumeSnapshot:
    notify(action.payload)
    return state


_TRANSITIONS = {
    FETCH_CV_STATE.REQUEST: _fetch_request,
    FETCH_CV_STATE.SUCCESS: _fetch_success,
    FETCH_CV_STATE.ERROR: _fetch_error,
}


def reduce(state: ResumeSnapshot, action: FetchAction, notify: Notifier) -> ResumeSnapshot:
    """Applies one action; unrelated action types return `state` itself."""
    transition = _TRANSITIONS.get(action.type)
    if transition is None:
        return state
    return transition(state, action, notify)


def is_fetched(snapshot: Optional[Mapping], section: str) -> bool:
    """
    Whether `section` currently holds content.

    Strings and sequences need a non-zero length, mappings at least one key.
    A missing store (None) counts as fetched.
    """
    if snapshot is None:
        return True
    value = snapshot.get(section)
    if isinstance(value, (str, Sequence, Mapping)):
        return len(value) > 0
    return False


def log_notifier(error: Any) -> None:
    """Notification sink that writes fetch failures to the application log."""
    logger.error("Resume section fetch failed: %s", error)


class ResumeStore:
    """
    Owns the current snapshot and serializes dispatches.

    Args:
        notify:    Sink for fetch errors (e.g. a UI toast bridge or log_notifier)
        bootstrap: `cv` data to seed from; defaults to settings.initial_state_data["cv"]
    """

    def __init__(self, notify: Notifier, bootstrap: Optional[Mapping] = None):
        if bootstrap is None:
            bootstrap = cv_bootstrap(settings.initial_state_data)
        self.notify = notify
        self._state = initial_snapshot(bootstrap)

    @property
    def state(self) -> ResumeSnapshot:
        return self._state

    def dispatch(self, action: FetchAction) -> ResumeSnapshot:
        self._state = reduce(self._state, action, self.notify)
        return self._state

    def is_fetched(self, section: str) -> bool:
        return is_fetched(self._state, section)
