"""
CV Site Backend — Resume Section Store
========================================

What:  Reducer-based state holder for the resume sections fetched by the
       site (summary, contacts, languages, hobbies, education, skills,
       projects). No HTTP or database access.
"""

from cvsite.store.actions import (
    FETCH_CV_STATE,
    SECTIONS,
    FetchAction,
    fetch_error,
    fetch_request,
    fetch_success,
)
from cvsite.store.resume import (
    ResumeSnapshot,
    ResumeStore,
    cv_bootstrap,
    initial_snapshot,
    is_fetched,
    load_bootstrap,
    log_notifier,
    reduce,
)

__all__ = [
    "FETCH_CV_STATE",
    "SECTIONS",
    "FetchAction",
    "ResumeSnapshot",
    "ResumeStore",
    "cv_bootstrap",
    "fetch_error",
    "fetch_request",
    "fetch_success",
    "initial_snapshot",
    "is_fetched",
    "load_bootstrap",
    "log_notifier",
    "reduce",
]
