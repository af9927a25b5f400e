"""
CV Site Backend — Resume Fetch Actions
========================================

What:  The three action types of one section-fetch lifecycle and their
       creators.
How:   Flux-standard shape: `type`, `payload`, `meta`, `error`. The section
       being fetched travels in `meta["section"]`.

Lifecycle:
    fetch_request("skills")            → FETCH_CV_STATE.REQUEST
    fetch_success("skills", [...])     → FETCH_CV_STATE.SUCCESS
    fetch_error("skills", "timeout")   → FETCH_CV_STATE.ERROR
"""

from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any, Dict

from cvsite.exceptions import ValidationError

SECTIONS = ("summary", "contacts", "languages", "hobbies", "education", "skills", "projects")

FETCH_CV_STATE = SimpleNamespace(
    REQUEST="FETCH_CV_STATE_REQUEST",
    SUCCESS="FETCH_CV_STATE_SUCCESS",
    ERROR="FETCH_CV_STATE_ERROR",
)


@dataclass(frozen=True)
class FetchAction:
    type: str
    payload: Any = None
    meta: Dict[str, Any] = field(default_factory=dict)
    error: bool = False

    @property
    def section(self) -> Any:
        return self.meta.get("section")


def _check_section(section: str) -> str:
    if section not in SECTIONS:
        raise ValidationError(
            message=f"Unknown resume section '{section}'",
            field="section",
            context={"sections": list(SECTIONS)},
        )
    return section


def fetch_request(section: str) -> FetchAction:
    return FetchAction(type=FETCH_CV_STATE.REQUEST, meta={"section": _check_section(section)})


def fetch_success(section: str, payload: Any) -> FetchAction:
    return FetchAction(
        type=FETCH_CV_STATE.SUCCESS,
        payload=payload,
        meta={"section": _check_section(section)},
    )


def fetch_error(section: str, error: Any) -> FetchAction:
    return FetchAction(
        type=FETCH_CV_STATE.ERROR,
        payload=error,
        meta={"section": _check_section(section)},
        error=True,
    )
