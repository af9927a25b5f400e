"""
CV Site Backend — Resume Store Tests
======================================

What:  Tests for the resume section reducer, its action creators, the
       bootstrap merge and is_fetched.
How:   Pure functions; the notification sink is a MagicMock.
"""

import json
from unittest.mock import MagicMock

import pytest

from cvsite.config import settings
from cvsite.exceptions import ValidationError
from cvsite.store import (
    FETCH_CV_STATE,
    SECTIONS,
    FetchAction,
    ResumeSnapshot,
    ResumeStore,
    cv_bootstrap,
    fetch_error,
    fetch_request,
    fetch_success,
    initial_snapshot,
    is_fetched,
    load_bootstrap,
    reduce,
)
from cvsite.store.resume import defaults_deep


class TestActionCreators:

    def test_lifecycle_types(self):
        assert fetch_request("skills").type == FETCH_CV_STATE.REQUEST
        assert fetch_success("skills", []).type == FETCH_CV_STATE.SUCCESS
        error = fetch_error("skills", "timeout")
        assert error.type == FETCH_CV_STATE.ERROR
        assert error.error is True
        assert error.payload == "timeout"

    def test_section_travels_in_meta(self):
        assert fetch_success("hobbies", ["chess"]).meta == {"section": "hobbies"}

    def test_unknown_section_rejected(self):
        with pytest.raises(ValidationError):
            fetch_success("publications", [])


class TestReducer:

    def setup_method(self):
        self.notify = MagicMock()
        self.state = initial_snapshot({})

    def test_empty_skeleton(self):
        assert set(self.state) == set(SECTIONS)
        assert self.state["summary"] == ""
        assert self.state["skills"] == []

    def test_success_replaces_one_section(self):
        skills = [{"id": 1, "name": "Python"}]

        new_state = reduce(self.state, fetch_success("skills", skills), self.notify)

        assert new_state["skills"] == skills
        for section in SECTIONS:
            if section != "skills":
                assert new_state[section] == self.state[section]
        assert self.state["skills"] == []
        self.notify.assert_not_called()

    def test_request_returns_equal_copy(self):
        new_state = reduce(self.state, fetch_request("summary"), self.notify)
        assert new_state == self.state
        assert new_state is not self.state

    def test_error_notifies_and_keeps_state(self):
        new_state = reduce(self.state, fetch_error("projects", "boom"), self.notify)
        assert new_state is self.state
        self.notify.assert_called_once_with("boom")

    def test_unrelated_action_ignored(self):
        new_state = reduce(self.state, FetchAction(type="SOMETHING_ELSE"), self.notify)
        assert new_state is self.state

    def test_success_for_unknown_section_dropped(self):
        rogue = FetchAction(type=FETCH_CV_STATE.SUCCESS, payload=[1], meta={"section": "nope"})
        assert reduce(self.state, rogue, self.notify) is self.state

    def test_snapshot_is_read_only(self):
        with pytest.raises(TypeError):
            self.state["summary"] = "x"


class TestBootstrap:

    def test_defaults_deep_fills_missing_and_null(self):
        merged = defaults_deep(
            {"a": None, "b": {"x": 1}},
            {"a": [], "b": {"x": 0, "y": 2}, "c": ""},
        )
        assert merged == {"a": [], "b": {"x": 1, "y": 2}, "c": ""}

    def test_defaults_are_copied(self):
        defaults = {"list": []}
        merged = defaults_deep({}, defaults)
        merged["list"].append(1)
        assert defaults == {"list": []}

    def test_bootstrap_values_win(self):
        state = initial_snapshot({"summary": "Hi", "hobbies": ["chess"], "skills": None})
        assert state["summary"] == "Hi"
        assert state["hobbies"] == ["chess"]
        assert state["skills"] == []

    def test_unknown_bootstrap_sections_dropped(self):
        state = initial_snapshot({"publications": ["paper"]})
        assert "publications" not in state

    def test_load_bootstrap_extracts_cv(self):
        raw = json.dumps({"cv": {"summary": "Hi"}, "router": {}})
        assert load_bootstrap(raw) == {"summary": "Hi"}
        assert load_bootstrap("") == {}
        assert load_bootstrap(json.dumps({"other": 1})) == {}


class TestIsFetched:

    @pytest.mark.parametrize("value,expected", [
        ("", False),
        ("Backend engineer", True),
        ([], False),
        ([{"id": 1}], True),
        ({}, False),
        ({"email": "a@b.c"}, True),
        (None, False),
        (42, False),
    ])
    def test_content_rules(self, value, expected):
        snapshot = ResumeSnapshot({"summary": value})
        assert is_fetched(snapshot, "summary") is expected

    def test_missing_store_counts_as_fetched(self):
        assert is_fetched(None, "skills") is True


class TestResumeStore:

    def test_seeded_from_settings(self):
        store = ResumeStore(notify=MagicMock())
        assert store.state["summary"] == "Backend engineer"
        assert store.state["education"] == [{"school": "MIT"}]
        assert store.state["skills"] == []
        assert store.is_fetched("summary")
        assert not store.is_fetched("skills")

    def test_follows_current_initial_state(self, monkeypatch):
        monkeypatch.setattr(
            settings, "initial_state", json.dumps({"cv": {"hobbies": ["chess"]}})
        )

        store = ResumeStore(notify=MagicMock())

        assert store.state["hobbies"] == ["chess"]
        assert store.state["summary"] == ""

    def test_non_object_cv_ignored(self):
        assert cv_bootstrap({"cv": ["not", "a", "mapping"]}) == {}
        assert cv_bootstrap({}) == {}

    def test_dispatch_lifecycle(self):
        notify = MagicMock()
        store = ResumeStore(notify=notify, bootstrap={})

        store.dispatch(fetch_request("languages"))
        assert not store.is_fetched("languages")

        store.dispatch(fetch_success("languages", [{"name": "English"}]))
        assert store.is_fetched("languages")

        before = store.state
        store.dispatch(fetch_error("languages", "network down"))
        assert store.state is before
        notify.assert_called_once_with("network down")
