"""Tests for lifecycle configuration and the lifecycle gate."""

import pytest

from django.core.exceptions import ImproperlyConfigured, ValidationError

from assets.lifecycles import (
    NONE,
    IllegalTransition,
    InvalidStatus,
    Lifecycle,
    LifecycleGate,
    StatusRejected,
    get_gate,
    load_lifecycles,
)

BASIC = {
    "initial": ["new"],
    "active": ["open"],
    "inactive": ["deleted"],
    "defaults": {"on_create": "new"},
    "transitions": {
        "": ["new", "open"],
        "new": ["open", "deleted"],
        "open": ["deleted"],
    },
    "reopen": ["open"],
}

RECYCLING = {
    "initial": ["new"],
    "inactive": ["stolen", "recycled"],
    "transitions": {
        "": ["new"],
        "new": ["stolen", "recycled"],
    },
}


@pytest.fixture
def basic():
    return Lifecycle.from_config("basic", BASIC)


@pytest.fixture
def gate():
    return LifecycleGate(
        load_lifecycles({"basic": BASIC, "recycling": RECYCLING})
    )


class FakeRecord:
    def __init__(self, status, lifecycle="basic"):
        self.status = status
        self.lifecycle = lifecycle


class TestLifecycle:
    def test_statuses_in_declared_order(self, basic):
        assert basic.statuses == ("new", "open", "deleted")

    def test_is_valid(self, basic):
        assert basic.is_valid("open")
        assert not basic.is_valid("archived")

    def test_is_valid_is_case_sensitive(self, basic):
        assert not basic.is_valid("Open")
        assert not basic.is_valid(" open")

    def test_empty_string_is_not_a_status(self, basic):
        assert not basic.is_valid("")

    def test_creation_transitions_use_none_sentinel(self, basic):
        assert basic.is_transition(NONE, "new")
        assert not basic.is_transition("", "new")

    def test_transitions_from_follow_status_order(self, basic):
        assert basic.transitions_from("new") == ("open", "deleted")
        assert basic.transitions_from("deleted") == ()

    def test_is_inactive(self, basic):
        assert basic.is_inactive("deleted")
        assert not basic.is_inactive("open")

    def test_is_reopening(self, basic):
        assert basic.is_reopening("deleted", "open")
        assert not basic.is_reopening("new", "open")

    def test_default_falls_back_to_first_status(self):
        config = {
            "initial": ["draft"],
            "inactive": ["gone"],
            "transitions": {"": ["draft"]},
        }
        assert Lifecycle.from_config("x", config).default_on_create == "draft"

    def test_is_immutable(self, basic):
        with pytest.raises(AttributeError):
            basic.default_on_create = "open"
        with pytest.raises(TypeError):
            basic.transitions["new"] = frozenset({"new"})


class TestLifecycleConfigErrors:
    def test_no_statuses(self):
        with pytest.raises(ImproperlyConfigured, match="no statuses"):
            Lifecycle.from_config("empty", {})

    def test_duplicate_status(self):
        config = {"initial": ["new"], "active": ["new"]}
        with pytest.raises(ImproperlyConfigured, match="more than once"):
            Lifecycle.from_config("dup", config)

    def test_unknown_transition_target(self):
        config = {
            "initial": ["new"],
            "transitions": {"": ["new"], "new": ["gone"]},
        }
        with pytest.raises(
            ImproperlyConfigured, match="unknown status 'gone'"
        ):
            Lifecycle.from_config("bad", config)

    def test_default_not_reachable_from_none(self):
        config = {
            "initial": ["new"],
            "active": ["open"],
            "defaults": {"on_create": "new"},
            "transitions": {"": ["open"]},
        }
        with pytest.raises(ImproperlyConfigured, match="default status"):
            Lifecycle.from_config("bad", config)

    def test_map_to_unknown_lifecycle(self):
        config = dict(BASIC, maps={"nowhere": {"new": "new"}})
        with pytest.raises(ImproperlyConfigured, match="unknown lifecycle"):
            load_lifecycles({"basic": config})

    def test_map_to_invalid_status(self):
        config = dict(BASIC, maps={"recycling": {"open": "open"}})
        with pytest.raises(ImproperlyConfigured, match="does not define"):
            load_lifecycles({"basic": config, "recycling": RECYCLING})


class TestLifecycleGate:
    def test_is_valid_status(self, gate):
        assert gate.is_valid_status("basic", "open") is True
        assert gate.is_valid_status("basic", "archived") is False

    def test_accepts_lifecycle_objects(self, gate, basic):
        assert gate.is_valid_status(basic, "open")

    def test_unknown_lifecycle(self, gate):
        with pytest.raises(LookupError):
            gate.is_valid_status("nope", "open")

    def test_default_is_reachable_from_none(self, gate):
        for name in gate.names:
            default = gate.default_status_on_create(name)
            assert gate.is_valid_transition(name, NONE, default)

    def test_check_create_uses_default(self, gate):
        assert gate.check_create("basic") == "new"
        assert gate.check_create("basic", "") == "new"

    def test_check_create_keeps_explicit_status(self, gate):
        assert gate.check_create("basic", "open") == "open"

    def test_check_create_invalid_status(self, gate):
        with pytest.raises(InvalidStatus) as exc:
            gate.check_create("basic", "archived")
        assert exc.value.messages == [
            "Status 'archived' isn't a valid status for assets."
        ]

    def test_check_create_unreachable_status(self, gate):
        with pytest.raises(IllegalTransition) as exc:
            gate.check_create("basic", "deleted")
        assert exc.value.messages == [
            "New assets cannot have status 'deleted'."
        ]

    def test_errors_are_validation_errors(self, gate):
        with pytest.raises(ValidationError):
            gate.check_create("basic", "Open")

    def test_check_update(self, gate):
        assert gate.check_update(FakeRecord("new"), "open") == "open"

    def test_check_update_invalid_status(self, gate):
        with pytest.raises(InvalidStatus):
            gate.check_update(FakeRecord("new"), "archived")

    def test_check_update_missing_edge(self, gate):
        with pytest.raises(IllegalTransition) as exc:
            gate.check_update(FakeRecord("deleted"), "open")
        assert exc.value.from_status == "deleted"
        assert "You can't change status from 'deleted' to 'open'." in (
            exc.value.messages
        )

    def test_recycling_scenario(self, gate):
        status = gate.check_create("recycling")
        assert status == "new"
        with pytest.raises(InvalidStatus):
            gate.check_update(FakeRecord(status, "recycling"), "missing")
        with pytest.raises(StatusRejected):
            gate.check_update(FakeRecord(status, "recycling"), "missing")
        assert gate.is_valid_transition("recycling", "new", "recycled")


class TestGetGate:
    def test_uses_settings(self, settings):
        assert "assets" in get_gate().names
        assert get_gate().default_status_on_create("assets") == "new"

    def test_rebuilt_when_settings_change(self, settings):
        settings.ASSET_LIFECYCLES = {"recycling": RECYCLING}
        assert get_gate().names == ("recycling",)
