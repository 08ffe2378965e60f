"""Asset lifecycles and the gate that enforces them.

A lifecycle is a named set of legal statuses plus a directed transition
table. Lifecycles are declared in ``settings.ASSET_LIFECYCLES`` and parsed
once into frozen :class:`Lifecycle` objects; :class:`LifecycleGate` answers
whether a record may enter or move to a given status.
"""

import enum
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping, Protocol

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured, ValidationError
from django.core.signals import setting_changed
from django.dispatch import receiver


class Origin(enum.Enum):
    """Where a transition starts when the record has no status yet."""

    NONE = "none"


# Origin of the creation transition. Kept distinct from "" so that an
# empty string can never be mistaken for "not yet created".
NONE = Origin.NONE

# Key used in settings to declare the creation transitions.
CREATE_KEY = ""


class StatusRejected(ValidationError):
    """Base class for lifecycle gate rejections."""


class InvalidStatus(StatusRejected):
    """The status is not a member of the lifecycle's status set."""

    def __init__(self, status):
        self.status = status
        super().__init__(
            f"Status '{status}' isn't a valid status for assets.",
            code="invalid_status",
        )


class IllegalTransition(StatusRejected):
    """The status is legal but not reachable from the current status."""

    def __init__(self, from_status, to_status):
        self.from_status = from_status
        self.to_status = to_status
        if from_status is NONE:
            message = f"New assets cannot have status '{to_status}'."
        else:
            message = (
                f"You can't change status from '{from_status}' "
                f"to '{to_status}'."
            )
        super().__init__(message, code="illegal_transition")


class StatusOwner(Protocol):
    """A record whose status is governed by a lifecycle."""

    status: str

    @property
    def lifecycle(self) -> str: ...


@dataclass(frozen=True)
class Lifecycle:
    name: str
    initial: tuple[str, ...]
    active: tuple[str, ...]
    inactive: tuple[str, ...]
    default_on_create: str
    transitions: Mapping[Origin | str, frozenset[str]]
    reopen: frozenset[str] = frozenset()
    maps: Mapping[str, Mapping[str, str]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def statuses(self) -> tuple[str, ...]:
        return self.initial + self.active + self.inactive

    def is_valid(self, status) -> bool:
        return isinstance(status, str) and status in self.statuses

    def is_transition(self, from_status, to_status) -> bool:
        return to_status in self.transitions.get(from_status, frozenset())

    def transitions_from(self, from_status) -> tuple[str, ...]:
        """Return reachable statuses in lifecycle order."""
        allowed = self.transitions.get(from_status, frozenset())
        return tuple(s for s in self.statuses if s in allowed)

    def is_inactive(self, status) -> bool:
        return status in self.inactive

    def is_reopening(self, from_status, to_status) -> bool:
        return self.is_inactive(from_status) and to_status in self.reopen

    def map_status(self, lifecycle_name, status):
        """Map ``status`` into another lifecycle, or None if unmapped."""
        return self.maps.get(lifecycle_name, {}).get(status)

    @classmethod
    def from_config(cls, name: str, config: Mapping) -> "Lifecycle":
        """Build a lifecycle from its settings entry.

        Raises ImproperlyConfigured if the definition is malformed.
        """
        initial = tuple(config.get("initial", ()))
        active = tuple(config.get("active", ()))
        inactive = tuple(config.get("inactive", ()))
        statuses = initial + active + inactive

        if not statuses:
            raise ImproperlyConfigured(
                f"Lifecycle '{name}' defines no statuses."
            )
        for status in statuses:
            if not isinstance(status, str) or not status:
                raise ImproperlyConfigured(
                    f"Lifecycle '{name}' has an empty or non-string status."
                )
        if len(set(statuses)) != len(statuses):
            raise ImproperlyConfigured(
                f"Lifecycle '{name}' lists a status more than once."
            )

        def check(status, where):
            if status not in statuses:
                raise ImproperlyConfigured(
                    f"Lifecycle '{name}' references unknown status "
                    f"'{status}' in {where}."
                )

        transitions = {}
        for source, targets in config.get("transitions", {}).items():
            key = NONE if source == CREATE_KEY else source
            if key is not NONE:
                check(source, "transitions")
            for target in targets:
                check(target, "transitions")
            transitions[key] = frozenset(targets)

        defaults = config.get("defaults", {})
        default_on_create = defaults.get("on_create") or statuses[0]
        check(default_on_create, "defaults")
        if default_on_create not in transitions.get(NONE, ()):
            raise ImproperlyConfigured(
                f"Lifecycle '{name}' cannot create records in its default "
                f"status '{default_on_create}'."
            )

        reopen = frozenset(config.get("reopen", ()))
        for status in reopen:
            check(status, "reopen")

        maps = {}
        for target, mapping in config.get("maps", {}).items():
            for source in mapping:
                check(source, f"maps to '{target}'")
            maps[target] = MappingProxyType(dict(mapping))

        return cls(
            name=name,
            initial=initial,
            active=active,
            inactive=inactive,
            default_on_create=default_on_create,
            transitions=MappingProxyType(transitions),
            reopen=reopen,
            maps=MappingProxyType(maps),
        )


def load_lifecycles(config: Mapping) -> dict[str, Lifecycle]:
    """Parse a full lifecycle table, checking cross-lifecycle maps."""
    lifecycles = {
        name: Lifecycle.from_config(name, definition)
        for name, definition in config.items()
    }
    for lifecycle in lifecycles.values():
        for target, mapping in lifecycle.maps.items():
            if target not in lifecycles:
                raise ImproperlyConfigured(
                    f"Lifecycle '{lifecycle.name}' maps to unknown "
                    f"lifecycle '{target}'."
                )
            for status in mapping.values():
                if not lifecycles[target].is_valid(status):
                    raise ImproperlyConfigured(
                        f"Lifecycle '{lifecycle.name}' maps to status "
                        f"'{status}', which '{target}' does not define."
                    )
    return lifecycles


class LifecycleGate:
    """Decide whether a record may enter or move to a given status.

    Every method accepts either a :class:`Lifecycle` or a lifecycle name.
    The predicates are pure; ``check_create`` and ``check_update`` raise
    :class:`InvalidStatus` or :class:`IllegalTransition` on rejection.
    """

    def __init__(self, lifecycles: Mapping[str, Lifecycle]):
        self._lifecycles = MappingProxyType(dict(lifecycles))

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._lifecycles)

    def lifecycle(self, lifecycle) -> Lifecycle:
        if isinstance(lifecycle, Lifecycle):
            return lifecycle
        try:
            return self._lifecycles[lifecycle]
        except KeyError:
            raise LookupError(f"Unknown lifecycle '{lifecycle}'.") from None

    def is_valid_status(self, lifecycle, status) -> bool:
        return self.lifecycle(lifecycle).is_valid(status)

    def is_valid_transition(self, lifecycle, from_status, to_status) -> bool:
        return self.lifecycle(lifecycle).is_transition(from_status, to_status)

    def default_status_on_create(self, lifecycle) -> str:
        return self.lifecycle(lifecycle).default_on_create

    def check_create(self, lifecycle, status=None) -> str:
        """Return the status a new record will get, or raise."""
        cycle = self.lifecycle(lifecycle)
        if status is None or status == "":
            status = cycle.default_on_create
        if not cycle.is_valid(status):
            raise InvalidStatus(status)
        if not cycle.is_transition(NONE, status):
            raise IllegalTransition(NONE, status)
        return status

    def check_update(self, record: StatusOwner, status) -> str:
        cycle = self.lifecycle(record.lifecycle)
        if not cycle.is_valid(status):
            raise InvalidStatus(status)
        if not cycle.is_transition(record.status, status):
            raise IllegalTransition(record.status, status)
        return status


@lru_cache(maxsize=None)
def get_gate() -> LifecycleGate:
    """Return the gate for the configured lifecycle table."""
    return LifecycleGate(load_lifecycles(settings.ASSET_LIFECYCLES))


@receiver(setting_changed)
def _reset_gate(sender, setting, **kwargs):
    if setting == "ASSET_LIFECYCLES":
        get_gate.cache_clear()
