"""Pure transition function for the update cycle.

``transition(state, event, options, cmp)`` returns the next state plus the
single effect the driver must perform before feeding back the next event.
Nothing here touches the network or the host; :mod:`.orchestrator` executes
the effects.

    IDLE --STARTED--> CHECKING [fetch latest]
    CHECKING --LATEST_FETCHED--> AWAITING_INSTALL_CONSENT [ask | auto consent]
                              \\-> UP_TO_DATE [notify | nothing]
    AWAITING_INSTALL_CONSENT --CONSENT_GIVEN--> DOWNLOADING [download]
                             --CONSENT_DENIED--> DONE
    DOWNLOADING --DOWNLOADED--> INSTALLING [install]
    INSTALLING --INSTALLED--> AWAITING_RELOAD_CONSENT [ask reload]
    AWAITING_RELOAD_CONSENT --CONSENT_GIVEN--> DONE [reload]
                            --CONSENT_DENIED--> DONE
"""

from __future__ import annotations

import enum
from typing import NamedTuple, Optional

from .errors import UpdaterError
from .types import CycleState, UpdateOptions


class Event(enum.Enum):
    """Outcome reported by the driver after performing an effect."""

    STARTED = "started"
    LATEST_FETCHED = "latest_fetched"
    CONSENT_GIVEN = "consent_given"
    CONSENT_DENIED = "consent_denied"
    DOWNLOADED = "downloaded"
    INSTALLED = "installed"


class Effect(enum.Enum):
    """Side effect the driver performs on entering the new state."""

    NONE = "none"
    FETCH_LATEST = "fetch_latest"
    NOTIFY_UP_TO_DATE = "notify_up_to_date"
    ASK_INSTALL = "ask_install"
    AUTO_CONSENT = "auto_consent"
    DOWNLOAD = "download"
    INSTALL = "install"
    ASK_RELOAD = "ask_reload"
    RELOAD = "reload"


class Step(NamedTuple):
    """Next state plus the effect to perform on entering it."""

    state: CycleState
    effect: Effect


def transition(
    state: CycleState,
    event: Event,
    options: UpdateOptions,
    cmp: Optional[int] = None,
) -> Step:
    """Next ``Step`` for ``event`` in ``state``.

    ``cmp`` is ``compare_versions(latest, installed)`` and is required with
    ``LATEST_FETCHED``. Any pair not in the table raises ``UpdaterError``.
    """
    if state is CycleState.IDLE and event is Event.STARTED:
        return Step(CycleState.CHECKING, Effect.FETCH_LATEST)

    if state is CycleState.CHECKING and event is Event.LATEST_FETCHED:
        if cmp is None:
            raise UpdaterError("version comparison missing for fetched release")
        if options.reinstall:
            return Step(CycleState.AWAITING_INSTALL_CONSENT, Effect.AUTO_CONSENT)
        if cmp > 0:
            return Step(CycleState.AWAITING_INSTALL_CONSENT, Effect.ASK_INSTALL)
        if options.show_up_to_date_confirmation:
            return Step(CycleState.UP_TO_DATE, Effect.NOTIFY_UP_TO_DATE)
        return Step(CycleState.UP_TO_DATE, Effect.NONE)

    if state is CycleState.AWAITING_INSTALL_CONSENT:
        if event is Event.CONSENT_GIVEN:
            return Step(CycleState.DOWNLOADING, Effect.DOWNLOAD)
        if event is Event.CONSENT_DENIED:
            return Step(CycleState.DONE, Effect.NONE)

    if state is CycleState.DOWNLOADING and event is Event.DOWNLOADED:
        return Step(CycleState.INSTALLING, Effect.INSTALL)

    if state is CycleState.INSTALLING and event is Event.INSTALLED:
        return Step(CycleState.AWAITING_RELOAD_CONSENT, Effect.ASK_RELOAD)

    if state is CycleState.AWAITING_RELOAD_CONSENT:
        if event is Event.CONSENT_GIVEN:
            return Step(CycleState.DONE, Effect.RELOAD)
        if event is Event.CONSENT_DENIED:
            return Step(CycleState.DONE, Effect.NONE)

    raise UpdaterError(f"illegal transition: {event.value} in state {state.value}")


__all__ = ["Effect", "Event", "Step", "transition"]
