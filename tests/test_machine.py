import pytest

from extension_updater.errors import UpdaterError
from extension_updater.machine import Effect, Event, Step, transition
from extension_updater.types import CycleState, UpdateOptions

DEFAULT = UpdateOptions()
REINSTALL = UpdateOptions(reinstall=True)
CONFIRM = UpdateOptions(show_up_to_date_confirmation=True)


def test_start_checks_registry():
    assert transition(CycleState.IDLE, Event.STARTED, DEFAULT) == Step(
        CycleState.CHECKING, Effect.FETCH_LATEST
    )


@pytest.mark.parametrize(
    "options,cmp,expected",
    [
        (DEFAULT, 1, Step(CycleState.AWAITING_INSTALL_CONSENT, Effect.ASK_INSTALL)),
        (DEFAULT, 0, Step(CycleState.UP_TO_DATE, Effect.NONE)),
        (DEFAULT, -1, Step(CycleState.UP_TO_DATE, Effect.NONE)),
        (CONFIRM, 0, Step(CycleState.UP_TO_DATE, Effect.NOTIFY_UP_TO_DATE)),
        (CONFIRM, -1, Step(CycleState.UP_TO_DATE, Effect.NOTIFY_UP_TO_DATE)),
        (CONFIRM, 1, Step(CycleState.AWAITING_INSTALL_CONSENT, Effect.ASK_INSTALL)),
        (REINSTALL, -1, Step(CycleState.AWAITING_INSTALL_CONSENT, Effect.AUTO_CONSENT)),
        (REINSTALL, 0, Step(CycleState.AWAITING_INSTALL_CONSENT, Effect.AUTO_CONSENT)),
        (REINSTALL, 1, Step(CycleState.AWAITING_INSTALL_CONSENT, Effect.AUTO_CONSENT)),
    ],
)
def test_check_outcomes(options, cmp, expected):
    assert transition(CycleState.CHECKING, Event.LATEST_FETCHED, options, cmp) == expected


def test_install_consent():
    state = CycleState.AWAITING_INSTALL_CONSENT
    assert transition(state, Event.CONSENT_GIVEN, DEFAULT) == Step(
        CycleState.DOWNLOADING, Effect.DOWNLOAD
    )
    assert transition(state, Event.CONSENT_DENIED, DEFAULT) == Step(
        CycleState.DONE, Effect.NONE
    )


def test_download_install_reload_chain():
    assert transition(CycleState.DOWNLOADING, Event.DOWNLOADED, DEFAULT) == Step(
        CycleState.INSTALLING, Effect.INSTALL
    )
    assert transition(CycleState.INSTALLING, Event.INSTALLED, DEFAULT) == Step(
        CycleState.AWAITING_RELOAD_CONSENT, Effect.ASK_RELOAD
    )
    state = CycleState.AWAITING_RELOAD_CONSENT
    assert transition(state, Event.CONSENT_GIVEN, DEFAULT) == Step(
        CycleState.DONE, Effect.RELOAD
    )
    assert transition(state, Event.CONSENT_DENIED, DEFAULT) == Step(
        CycleState.DONE, Effect.NONE
    )


@pytest.mark.parametrize(
    "state,event",
    [
        (CycleState.IDLE, Event.DOWNLOADED),
        (CycleState.CHECKING, Event.CONSENT_GIVEN),
        (CycleState.UP_TO_DATE, Event.STARTED),
        (CycleState.DONE, Event.CONSENT_GIVEN),
        (CycleState.DOWNLOADING, Event.INSTALLED),
    ],
)
def test_illegal_transitions(state, event):
    with pytest.raises(UpdaterError):
        transition(state, event, DEFAULT, 1)


def test_fetched_without_comparison_is_rejected():
    with pytest.raises(UpdaterError):
        transition(CycleState.CHECKING, Event.LATEST_FETCHED, DEFAULT)
