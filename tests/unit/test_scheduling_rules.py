from datetime import date, datetime, time, timedelta, timezone

import pytest

from turnos.scheduling.domain.entities import (
    AppointmentState,
    DayOfWeek,
    check_transition,
    check_window,
    day_bounds,
    normalize_instant,
)
from turnos.scheduling.infrastructure.models import TurnoModel
from turnos.shared.domain.lifecycle import LifecycleStatus
from turnos.shared.exceptions import InvalidInputError


def test_state_parse():
    assert AppointmentState.parse(" Confirmado ") is AppointmentState.CONFIRMADO
    with pytest.raises(InvalidInputError):
        AppointmentState.parse("archivado")


def test_transitions_unguarded_by_default():
    # cancelled appointments can still be confirmed
    check_transition(AppointmentState.CANCELADO, AppointmentState.CONFIRMADO, strict=False)
    check_transition(AppointmentState.COMPLETADO, AppointmentState.PENDIENTE, strict=False)


@pytest.mark.parametrize(
    "current,target",
    [
        (AppointmentState.PENDIENTE, AppointmentState.CONFIRMADO),
        (AppointmentState.PENDIENTE, AppointmentState.CANCELADO),
        (AppointmentState.CONFIRMADO, AppointmentState.COMPLETADO),
        (AppointmentState.CONFIRMADO, AppointmentState.CANCELADO),
    ],
)
def test_strict_allowed(current, target):
    check_transition(current, target, strict=True)


@pytest.mark.parametrize(
    "current,target",
    [
        (AppointmentState.CANCELADO, AppointmentState.CONFIRMADO),
        (AppointmentState.PENDIENTE, AppointmentState.COMPLETADO),
        (AppointmentState.COMPLETADO, AppointmentState.CANCELADO),
    ],
)
def test_strict_refused(current, target):
    with pytest.raises(InvalidInputError):
        check_transition(current, target, strict=True)


def test_normalize_instant():
    assert normalize_instant("2030-05-10T09:00:00Z") == datetime(2030, 5, 10, 9, 0)
    assert normalize_instant("2030-05-10T06:00:00-03:00") == datetime(2030, 5, 10, 9, 0)
    aware = datetime(2030, 5, 10, 11, 0, 0, 123456, tzinfo=timezone(timedelta(hours=2)))
    assert normalize_instant(aware) == datetime(2030, 5, 10, 9, 0)
    assert normalize_instant(datetime(2030, 5, 10, 9, 0)) == datetime(2030, 5, 10, 9, 0)
    with pytest.raises(InvalidInputError):
        normalize_instant("mañana")


def test_day_bounds():
    assert day_bounds("2030-05-10") == (datetime(2030, 5, 10), datetime(2030, 5, 11))
    assert day_bounds(date(2030, 12, 31))[1] == datetime(2031, 1, 1)
    with pytest.raises(InvalidInputError):
        day_bounds("10/05/2030")


def test_day_of_week():
    assert DayOfWeek.parse("Miércoles") is DayOfWeek.MIERCOLES
    assert DayOfWeek.parse("sábado") is DayOfWeek.SABADO
    assert DayOfWeek.of(date(2030, 5, 10)) is DayOfWeek.VIERNES
    with pytest.raises(InvalidInputError):
        DayOfWeek.parse("feriado")


def test_window():
    check_window(time(9), time(13), 30)
    with pytest.raises(InvalidInputError):
        check_window(time(13), time(9), 30)
    with pytest.raises(InvalidInputError):
        check_window(time(9), time(13), 0)


def test_soft_delete_mixin_status():
    turno = TurnoModel(is_active=True)
    assert turno.status is LifecycleStatus.ACTIVE
    turno.deactivate()
    assert turno.status is LifecycleStatus.INACTIVE
    assert not turno.status.is_active
    turno.reactivate()
    assert turno.status is LifecycleStatus.ACTIVE
