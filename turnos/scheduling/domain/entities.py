"""
Scheduling domain rules.

- AppointmentState and the optional strict transition table
- DayOfWeek for weekly availability templates
- Instant normalization used for slot equality
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple, Union

from turnos.shared.exceptions import InvalidInputError


class AppointmentState(str, Enum):
    PENDIENTE = "pendiente"
    CONFIRMADO = "confirmado"
    CANCELADO = "cancelado"
    COMPLETADO = "completado"

    @classmethod
    def parse(cls, value: Union[str, "AppointmentState"]) -> "AppointmentState":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidInputError(
                f"Unknown appointment state '{value}'",
                details={"allowed": [s.value for s in cls]},
            ) from None

    @property
    def is_open(self) -> bool:
        return self in (AppointmentState.PENDIENTE, AppointmentState.CONFIRMADO)


# Used only when strict transitions are enabled
STRICT_TRANSITIONS: Dict[AppointmentState, FrozenSet[AppointmentState]] = {
    AppointmentState.PENDIENTE: frozenset({AppointmentState.CONFIRMADO, AppointmentState.CANCELADO}),
    AppointmentState.CONFIRMADO: frozenset({AppointmentState.CANCELADO, AppointmentState.COMPLETADO}),
    AppointmentState.CANCELADO: frozenset(),
    AppointmentState.COMPLETADO: frozenset(),
}


def check_transition(current: AppointmentState, target: AppointmentState, *, strict: bool) -> None:
    """
    Unguarded by default: any state may be overwritten by any other.

    Raises:
        InvalidInputError: strict mode and ``target`` not reachable from ``current``
    """
    if not strict or current is target:
        return
    if target not in STRICT_TRANSITIONS[current]:
        raise InvalidInputError(
            f"Cannot move appointment from {current.value} to {target.value}",
            details={"from": current.value, "to": target.value},
        )


class DayOfWeek(str, Enum):
    LUNES = "lunes"
    MARTES = "martes"
    MIERCOLES = "miercoles"
    JUEVES = "jueves"
    VIERNES = "viernes"
    SABADO = "sabado"
    DOMINGO = "domingo"

    @classmethod
    def parse(cls, value: Union[str, "DayOfWeek"]) -> "DayOfWeek":
        if isinstance(value, cls):
            return value
        normalized = (
            str(value).strip().lower().replace("é", "e").replace("á", "a")
        )
        try:
            return cls(normalized)
        except ValueError:
            raise InvalidInputError(
                f"Unknown day of week '{value}'",
                details={"allowed": [d.value for d in cls]},
            ) from None

    @classmethod
    def of(cls, moment: Union[date, datetime]) -> "DayOfWeek":
        return list(cls)[moment.weekday()]


def normalize_instant(value: Union[str, datetime]) -> datetime:
    """
    Exact slot instant used for storage and overlap equality.

    Aware datetimes are converted to UTC and made naive; naive ones are taken
    as already being UTC. Strings are parsed as ISO-8601 ('Z' accepted).
    Sub-second precision is dropped so equal wall times compare equal.

    Raises:
        InvalidInputError: unparseable string
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidInputError(f"Invalid date-time '{value}'", details={"field": "fechaHora"}) from None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=0)


def day_bounds(day: Union[str, date]) -> Tuple[datetime, datetime]:
    """[start, end) of a calendar day, as naive instants."""
    if isinstance(day, str):
        try:
            day = date.fromisoformat(day.strip()[:10])
        except ValueError:
            raise InvalidInputError(f"Invalid date '{day}'", details={"field": "fecha"}) from None
    if isinstance(day, datetime):
        day = day.date()
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def check_window(hora_inicio: time, hora_fin: time, duracion: Optional[int]) -> None:
    """Weekly availability window sanity check."""
    if hora_inicio >= hora_fin:
        raise InvalidInputError(
            "horaInicio must be earlier than horaFin",
            details={"horaInicio": hora_inicio.isoformat(), "horaFin": hora_fin.isoformat()},
        )
    if duracion is not None and duracion <= 0:
        raise InvalidInputError("duracionTurno must be positive", details={"duracionTurno": duracion})
