from datetime import datetime

import pytest

from turnos.scheduling.domain.entities import AppointmentState
from turnos.shared.exceptions import ConflictError, InvalidInputError, NotFoundError, SlotTakenError
from turnos.shared.pagination import PageRequest

SLOT = "2030-05-10T09:00:00Z"


async def book(svc, seed, fecha_hora=SLOT, doctor=None, dni=None, **kw):
    return await svc.create(
        dni_paciente=dni or seed.dni,
        id_doctor=doctor or seed.doctor_id,
        id_consultorio=seed.office_id,
        fecha_hora=fecha_hora,
        **kw,
    )


async def test_create_defaults_and_relations(appointments, seed):
    turno = await book(appointments, seed)
    assert turno.estado is AppointmentState.PENDIENTE
    assert turno.duracion_minutos == 30
    assert turno.is_active is True
    assert turno.fecha_hora == datetime(2030, 5, 10, 9, 0)
    assert turno.fecha_solicitud is not None
    assert turno.paciente.dni == seed.dni
    assert turno.doctor.apellido == "Gomez"
    assert turno.consultorio.nombre == "Consultorio Norte"


async def test_confirmed_slot_blocks_new_booking(appointments, seed):
    await book(appointments, seed, estado="confirmado")
    with pytest.raises(SlotTakenError) as exc:
        await book(appointments, seed, dni=seed.other_dni)
    assert isinstance(exc.value, ConflictError)
    assert exc.value.message == "There is already a confirmed appointment in that slot"


async def test_equivalent_instants_collide(appointments, seed):
    await book(appointments, seed, estado="confirmado")
    with pytest.raises(SlotTakenError):
        await book(appointments, seed, fecha_hora="2030-05-10T06:00:00-03:00", dni=seed.other_dni)


async def test_other_doctor_same_instant_is_free(appointments, seed):
    await book(appointments, seed, estado="confirmado")
    other = await book(appointments, seed, doctor=seed.other_doctor_id, estado="confirmado")
    assert other.id is not None


async def test_pending_bookings_do_not_block(appointments, seed):
    first = await book(appointments, seed)
    second = await book(appointments, seed, dni=seed.other_dni)
    assert first.id != second.id


async def test_confirming_into_confirmed_slot_conflicts(appointments, seed):
    first = await book(appointments, seed)
    second = await book(appointments, seed, dni=seed.other_dni)
    await appointments.confirm(first.id)
    with pytest.raises(ConflictError):
        await appointments.confirm(second.id)


async def test_confirm_cancelled_is_allowed(appointments, seed):
    turno = await book(appointments, seed)
    await appointments.cancel(turno.id)
    confirmed = await appointments.confirm(turno.id)
    assert confirmed.estado is AppointmentState.CONFIRMADO


async def test_strict_slot_exclusivity(make_appointments, seed):
    strict = make_appointments(strict_slot_exclusivity=True)
    await book(strict, seed)
    with pytest.raises(SlotTakenError):
        await book(strict, seed, dni=seed.other_dni)


async def test_strict_transitions(make_appointments, seed):
    strict = make_appointments(strict_transitions=True)
    turno = await book(strict, seed)
    await strict.cancel(turno.id)
    with pytest.raises(InvalidInputError):
        await strict.confirm(turno.id)


async def test_unknown_participants(appointments, seed):
    with pytest.raises(NotFoundError):
        await book(appointments, seed, dni="11111111")
    with pytest.raises(NotFoundError):
        await book(appointments, seed, doctor=99)


async def test_invalid_input(appointments, seed):
    with pytest.raises(InvalidInputError):
        await book(appointments, seed, fecha_hora="not a date")
    with pytest.raises(InvalidInputError):
        await book(appointments, seed, estado="archivado")
    with pytest.raises(InvalidInputError):
        await book(appointments, seed, duracion_minutos=0)


async def test_soft_delete_is_idempotent_and_restorable(appointments, seed):
    turno = await book(appointments, seed)
    fields = ("dni_paciente", "id_doctor", "id_consultorio", "fecha_hora", "fecha_solicitud", "duracion_minutos", "estado")
    before = {name: getattr(turno, name) for name in fields}
    await appointments.soft_delete(turno.id)
    await appointments.soft_delete(turno.id)

    with pytest.raises(NotFoundError):
        await appointments.get(turno.id)
    hidden = await appointments.get(turno.id, include_inactive=True)
    assert hidden.is_active is False

    restored = await appointments.restore(turno.id)
    assert restored.is_active is True
    fetched = await appointments.get(turno.id)
    assert fetched.id == turno.id
    assert {name: getattr(fetched, name) for name in fields} == before


async def test_restore_requires_inactive_row(appointments, seed):
    turno = await book(appointments, seed)
    with pytest.raises(NotFoundError):
        await appointments.restore(turno.id)
    with pytest.raises(NotFoundError):
        await appointments.restore(9999)
    with pytest.raises(NotFoundError):
        await appointments.soft_delete(9999)


async def test_visibility(appointments, seed):
    kept = await book(appointments, seed)
    gone = await book(appointments, seed, fecha_hora="2030-05-10T10:00:00Z")
    await appointments.soft_delete(gone.id)

    page = PageRequest.build()
    visible = await appointments.find_all(page)
    assert [t.id for t in visible.data] == [kept.id]
    assert visible.total == 1

    everything = await appointments.find_all(page, include_inactive=True)
    assert {t.id for t in everything.data} == {kept.id, gone.id}

    inactive = await appointments.find_inactive(page)
    assert [t.id for t in inactive.data] == [gone.id]


async def test_update_overwrites_and_normalizes(appointments, seed):
    turno = await book(appointments, seed)
    updated = await appointments.update_appointment(
        turno.id, {"fecha_hora": "2030-05-11T14:30:00+00:00", "duracion_minutos": 45}
    )
    assert updated.fecha_hora == datetime(2030, 5, 11, 14, 30)
    assert updated.duracion_minutos == 45

    await appointments.soft_delete(turno.id)
    with pytest.raises(NotFoundError):
        await appointments.update_appointment(turno.id, {"duracion_minutos": 20})


async def test_queries(appointments, seed):
    early = await book(appointments, seed, fecha_hora="2030-05-10T08:00:00Z")
    late = await book(appointments, seed, fecha_hora="2030-05-10T17:00:00Z", estado="confirmado")
    other_day = await book(appointments, seed, fecha_hora="2030-05-12T08:00:00Z", doctor=seed.other_doctor_id)
    page = PageRequest.build()

    by_patient = await appointments.find_by_patient(seed.dni, page)
    assert [t.id for t in by_patient.data] == [other_day.id, late.id, early.id]

    by_doctor = await appointments.find_by_doctor(seed.doctor_id, page)
    assert [t.id for t in by_doctor.data] == [early.id, late.id]

    confirmed = await appointments.find_by_state("confirmado", page)
    assert [t.id for t in confirmed.data] == [late.id]

    same_day = await appointments.find_by_date("2030-05-10", page)
    assert [t.id for t in same_day.data] == [early.id, late.id]

    ranged = await appointments.find_by_date_range("2030-05-10T08:00:00Z", "2030-05-10T17:00:00Z", page)
    assert ranged.total == 2

    with pytest.raises(InvalidInputError):
        await appointments.find_by_date_range("2030-05-11T00:00:00Z", "2030-05-10T00:00:00Z", page)


async def test_filter_and_pagination(appointments, seed):
    for hour in range(8, 13):
        await book(appointments, seed, fecha_hora=f"2030-06-01T{hour:02d}:00:00Z")
    await book(appointments, seed, fecha_hora="2030-06-01T08:00:00Z", doctor=seed.other_doctor_id)

    page = await appointments.find_all(PageRequest.build(page=2, limit=2, filter="ANA"))
    assert page.total == 5
    assert len(page.data) == 2
    assert all(t.id_doctor == seed.doctor_id for t in page.data)

    for wildcard in ("%", "_", "An%"):
        assert (await appointments.find_all(PageRequest.build(filter=wildcard))).total == 0

    desc = await appointments.find_all(PageRequest.build(sort="fechaHora", order="desc", limit=1))
    assert desc.data[0].fecha_hora == datetime(2030, 6, 1, 12, 0)
