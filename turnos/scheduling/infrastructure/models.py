# turnos/scheduling/infrastructure/models.py
"""
Scheduling models.
Contains:
- TurnoModel (appointment)
- HorarioDisponibleModel (weekly availability template)
Important:
- At most one CONFIRMADO turno per (doctor, consultorio, fecha_hora); enforced
  by the partial unique index uq_turno_confirmado_slot
- fecha_hora is stored as naive UTC
"""
from datetime import datetime, time

from sqlalchemy import CheckConstraint, Enum, ForeignKey, Index, Integer, Time, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from turnos.clinic.infrastructure.models import ConsultorioModel, DoctorModel, PacienteModel
from turnos.scheduling.domain.entities import AppointmentState, DayOfWeek
from turnos.shared.database import Base, SoftDeleteMixin, TimestampMixin, utcnow

CONFIRMED_ONLY = text("estado = 'confirmado'")


def _enum(enum_cls, name: str) -> Enum:
    return Enum(enum_cls, name=name, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e])


class TurnoModel(Base, TimestampMixin, SoftDeleteMixin):
    """Appointment of a patient with a doctor in an office."""
    __tablename__ = "turno"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    dni_paciente: Mapped[str] = mapped_column(ForeignKey("paciente.dni"), nullable=False, index=True)
    id_doctor: Mapped[int] = mapped_column(ForeignKey("doctor.id"), nullable=False, index=True)
    id_consultorio: Mapped[int] = mapped_column(ForeignKey("consultorio.id"), nullable=False)
    fecha_hora: Mapped[datetime] = mapped_column(nullable=False, index=True)
    fecha_solicitud: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    duracion_minutos: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    estado: Mapped[AppointmentState] = mapped_column(
        _enum(AppointmentState, "estado_turno"),
        nullable=False,
        default=AppointmentState.PENDIENTE,
    )

    paciente: Mapped[PacienteModel] = relationship(lazy="raise")
    doctor: Mapped[DoctorModel] = relationship(lazy="raise")
    consultorio: Mapped[ConsultorioModel] = relationship(lazy="raise")

    __table_args__ = (
        Index(
            "uq_turno_confirmado_slot",
            "id_doctor",
            "id_consultorio",
            "fecha_hora",
            unique=True,
            postgresql_where=CONFIRMED_ONLY,
            sqlite_where=CONFIRMED_ONLY,
        ),
        CheckConstraint("duracion_minutos > 0", name="chk_turno__duracion_positive"),
    )


class HorarioDisponibleModel(Base):
    """Recurring weekly window in which a doctor attends in an office."""
    __tablename__ = "horario_disponible"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id_doctor: Mapped[int] = mapped_column(ForeignKey("doctor.id", ondelete="CASCADE"), nullable=False, index=True)
    id_consultorio: Mapped[int] = mapped_column(ForeignKey("consultorio.id"), nullable=False, index=True)
    dia_semana: Mapped[DayOfWeek] = mapped_column(_enum(DayOfWeek, "dia_semana"), nullable=False)
    hora_inicio: Mapped[time] = mapped_column(Time, nullable=False)
    hora_fin: Mapped[time] = mapped_column(Time, nullable=False)
    duracion_turno: Mapped[int] = mapped_column(Integer, nullable=False, default=30)

    doctor: Mapped[DoctorModel] = relationship(lazy="raise")
    consultorio: Mapped[ConsultorioModel] = relationship(lazy="raise")

    __table_args__ = (
        CheckConstraint("hora_inicio < hora_fin", name="chk_horario__window"),
        CheckConstraint("duracion_turno > 0", name="chk_horario__duracion_positive"),
    )
