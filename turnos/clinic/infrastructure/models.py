# turnos/clinic/infrastructure/models.py
"""
Clinic reference data.
Contains:
- Doctor (+ specialties, many-to-many)
- Paciente (natural key: DNI)
- Consultorio (office)
- Especialidad, Cobertura, ObraSocial (lookups)
Important:
- Doctor, Paciente, Consultorio and ObraSocial are soft-deleted only
- Relations are lazy="raise": callers must ask the repository to load them
"""
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import Column, Date, ForeignKey, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from turnos.shared.database import Base, SoftDeleteMixin, utcnow

doctor_especialidad = Table(
    "doctor_especialidad",
    Base.metadata,
    Column("id_doctor", ForeignKey("doctor.id", ondelete="CASCADE"), primary_key=True),
    Column("id_especialidad", ForeignKey("especialidad.id", ondelete="CASCADE"), primary_key=True),
)


class EspecialidadModel(Base):
    """Medical specialty."""
    __tablename__ = "especialidad"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nombre: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)


class CoberturaModel(Base):
    """Coverage plan offered by insurers."""
    __tablename__ = "cobertura"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nombre: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)


class ObraSocialModel(Base, SoftDeleteMixin):
    """Insurer, keyed by its short code."""
    __tablename__ = "obra_social"

    codigo: Mapped[str] = mapped_column(String(6), primary_key=True)
    nombre: Mapped[str] = mapped_column(String(100), nullable=False)
    telefono: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(100), unique=True, nullable=True)
    id_cobertura: Mapped[Optional[int]] = mapped_column(ForeignKey("cobertura.id"), nullable=True)

    cobertura: Mapped[Optional[CoberturaModel]] = relationship(lazy="raise")


class DoctorModel(Base, SoftDeleteMixin):
    """Medical professional."""
    __tablename__ = "doctor"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nombre: Mapped[str] = mapped_column(String(100), nullable=False)
    apellido: Mapped[str] = mapped_column(String(100), nullable=False)
    telefono: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    matricula: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    fecha_registro: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    especialidades: Mapped[List[EspecialidadModel]] = relationship(
        secondary=doctor_especialidad, lazy="raise", order_by=EspecialidadModel.id
    )


class PacienteModel(Base, SoftDeleteMixin):
    """Patient, keyed by DNI."""
    __tablename__ = "paciente"

    dni: Mapped[str] = mapped_column(String(9), primary_key=True)
    nombre: Mapped[str] = mapped_column(String(100), nullable=False)
    apellido: Mapped[str] = mapped_column(String(100), nullable=False)
    fecha_nacimiento: Mapped[date] = mapped_column(Date, nullable=False)
    direccion: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    telefono: Mapped[str] = mapped_column(String(20), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    fecha_registro: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    codigo_obra_social: Mapped[Optional[str]] = mapped_column(ForeignKey("obra_social.codigo"), nullable=True)
    numero_afiliado: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    id_cobertura: Mapped[int] = mapped_column(ForeignKey("cobertura.id"), nullable=False, default=1)

    obra_social: Mapped[Optional[ObraSocialModel]] = relationship(lazy="raise")
    cobertura: Mapped[CoberturaModel] = relationship(lazy="raise")


class ConsultorioModel(Base, SoftDeleteMixin):
    """Physical office where appointments happen."""
    __tablename__ = "consultorio"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nombre: Mapped[str] = mapped_column(String(100), nullable=False)
