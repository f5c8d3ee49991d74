"""Imports every ORM module so Base.metadata knows all tables."""
from turnos.clinic.infrastructure.models import (  # noqa: F401
    CoberturaModel,
    ConsultorioModel,
    DoctorModel,
    EspecialidadModel,
    ObraSocialModel,
    PacienteModel,
    doctor_especialidad,
)
from turnos.identity.infrastructure.models import UsuarioModel  # noqa: F401
from turnos.scheduling.infrastructure.models import HorarioDisponibleModel, TurnoModel  # noqa: F401
