"""
Domain Enums
Business enumerations for job applications
"""
from enum import Enum
from typing import Dict, FrozenSet


class ApplicationStatus(str, Enum):
    """Status of a job application (any status may follow any other)"""
    PENDIENTE = "pendiente"
    EN_REVISION = "en_revision"
    TE_CONTESTARON = "te_contestaron"
    ENTREVISTA_PROGRAMADA = "entrevista_programada"
    RECHAZADA = "rechazada"
    ACEPTADA = "aceptada"
    DESCARTADA_POR_MI = "descartada_por_mi"


class Platform(str, Enum):
    """Where the application was submitted"""
    LINKEDIN = "linkedin"
    INDEED = "indeed"
    COMPUTRABAJO = "computrabajo"
    OCC_MUNDIAL = "occ_mundial"
    GLASSDOOR = "glassdoor"
    SITIO_EMPRESA = "sitio_empresa"
    EMAIL_DIRECTO = "email_directo"
    REFERIDO = "referido"
    OTRO = "otro"


class SalaryCurrency(str, Enum):
    """Currency of the offered salary"""
    USD = "USD"
    MXN = "MXN"
    EUR = "EUR"


class SalaryPeriod(str, Enum):
    """Period the salary amounts refer to"""
    MENSUAL = "mensual"
    ANUAL = "anual"


class LocationType(str, Enum):
    """Work modality"""
    REMOTO = "remoto"
    PRESENCIAL = "presencial"
    HIBRIDO = "hibrido"


# Statuses that count as "the company answered"
RESPONDED_STATUSES: FrozenSet[ApplicationStatus] = frozenset({
    ApplicationStatus.ENTREVISTA_PROGRAMADA,
    ApplicationStatus.ACEPTADA,
    ApplicationStatus.TE_CONTESTARON,
    ApplicationStatus.RECHAZADA,
})

# Statuses that count as an interview obtained through a platform
INTERVIEW_STATUSES: FrozenSet[ApplicationStatus] = frozenset({
    ApplicationStatus.ENTREVISTA_PROGRAMADA,
    ApplicationStatus.ACEPTADA,
})


STATUS_LABELS: Dict[ApplicationStatus, str] = {
    ApplicationStatus.PENDIENTE: "Pendiente",
    ApplicationStatus.EN_REVISION: "En Revisión",
    ApplicationStatus.TE_CONTESTARON: "Te Contestaron",
    ApplicationStatus.ENTREVISTA_PROGRAMADA: "Entrevista Programada",
    ApplicationStatus.RECHAZADA: "Rechazada",
    ApplicationStatus.ACEPTADA: "Aceptada",
    ApplicationStatus.DESCARTADA_POR_MI: "Descartada por Mí",
}

PLATFORM_LABELS: Dict[Platform, str] = {
    Platform.LINKEDIN: "LinkedIn",
    Platform.INDEED: "Indeed",
    Platform.COMPUTRABAJO: "Computrabajo",
    Platform.OCC_MUNDIAL: "OCC Mundial",
    Platform.GLASSDOOR: "Glassdoor",
    Platform.SITIO_EMPRESA: "Sitio de la Empresa",
    Platform.EMAIL_DIRECTO: "Email Directo",
    Platform.REFERIDO: "Referido",
    Platform.OTRO: "Otro",
}


def get_status_label(status: ApplicationStatus) -> str:
    """Get display label for a status"""
    return STATUS_LABELS.get(status, status.value)


def get_platform_label(platform: Platform) -> str:
    """Get display label for a platform"""
    return PLATFORM_LABELS.get(platform, platform.value)
