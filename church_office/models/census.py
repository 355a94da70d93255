"""
Census Models

The census keeps two independent record families, both keyed by
the member's national ID (`cedula`):

- personal data (`censo_datos_personales`)
- church/employment data (`censo_datos_iglesia`)

Every attribute except the identifying ones is optional; the
census form is filled in over time.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from church_office.models.records import RecordModel


class CensusPersonalRecord(RecordModel):
    """Personal data of a church member."""

    id: Optional[int] = None
    cedula: str = Field(..., min_length=1, max_length=20)
    apellidos_nombres: str = Field(..., min_length=1, max_length=200)
    fecha_nacimiento: Optional[date] = None
    edad: Optional[int] = Field(default=None, ge=0, le=150)
    es_cristiano: bool = False
    bautizo: bool = False
    tipo_sangre: Optional[str] = None
    estado_civil: Optional[str] = None
    sexo: Optional[str] = None
    capacidad_especial: Optional[str] = None
    porcentaje_discapacidad: Optional[float] = Field(default=None, ge=0, le=100)
    tipo_discapacidad: Optional[str] = None
    celular: Optional[str] = None
    telefono_convencional: Optional[str] = None
    telefono_familiar: Optional[str] = None
    conyuge: Optional[str] = None
    correo: Optional[str] = None
    nivel_estudio: Optional[str] = None
    curso: Optional[str] = None
    acumuladecimos: Optional[str] = None
    hoja_vida: Optional[str] = None
    estado: Optional[str] = None
    fecha_registro_saite: Optional[date] = None
    fecha_registro_iess: Optional[date] = None
    direccion: Optional[str] = None
    ciudad: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CensusChurchRecord(RecordModel):
    """Church role and employment data of a member."""

    id: Optional[int] = None
    cedula: str = Field(..., min_length=1, max_length=20)
    jornada_trabajo: Optional[str] = None
    cargo: Optional[str] = None
    local: Optional[str] = None
    fecha_ingreso: Optional[date] = None
    fecha_reingreso: Optional[date] = None
    fecha_salida: Optional[date] = None
    dias_por_mes: Optional[int] = Field(default=None, ge=0, le=31)
    horas_diarias: Optional[float] = Field(default=None, ge=0, le=24)
    horas_semanales: Optional[float] = Field(default=None, ge=0, le=168)
    sueldo: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    tipo_pago: Optional[str] = None
    banco: Optional[str] = None
    numero_cuenta: Optional[str] = None
    interseccion: Optional[str] = None
    redil: Optional[str] = None
    ninos: Optional[str] = None
    otros: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


CENSUS_LISTS = (
    "tipos_sangre", "estados_civiles", "capacidades_especiales",
    "niveles_estudio", "jornadas_trabajo", "cargos", "locales",
    "tipos_pago", "bancos",
)


class CensusConfiguration(RecordModel):
    """Option lists offered by the census forms."""

    id: int = 1
    tipos_sangre: list[str] = Field(
        default_factory=lambda: ["A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-"]
    )
    estados_civiles: list[str] = Field(
        default_factory=lambda: ["Soltero", "Casado", "Divorciado", "Viudo", "Unión Libre"]
    )
    capacidades_especiales: list[str] = Field(
        default_factory=lambda: [
            "Ninguna", "Visual", "Auditiva", "Motriz", "Intelectual", "Psicosocial",
        ]
    )
    niveles_estudio: list[str] = Field(
        default_factory=lambda: [
            "Primaria", "Secundaria", "Técnico", "Tecnológico", "Universitario", "Postgrado",
        ]
    )
    jornadas_trabajo: list[str] = Field(
        default_factory=lambda: ["Mañana", "Tarde", "Noche", "Mixta"]
    )
    cargos: list[str] = Field(
        default_factory=lambda: [
            "Pastor", "Líder", "Diácono", "Maestro", "Músico", "Ujier", "Miembro",
        ]
    )
    locales: list[str] = Field(
        default_factory=lambda: [
            "Sede Principal", "Sede Norte", "Sede Sur", "Sede Este", "Sede Oeste",
        ]
    )
    tipos_pago: list[str] = Field(
        default_factory=lambda: ["DIEZMO", "PROMESA DONACION", "OFRENDA", "OTRO"]
    )
    bancos: list[str] = Field(
        default_factory=lambda: [
            "Banco Popular", "Bancolombia", "Banco de Bogotá", "BBVA", "Davivienda",
        ]
    )
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
