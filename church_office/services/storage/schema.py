"""
Database Schema

SQLAlchemy Core table definitions for every table the back-office uses.
Column names follow the existing hosted database (Spanish names such
as `mes_id`, `fecha`, `valor`).

DESIGN DECISION: The hosted schema is assumed to exist already.
These definitions are what the gateway builds statements from, and
`DatabaseClient.create_schema()` uses them to create a local database
for development and tests. There are no migrations.

Period-scoped tables reference `meses.id` with ON DELETE CASCADE: a
period owns its records.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
)


metadata = MetaData()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _timestamps() -> list[Column]:
    return [
        Column("created_at", DateTime(timezone=True), default=utcnow),
        Column("updated_at", DateTime(timezone=True), default=utcnow, onupdate=utcnow),
    ]


def _period_fk() -> Column:
    return Column(
        "mes_id",
        String(64),
        ForeignKey("meses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


def _money(name: str) -> Column:
    return Column(name, Numeric(14, 2), nullable=False)


# =============================================================================
# PERIODS
# =============================================================================

periods = Table(
    "meses",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("name", String(100), nullable=False),
    Column("year", Integer, nullable=False),
    Column("month", Integer, nullable=False),
    Column("start_date", DateTime(timezone=True), nullable=False),
    Column("end_date", DateTime(timezone=True)),
    Column("status", String(10), nullable=False, default="active"),
    *_timestamps(),
)

period_configurations = Table(
    "configuraciones_mes",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "mes_id",
        String(64),
        ForeignKey("meses.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    ),
    Column("ministerios", JSON, nullable=False),
    Column("categorias_principales", JSON, nullable=False),
    Column("detalles", JSON, nullable=False),
    *_timestamps(),
)


# =============================================================================
# LEDGER AND TITHES
# =============================================================================

def _ledger_table(name: str) -> Table:
    return Table(
        name,
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        _period_fk(),
        Column("concepto", String(200)),
        _money("monto"),
        Column("fecha", Date, nullable=False),
        Column("ministerio", String(100), nullable=False),
        Column("categoria_principal", String(100), nullable=False),
        Column("detalle", String(200), nullable=False),
        Column("observacion", Text),
        Column("estado", String(50)),
        *_timestamps(),
    )


income = _ledger_table("ingresos")
expenses = _ledger_table("egresos")

tithes = Table(
    "diezmos",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    _period_fk(),
    Column("numero", Integer, nullable=False),
    Column("fecha", Date, nullable=False),
    Column("donador", String(200), nullable=False),
    _money("valor"),
    *_timestamps(),
)


# =============================================================================
# ATTENDANCE GRID
# =============================================================================

attendance_details = Table(
    "asistencia_detalles",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    _period_fk(),
    Column("nombre", String(200), nullable=False),
    Column("orden", Integer, nullable=False, default=0),
    *_timestamps(),
)

attendance_columns = Table(
    "asistencia_columnas",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    _period_fk(),
    Column("nombre", String(200), nullable=False),
    Column("orden", Integer, nullable=False, default=0),
    *_timestamps(),
)

attendance_cells = Table(
    "asistencia_datos",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    _period_fk(),
    Column(
        "detalle_id",
        Integer,
        ForeignKey("asistencia_detalles.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "columna_id",
        Integer,
        ForeignKey("asistencia_columnas.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("cantidad", Integer, nullable=False),
    *_timestamps(),
    UniqueConstraint("detalle_id", "columna_id"),
)


# =============================================================================
# DISCIPLESHIP
# =============================================================================

discipleship_participants = Table(
    "discipulado_participantes",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(200), nullable=False),
    *_timestamps(),
)

discipleship_dates = Table(
    "discipulado_fechas",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    _period_fk(),
    Column("fecha", Date, nullable=False),
    Column("created_at", DateTime(timezone=True), default=utcnow),
)

discipleship_attendance = Table(
    "discipulado_asistencia",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    _period_fk(),
    Column(
        "participante_id",
        Integer,
        ForeignKey("discipulado_participantes.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "fecha_id",
        Integer,
        ForeignKey("discipulado_fechas.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("status", String(10), nullable=False),
    *_timestamps(),
    UniqueConstraint("participante_id", "fecha_id"),
)


# =============================================================================
# INVENTORY AND GLOBAL OPTIONS
# =============================================================================

inventory_items = Table(
    "inventory_items",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("cantidad", Integer, nullable=False),
    Column("codigo", String(50), nullable=False),
    Column("detalle", String(500), nullable=False),
    Column("numero_serie", String(100)),
    Column("ubicacion", String(100), nullable=False),
    Column("ministerio", String(100), nullable=False),
    Column("estado", String(50), nullable=False),
    Column("fecha_registro", Date, nullable=False),
    *_timestamps(),
)

global_configuration = Table(
    "configuraciones_globales",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("ministerios", JSON, nullable=False),
    Column("ubicaciones", JSON, nullable=False),
    Column("estados", JSON, nullable=False),
    Column("categorias_principales", JSON, nullable=False),
    Column("detalles", JSON, nullable=False),
    *_timestamps(),
)


# =============================================================================
# PAYMENT FLOW
# =============================================================================

payment_tables = Table(
    "payment_tables",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("nombre", String(200), nullable=False),
    Column("fecha_creacion", Date, nullable=False),
    *_timestamps(),
)

payment_rows = Table(
    "payment_rows",
    metadata,
    Column("id", String(36), primary_key=True),
    Column(
        "table_id",
        String(36),
        ForeignKey("payment_tables.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("fecha", Date, nullable=False),
    Column("beneficiarios", String(500), nullable=False),
    Column("detalle", String(500), nullable=False),
    _money("valor"),
    *_timestamps(),
)


# =============================================================================
# CENSUS
# =============================================================================

census_personal = Table(
    "censo_datos_personales",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("cedula", String(20), nullable=False, index=True),
    Column("apellidos_nombres", String(200), nullable=False),
    Column("fecha_nacimiento", Date),
    Column("edad", Integer),
    Column("es_cristiano", Boolean, default=False),
    Column("bautizo", Boolean, default=False),
    Column("tipo_sangre", String(5)),
    Column("estado_civil", String(50)),
    Column("sexo", String(20)),
    Column("capacidad_especial", String(100)),
    Column("porcentaje_discapacidad", Float),
    Column("tipo_discapacidad", String(100)),
    Column("celular", String(30)),
    Column("telefono_convencional", String(30)),
    Column("telefono_familiar", String(30)),
    Column("conyuge", String(200)),
    Column("correo", String(200)),
    Column("nivel_estudio", String(100)),
    Column("curso", String(100)),
    Column("acumuladecimos", String(50)),
    Column("hoja_vida", Text),
    Column("estado", String(50)),
    Column("fecha_registro_saite", Date),
    Column("fecha_registro_iess", Date),
    Column("direccion", Text),
    Column("ciudad", String(100)),
    *_timestamps(),
)

census_church = Table(
    "censo_datos_iglesia",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("cedula", String(20), nullable=False, index=True),
    Column("jornada_trabajo", String(50)),
    Column("cargo", String(100)),
    Column("local", String(100)),
    Column("fecha_ingreso", Date),
    Column("fecha_reingreso", Date),
    Column("fecha_salida", Date),
    Column("dias_por_mes", Integer),
    Column("horas_diarias", Float),
    Column("horas_semanales", Float),
    Column("sueldo", Numeric(14, 2)),
    Column("tipo_pago", String(50)),
    Column("banco", String(100)),
    Column("numero_cuenta", String(50)),
    Column("interseccion", String(200)),
    Column("redil", String(100)),
    Column("ninos", String(200)),
    Column("otros", Text),
    *_timestamps(),
)

census_configuration = Table(
    "censo_configuraciones",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("tipos_sangre", JSON, nullable=False),
    Column("estados_civiles", JSON, nullable=False),
    Column("capacidades_especiales", JSON, nullable=False),
    Column("niveles_estudio", JSON, nullable=False),
    Column("jornadas_trabajo", JSON, nullable=False),
    Column("cargos", JSON, nullable=False),
    Column("locales", JSON, nullable=False),
    Column("tipos_pago", JSON, nullable=False),
    Column("bancos", JSON, nullable=False),
    *_timestamps(),
)


def get_table(name: str) -> Table:
    """Look up a table by name, raising KeyError for unknown tables."""
    return metadata.tables[name]
