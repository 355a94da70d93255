"""
Streamlit Frontend for Church Office

This is the screen church staff use every week to record the month's
income, expenses, tithes and attendance.

DESIGN PRINCIPLES:
1. Nothing works until the operator has logged in
2. Most screens write into the active month; without one they
   send the operator to "Control Mensual"
3. Clear error messages in Spanish
4. Screens hold no business rules: they call services and show results
"""

import asyncio
from datetime import date
from decimal import Decimal

import streamlit as st

from church_office.config import get_settings, validate_all_settings
from church_office.errors import ChurchOfficeError, StorageError, user_message
from church_office.models.records import AttendanceStatus, LedgerKind
from church_office.orchestrator import AppComponents, create_app_components
from church_office.services import InMemoryGateway, format_currency


# Page configuration
st.set_page_config(
    page_title="Dashboard Iglesia",
    page_icon="⛪",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .info-box {
        padding: 20px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_shared_components() -> AppComponents:
    """Database connection shared by every browser session (cached)."""
    return create_app_components(use_database=True)


def get_components() -> AppComponents:
    """
    Per-session components.

    The gateway is shared; the period manager (active month, known
    months) belongs to one browser session.
    """
    if "components" not in st.session_state:
        shared = get_shared_components()
        st.session_state.components = AppComponents(shared.gateway, shared.activity)
    return st.session_state.components


def attempt(components: AppComponents, operation: str, coro):
    """
    Run a service call, showing any failure to the operator.

    Returns the result, or None when the call failed.
    """
    try:
        return run_async(coro)
    except ChurchOfficeError as e:
        st.error(user_message(e))
    except StorageError as e:
        components.activity.log_storage_error(operation, e)
        st.error(user_message(e))
    return None


def main():
    """Main application entry point."""
    components = get_components()
    gate = components.session_gate(st.session_state)

    if not gate.is_authenticated():
        render_login_page(components)
        return

    user = gate.current_user()
    settings = get_settings().app

    # Sidebar navigation
    st.sidebar.title(f"⛪ {settings.church_name}")
    st.sidebar.markdown(f"**{user.name}**")
    if isinstance(components.gateway, InMemoryGateway):
        st.sidebar.warning("Sin base de datos: los datos no se guardan")

    active = attempt(components, "get_active_period", components.periods.get_active_period())
    if active is not None:
        st.sidebar.success(f"Mes activo: {active.name}")
    else:
        st.sidebar.info("No hay un mes activo")

    st.sidebar.markdown("---")
    page = st.sidebar.radio(
        "Ir a:",
        [
            "📅 Control Mensual",
            "💰 Ingresos y Egresos",
            "🙏 Diezmos",
            "📈 Asistencia",
            "👥 Discipulado",
            "📦 Inventario",
            "💸 Flujo de Pago",
            "📝 Censo",
        ],
        index=0,
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("Cerrar sesión"):
        gate.logout()
        st.rerun()

    if settings.debug_mode:
        render_status_panel(settings)

    # Route to appropriate page
    if page == "📅 Control Mensual":
        render_period_page(components)
    elif page == "💰 Ingresos y Egresos":
        render_ledger_page(components, active)
    elif page == "🙏 Diezmos":
        render_tithes_page(components, active)
    elif page == "📈 Asistencia":
        render_attendance_page(components, active)
    elif page == "👥 Discipulado":
        render_discipleship_page(components, active)
    elif page == "📦 Inventario":
        render_inventory_page(components)
    elif page == "💸 Flujo de Pago":
        render_payment_flow_page(components)
    elif page == "📝 Censo":
        render_census_page(components)


def render_status_panel(settings):
    """Configuration status, shown in the sidebar in debug mode."""
    with st.sidebar.expander("🔧 Estado de configuración"):
        st.markdown(f"**Entorno:** {settings.app_environment}")

        status = validate_all_settings()
        sections = [
            ("Base de datos", "database"),
            ("Sesión", "session"),
            ("Aplicación", "app"),
        ]
        for name, key in sections:
            if status.get(key, False):
                st.success(f"✅ {name}")
            else:
                error = status.get(f"{key}_error", "No configurado")
                st.error(f"❌ {name} - {error}")


def render_login_page(components: AppComponents):
    """Render the login form."""
    st.title("⛪ Dashboard Iglesia")
    st.markdown("Ingrese su cédula y contraseña.")

    with st.form("login"):
        cedula = st.text_input("Cédula")
        password = st.text_input("Contraseña", type="password")
        submitted = st.form_submit_button("Ingresar", type="primary")

    if submitted:
        gate = components.session_gate(st.session_state)
        try:
            gate.login(cedula, password)
            st.rerun()
        except ChurchOfficeError as e:
            st.error(user_message(e))


def require_active(active) -> bool:
    """Stop a period-scoped screen when there is no active month."""
    if active is None:
        st.markdown("""
        <div class="info-box">
            <h4>No hay un mes activo seleccionado</h4>
            <p>Inicie un nuevo mes en <strong>Control Mensual</strong>.</p>
        </div>
        """, unsafe_allow_html=True)
        return False
    return True


def render_period_page(components: AppComponents):
    """Render the month lifecycle page."""
    st.title("📅 Control Mensual")
    periods = components.periods

    active = attempt(components, "get_active_period", periods.get_active_period())

    col1, col2 = st.columns(2)
    with col1:
        if st.button("▶️ Iniciar nuevo mes", type="primary"):
            period = attempt(components, "start_new_period", periods.start_new_period())
            if period is not None:
                st.success(f"Mes iniciado: {period.name}")
                st.rerun()
    with col2:
        if active is not None and st.button("⏹️ Cerrar mes actual"):
            closed = attempt(components, "close_current_period", periods.close_current_period())
            if closed is not None:
                st.success(f"Mes cerrado: {closed.name}")
                st.rerun()

    if active is not None:
        st.markdown("---")
        st.subheader(f"Resumen de {active.name}")
        render_summary(components, active.id)
        render_configuration(components)

    st.markdown("---")
    st.subheader("Meses cerrados")
    closed_periods = attempt(components, "get_closed_periods", periods.get_closed_periods()) or []
    if not closed_periods:
        st.info("Todavía no hay meses cerrados.")
    for period in closed_periods:
        end = period.end_date.strftime("%d/%m/%Y") if period.end_date else "-"
        with st.expander(f"{period.name} (cerrado {end})"):
            render_summary(components, period.id)


def render_summary(components: AppComponents, period_id: str):
    summary = attempt(components, "build_summary", components.summary.build(period_id))
    if summary is None:
        return
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total Ingresos", format_currency(summary.total_ingresos),
                f"{summary.ingresos_count} registros")
    col2.metric("Total Egresos", format_currency(summary.total_egresos),
                f"{summary.egresos_count} registros")
    col3.metric("Total Diezmos", format_currency(summary.total_diezmos),
                f"{summary.diezmos_count} registros")
    col4.metric("Asistencia total", summary.attendance_total)
    st.markdown(f"**Balance:** {format_currency(summary.balance)}")


def render_configuration(components: AppComponents):
    """Option lists of the active month."""
    with st.expander("⚙️ Configuración del mes"):
        configuration = attempt(
            components, "get_configuration", components.periods.get_configuration()
        )
        if configuration is None:
            return
        labels = {
            "ministerios": "Ministerios",
            "categorias_principales": "Categorías principales",
            "detalles": "Detalles",
        }
        for list_name, label in labels.items():
            st.markdown(f"**{label}:** " + ", ".join(getattr(configuration, list_name)))
            col1, col2 = st.columns([3, 1])
            value = col1.text_input(f"Nueva opción ({label})", key=f"new_{list_name}")
            if col2.button("Agregar", key=f"add_{list_name}"):
                if attempt(components, "add_option",
                           components.periods.add_option(list_name, value)) is not None:
                    st.rerun()


def render_ledger_page(components: AppComponents, active):
    """Render the income/expense ledger."""
    st.title("💰 Ingresos y Egresos")
    if not require_active(active):
        return
    ledger = components.ledger
    configuration = attempt(components, "get_configuration", components.periods.get_configuration())
    if configuration is None:
        return

    with st.form("ledger_entry", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            tipo = st.selectbox("Tipo *", [kind.value for kind in LedgerKind])
            fecha = st.date_input("Fecha *", value=date.today())
            monto = st.number_input("Monto *", min_value=0.0, step=1000.0, format="%.2f")
            concepto = st.text_input("Concepto")
        with col2:
            ministerio = st.selectbox("Ministerio *", configuration.ministerios)
            categoria = st.selectbox("Categoría principal *", configuration.categorias_principales)
            detalle = st.selectbox("Detalle *", configuration.detalles)
            observacion = st.text_area("Observación")
        submitted = st.form_submit_button("Guardar", type="primary")

    if submitted:
        entry = attempt(components, "create_ledger_entry", ledger.create_entry(tipo, {
            "fecha": fecha,
            "monto": Decimal(str(monto)),
            "concepto": concepto or None,
            "ministerio": ministerio,
            "categoria_principal": categoria,
            "detalle": detalle,
            "observacion": observacion or None,
        }))
        if entry is not None:
            st.success("Registro guardado")

    totals = attempt(components, "ledger_totals", ledger.totals())
    if totals is not None:
        col1, col2, col3 = st.columns(3)
        col1.metric("Ingresos", format_currency(totals.total_ingresos))
        col2.metric("Egresos", format_currency(totals.total_egresos))
        col3.metric("Balance", format_currency(totals.balance))

    lines = attempt(components, "ledger_statement", ledger.statement()) or []
    for line in lines:
        entry = line.entry
        col1, col2, col3, col4 = st.columns([2, 4, 2, 1])
        col1.write(f"{entry.fecha:%d/%m/%Y} · {line.tipo.value}")
        col2.write(f"{entry.ministerio} / {entry.categoria_principal} / {entry.detalle}")
        col3.write(format_currency(entry.monto))
        if col4.button("🗑️", key=f"del_{line.tipo.value}_{entry.id}"):
            attempt(components, "delete_ledger_entry", ledger.delete_entry(line.tipo, entry.id))
            st.rerun()


def render_tithes_page(components: AppComponents, active):
    """Render the tithe registry."""
    st.title("🙏 Diezmos")
    if not require_active(active):
        return
    tithes = components.tithes

    next_number = attempt(components, "next_tithe_number", tithes.get_next_number()) or 1
    with st.form("tithe", clear_on_submit=True):
        st.markdown(f"**Número:** {next_number}")
        fecha = st.date_input("Fecha *", value=date.today())
        donador = st.text_input("Donador *")
        valor = st.number_input("Valor *", min_value=0.0, step=1000.0, format="%.2f")
        submitted = st.form_submit_button("Guardar", type="primary")

    if submitted:
        saved = attempt(components, "create_tithe", tithes.create({
            "fecha": fecha,
            "donador": donador,
            "valor": Decimal(str(valor)),
        }))
        if saved is not None:
            st.success(f"Diezmo #{saved.numero} guardado")
            st.rerun()

    total = attempt(components, "tithe_total", tithes.get_total())
    if total is not None:
        st.markdown(f'<div class="big-number">{format_currency(total)}</div>', unsafe_allow_html=True)

    entries = attempt(components, "list_tithes", tithes.list()) or []
    st.dataframe(
        [
            {"#": t.numero, "Fecha": t.fecha, "Donador": t.donador, "Valor": float(t.valor)}
            for t in entries
        ],
        use_container_width=True,
    )


def render_attendance_page(components: AppComponents, active):
    """Render the attendance grid."""
    st.title("📈 Asistencia")
    if not require_active(active):
        return
    attendance = components.attendance

    grid = attempt(components, "attendance_grid", attendance.get_grid())
    if grid is None:
        return
    if not grid.details and st.button("Crear filas predeterminadas"):
        attempt(components, "initialize_details", attendance.initialize_default_details())
        st.rerun()

    col1, col2 = st.columns(2)
    with col1:
        new_column = st.text_input("Nueva columna (fecha de servicio)")
        if st.button("Agregar columna") and attempt(
            components, "add_column", attendance.add_column(new_column)
        ):
            st.rerun()
    with col2:
        new_detail = st.text_input("Nueva fila")
        if st.button("Agregar fila") and attempt(
            components, "add_detail", attendance.add_detail(new_detail)
        ):
            st.rerun()

    for detail in grid.details:
        cols = st.columns(len(grid.columns) + 2)
        cols[0].markdown(f"**{detail.nombre}**")
        for index, column in enumerate(grid.columns, start=1):
            current = grid.value(detail.id, column.id)
            value = cols[index].number_input(
                column.nombre,
                min_value=0,
                value=current,
                step=1,
                key=f"cell_{detail.id}_{column.id}",
            )
            if value != current:
                attempt(components, "set_count",
                        attendance.set_count(detail.id, column.id, value))
        cols[-1].markdown(f"**{grid.row_total(detail.id)}**")

    st.markdown(f"**Total general:** {grid.grand_total}")


def render_discipleship_page(components: AppComponents, active):
    """Render the discipleship sheet."""
    st.title("👥 Discipulado")
    if not require_active(active):
        return
    discipleship = components.discipleship

    col1, col2 = st.columns(2)
    with col1:
        name = st.text_input("Nuevo participante")
        if st.button("Agregar participante") and attempt(
            components, "add_participant", discipleship.add_participant(name)
        ):
            st.rerun()
    with col2:
        fecha = st.date_input("Nueva fecha", value=date.today())
        if st.button("Agregar fecha") and attempt(
            components, "add_date", discipleship.add_date(fecha)
        ):
            st.rerun()

    sheet = attempt(components, "discipleship_sheet", discipleship.get_sheet())
    if sheet is None:
        return
    statuses = [status.value for status in AttendanceStatus]
    for participant in sheet.participants:
        cols = st.columns(len(sheet.dates) + 2)
        cols[0].markdown(f"**{participant.name}**")
        for index, meeting in enumerate(sheet.dates, start=1):
            current = sheet.status(participant.id, meeting.id)
            value = cols[index].selectbox(
                f"{meeting.fecha:%d/%m}",
                statuses,
                index=statuses.index(current),
                key=f"mark_{participant.id}_{meeting.id}",
            )
            if value != current:
                attempt(components, "set_status",
                        discipleship.set_status(participant.id, meeting.id, value))
        cols[-1].markdown(f"**{sheet.present_count_for_participant(participant.id)}**")


def render_inventory_page(components: AppComponents):
    """Render the inventory."""
    st.title("📦 Inventario")
    inventory = components.inventory
    options = attempt(components, "inventory_options", inventory.get_options())
    if options is None:
        return

    with st.form("inventory_item", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            cantidad = st.number_input("Cantidad *", min_value=0, step=1)
            codigo = st.text_input("Código *")
            detalle = st.text_input("Detalle *")
            numero_serie = st.text_input("Número de serie")
        with col2:
            ubicacion = st.selectbox("Ubicación *", options.ubicaciones)
            ministerio = st.selectbox("Ministerio *", options.ministerios)
            estado = st.selectbox("Estado *", options.estados)
        submitted = st.form_submit_button("Guardar", type="primary")

    if submitted:
        item = attempt(components, "create_inventory_item", inventory.items.create({
            "cantidad": cantidad,
            "codigo": codigo,
            "detalle": detalle,
            "numero_serie": numero_serie or None,
            "ubicacion": ubicacion,
            "ministerio": ministerio,
            "estado": estado,
        }))
        if item is not None:
            st.success("Artículo guardado")

    items = attempt(components, "list_inventory", inventory.items.list()) or []
    st.dataframe(
        [item.model_dump(exclude={"id", "created_at", "updated_at"}) for item in items],
        use_container_width=True,
    )


def render_payment_flow_page(components: AppComponents):
    """Render payment-flow tables and their export."""
    st.title("💸 Flujo de Pago")
    payment_flow = components.payment_flow

    nombre = st.text_input("Nombre de la tabla")
    if st.button("Crear tabla", type="primary") and attempt(
        components, "create_payment_table", payment_flow.create_table(nombre)
    ):
        st.rerun()

    tables = attempt(components, "list_payment_tables", payment_flow.get_all_tables()) or []
    for table in tables:
        with st.expander(f"{table.table.nombre} · {format_currency(table.total)}"):
            with st.form(f"row_{table.table.id}", clear_on_submit=True):
                col1, col2 = st.columns(2)
                fecha = col1.date_input("Fecha", value=date.today())
                valor = col2.number_input("Valor", min_value=0.0, step=1000.0, format="%.2f")
                beneficiarios = st.text_input("Beneficiarios")
                detalle = st.text_input("Detalle")
                if st.form_submit_button("Agregar fila"):
                    if attempt(components, "add_payment_row", payment_flow.add_row(table.table.id, {
                        "fecha": fecha,
                        "valor": Decimal(str(valor)),
                        "beneficiarios": beneficiarios,
                        "detalle": detalle,
                    })):
                        st.rerun()

            st.dataframe(
                [
                    {"Fecha": row.fecha, "Beneficiarios": row.beneficiarios,
                     "Detalle": row.detalle, "Valor": float(row.valor)}
                    for row in table.rows
                ],
                use_container_width=True,
            )

            exported = attempt(components, "export_payment_table",
                               payment_flow.export_html(table.table.id))
            if exported is not None:
                filename, document = exported
                st.download_button(
                    "📄 Descargar",
                    data=document,
                    file_name=filename,
                    mime="text/html",
                    key=f"export_{table.table.id}",
                )
            if st.button("🗑️ Eliminar tabla", key=f"delete_{table.table.id}"):
                attempt(components, "delete_payment_table",
                        payment_flow.delete_table(table.table.id))
                st.rerun()


def render_census_page(components: AppComponents):
    """Render the census forms."""
    st.title("📝 Censo")
    census = components.census
    options = attempt(components, "census_options", census.get_options())
    if options is None:
        return

    with st.form("census_personal", clear_on_submit=True):
        st.subheader("Datos personales")
        col1, col2 = st.columns(2)
        with col1:
            cedula = st.text_input("Cédula *")
            nombres = st.text_input("Apellidos y nombres *")
            tipo_sangre = st.selectbox("Tipo de sangre", [""] + options.tipos_sangre)
        with col2:
            estado_civil = st.selectbox("Estado civil", [""] + options.estados_civiles)
            celular = st.text_input("Celular")
            ciudad = st.text_input("Ciudad")
        submitted = st.form_submit_button("Guardar", type="primary")

    if submitted:
        record = attempt(components, "create_census_record", census.personal.create({
            "cedula": cedula,
            "apellidos_nombres": nombres,
            "tipo_sangre": tipo_sangre or None,
            "estado_civil": estado_civil or None,
            "celular": celular or None,
            "ciudad": ciudad or None,
        }))
        if record is not None:
            st.success("Registro guardado")

    records = attempt(components, "list_census", census.personal.list()) or []
    st.dataframe(
        [
            {"Cédula": r.cedula, "Nombres": r.apellidos_nombres, "Celular": r.celular,
             "Ciudad": r.ciudad}
            for r in records
        ],
        use_container_width=True,
    )


if __name__ == "__main__":
    main()
