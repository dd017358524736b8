"""
Streamlit front-end for the repair shop
Intake form, record history and editing on top of the records API
"""

import asyncio

import streamlit as st

from src.config import settings
from src.logging_config import setup_logging
from src.documents.document_renderer import DocumentKind, DocumentRenderer
from src.errors import ImageCompressionError, RecordValidationError, RemoteError
from src.models.line_items import EDITABLE_FIELDS
from src.models.vehicle_record import ItemKind, RecordStatus, VehicleRecord
from src.services.api_record_store import ApiRecordStore
from src.services.history_service import HistoryService
from src.services.record_service import PhotoUpload, RecordService
from src.services.share_composer import ShareComposer

setup_logging()

st.set_page_config(
    page_title="Taller JYM",
    page_icon=None,
    layout="centered",
    initial_sidebar_state="collapsed"
)

PRIMARY = "#2563eb"
ACCENT = "#1e3a8a"
FONT_FAMILY = "Arial, 'Helvetica Neue', sans-serif"

st.markdown(
    f"""
<style>
    html, body, [class*="css"]  {{
        font-family: {FONT_FAMILY};
    }}
    .shop-header {{
        background: linear-gradient(90deg, {ACCENT}, {PRIMARY});
        color: white;
        padding: 1rem;
        border-radius: 12px;
        text-align: center;
    }}
    .status-done {{
        color: #15803d;
        font-weight: 600;
    }}
    .status-open {{
        color: #a16207;
        font-weight: 600;
    }}
    .stButton>button {{
        width: 100%;
        border-radius: 10px;
        font-weight: 600;
    }}
</style>
""",
    unsafe_allow_html=True,
)

FORM_FIELDS = {
    "plate": "Placa",
    "model": "Modelo",
    "mileage": "Km",
    "client_name": "Nombre",
    "contact": "WhatsApp / Contacto",
    "external_code": "Código de trabajo",
}
ITEM_LABELS = {ItemKind.WORK: "Trabajos", ItemKind.PARTS: "Repuestos"}


def get_store() -> ApiRecordStore:
    if "store" not in st.session_state:
        st.session_state["store"] = ApiRecordStore()
    return st.session_state["store"]


def get_history() -> HistoryService:
    if "history" not in st.session_state:
        st.session_state["history"] = HistoryService(get_store())
    return st.session_state["history"]


def current_record() -> VehicleRecord:
    if "record" not in st.session_state:
        load_into_form(VehicleRecord())
    return st.session_state["record"]


def item_key(kind: ItemKind, index: int, field: str) -> str:
    return f"{kind.value}_{field}_{index}"


def sync_form_state():
    """Copy the record into the widget state (after loads and structural edits)"""
    record = st.session_state["record"]
    for attr in FORM_FIELDS:
        st.session_state[f"field_{attr}"] = getattr(record, attr) or ""
    for kind in ItemKind:
        for i, item in enumerate(record.items(kind)):
            for field in EDITABLE_FIELDS:
                st.session_state[item_key(kind, i, field)] = getattr(item, field)
    st.session_state["cost_input"] = str(record.cost)
    st.session_state["status_input"] = record.status.value


def load_into_form(record: VehicleRecord):
    st.session_state["record"] = record
    sync_form_state()


def on_field_change(attr: str):
    setattr(current_record(), attr, st.session_state[f"field_{attr}"])


def on_item_change(kind: ItemKind, index: int, field: str):
    record = current_record()
    record.update_item(kind, index, field, st.session_state[item_key(kind, index, field)])
    st.session_state["cost_input"] = str(record.cost)


def on_item_add(kind: ItemKind):
    current_record().add_item(kind)
    sync_form_state()


def on_item_remove(kind: ItemKind, index: int):
    current_record().remove_item(kind, index)
    sync_form_state()


def on_cost_change():
    current_record().set_cost(st.session_state["cost_input"])


def on_status_change():
    current_record().status = RecordStatus(st.session_state["status_input"])


def render_items(kind: ItemKind):
    record = current_record()
    st.markdown(f"**{ITEM_LABELS[kind]}**")
    for i, _ in enumerate(record.items(kind)):
        col_desc, col_price, col_remove = st.columns([6, 3, 1])
        with col_desc:
            st.text_input(
                "Descripción", key=item_key(kind, i, "description"),
                on_change=on_item_change, args=(kind, i, "description"),
                label_visibility="collapsed", placeholder="Descripción",
            )
        with col_price:
            st.text_input(
                "Precio", key=item_key(kind, i, "price"),
                on_change=on_item_change, args=(kind, i, "price"),
                label_visibility="collapsed", placeholder="0",
            )
        with col_remove:
            st.button("✕", key=f"{kind.value}_remove_{i}", on_click=on_item_remove, args=(kind, i))
    st.button(f"Agregar {ITEM_LABELS[kind].lower()}", key=f"{kind.value}_add", on_click=on_item_add, args=(kind,))


def notify(level: str, message: str):
    st.session_state["form_notice"] = (level, message)


def on_save():
    record = current_record()
    uploaded = st.session_state.get("photo_upload")
    photo = PhotoUpload(content=uploaded.getvalue(), file_name=uploaded.name) if uploaded else None
    service = RecordService(get_store())
    try:
        asyncio.run(service.save(record, photo))
    except RecordValidationError:
        notify("warning", "Por favor completa al menos la Placa y el Cliente.")
        return
    except ImageCompressionError:
        notify("error", "Error al procesar la imagen.")
        return
    except RemoteError as e:
        notify("error", f"Error al guardar: {e}")
        return

    notify("success", "¡Registro guardado exitosamente en la nube!")
    load_into_form(VehicleRecord())


def on_cancel_edit():
    load_into_form(VehicleRecord())


def render_form():
    record = current_record()
    notice = st.session_state.pop("form_notice", None)
    if notice:
        getattr(st, notice[0])(notice[1])

    heading = "Editar Registro" if not record.is_new else "Nuevo Ingreso"
    st.subheader(heading)
    if not record.is_new:
        st.button("Cancelar edición", on_click=on_cancel_edit)

    st.caption("Datos del Vehículo")
    for attr in ("plate", "model", "mileage", "external_code"):
        st.text_input(FORM_FIELDS[attr], key=f"field_{attr}", on_change=on_field_change, args=(attr,))

    st.caption("Datos del Cliente")
    for attr in ("client_name", "contact"):
        st.text_input(FORM_FIELDS[attr], key=f"field_{attr}", on_change=on_field_change, args=(attr,))

    st.caption("Detalles del Servicio")
    render_items(ItemKind.WORK)
    render_items(ItemKind.PARTS)
    st.text_input("Costo Estimado", key="cost_input", on_change=on_cost_change)
    if not record.is_new:
        st.selectbox(
            "Estado", [s.value for s in RecordStatus],
            key="status_input", on_change=on_status_change,
        )

    st.file_uploader("Capturar / Subir Foto", type=["jpg", "jpeg", "png", "webp"], key="photo_upload")
    st.button("Guardar Registro en Nube", type="primary", on_click=on_save)

    renderer = DocumentRenderer()
    composer = ShareComposer()
    col_pdf, col_share = st.columns(2)
    with col_pdf:
        kind = DocumentKind.INTAKE_RECEIPT if record.status is RecordStatus.IN_PROGRESS else DocumentKind.SERVICE_REPORT
        document = renderer.render(record, kind)
        st.download_button("PDF", data=document.content, file_name=document.filename, mime="application/pdf")
    with col_share:
        message = composer.compose(record)
        st.link_button("Enviar", composer.whatsapp_link(record.contact, message.text))


def run_history_action(action, record_id: str, error_prefix: str):
    try:
        asyncio.run(action(record_id))
    except RemoteError as e:
        st.session_state["history_error"] = f"{error_prefix}: {e}"


def on_toggle(record_id: str):
    run_history_action(get_history().toggle_status, record_id, "Error al actualizar estado")


def on_delete(record_id: str):
    run_history_action(get_history().delete, record_id, "Error al borrar")


def on_edit(record_id: str):
    load_into_form(get_history().find(record_id).model_copy(deep=True))


def render_history():
    history = get_history()
    try:
        asyncio.run(history.refresh())
    except RemoteError as e:
        st.error(f"Error: {e}")
        return

    error = st.session_state.pop("history_error", None)
    if error:
        st.error(error)

    term = st.text_input("Buscar por placa, cliente o ID...")
    records = history.search(term)
    if not records:
        st.info("No se encontraron resultados." if term else "No hay registros aún.")
        return

    for record in records:
        with st.container(border=True):
            created = record.created_at.strftime("%d/%m/%Y") if record.created_at else ""
            css = "status-done" if record.status is RecordStatus.DONE else "status-open"
            st.markdown(
                f"{created} · <span class='{css}'>{record.status.value}</span>",
                unsafe_allow_html=True,
            )
            col_photo, col_info = st.columns([1, 4])
            with col_photo:
                if record.photo_url:
                    st.image(record.photo_url, width=64)
            with col_info:
                st.markdown(f"**{record.plate}** - {record.model or 'Sin Modelo'}")
                st.write(record.client_name)
                summary = ", ".join(i.description for i in record.work_items.filled_items())
                st.caption(summary)

            col_toggle, col_edit, col_delete = st.columns(3)
            label = "Reabrir" if record.status is RecordStatus.DONE else "Terminar"
            col_toggle.button(label, key=f"toggle_{record.id}", on_click=on_toggle, args=(record.id,))
            col_edit.button("Editar", key=f"edit_{record.id}", on_click=on_edit, args=(record.id,))
            if col_delete.checkbox("Confirmar borrado", key=f"confirm_{record.id}"):
                col_delete.button("Borrar", key=f"delete_{record.id}", on_click=on_delete, args=(record.id,))


def main():
    st.markdown(
        f"<div class='shop-header'><h2>{settings.SHOP_NAME.title()}</h2>Gestión de Taller</div>",
        unsafe_allow_html=True,
    )
    current_record()
    tab_form, tab_history = st.tabs(["Nuevo Ingreso", "Historial"])
    with tab_form:
        render_form()
    with tab_history:
        render_history()


if __name__ == "__main__":
    main()
