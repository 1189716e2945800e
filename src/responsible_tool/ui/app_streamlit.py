"""
Streamlit UI for the Responsible Tool.

Features:
- Current local time in the business timezone
- Resolution preview for a hand-entered order, optionally at a simulated time
- Mapping table and statistics
"""
import streamlit as st

from responsible_tool.config.logging import configure_logging
from responsible_tool.config.settings import get_settings
from responsible_tool.engine import CollectingSink, FixedClock, Order, ResponsibleResolver, ZoneClock
from responsible_tool.engine.models import WEEKDAY_NAMES
from responsible_tool.rules.mapping_loader import MappingStore
from responsible_tool.services.mapping_service import MappingService


st.set_page_config(
    page_title="Responsible Assignment",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_settings_cached():
    """Get cached settings."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_dir)
    return settings


@st.cache_resource
def get_store():
    """Get cached mapping store."""
    return MappingStore(get_settings_cached().mapping_json)


try:
    settings = get_settings_cached()
    clock = ZoneClock(settings.timezone)
    store = get_store()
    config = store.config
    service = MappingService(settings.mapping_csv, settings.mapping_json)
except (FileNotFoundError, ValueError) as e:
    st.error(f"System Error: {e}")
    st.stop()


# ============================================================================
# SIDEBAR: Clock and mapping status
# ============================================================================
with st.sidebar:
    st.header("🕒 Business Time")
    with st.container(border=True):
        st.markdown(f"**{settings.timezone}**")
        st.markdown(f"`{clock.now()}`")

    st.divider()

    counts = config.counts()
    st.success(f"🔧 **{sum(counts.values())} Mapping Rules Active**")
    if config.default_id in (None, ''):
        st.warning("⚠️ No default responsible configured")
    else:
        st.caption(f"Default responsible: `{config.default_id}`")

    if st.button("🔄 Reload Mapping"):
        error = store.try_reload()
        if error:
            st.error(f"Reload failed, keeping current mapping: {error}")
        else:
            st.rerun()


st.title("Responsible Assignment")

tab1, tab2 = st.tabs(["⚡ Resolve", "📚 Mapping"])


# ============================================================================
# TAB 1: RESOLUTION PREVIEW
# ============================================================================
with tab1:
    col1, col2 = st.columns([1.4, 1.0], gap="large")

    with col1:
        st.subheader("Order")
        with st.container(border=True):
            order_id = st.text_input("Order ID", value="preview")
            tags = st.text_input("Tags", placeholder="vip, wholesale")
            c1, c2 = st.columns(2)
            with c1:
                shipping = st.text_input("Shipping Country", max_chars=2)
            with c2:
                billing = st.text_input("Billing Country", max_chars=2)
            source = st.text_input("Source Name", placeholder="web, pos, shopify_draft_order")

        simulate = st.toggle("Simulate time", value=False)
        preview_clock = clock
        if simulate:
            c1, c2, c3 = st.columns(3)
            with c1:
                weekday = st.selectbox("Weekday", options=list(range(7)), format_func=lambda d: WEEKDAY_NAMES[d], index=1)
            with c2:
                hour = st.number_input("Hour", min_value=0, max_value=23, value=9)
            with c3:
                minute = st.number_input("Minute", min_value=0, max_value=59, value=1)
            preview_clock = FixedClock(weekday, int(hour), int(minute))

    with col2:
        st.subheader("Result")
        order = Order(
            id=order_id,
            tags=tags or None,
            shipping_country_code=shipping.upper() or None,
            billing_country_code=billing.upper() or None,
            source_name=source or None,
        )
        sink = CollectingSink()
        result = ResponsibleResolver(clock=preview_clock, sink=sink).resolve(config, order)

        if result.resolved:
            st.metric("Responsible", str(result.responsible_id), delta=result.matched_by.value, delta_color="off")
        else:
            st.error("No responsible resolved")

        for message in sink.messages:
            st.warning(message)

        with st.expander("🔍 Resolution Details", expanded=True):
            for t in result.trace:
                if t.value:
                    st.caption(f"**{t.step}**: {t.description} = `{t.value}`")
                else:
                    st.caption(f"**{t.step}**: {t.description}")


# ============================================================================
# TAB 2: MAPPING TABLE
# ============================================================================
with tab2:
    stats = service.get_stats()
    c1, c2, c3 = st.columns(3)
    c1.metric("Entries", stats['total'])
    c2.metric("Active", stats['active'])
    c3.metric("Responsibles", stats['responsibles'])

    st.dataframe(service.to_frame(), use_container_width=True, hide_index=True)

    if st.button("⚙️ Compile Mapping", type="primary"):
        success, errors = service.compile()
        error = store.try_reload() if success else None
        if success and error:
            st.error(f"Compiled, but reload failed: {error}")
        elif success:
            st.success("Mapping compiled and reloaded")
            st.rerun()
        else:
            for err in errors:
                st.error(err)
