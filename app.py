import pandas as pd
import streamlit as st
from contextlib import contextmanager
from typing import Any, Dict, List

from fans.charts import facility_band_chart, facility_variance_chart, system_comparison_chart
from fans.data import metric_value
from fans.export import export_csv, export_filename
from fans.filters import ALL
from fans.ranking import SortField
from fans.session import DashboardSession


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;margin-bottom: 8px;}
        .good {color: #16a34a;} .bad {color: #dc2626;} .neutral {color: #6b7280;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def fmt_currency(value: Any, decimals: int = 2) -> str:
    value = metric_value(value)
    return f"${value:,.{decimals}f}" if value is not None else "-"


def fmt_pct(value: Any) -> str:
    value = metric_value(value)
    if value is None:
        return "-"
    return f"{'+' if value > 0 else ''}{value:.1f}%"


def get_session() -> DashboardSession:
    if "fans_session" not in st.session_state:
        st.session_state["fans_session"] = DashboardSession.from_reference_data()
    return st.session_state["fans_session"]


# ---------- UI setup ----------
st.set_page_config(page_title="FANS Peer Comparison Dashboard", layout="wide")
inject_base_styles()
st.title("FANS Peer Comparison Dashboard")
st.caption("Benchmark your performance against peers.")

try:
    session = get_session()
except Exception as exc:
    st.error(f"Reference data could not be loaded: {exc}")
    st.stop()

options = session.options()

# ----- Sidebar: filters -----
with st.sidebar:
    st.markdown("### Filters")
    health_system = st.selectbox("Health System", [ALL] + options["health_systems"], format_func=lambda v: "All Systems" if v == ALL else v)
    period = st.selectbox("Period", [ALL] + options["periods"], format_func=lambda v: "All Periods" if v == ALL else v)
    census_range = None
    bounds = options["census_bounds"]
    if bounds is not None and bounds[0] < bounds[1]:
        census_range = st.slider("Daily Census", min_value=float(bounds[0]), max_value=float(bounds[1]), value=(float(bounds[0]), float(bounds[1])))
    session.set_filters({"health_system": health_system, "period": period, "census_range": census_range})

    st.markdown("---")
    st.markdown("### Import")
    uploaded = st.file_uploader(
        "Spreadsheet (.xlsx, .xls, .csv)",
        type=["xlsx", "xls", "csv"],
        key=f"uploader_{st.session_state.get('_uploader_gen', 0)}",
    )
    if uploaded is not None and st.session_state.get("_last_upload") != uploaded.file_id:
        st.session_state["_last_upload"] = uploaded.file_id
        session.close_import()
        session.process_upload(uploaded.getvalue(), uploaded.name)

overview = session.overview()
portfolio = session.portfolio()
filtered = session.filtered()
rankings = session.rankings()


def render_kpi_tiles(metrics: Dict[str, Any]):
    total = metrics["below_median"] + metrics["above_median"]
    cols = st.columns(4)
    cols[0].metric("Avg AOE Variance", fmt_pct(metrics["avg_variance"]), help="Mean AOE variance vs peer median.")
    cols[1].metric("Below Peer Median", f"{metrics['below_median']} / {total}", delta=f"{metrics['pct_below_median']:.0f}% performing well")
    cols[2].metric("Potential Savings", f"${metrics['potential_savings'] / 1_000_000:.1f}M", help="Annualized AOE excess over peer median.")
    top = metrics["top_performer"]
    cols[3].metric(
        "Top Performer",
        (top["facility_name"][:20] if top else "-"),
        delta=f"{fmt_pct(top['aoe_variance_pct'])} vs median" if top else None,
        delta_color="inverse",
    )


def close_import_panel():
    session.close_import()
    # new uploader key empties the widget; the same file can then be picked again
    st.session_state.pop("_last_upload", None)
    st.session_state["_uploader_gen"] = st.session_state.get("_uploader_gen", 0) + 1


def render_import_panel():
    pipeline = session.pipeline
    if pipeline.step == "upload":
        return
    with card("Import Data"):
        if pipeline.step == "preview":
            for warning in pipeline.warnings:
                st.warning(warning)
            st.caption(f"Detected columns: {', '.join(f'{k} ← {v}' for k, v in pipeline.mapping.items()) or 'none'}")
            preview = pd.DataFrame([row.__dict__ for row in pipeline.preview])
            st.dataframe(preview.head(10), hide_index=True, use_container_width=True)
            c1, c2 = st.columns(2)
            if c1.button("Back"):
                close_import_panel()
                st.rerun()
            if c2.button(f"Import {len(pipeline.preview)} Records", type="primary"):
                session.confirm_import()
                st.rerun()
        elif pipeline.result is not None:
            result = pipeline.result
            if result.success and result.records_imported > 0:
                st.success(f"Import successful: {result.records_imported} records imported")
            else:
                st.error("Import failed")
                for err in result.errors:
                    st.write(err)
            if st.button("Done"):
                close_import_panel()
                st.rerun()


def render_facility_tab():
    facilities = options["facilities"]
    if not facilities:
        st.info("No facilities match the selected filters.")
        return
    current = session.current_facility()
    session.selected_facility = st.selectbox("Facility", facilities, index=facilities.index(current) if current in facilities else 0)
    detail = session.facility_detail()
    if detail["record"] is None:
        st.info("No peer benchmark data for this facility.")
        return
    record = detail["record"]
    st.markdown(f"**{record['display_name']}** · {record['health_system']} · {record['period']}")
    st.caption(f"Daily Census: {record['daily_census']:.0f}" if record["daily_census"] is not None else "Daily Census: -")
    cols = st.columns(2)
    with cols[0]:
        with card("Variance vs Peer Median"):
            st.altair_chart(facility_variance_chart(detail["breakdown"]), use_container_width=True)
    with cols[1]:
        with card("Actual vs Peer Range"):
            st.altair_chart(facility_band_chart(detail["breakdown"]), use_container_width=True)
    table = pd.DataFrame(detail["breakdown"])
    for col in ["actual", "peer_min", "peer_mid", "peer_max", "variance"]:
        table[col] = table[col].apply(fmt_currency)
    table["variance_pct"] = table["variance_pct"].apply(fmt_pct)
    st.dataframe(table, hide_index=True, use_container_width=True)


def render_rankings_tab(ranked: pd.DataFrame):
    sortable: List[str] = [f.value for f in SortField]
    c1, c2 = st.columns([3, 1])
    field = c1.selectbox("Sort by", sortable, index=sortable.index(session.sort_field.value))
    direction = c2.radio("Direction", ["desc", "asc"], index=0 if session.sort_direction == "desc" else 1, horizontal=True)
    if field != session.sort_field.value or direction != session.sort_direction:
        session.sort_field, session.sort_direction = SortField(field), direction
        ranked = session.rankings()
    st.download_button(
        "Export CSV",
        data=export_csv(ranked, "peer_comparison").encode("utf-8"),
        file_name=export_filename("peer_comparison"),
        mime="text/csv",
    )
    view = ranked.head(50)[
        ["facility_name", "health_system", "daily_census", "aoe_ppd", "aoe_peer_mid", "aoe_variance_pct", "labor_variance_pct"]
    ].copy()
    view.insert(0, "rank", range(1, len(view) + 1))
    st.dataframe(view, hide_index=True, use_container_width=True)


def render_systems_tab():
    systems = session.system_comparison()
    if not systems:
        st.info("No health systems with peer data for the selected filters.")
        return
    with card("Average AOE Variance by Health System"):
        st.altair_chart(system_comparison_chart(systems), use_container_width=True)
    st.dataframe(pd.DataFrame(systems), hide_index=True, use_container_width=True)


def render_overview_tab(records: pd.DataFrame, summary_stats: Dict[str, Any]):
    averages = summary_stats["averages"]
    cols = st.columns(5)
    cols[0].metric("Records", f"{summary_stats['record_count']:,}")
    cols[1].metric("Avg AOE PPD", fmt_currency(averages["aoe_ppd"]))
    cols[2].metric("Avg Labor PPD", fmt_currency(averages["labor_ppd"]))
    cols[3].metric("Avg COGS PPD", fmt_currency(averages["cogs_ppd"]))
    cols[4].metric("Avg Revenue PPD", fmt_currency(averages["revenue_ppd"]))
    st.download_button(
        "Export CSV",
        data=export_csv(records, "overview").encode("utf-8"),
        file_name=export_filename("overview"),
        mime="text/csv",
    )
    st.dataframe(records, hide_index=True, use_container_width=True)


render_import_panel()
render_kpi_tiles(portfolio)
tabs = st.tabs(["Facility Analysis", "Performance Rankings", "System Comparison", "Overview"])
with tabs[0]:
    render_facility_tab()
with tabs[1]:
    render_rankings_tab(rankings)
with tabs[2]:
    render_systems_tab()
with tabs[3]:
    render_overview_tab(filtered, overview)

st.caption(
    f"{len(session.with_variance())} facilities with peer data | "
    f"{session.summary.total_health_systems} health systems | "
    f"{len(session.imported)} imported records this session"
)
