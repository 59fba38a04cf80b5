"""
Streamlit Dashboard for ExpensesHub

The screen a user opens every day to record spending and see where
the money went.

DESIGN PRINCIPLES:
1. One page: period controls on the left, numbers and chart on the right
2. Every change goes through the API, never straight to the database
3. Clear error messages; a failed save leaves the screen as it was

State lives in the client stores. They are created once per browser
session and passed explicitly to each render function.
"""

from datetime import date, datetime, time
from decimal import Decimal

import pandas as pd
import plotly.express as px
import streamlit as st

from expenseshub.client import ApiClient, CategoryStore, SettingsStore, TransactionStore
from expenseshub.config import get_settings
from expenseshub.errors import ExpensesHubError, ValidationError
from expenseshub.models import (
    ChartType,
    DataView,
    PeriodType,
    TransactionType,
)
from expenseshub.queries import period_range, summarize


# Page configuration
st.set_page_config(
    page_title="ExpensesHub",
    page_icon="💸",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .big-number {
        font-size: 2.2em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_api_client() -> ApiClient:
    """One HTTP client per server process (cached)."""
    return ApiClient()


def get_stores() -> tuple[TransactionStore, CategoryStore, SettingsStore]:
    """Stores for this browser session, created on first use."""
    if "stores" not in st.session_state:
        api = get_api_client()
        st.session_state.stores = (
            TransactionStore(api),
            CategoryStore(api),
            SettingsStore(api),
        )
    return st.session_state.stores


def local_today() -> date:
    return datetime.now(get_settings().app.tzinfo).date()


def show_error(e: ExpensesHubError) -> None:
    st.error(f"❌ {e.message}")
    if isinstance(e, ValidationError):
        for issue in e.issues:
            st.caption(f"• **{issue.field}**: {issue.message}")


def main():
    """Main application entry point."""
    transactions, categories, settings = get_stores()

    if settings.settings is None:
        settings.fetch()
    categories.fetch()

    st.sidebar.title("💸 ExpensesHub")
    st.sidebar.markdown("---")

    controls = render_sidebar(settings)
    window = period_range(
        controls["period"],
        datetime.combine(controls["reference"], time(12)),
        get_settings().app.tzinfo,
    )
    transactions.fetch(window.start, window.end)

    for store in (transactions, categories, settings):
        if store.error:
            st.warning(f"⚠️ {store.error}")

    render_overview(transactions, categories, settings, controls)
    st.markdown("---")

    col1, col2 = st.columns([3, 2])
    with col1:
        render_transactions(transactions, categories)
    with col2:
        render_add_transaction(transactions, categories)
        render_add_category(categories)


def render_sidebar(settings: SettingsStore) -> dict:
    """Period, view and chart controls, seeded from the saved preferences."""
    current = settings.settings
    periods = list(PeriodType)
    views = list(DataView)
    charts = list(ChartType)

    period = st.sidebar.selectbox(
        "Period",
        options=periods,
        index=periods.index(current.default_period) if current else periods.index(PeriodType.MONTHLY),
        format_func=lambda p: p.value.title(),
    )
    reference = st.sidebar.date_input("Showing period containing", value=local_today())
    view = st.sidebar.radio(
        "Show",
        options=views,
        index=views.index(current.default_data_view) if current else 0,
        format_func=lambda v: v.value.title(),
        horizontal=True,
    )
    chart = st.sidebar.selectbox(
        "Chart",
        options=charts,
        index=charts.index(current.default_chart_type) if current else 0,
        format_func=lambda c: c.value.title(),
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("💾 Save as defaults", disabled=current is None):
        try:
            settings.update({
                "defaultPeriod": period.value,
                "defaultDataView": view.value,
                "defaultChartType": chart.value,
            })
            st.sidebar.success("✅ Preferences saved")
        except ExpensesHubError as e:
            st.sidebar.error(f"❌ {e.message}")

    return {"period": period, "reference": reference, "view": view, "chart": chart}


def render_overview(
    transactions: TransactionStore,
    categories: CategoryStore,
    settings: SettingsStore,
    controls: dict,
):
    """Totals, breakdown chart and table, CSV download."""
    currency = settings.settings.currency if settings.settings else "EUR"
    summary = summarize(transactions.items)

    st.title(f"📊 {controls['period'].value.title()} overview")
    col1, col2, col3 = st.columns(3)
    col1.metric("Income", f"{summary.total_income:,.2f} {currency}")
    col2.metric("Expenses", f"{summary.total_expenses:,.2f} {currency}")
    col3.metric("Balance", f"{summary.balance:,.2f} {currency}")

    view: DataView = controls["view"]
    points = transactions.breakdown(categories.items, view.transaction_type)

    if not points:
        st.info(f"📋 No {view.value} recorded for this period yet.")
    else:
        df = pd.DataFrame({
            "Category": [p.label for p in points],
            "Amount": [float(p.value) for p in points],
            "Share (%)": [round(p.percentage, 1) for p in points],
        })
        colors = {p.label: p.color for p in points}

        chart: ChartType = controls["chart"]
        if chart is ChartType.BAR:
            fig = px.bar(df, x="Category", y="Amount", color="Category", color_discrete_map=colors)
        elif chart is ChartType.LINE:
            fig = px.line(df, x="Category", y="Amount", markers=True)
        else:
            fig = px.pie(
                df,
                names="Category",
                values="Amount",
                color="Category",
                color_discrete_map=colors,
                hole=0.5 if chart is ChartType.DOUGHNUT else 0,
            )
        fig.update_layout(showlegend=chart is not ChartType.BAR, margin=dict(t=20, b=20))

        col1, col2 = st.columns([3, 2])
        col1.plotly_chart(fig, use_container_width=True, config={"displayModeBar": False})
        col2.dataframe(df, hide_index=True, use_container_width=True)

    filename, content = transactions.export_csv(categories.items, controls["period"])
    st.download_button(
        "⬇️ Export CSV",
        data=content,
        file_name=filename,
        mime="text/csv",
        disabled=not transactions.items,
    )


def render_transactions(transactions: TransactionStore, categories: CategoryStore):
    st.markdown("### Transactions")
    if not transactions.items:
        st.caption("Nothing here yet.")
        return

    names = {c.id: f"{c.icon} {c.name}" for c in categories.items}
    for transaction in transactions.items:
        col1, col2, col3, col4 = st.columns([2, 3, 2, 1])
        sign = "-" if transaction.type is TransactionType.EXPENSE else "+"
        col1.markdown(transaction.date.astimezone(get_settings().app.tzinfo).date().isoformat())
        col2.markdown(
            f"{names.get(transaction.category_id, '❔ Unknown')}  \n"
            f"<small>{transaction.description}</small>",
            unsafe_allow_html=True,
        )
        col3.markdown(f"**{sign}{transaction.amount:,.2f}**")
        if col4.button("🗑️", key=f"delete-{transaction.id}", help="Delete"):
            try:
                transactions.delete(transaction.id)
                st.rerun()
            except ExpensesHubError as e:
                show_error(e)


def render_add_transaction(transactions: TransactionStore, categories: CategoryStore):
    st.markdown("### Add transaction")
    kind = st.radio(
        "Type",
        options=list(TransactionType),
        format_func=lambda t: t.value.title(),
        horizontal=True,
        key="new-transaction-type",
    )
    options = categories.by_type(kind)

    with st.form("add-transaction", clear_on_submit=True):
        amount = st.number_input("Amount", min_value=0.0, step=0.01, format="%.2f")
        category = st.selectbox(
            "Category",
            options=options,
            format_func=lambda c: f"{c.icon} {c.name}",
        )
        description = st.text_input("Description", max_chars=200)
        when = st.date_input("Date", value=local_today())
        submitted = st.form_submit_button("➕ Add", type="primary")

    if submitted:
        try:
            transactions.create({
                "type": kind.value,
                "amount": Decimal(str(amount)),
                "categoryId": category.id if category else "",
                "description": description,
                "date": datetime.combine(when, time(12)),
            })
            st.success("✅ Saved")
            st.rerun()
        except ExpensesHubError as e:
            show_error(e)


def render_add_category(categories: CategoryStore):
    with st.expander("🏷️ New category"):
        with st.form("add-category", clear_on_submit=True):
            name = st.text_input("Name", max_chars=30)
            icon = st.text_input("Icon", value="🔷")
            color = st.color_picker("Color", value="#8B5CF6")
            kind = st.selectbox(
                "Type",
                options=list(TransactionType),
                format_func=lambda t: t.value.title(),
            )
            submitted = st.form_submit_button("Create")

        if submitted:
            try:
                categories.create({
                    "name": name,
                    "icon": icon,
                    "color": color.upper(),
                    "type": kind.value,
                })
                st.success(f"✅ Category '{name}' created")
            except ExpensesHubError as e:
                show_error(e)


if __name__ == "__main__":
    main()
