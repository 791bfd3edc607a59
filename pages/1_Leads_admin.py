"""
Page 1: Leads Admin
Review captured leads and re-render a lead's ROI report
"""

import logging
import sys
from pathlib import Path

import pandas as pd
import streamlit as st

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from lead_queries import LeadQueries
from pdf_report_renderer import render_report
from roi_calculator import CalculatorInputs, calculate_roi, format_currency, format_number
from svg_rasterizer import ReportRenderError
from utils import check_authentication, get_cached_database_connection


st.set_page_config(page_title="Leads admin", page_icon="🗂️", layout="wide")

if not check_authentication():
    st.stop()

st.title("🗂️ Leads")

db = get_cached_database_connection()

limit = st.sidebar.slider("Leads to show", min_value=10, max_value=500, value=50, step=10)

try:
    leads_df = LeadQueries.get_recent_leads(db, limit=limit)
except Exception as e:
    logging.error(f"Failed to load leads: {e}")
    st.error("Could not load leads. Check the database configuration.")
    st.stop()

if leads_df.empty:
    st.info("No leads yet.")
    st.stop()

col1, col2, col3 = st.columns(3)
col1.metric("Leads", format_number(len(leads_df)))
col2.metric("With calculator data", format_number(int(leads_df['annual_order_volume'].notna().sum())))
col3.metric("Reports delivered", format_number(int(leads_df['pdf_report_url'].notna().sum())))

st.dataframe(leads_df, width="stretch", hide_index=True)

st.markdown("---")
st.subheader("Re-render a report")

lead_options = {
    f"#{row.id} - {row.name} <{row.email}>": row
    for row in leads_df.itertuples(index=False)
}
selected = st.selectbox("Lead", list(lead_options.keys()))
lead = lead_options[selected]

calculator_values = {
    'annual_lifeline_enrollments': lead.annual_lifeline_enrollments,
    'average_review_time_seconds': lead.average_review_time_seconds,
    'annual_order_volume': lead.annual_order_volume,
    'average_non_compliance_cost': lead.average_non_compliance_cost,
}
# NULL columns come back as NaN, which is truthy
inputs = CalculatorInputs.from_dict({
    key: (None if pd.isna(value) else float(value)) for key, value in calculator_values.items()
})

if inputs is None:
    st.info("This lead did not submit calculator values; the report will have no figures.")
else:
    roi = calculate_roi(inputs)
    st.write(
        f"Efficiency gains **{format_currency(roi.efficiency_gains)}**, "
        f"compliance accuracy **{format_currency(roi.compliance_accuracy)}**, "
        f"annual value **{format_currency(roi.annual_value_save)}**"
    )

if st.button("Render PDF", type="primary"):
    try:
        pdf_bytes = render_report(calculator_inputs=inputs)
    except ReportRenderError as e:
        st.error(f"Report rendering failed: {e}")
    else:
        st.download_button(
            "⬇️ Download PDF",
            data=pdf_bytes,
            file_name=f"ProofIQ_ROI_Report_{lead.id}.pdf",
            mime="application/pdf",
        )
