"""
ProofIQ ROI Calculator - Main Application
Public Streamlit page: ROI estimate preview and lead capture form
"""

import sys
import logging
from pathlib import Path

# Configure logging BEFORE importing streamlit
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(levelname)s: %(message)s',
    datefmt='%H:%M:%S',
    force=True  # Override any existing config
)
logging.info("APP STARTUP: Logging initialized")

import streamlit as st

# Add current directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from constants import APP_CONFIG, CALCULATOR_FIELD_LABELS, HELP_TEXT
from lead_service import LeadService, LeadSubmission
from roi_calculator import CalculatorInputs, calculate_roi, format_currency
from utils import get_cached_database_connection


# Page configuration
st.set_page_config(
    page_title=APP_CONFIG['title'],
    page_icon=APP_CONFIG['icon'],
    layout=APP_CONFIG['layout'],
    initial_sidebar_state=APP_CONFIG['initial_sidebar_state']
)

# Default calculator values shown on first load
CALCULATOR_DEFAULTS = {
    'annual_lifeline_enrollments': 5000,
    'average_review_time_seconds': 300,
    'annual_order_volume': 10000,
    'average_non_compliance_cost': 500,
}


def initialize_session_state():
    """Initialize session state variables"""
    if 'last_submission' not in st.session_state:
        st.session_state.last_submission = None


def show_calculator() -> CalculatorInputs:
    """Calculator inputs with a live ROI preview"""
    st.markdown(HELP_TEXT['calculator'])

    values = {}
    col1, col2 = st.columns(2)
    for i, (field_name, label) in enumerate(CALCULATOR_FIELD_LABELS.items()):
        with (col1 if i % 2 == 0 else col2):
            values[field_name] = st.number_input(
                label,
                min_value=0,
                value=CALCULATOR_DEFAULTS[field_name],
                step=1,
                key=f"calc_{field_name}",
            )

    inputs = CalculatorInputs(**values)
    roi = calculate_roi(inputs)

    st.markdown("### Your estimated annual impact")
    m1, m2, m3 = st.columns(3)
    m1.metric("Efficiency gains", format_currency(roi.efficiency_gains))
    m2.metric("Compliance accuracy", format_currency(roi.compliance_accuracy))
    m3.metric("Annual value", format_currency(roi.annual_value_save))

    return inputs


def show_lead_form(inputs: CalculatorInputs):
    """Lead capture form; submits through LeadService"""
    st.markdown("### Get your personalized report")
    st.caption(HELP_TEXT['report'].strip())

    with st.form("lead_form"):
        name = st.text_input("Full name *")
        email = st.text_input("Work email *")
        col1, col2 = st.columns(2)
        with col1:
            company = st.text_input("Company")
        with col2:
            phone = st.text_input("Phone")
        message = st.text_area("Anything else we should know?")
        submitted = st.form_submit_button("Email me the report", type="primary")

    if not submitted:
        return

    submission = LeadSubmission(
        name=name,
        email=email,
        phone=phone,
        company=company,
        message=message,
        source="roi_calculator",
        **inputs.to_dict(),
    )

    try:
        service = LeadService(db=get_cached_database_connection())
    except Exception as e:
        logging.error(f"Failed to initialize lead service: {e}")
        st.error("We couldn't submit your request right now. Please try again later.")
        return

    with st.spinner("Preparing your report..."):
        result = service.submit_lead(submission)

    st.session_state.last_submission = result

    if not result.success:
        st.error(result.error_message)
        return

    st.success(result.message)
    if result.report and result.report.pdf_bytes:
        st.download_button(
            "⬇️ Download your report now",
            data=result.report.pdf_bytes,
            file_name="ProofIQ_ROI_Report.pdf",
            mime="application/pdf",
        )
    if result.report and result.report.error_message:
        st.warning("Your request was saved, but we couldn't email the report. Our team will follow up.")


def main():
    """Main application entry point"""
    initialize_session_state()

    st.title(APP_CONFIG['title'])
    inputs = show_calculator()
    st.markdown("---")
    show_lead_form(inputs)


if __name__ == "__main__":
    main()
