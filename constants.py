"""
Constants and reference data for the ProofIQ ROI report service
Includes ROI model assumptions, report template geometry and branding
"""

from pathlib import Path

# ==============================================================================
# ROI MODEL ASSUMPTIONS
# ==============================================================================
# Efficiency gains: manual review time eliminated, valued at a staff labor rate
COMPLIANCE_STAFF_HOURLY_RATE = 50       # $/hour
REVIEW_TIME_REDUCTION = 0.9             # 90% of manual review time saved
SECONDS_PER_HOUR = 3600

# Compliance accuracy: share of orders that would otherwise become violations
VIOLATION_REDUCTION_RATE = 0.05         # 5% fewer violations/rejections

# Calculator form fields, in display order
CALCULATOR_FIELDS = [
    'annual_lifeline_enrollments',
    'average_review_time_seconds',
    'annual_order_volume',
    'average_non_compliance_cost',
]

CALCULATOR_FIELD_LABELS = {
    'annual_lifeline_enrollments': 'Annual Lifeline enrollments',
    'average_review_time_seconds': 'Average review time (seconds)',
    'annual_order_volume': 'Annual order volume',
    'average_non_compliance_cost': 'Average non-compliance cost ($)',
}

# ==============================================================================
# REPORT TEMPLATE
# ==============================================================================
TEMPLATE_DIR = Path(__file__).parent / 'templates'
REPORT_TEMPLATE_PATH = TEMPLATE_DIR / 'report.svg'

# Width the report SVG was authored at; all overlay coordinates are in this space
TEMPLATE_AUTHORING_WIDTH = 776

# Pixel width used for emailed reports
DEFAULT_REPORT_WIDTH = 1200

# Call-to-action target baked into the report's "Book a Demo" button
DEMO_BOOKING_URL = "https://proofiqapp.com/demo"

# Overlay styling
REPORT_COLORS = {
    'card_tint': '#EBF3FF',     # Light blue behind the computed values
    'value_text': '#0F172A',    # Slate-900 for the computed values
}
REPORT_VALUE_FONT = 'Helvetica-Bold'
REPORT_VALUE_FONT_SIZE = 28     # In template units, scaled per render

# ==============================================================================
# LEADS / DELIVERY
# ==============================================================================
LEAD_STATUS_NEW = 'new'
S3_REPORT_PREFIX = 'proof-iq'
REPORT_CONTENT_TYPE = 'application/pdf'

# Streamlit app configuration
APP_CONFIG = {
    'title': 'ProofIQ ROI Calculator',
    'icon': '📈',
    'layout': 'centered',
    'initial_sidebar_state': 'collapsed'
}

# Help text
HELP_TEXT = {
    'calculator': """
        Enter your current Lifeline compliance workload. We estimate the time
        ProofIQ saves your review team and the penalties it helps you avoid.
    """,
    'report': """
        We'll email you a personalized PDF report with these figures and a
        link to book a walkthrough with our team.
    """,
}
