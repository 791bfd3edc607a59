"""
Lead Service for ProofIQ

Accepts lead form submissions and, when calculator values are included,
delivers the personalized ROI report:

1. Store the lead (fast, always first)
2. Render the report PDF
3. Upload it to S3
4. Email the lead the download link and notify the admin
5. Save the report URL on the lead once the lead email went out

Report delivery failures are logged and reported, never rolled back into
the lead insert: a lead is kept even when its report could not be sent.
"""

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from constants import DEFAULT_REPORT_WIDTH
from database import DatabaseConnection, get_database_connection
from email_service import EmailResult, EmailService, validate_email
from lead_queries import LeadQueries
from pdf_report_renderer import render_report
from roi_calculator import CalculatorInputs, calculate_roi
from s3_storage import S3StorageService
from svg_rasterizer import ReportRenderError

logger = logging.getLogger(__name__)


def sanitize_for_filename(value: str) -> str:
    """Replace every non-alphanumeric character with '-'"""
    return re.sub(r'[^a-zA-Z0-9]', '-', value)


@dataclass
class LeadSubmission:
    """Lead form submission"""
    name: str
    email: str
    phone: Optional[str] = None
    company: Optional[str] = None
    message: Optional[str] = None
    source: Optional[str] = None
    annual_lifeline_enrollments: Optional[float] = None
    average_review_time_seconds: Optional[float] = None
    annual_order_volume: Optional[float] = None
    average_non_compliance_cost: Optional[float] = None

    @classmethod
    def from_dict(cls, data: dict) -> "LeadSubmission":
        """Build from a request/form dict, ignoring unknown keys"""
        known = cls.__dataclass_fields__.keys()
        values = {key: data.get(key) for key in known}
        values['name'] = values['name'] or ""
        values['email'] = values['email'] or ""
        return cls(**values)

    def calculator_inputs(self) -> Optional[CalculatorInputs]:
        """Calculator values, or None unless all four were provided"""
        return CalculatorInputs.from_dict(self.__dict__)


@dataclass
class ReportDeliveryResult:
    """Outcome of rendering, uploading and emailing one report"""
    pdf_bytes: Optional[bytes] = None
    pdf_url: Optional[str] = None
    email_result: Optional[EmailResult] = None
    admin_result: Optional[EmailResult] = None
    report_url_saved: bool = False
    error_message: Optional[str] = None

    @property
    def success(self) -> bool:
        return bool(self.email_result and self.email_result.success)


@dataclass
class LeadSubmissionResult:
    """Outcome of a lead form submission"""
    success: bool
    lead_id: Optional[int] = None
    message: str = ""
    error_message: Optional[str] = None
    report: Optional[ReportDeliveryResult] = field(default=None, repr=False)

    def to_dict(self) -> dict:
        """Response body shape for API callers"""
        if not self.success:
            return {"error": self.error_message}
        return {"success": True, "leadId": self.lead_id, "message": self.message}


def validate_submission(submission: LeadSubmission) -> Tuple[bool, str]:
    """
    Validate required lead fields.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not submission.name or not submission.name.strip() or not submission.email:
        return False, "Name and email are required"

    is_valid, _ = validate_email(submission.email)
    if not is_valid:
        return False, "Invalid email format"

    return True, ""


class LeadService:
    """
    Lead intake and report delivery.

    Usage:
        service = LeadService()
        result = service.submit_lead(LeadSubmission.from_dict(form_data))
    """

    def __init__(
        self,
        db: Optional[DatabaseConnection] = None,
        storage: Optional[S3StorageService] = None,
        email_service: Optional[EmailService] = None,
        report_width: int = DEFAULT_REPORT_WIDTH
    ):
        self.db = db or get_database_connection()
        self.storage = storage or S3StorageService()
        self.email_service = email_service or EmailService()
        self.report_width = report_width

    def submit_lead(self, submission: LeadSubmission) -> LeadSubmissionResult:
        """
        Store a lead and deliver its ROI report when calculator values are present.

        Args:
            submission: Lead form submission

        Returns:
            LeadSubmissionResult; success reflects the lead insert, not report delivery
        """
        is_valid, error_msg = validate_submission(submission)
        if not is_valid:
            return LeadSubmissionResult(success=False, error_message=error_msg)

        submission = replace(submission, email=submission.email.strip())

        try:
            lead_id = LeadQueries.insert_lead(self.db, submission)
        except Exception as e:
            logger.exception("Error creating lead")
            return LeadSubmissionResult(
                success=False,
                error_message=f"Failed to create lead: {e}",
            )

        logger.info(f"Created lead {lead_id} ({submission.source or 'no source'})")

        message = "Lead created successfully"
        report = None
        if submission.calculator_inputs() is not None:
            message += ". Report will be sent shortly."
            report = self.process_report(lead_id, submission)

        return LeadSubmissionResult(success=True, lead_id=lead_id, message=message, report=report)

    def process_report(self, lead_id: int, submission: LeadSubmission) -> ReportDeliveryResult:
        """
        Render, upload and email the ROI report for a stored lead.

        Failures are logged and returned; nothing here raises.
        """
        result = ReportDeliveryResult()
        inputs = submission.calculator_inputs()
        if inputs is None:
            result.error_message = "Calculator values incomplete"
            return result

        try:
            result.pdf_bytes = render_report(
                target_width=self.report_width,
                calculator_inputs=inputs,
            )
        except (ReportRenderError, ValueError) as e:
            logger.error(f"Report rendering failed for lead {lead_id}: {e}")
            result.error_message = str(e)
            return result

        result.pdf_url = self.storage.upload_pdf(
            result.pdf_bytes, sanitize_for_filename(submission.email)
        )
        if result.pdf_url:
            logger.info(f"PDF uploaded for lead {lead_id}: {result.pdf_url}")
        else:
            logger.error(f"PDF upload failed for lead {lead_id}; sending email without link")

        result.email_result = self.email_service.send_roi_report_email(
            name=submission.name,
            email=submission.email,
            company=submission.company,
            pdf_url=result.pdf_url,
            lead_id=lead_id,
        )

        result.admin_result = self.email_service.send_admin_lead_notification(
            name=submission.name,
            email=submission.email,
            company=submission.company,
            roi_figures=calculate_roi(inputs).formatted(),
            pdf_url=result.pdf_url,
            lead_id=lead_id,
        )

        if not result.email_result.success:
            logger.error(f"Failed to send email for lead {lead_id}: {result.email_result.error_message}")
            result.error_message = result.email_result.error_message
            return result

        if result.pdf_url:
            try:
                LeadQueries.update_report_url(self.db, lead_id, result.pdf_url)
                result.report_url_saved = True
            except Exception as e:
                logger.error(f"Failed to save report URL for lead {lead_id}: {e}")
                result.error_message = f"Failed to save report URL: {e}"

        return result
