"""
Email Service for ProofIQ
Handles sending ROI report links to leads via SendGrid.

Features:
- SendGrid API integration
- Email validation (RFC 5322)
- Lead report email with download link
- Internal admin notification for every new report
- Failure notifications to monitoring address
- Structured response handling
"""

import os
import re
import logging
from datetime import datetime
from html import escape as html_escape
from typing import Dict, Optional, Tuple
from dataclasses import dataclass, field

from dotenv import load_dotenv

from constants import DEMO_BOOKING_URL

# Load environment variables
load_dotenv()

# Configure logging
logger = logging.getLogger(__name__)

# RFC 5322 compliant email regex pattern
EMAIL_REGEX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

SUCCESS_STATUS_CODES = (200, 201, 202)


@dataclass
class EmailConfig:
    """Configuration for email service."""
    sendgrid_api_key: str = ""
    admin_email: str = ""
    monitoring_email: str = ""
    sender_email: str = "noreply@proofiqapp.com"
    sender_name: str = "ProofIQ"

    @classmethod
    def from_environment(cls) -> "EmailConfig":
        """Load configuration from environment variables."""
        return cls(
            sendgrid_api_key=os.getenv("SENDGRID_API_KEY", ""),
            admin_email=os.getenv("ADMIN_EMAIL", ""),
            monitoring_email=os.getenv("MONITORING_EMAIL", ""),
            sender_email=os.getenv("SENDER_EMAIL", "noreply@proofiqapp.com"),
            sender_name=os.getenv("SENDER_NAME", "ProofIQ"),
        )

    def validate(self) -> Tuple[bool, str]:
        """Validate configuration. Returns (is_valid, error_message)."""
        if not self.sendgrid_api_key:
            return False, "SENDGRID_API_KEY environment variable is not set"
        if not self.sendgrid_api_key.startswith("SG."):
            return False, "SENDGRID_API_KEY appears invalid (should start with 'SG.')"
        return True, ""


@dataclass
class EmailResult:
    """Result of an email send operation."""
    success: bool
    recipient: str
    sent_at: Optional[datetime] = None
    message_id: Optional[str] = None
    error_message: Optional[str] = None
    error_details: Optional[dict] = field(default_factory=dict)
    status_code: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "recipient": self.recipient,
            "sent_at": self.sent_at.isoformat() if self.sent_at else None,
            "message_id": self.message_id,
            "error_message": self.error_message,
            "error_details": self.error_details,
            "status_code": self.status_code,
        }


def validate_email(email: str) -> Tuple[bool, str]:
    """
    Validate email address format (RFC 5322 compliant).

    Args:
        email: Email address to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not email:
        return False, "Email address is required"

    email = email.strip()

    # Check for multiple recipients (comma or semicolon separated)
    if "," in email or ";" in email:
        return False, "Only a single recipient email address is allowed"

    # Check length
    if len(email) > 254:
        return False, "Email address is too long (max 254 characters)"

    # Check format with RFC 5322 regex
    if not EMAIL_REGEX.match(email):
        return False, "Invalid email address format"

    # Check for valid domain (at least one dot after @)
    local, domain = email.rsplit("@", 1)
    if "." not in domain:
        return False, "Invalid email domain"

    return True, ""


class EmailService:
    """
    Email service for sending ROI reports via SendGrid.

    Usage:
        service = EmailService()
        if service.is_configured()[0]:
            result = service.send_roi_report_email(
                name="Jane Doe",
                email="jane@example.com",
                company="Acme Wireless",
                pdf_url="https://bucket.s3.us-east-1.amazonaws.com/proof-iq/report.pdf"
            )
    """

    def __init__(self, config: Optional[EmailConfig] = None):
        """Initialize email service with optional config."""
        self.config = config or EmailConfig.from_environment()
        self._sg_client = None

    def is_configured(self) -> Tuple[bool, str]:
        """Check if email service is properly configured."""
        return self.config.validate()

    def _get_sendgrid_client(self):
        """Get or create SendGrid client (lazy initialization)."""
        if self._sg_client is None:
            from sendgrid import SendGridAPIClient
            self._sg_client = SendGridAPIClient(self.config.sendgrid_api_key)
        return self._sg_client

    def _create_roi_report_email_content(
        self,
        name: str,
        company: Optional[str],
        pdf_url: Optional[str]
    ) -> Tuple[str, str, str]:
        """
        Create email content for ROI report delivery.

        Returns:
            Tuple of (subject, plain_text_body, html_body)
        """
        subject = f"{name}, Your ProofIQ ROI Analysis is Ready"
        first_name = name.split(" ")[0] if name else ""

        if company:
            company_text = f"We've prepared a personalized ROI analysis for {company}."
        else:
            company_text = "We've prepared a personalized ROI analysis for your organization."

        download_text = (
            f"\nDownload your ROI report: {pdf_url}\n" if pdf_url else ""
        )

        plain_text = f"""
Hi {first_name},

Thank you for your interest in ProofIQ. {company_text}
{download_text}
ProofIQ helps Lifeline providers streamline compliance audits through:
- Automated audit processing: NLAD/RAD verification, duplicate detection, and eligibility checks
- Improved accuracy: AI-powered validation against FCC and USAC requirements
- Reduced costs: less manual review time and fewer compliance penalties

We'd be happy to walk you through the report. Schedule a demo: {DEMO_BOOKING_URL}

Best regards,
The ProofIQ Team
"""

        # Escape user-provided values for HTML context
        safe_first_name = html_escape(first_name)
        safe_company_text = html_escape(company_text)

        pdf_section = ""
        if pdf_url:
            safe_pdf_url = html_escape(pdf_url, quote=True)
            pdf_section = f"""
            <p>Your custom report is ready to download and includes detailed projections based on your specific requirements.</p>
            <p class="button-row"><a class="button" href="{safe_pdf_url}">Download Your ROI Report</a></p>
"""

        html_body = f"""
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Your ProofIQ ROI Report</title>
    <style>
        body {{ margin: 0; font-family: -apple-system, 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #3f3f46; background: #f4f4f5; }}
        .container {{ max-width: 600px; margin: 0 auto; padding: 40px 20px; }}
        .card {{ background: #ffffff; border: 1px solid #e4e4e7; }}
        .header {{ padding: 32px 40px; border-bottom: 1px solid #e4e4e7; font-size: 22px; font-weight: bold; color: #164CF8; }}
        .content {{ padding: 40px; font-size: 15px; }}
        .button-row {{ text-align: center; margin: 0 0 32px; }}
        .button {{ display: inline-block; padding: 12px 24px; background: #18181b; color: #ffffff; text-decoration: none; font-weight: 500; border-radius: 4px; }}
        .footer {{ padding: 24px 40px; background: #fafafa; border-top: 1px solid #e4e4e7; font-size: 13px; color: #71717a; }}
    </style>
</head>
<body>
    <div class="container">
        <div class="card">
            <div class="header">ProofIQ</div>
            <div class="content">
                <p style="color: #18181b; font-size: 16px;">Hi {safe_first_name},</p>
                <p>Thank you for your interest in ProofIQ. {safe_company_text}</p>
{pdf_section}
                <p>ProofIQ helps Lifeline providers streamline compliance audits through:</p>
                <ul>
                    <li><strong>Automated audit processing</strong> &mdash; NLAD/RAD verification, duplicate detection, and eligibility checks</li>
                    <li><strong>Improved accuracy</strong> &mdash; AI-powered validation against FCC and USAC requirements</li>
                    <li><strong>Reduced costs</strong> &mdash; Less manual review time and fewer compliance penalties</li>
                </ul>
                <p>We'd be happy to walk you through the report and answer any questions you have about implementing ProofIQ.</p>
                <p class="button-row"><a class="button" href="{DEMO_BOOKING_URL}">Schedule a Demo</a></p>
                <p>Best regards,<br>The ProofIQ Team</p>
            </div>
            <div class="footer">
                <p>ProofIQ</p>
                <p>&copy; {datetime.now().year} ProofIQ. All rights reserved.</p>
            </div>
        </div>
    </div>
</body>
</html>
"""

        return subject, plain_text.strip(), html_body.strip()

    def _create_admin_notification_content(
        self,
        lead_id: Optional[int],
        name: str,
        email: str,
        company: Optional[str],
        roi_figures: Optional[Dict[str, str]],
        pdf_url: Optional[str]
    ) -> Tuple[str, str, str]:
        """
        Create internal notification content for a new lead report.

        Returns:
            Tuple of (subject, plain_text_body, html_body)
        """
        subject = f"New ROI report lead: {name}" + (f" ({company})" if company else "")

        rows = [
            ("Lead ID", str(lead_id) if lead_id is not None else "N/A"),
            ("Name", name),
            ("Email", email),
            ("Company", company or "N/A"),
        ]
        if roi_figures:
            rows.extend([
                ("Efficiency gains", roi_figures.get("efficiency_gains", "")),
                ("Compliance accuracy", roi_figures.get("compliance_accuracy", "")),
                ("Annual value", roi_figures.get("annual_value_save", "")),
            ])
        rows.append(("Report", pdf_url or "not available"))

        plain_text = "NEW ROI REPORT LEAD\n\n" + "\n".join(f"{label}: {value}" for label, value in rows)

        html_rows = "\n".join(
            f"                <p><strong>{html_escape(label)}:</strong> {html_escape(value)}</p>"
            for label, value in rows
        )

        html_body = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <style>
        body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
        .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
        .header {{ background: #164CF8; color: white; padding: 20px; text-align: center; }}
        .details {{ background: #f8faff; padding: 15px; border-radius: 5px; margin: 15px 0; }}
        .footer {{ text-align: center; padding: 20px; font-size: 12px; color: #666; }}
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>New ROI Report Lead</h1>
        </div>
        <div class="details">
{html_rows}
        </div>
        <div class="footer">
            <p>ProofIQ Lead Capture</p>
        </div>
    </div>
</body>
</html>
"""

        return subject, plain_text, html_body.strip()

    def _create_failure_notification_content(
        self,
        recipient_email: str,
        lead_name: str,
        lead_id: str,
        error_details: dict,
        timestamp: datetime
    ) -> Tuple[str, str, str]:
        """
        Create email content for failure notification.

        Returns:
            Tuple of (subject, plain_text_body, html_body)
        """
        subject = f"[ALERT] ROI Report Email Delivery Failed - {lead_name}"

        error_msg = error_details.get("message", "Unknown error")
        status_code = error_details.get("status_code", "N/A")

        plain_text = f"""
ROI REPORT EMAIL DELIVERY FAILURE

Timestamp: {timestamp.isoformat()}
Lead: {lead_name}
Intended Recipient: {recipient_email}
Lead ID: {lead_id}

Error Details:
- Status Code: {status_code}
- Message: {error_msg}

Please investigate and send the report link manually if needed.

---
ProofIQ Monitoring
"""

        # Escape user-provided values for HTML context
        safe_lead_name = html_escape(lead_name)
        safe_recipient_email = html_escape(recipient_email)
        safe_lead_id = html_escape(lead_id)
        safe_error_msg = html_escape(str(error_msg))
        safe_status_code = html_escape(str(status_code))

        html_body = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <style>
        body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
        .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
        .header {{ background: #dc2626; color: white; padding: 20px; text-align: center; }}
        .content {{ padding: 20px; background: #fef2f2; }}
        .details {{ background: white; padding: 15px; border-radius: 5px; margin: 15px 0; }}
        .footer {{ text-align: center; padding: 20px; font-size: 12px; color: #666; }}
        code {{ background: #f3f4f6; padding: 2px 6px; border-radius: 3px; }}
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>ROI Report Email Delivery Failed</h1>
        </div>
        <div class="content">
            <div class="details">
                <p><strong>Timestamp:</strong> {timestamp.isoformat()}</p>
                <p><strong>Lead:</strong> {safe_lead_name}</p>
                <p><strong>Intended Recipient:</strong> <code>{safe_recipient_email}</code></p>
                <p><strong>Lead ID:</strong> <code>{safe_lead_id}</code></p>
            </div>
            <h3>Error Details</h3>
            <div class="details">
                <p><strong>Status Code:</strong> {safe_status_code}</p>
                <p><strong>Message:</strong> {safe_error_msg}</p>
            </div>
            <p>Please investigate and send the report link manually if needed.</p>
        </div>
        <div class="footer">
            <p>ProofIQ Monitoring</p>
        </div>
    </div>
</body>
</html>
"""

        return subject, plain_text.strip(), html_body

    def send_email(
        self,
        recipient_email: str,
        subject: str,
        html_body: str,
        plain_text: Optional[str] = None,
        categories: Tuple[str, ...] = ()
    ) -> EmailResult:
        """
        Send a single email through SendGrid.

        Args:
            recipient_email: Recipient's email address
            subject: Subject line
            html_body: HTML content
            plain_text: Optional plain-text alternative
            categories: SendGrid categories for reporting

        Returns:
            EmailResult with success/failure details and SendGrid message id
        """
        is_valid, error_msg = self.is_configured()
        if not is_valid:
            return EmailResult(
                success=False,
                recipient=recipient_email,
                error_message=f"Email service not configured: {error_msg}",
            )

        is_valid, error_msg = validate_email(recipient_email)
        if not is_valid:
            return EmailResult(
                success=False,
                recipient=recipient_email,
                error_message=error_msg,
            )

        try:
            from sendgrid.helpers.mail import Mail, Category

            message = Mail(
                from_email=(self.config.sender_email, self.config.sender_name),
                to_emails=recipient_email.strip(),
                subject=subject,
                plain_text_content=plain_text,
                html_content=html_body
            )
            for category in categories:
                message.add_category(Category(category))

            sg = self._get_sendgrid_client()
            response = sg.send(message)

            if response.status_code in SUCCESS_STATUS_CODES:
                headers = response.headers or {}
                return EmailResult(
                    success=True,
                    recipient=recipient_email,
                    sent_at=datetime.now(),
                    message_id=headers.get("X-Message-Id"),
                    status_code=response.status_code,
                )

            error_details = {
                "status_code": response.status_code,
                "message": f"SendGrid returned status {response.status_code}",
                "body": response.body.decode() if response.body else "",
            }
            return EmailResult(
                success=False,
                recipient=recipient_email,
                error_message=f"SendGrid returned status {response.status_code}",
                error_details=error_details,
                status_code=response.status_code,
            )

        except Exception as e:
            logger.exception("Failed to send email")
            return EmailResult(
                success=False,
                recipient=recipient_email,
                error_message=f"Failed to send email: {str(e)}",
                error_details={
                    "status_code": None,
                    "message": str(e),
                    "exception_type": type(e).__name__,
                },
            )

    def send_roi_report_email(
        self,
        name: str,
        email: str,
        company: Optional[str] = None,
        pdf_url: Optional[str] = None,
        lead_id: Optional[int] = None
    ) -> EmailResult:
        """
        Send the lead their ROI report download link.

        Args:
            name: Lead's full name (first word used in the greeting)
            email: Lead's email address
            company: Optional company name for personalization
            pdf_url: Public URL of the uploaded report
            lead_id: Optional lead id for failure notifications

        Returns:
            EmailResult with success/failure details
        """
        subject, plain_text, html_body = self._create_roi_report_email_content(name, company, pdf_url)

        result = self.send_email(
            recipient_email=email,
            subject=subject,
            html_body=html_body,
            plain_text=plain_text,
            categories=("roi_report", "lead_form"),
        )

        if result.success:
            logger.info(f"ROI report email sent to {email} (message id {result.message_id})")
        elif result.error_details:
            # Delivery attempted and failed; configuration/validation errors don't alert
            self._send_failure_notification(
                recipient_email=email,
                lead_name=name,
                lead_id=str(lead_id) if lead_id is not None else "N/A",
                error_details=result.error_details,
            )

        return result

    def send_admin_lead_notification(
        self,
        name: str,
        email: str,
        company: Optional[str] = None,
        roi_figures: Optional[Dict[str, str]] = None,
        pdf_url: Optional[str] = None,
        lead_id: Optional[int] = None
    ) -> Optional[EmailResult]:
        """
        Notify the internal admin address about a new report lead.

        Returns:
            EmailResult, or None if no admin address is configured
        """
        if not self.config.admin_email:
            logger.warning("No admin email configured, skipping lead notification")
            return None

        subject, plain_text, html_body = self._create_admin_notification_content(
            lead_id=lead_id,
            name=name,
            email=email,
            company=company,
            roi_figures=roi_figures,
            pdf_url=pdf_url,
        )

        result = self.send_email(
            recipient_email=self.config.admin_email,
            subject=subject,
            html_body=html_body,
            plain_text=plain_text,
            categories=("lead_notification",),
        )
        if not result.success:
            logger.error(f"Admin lead notification failed: {result.error_message}")
        return result

    def _send_failure_notification(
        self,
        recipient_email: str,
        lead_name: str,
        lead_id: str,
        error_details: dict
    ) -> None:
        """
        Send failure notification to monitoring email address.

        This method silently fails if notification cannot be sent,
        to prevent infinite loops.
        """
        if not self.config.monitoring_email:
            logger.warning("No monitoring email configured, skipping failure notification")
            return

        try:
            from sendgrid.helpers.mail import Mail

            timestamp = datetime.now()
            subject, plain_text, html_body = self._create_failure_notification_content(
                recipient_email=recipient_email,
                lead_name=lead_name,
                lead_id=lead_id,
                error_details=error_details,
                timestamp=timestamp,
            )

            message = Mail(
                from_email=(self.config.sender_email, self.config.sender_name),
                to_emails=self.config.monitoring_email,
                subject=subject,
                plain_text_content=plain_text,
                html_content=html_body
            )

            sg = self._get_sendgrid_client()
            sg.send(message)

            logger.info(f"Failure notification sent to {self.config.monitoring_email}")

        except Exception as e:
            # Log but don't raise - prevent infinite loops
            logger.error(f"Failed to send failure notification: {e}")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Email Service for ProofIQ")
    parser.add_argument(
        "--test",
        metavar="EMAIL",
        help="Send a test ROI report email to the specified address"
    )
    args = parser.parse_args()

    print("Email Service - ProofIQ")
    print("=" * 50)

    print("\n1. Configuration Check")
    print("-" * 30)
    service = EmailService()
    is_configured, msg = service.is_configured()

    if is_configured:
        print("  ✓ SENDGRID_API_KEY is set")
        for label, value in (("ADMIN_EMAIL", service.config.admin_email),
                             ("MONITORING_EMAIL", service.config.monitoring_email)):
            print(f"  {'✓' if value else '-'} {label}: {value or 'not set (optional)'}")
        print(f"  - Sender: {service.config.sender_name} <{service.config.sender_email}>")
    else:
        print(f"  ✗ {msg}")

    if args.test:
        print("\n2. Sending Test Email")
        print("-" * 30)
        if not is_configured:
            print("  ✗ Cannot send: email service not configured")
            raise SystemExit(1)

        result = service.send_roi_report_email(
            name="Test Lead",
            email=args.test,
            company="Test Company",
            pdf_url="https://example.com/proof-iq/test-report.pdf",
        )
        if result.success:
            print(f"  ✓ Email sent (message id {result.message_id})")
        else:
            print(f"  ✗ Failed to send email: {result.error_message}")
            raise SystemExit(1)
    else:
        print("\n  To send a test email, run:")
        print("  python email_service.py --test your@email.com")
