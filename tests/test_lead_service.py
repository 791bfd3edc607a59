"""
Test Suite for Lead Service - ProofIQ
Lead intake and ROI report delivery with storage, email and database mocked

Run with: python -m pytest tests/test_lead_service.py
"""

import unittest
from unittest.mock import Mock, patch

from email_service import EmailResult
from lead_service import (
    LeadService,
    LeadSubmission,
    LeadSubmissionResult,
    sanitize_for_filename,
    validate_submission,
)
from svg_rasterizer import ReportRenderError

PDF_URL = "https://proofiq-reports.s3.us-east-1.amazonaws.com/proof-iq/1-jane-example-com.pdf"


def make_submission(with_calculator=True, **overrides):
    data = {
        'name': 'Jane Doe',
        'email': 'jane@example.com',
        'company': 'Acme Wireless',
        'source': 'roi_calculator',
    }
    if with_calculator:
        data.update({
            'annual_lifeline_enrollments': 5000,
            'average_review_time_seconds': 300,
            'annual_order_volume': 10000,
            'average_non_compliance_cost': 500,
        })
    data.update(overrides)
    return LeadSubmission.from_dict(data)


class TestHelpers(unittest.TestCase):
    """Tests for sanitize_for_filename() and validate_submission()"""

    def test_sanitize_for_filename(self):
        self.assertEqual(sanitize_for_filename('jane.doe+1@example.com'), 'jane-doe-1-example-com')
        self.assertEqual(sanitize_for_filename('abc123'), 'abc123')

    def test_valid_submission(self):
        self.assertEqual(validate_submission(make_submission()), (True, ""))

    def test_missing_name_or_email(self):
        for overrides in ({'name': ''}, {'name': '   '}, {'email': ''}, {'email': None}):
            with self.subTest(overrides=overrides):
                is_valid, error = validate_submission(make_submission(**overrides))
                self.assertFalse(is_valid)
                self.assertEqual(error, "Name and email are required")

    def test_invalid_email(self):
        is_valid, error = validate_submission(make_submission(email='jane@'))
        self.assertFalse(is_valid)
        self.assertEqual(error, "Invalid email format")

    def test_from_dict_ignores_unknown_keys(self):
        submission = LeadSubmission.from_dict({'name': 'Jane', 'email': 'j@example.com', 'utm': 'x'})
        self.assertEqual(submission.name, 'Jane')
        self.assertIsNone(submission.calculator_inputs())

    def test_calculator_inputs_require_all_four(self):
        self.assertIsNotNone(make_submission().calculator_inputs())
        self.assertIsNone(make_submission(annual_order_volume=None).calculator_inputs())

    def test_result_to_dict(self):
        ok = LeadSubmissionResult(success=True, lead_id=42, message="Lead created successfully")
        self.assertEqual(ok.to_dict(), {"success": True, "leadId": 42, "message": "Lead created successfully"})
        failed = LeadSubmissionResult(success=False, error_message="Invalid email format")
        self.assertEqual(failed.to_dict(), {"error": "Invalid email format"})


@patch('lead_service.LeadQueries')
@patch('lead_service.render_report', return_value=b'%PDF-1.4 report')
class TestLeadService(unittest.TestCase):
    """Tests for LeadService.submit_lead() and process_report()"""

    def setUp(self):
        self.db = Mock()
        self.storage = Mock()
        self.storage.upload_pdf.return_value = PDF_URL
        self.email_service = Mock()
        self.email_service.send_roi_report_email.return_value = EmailResult(
            success=True, recipient='jane@example.com', message_id='msg-1'
        )
        self.email_service.send_admin_lead_notification.return_value = None
        self.service = LeadService(
            db=self.db, storage=self.storage, email_service=self.email_service, report_width=800
        )

    def test_invalid_submission_not_stored(self, mock_render, mock_queries):
        result = self.service.submit_lead(make_submission(email='not-an-email'))

        self.assertFalse(result.success)
        self.assertEqual(result.error_message, "Invalid email format")
        mock_queries.insert_lead.assert_not_called()
        mock_render.assert_not_called()

    def test_lead_without_calculator_values(self, mock_render, mock_queries):
        mock_queries.insert_lead.return_value = 7

        result = self.service.submit_lead(make_submission(with_calculator=False))

        self.assertTrue(result.success)
        self.assertEqual(result.lead_id, 7)
        self.assertEqual(result.message, "Lead created successfully")
        self.assertIsNone(result.report)
        mock_render.assert_not_called()
        self.email_service.send_roi_report_email.assert_not_called()

    def test_full_report_delivery(self, mock_render, mock_queries):
        mock_queries.insert_lead.return_value = 42

        result = self.service.submit_lead(make_submission(email='  jane@example.com '))

        self.assertTrue(result.success)
        self.assertEqual(result.message, "Lead created successfully. Report will be sent shortly.")
        self.assertTrue(result.report.success)
        self.assertTrue(result.report.report_url_saved)
        self.assertEqual(result.report.pdf_url, PDF_URL)

        self.assertEqual(mock_render.call_args.kwargs['target_width'], 800)
        self.assertEqual(mock_render.call_args.kwargs['calculator_inputs'].annual_order_volume, 10000)
        self.storage.upload_pdf.assert_called_once_with(b'%PDF-1.4 report', 'jane-example-com')
        self.email_service.send_roi_report_email.assert_called_once_with(
            name='Jane Doe',
            email='jane@example.com',
            company='Acme Wireless',
            pdf_url=PDF_URL,
            lead_id=42,
        )
        mock_queries.update_report_url.assert_called_once_with(self.db, 42, PDF_URL)

    def test_admin_notified_with_formatted_figures(self, mock_render, mock_queries):
        mock_queries.insert_lead.return_value = 42

        self.service.submit_lead(make_submission())

        kwargs = self.email_service.send_admin_lead_notification.call_args.kwargs
        self.assertEqual(kwargs['roi_figures'], {
            'efficiency_gains': '$37,500',
            'compliance_accuracy': '$250,000',
            'annual_value_save': '$287,500',
        })
        self.assertEqual(kwargs['lead_id'], 42)

    def test_insert_failure(self, mock_render, mock_queries):
        mock_queries.insert_lead.side_effect = Exception("connection refused")

        result = self.service.submit_lead(make_submission())

        self.assertFalse(result.success)
        self.assertIn("Failed to create lead", result.error_message)
        self.assertIn("connection refused", result.error_message)
        mock_render.assert_not_called()

    def test_render_failure_keeps_lead(self, mock_render, mock_queries):
        mock_queries.insert_lead.return_value = 42
        mock_render.side_effect = ReportRenderError("template missing")

        result = self.service.submit_lead(make_submission())

        self.assertTrue(result.success)
        self.assertFalse(result.report.success)
        self.assertEqual(result.report.error_message, "template missing")
        self.storage.upload_pdf.assert_not_called()
        self.email_service.send_roi_report_email.assert_not_called()
        mock_queries.update_report_url.assert_not_called()

    def test_invalid_report_width_keeps_lead(self, mock_render, mock_queries):
        """A bad report width is reported on the delivery result, not raised"""
        mock_queries.insert_lead.return_value = 42
        mock_render.side_effect = ValueError("target_width must be positive, got 0")

        result = self.service.submit_lead(make_submission())

        self.assertTrue(result.success)
        self.assertEqual(result.lead_id, 42)
        self.assertFalse(result.report.success)
        self.assertIn("target_width", result.report.error_message)
        self.storage.upload_pdf.assert_not_called()

    def test_submission_not_modified(self, mock_render, mock_queries):
        """The caller's submission keeps its email as typed"""
        mock_queries.insert_lead.return_value = 42
        submission = make_submission(email=' jane@example.com  ')

        self.service.submit_lead(submission)

        self.assertEqual(submission.email, ' jane@example.com  ')
        stored = mock_queries.insert_lead.call_args.args[1]
        self.assertEqual(stored.email, 'jane@example.com')

    def test_upload_failure_still_emails(self, mock_render, mock_queries):
        """Without a URL the email still goes out, but nothing is saved"""
        mock_queries.insert_lead.return_value = 42
        self.storage.upload_pdf.return_value = None

        result = self.service.submit_lead(make_submission())

        self.assertIsNone(self.email_service.send_roi_report_email.call_args.kwargs['pdf_url'])
        self.assertTrue(result.report.success)
        self.assertFalse(result.report.report_url_saved)
        mock_queries.update_report_url.assert_not_called()

    def test_email_failure_skips_url_update(self, mock_render, mock_queries):
        mock_queries.insert_lead.return_value = 42
        self.email_service.send_roi_report_email.return_value = EmailResult(
            success=False, recipient='jane@example.com', error_message="SendGrid returned status 500"
        )

        result = self.service.submit_lead(make_submission())

        self.assertTrue(result.success)
        self.assertFalse(result.report.success)
        self.assertEqual(result.report.error_message, "SendGrid returned status 500")
        mock_queries.update_report_url.assert_not_called()

    def test_url_update_failure_reported(self, mock_render, mock_queries):
        mock_queries.insert_lead.return_value = 42
        mock_queries.update_report_url.side_effect = Exception("deadlock")

        result = self.service.submit_lead(make_submission())

        self.assertTrue(result.success)
        self.assertFalse(result.report.report_url_saved)
        self.assertIn("deadlock", result.report.error_message)

    def test_process_report_incomplete_inputs(self, mock_render, mock_queries):
        report = self.service.process_report(1, make_submission(with_calculator=False))
        self.assertFalse(report.success)
        self.assertEqual(report.error_message, "Calculator values incomplete")
        mock_render.assert_not_called()


if __name__ == '__main__':
    unittest.main(verbosity=2)
