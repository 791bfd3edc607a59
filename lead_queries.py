"""
SQL queries for ProofIQ lead capture
All queries against the leads table
"""

from typing import TYPE_CHECKING

import pandas as pd

from constants import LEAD_STATUS_NEW
from database import DatabaseConnection

if TYPE_CHECKING:
    from lead_service import LeadSubmission


class LeadQueries:
    """SQL queries for lead records"""

    @staticmethod
    def insert_lead(db: DatabaseConnection, submission: "LeadSubmission") -> int:
        """
        Insert a new lead with status 'new' and no report URL yet

        Args:
            db: Database connection
            submission: Validated lead form submission

        Returns:
            New lead id
        """
        query = """
        INSERT INTO leads (
            name, email, phone, company, message, source,
            annual_lifeline_enrollments, average_review_time_seconds,
            annual_order_volume, average_non_compliance_cost,
            pdf_report_url, status, created_at, updated_at
        )
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, NULL, %s, NOW(), NOW())
        RETURNING id
        """
        params = (
            submission.name,
            submission.email,
            submission.phone or None,
            submission.company or None,
            submission.message or None,
            submission.source or None,
            submission.annual_lifeline_enrollments or None,
            submission.average_review_time_seconds or None,
            submission.annual_order_volume or None,
            submission.average_non_compliance_cost or None,
            LEAD_STATUS_NEW,
        )
        row = db.execute_write(query, params)
        return int(row['id'])

    @staticmethod
    def update_report_url(db: DatabaseConnection, lead_id: int, pdf_report_url: str) -> None:
        """Attach the uploaded report URL to a lead"""
        query = """
        UPDATE leads
        SET pdf_report_url = %s, updated_at = NOW()
        WHERE id = %s
        """
        db.execute_write(query, (pdf_report_url, lead_id))

    @staticmethod
    def get_lead(db: DatabaseConnection, lead_id: int) -> pd.DataFrame:
        """Get a single lead by id"""
        query = """
        SELECT *
        FROM leads
        WHERE id = %s
        """
        return db.execute_query(query, (lead_id,))

    @staticmethod
    def get_recent_leads(db: DatabaseConnection, limit: int = 50) -> pd.DataFrame:
        """
        Get the most recent leads, newest first

        Args:
            db: Database connection
            limit: Maximum number of rows

        Returns:
            DataFrame of leads
        """
        query = """
        SELECT
            id, name, email, company, source, status,
            annual_lifeline_enrollments, average_review_time_seconds,
            annual_order_volume, average_non_compliance_cost,
            pdf_report_url, created_at
        FROM leads
        ORDER BY created_at DESC
        LIMIT %s
        """
        return db.execute_query(query, (limit,))
