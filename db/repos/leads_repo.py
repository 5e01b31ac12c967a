from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from models.contact_draft import ContactDraft
from models.lead_record import LeadRecord


SOURCE_TYPE = "apollo"

_RECORD_COLUMNS = "id, email, company_id, first_name, last_name, job_title, linkedin_url, added_at, last_updated_at"

# Columns patched from a draft when the email already exists
_PATCH_COLUMNS = (
    "first_name",
    "last_name",
    "mobile_phone",
    "linkedin_url",
    "job_title",
    "seniority",
    "country",
    "state",
    "city",
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _to_record(row: Optional[Tuple]) -> Optional[LeadRecord]:
    if not row:
        return None
    return LeadRecord(
        id=int(row[0]),
        email=row[1],
        company_id=row[2],
        first_name=row[3],
        last_name=row[4],
        job_title=row[5],
        linkedin_url=row[6],
        added_at=row[7],
        last_updated_at=row[8],
    )


class LeadsRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def _find_one(self, where: str, params: Tuple) -> Optional[LeadRecord]:
        cur = self.conn.cursor()
        cur.execute(f"SELECT {_RECORD_COLUMNS} FROM leads WHERE {where} ORDER BY id LIMIT 1;", params)
        return _to_record(cur.fetchone())

    def find_lead_by_email(self, email: str) -> Optional[LeadRecord]:
        if not email or not email.strip():
            return None
        return self._find_one("email = ?", (normalize_email(email),))

    def find_lead_by_linkedin(self, linkedin_url: str) -> Optional[LeadRecord]:
        if not linkedin_url:
            return None
        return self._find_one("linkedin_url = ?", (linkedin_url,))

    def find_lead_by_name_and_company(self, first_name: str, last_name: str, company_id: int) -> Optional[LeadRecord]:
        return self._find_one(
            "first_name = ? AND last_name = ? AND company_id = ?",
            (first_name, last_name, company_id),
        )

    def upsert_lead(self, draft: ContactDraft, company_id: Optional[int]) -> Tuple[int, bool]:
        """Insert a lead keyed by email; on a duplicate email patch the existing row.

        Returns (lead_id, created). The patch only overwrites with non-null values,
        refreshes last_updated_at and never touches added_at.
        """
        if not draft.email or not draft.email.strip():
            raise ValueError("Lead email is required")
        email = normalize_email(draft.email)
        now = _now_iso()

        sql = (
            "INSERT INTO leads (email, company_id, first_name, last_name, mobile_phone, linkedin_url, job_title, "
            "seniority, country, state, city, source_type, is_active, added_at, last_updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 1, ?, ?);"
        )
        try:
            cur = self.conn.cursor()
            cur.execute(
                sql,
                (
                    email,
                    company_id,
                    draft.first_name,
                    draft.last_name,
                    draft.mobile_phone,
                    draft.linkedin_url,
                    draft.job_title,
                    draft.seniority,
                    draft.country,
                    draft.state,
                    draft.city,
                    SOURCE_TYPE,
                    now,
                    now,
                ),
            )
            self.conn.commit()
            return int(cur.lastrowid), True
        except sqlite3.IntegrityError:
            self.conn.rollback()
            existing = self.find_lead_by_email(email)
            if existing is None:
                raise

        assignments = [f"{col} = COALESCE(?, {col})" for col in _PATCH_COLUMNS]
        assignments.append("company_id = COALESCE(?, company_id)")
        assignments.append("last_updated_at = ?")
        values: List[Any] = [getattr(draft, col) for col in _PATCH_COLUMNS]
        values.extend([company_id, now, existing.id])
        self.conn.execute(f"UPDATE leads SET {', '.join(assignments)} WHERE id = ?;", tuple(values))
        self.conn.commit()
        return existing.id, False

    # --- Reporting / backfill ---
    def get_lead_with_company(self, email: str) -> Optional[Dict[str, Any]]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM v_leads_with_company WHERE email = ?;", (normalize_email(email),))
        row = cur.fetchone()
        if not row:
            return None
        names = [d[0] for d in cur.description]
        return dict(zip(names, row))

    def select_unclassified(self, limit: int = 500) -> List[Tuple[int, str, Optional[str]]]:
        """Return (id, email, job_title) for active leads still lacking a function group, oldest first."""
        sql = (
            "SELECT id, email, job_title FROM leads "
            "WHERE (function_group IS NULL OR function_group = '') "
            "  AND is_active = 1 "
            "  AND email IS NOT NULL AND email != '' "
            "  AND job_title IS NOT NULL AND job_title != '' "
            "ORDER BY added_at, id LIMIT ?;"
        )
        cur = self.conn.cursor()
        cur.execute(sql, (limit,))
        return [(int(r[0]), r[1], r[2]) for r in cur.fetchall()]

    def mark_fallback_processed(self, lead_ids: List[int]) -> None:
        if not lead_ids:
            return
        now = _now_iso()
        self.conn.executemany(
            "UPDATE leads SET last_updated_at = ?, last_fallback_processed_at = ? WHERE id = ?;",
            [(now, now, lid) for lid in lead_ids],
        )
        self.conn.commit()
