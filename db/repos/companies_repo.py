from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from models.company_draft import UNKNOWN_COMPANY, CompanyDraft
from models.company_record import CompanyRecord
from services.domain_utils import strip_domain


_RECORD_COLUMNS = (
    "id, name, domain, website, linkedin_url, scraped_industry, company_size, company_phone, "
    "technologies_json, country, state, city, full_enrichment, company_summary, created_at, last_updated_at"
)
_RECORD_FIELDS = [c.strip() for c in _RECORD_COLUMNS.split(",")]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_record(row: Optional[Tuple]) -> Optional[CompanyRecord]:
    if not row:
        return None
    return CompanyRecord.model_validate(dict(zip(_RECORD_FIELDS, row)))


class CompaniesRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def find_company_by_domain(self, domain: str) -> Optional[CompanyRecord]:
        """Look up a company by its normalized domain (scheme, www. and path stripped)."""
        normalized = strip_domain(domain)
        if not normalized:
            return None
        cur = self.conn.cursor()
        cur.execute(f"SELECT {_RECORD_COLUMNS} FROM companies WHERE domain = ? LIMIT 1;", (normalized,))
        return _to_record(cur.fetchone())

    def find_company_by_name(self, name: str) -> Optional[CompanyRecord]:
        """Exact-name lookup; names are not unique so the oldest row wins."""
        if not name:
            return None
        cur = self.conn.cursor()
        cur.execute(f"SELECT {_RECORD_COLUMNS} FROM companies WHERE name = ? ORDER BY id LIMIT 1;", (name,))
        return _to_record(cur.fetchone())

    def get_company(self, company_id: int) -> Optional[CompanyRecord]:
        cur = self.conn.cursor()
        cur.execute(f"SELECT {_RECORD_COLUMNS} FROM companies WHERE id = ?;", (company_id,))
        return _to_record(cur.fetchone())

    def create_company(self, draft: CompanyDraft) -> Tuple[int, bool]:
        """Insert a company unless its domain already exists.

        Returns (company_id, created). A concurrent insert of the same domain
        surfaces as a UNIQUE violation and resolves to the existing row.
        """
        domain = strip_domain(draft.domain)
        if domain:
            existing = self.find_company_by_domain(domain)
            if existing:
                return existing.id, False

        technologies = json.dumps(draft.company_technologies, ensure_ascii=False) if draft.company_technologies else None
        sql = (
            "INSERT INTO companies (name, domain, website, linkedin_url, scraped_industry, company_size, "
            "company_phone, technologies_json, country, state, city, last_updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);"
        )
        try:
            cur = self.conn.cursor()
            cur.execute(
                sql,
                (
                    draft.name or UNKNOWN_COMPANY,
                    domain,
                    draft.website,
                    draft.linkedin_url,
                    draft.scraped_industry,
                    draft.company_size,
                    draft.company_phone,
                    technologies,
                    draft.country,
                    draft.state,
                    draft.city,
                    _now_iso(),
                ),
            )
            self.conn.commit()
            return int(cur.lastrowid), True
        except sqlite3.IntegrityError:
            self.conn.rollback()
            existing = self.find_company_by_domain(domain) if domain else None
            if existing is None:
                raise
            return existing.id, False

    # --- Backfill support ---
    def select_unsummarized(self, limit: int = 500) -> List[Tuple[int, str, str]]:
        """Return (id, name, domain) for companies with a domain but no summary, oldest first."""
        sql = (
            "SELECT id, name, domain FROM companies "
            "WHERE domain IS NOT NULL AND domain != '' "
            "  AND (company_summary IS NULL OR company_summary = '') "
            "ORDER BY created_at, id LIMIT ?;"
        )
        cur = self.conn.cursor()
        cur.execute(sql, (limit,))
        return [(int(r[0]), r[1], r[2]) for r in cur.fetchall()]

    def mark_fallback_processed(self, company_ids: List[int]) -> None:
        if not company_ids:
            return
        now = _now_iso()
        self.conn.executemany(
            "UPDATE companies SET last_updated_at = ?, last_fallback_processed_at = ? WHERE id = ?;",
            [(now, now, cid) for cid in company_ids],
        )
        self.conn.commit()

    def apply_summary(self, company_id: int, fields: Dict[str, Any]) -> bool:
        """Write summary/label fields and flag the company as fully enriched.

        Returns False when the company does not exist.
        """
        columns = ["full_enrichment = 1", "last_updated_at = ?"]
        values: List[Any] = [_now_iso()]
        for key in ("company_summary", "short_company_summary", "industry_label", "subindustry_label"):
            if fields.get(key) is not None:
                columns.append(f"{key} = ?")
                values.append(fields[key])
        values.append(company_id)
        cur = self.conn.cursor()
        cur.execute(f"UPDATE companies SET {', '.join(columns)} WHERE id = ?;", tuple(values))
        self.conn.commit()
        return cur.rowcount > 0
