from __future__ import annotations

import sqlite3


def bootstrap(conn: sqlite3.Connection) -> None:
    """Create companies/leads tables, indexes and the joined view (idempotent)."""
    cur = conn.cursor()

    # Companies are global; domain is the identity key when present
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS companies (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  name TEXT NOT NULL,\n"
            "  domain TEXT UNIQUE,\n"
            "  website TEXT,\n"
            "  linkedin_url TEXT,\n"
            "  scraped_industry TEXT,\n"
            "  company_size INTEGER,\n"
            "  company_phone TEXT,\n"
            "  technologies_json TEXT,\n"
            "  country TEXT,\n"
            "  state TEXT,\n"
            "  city TEXT,\n"
            "  full_enrichment INTEGER NOT NULL DEFAULT 0,\n"
            "  company_summary TEXT,\n"
            "  short_company_summary TEXT,\n"
            "  industry_label TEXT,\n"
            "  subindustry_label TEXT,\n"
            "  created_at TEXT NOT NULL DEFAULT (datetime('now')),\n"
            "  last_updated_at TEXT,\n"
            "  last_fallback_processed_at TEXT\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_companies_name ON companies(name);")

    # Leads are the global marketplace contacts, keyed by email
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS leads (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  email TEXT NOT NULL UNIQUE,\n"
            "  company_id INTEGER,\n"
            "  first_name TEXT,\n"
            "  last_name TEXT,\n"
            "  mobile_phone TEXT,\n"
            "  linkedin_url TEXT,\n"
            "  job_title TEXT,\n"
            "  seniority TEXT,\n"
            "  function_group TEXT,\n"
            "  country TEXT,\n"
            "  state TEXT,\n"
            "  city TEXT,\n"
            "  source_type TEXT,\n"
            "  is_active INTEGER NOT NULL DEFAULT 1,\n"
            "  added_at TEXT NOT NULL,\n"
            "  last_updated_at TEXT NOT NULL,\n"
            "  last_fallback_processed_at TEXT,\n"
            "  FOREIGN KEY(company_id) REFERENCES companies(id) ON DELETE SET NULL\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_leads_company_id ON leads(company_id);")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_leads_linkedin_url ON leads(linkedin_url);")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_leads_last_first ON leads(last_name, first_name);")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_leads_function_group ON leads(function_group);")

    # View for joined reads
    cur.execute("DROP VIEW IF EXISTS v_leads_with_company;")
    cur.execute(
        (
            "CREATE VIEW v_leads_with_company AS\n"
            "SELECT\n"
            "  l.id AS lead_id,\n"
            "  l.email,\n"
            "  l.first_name,\n"
            "  l.last_name,\n"
            "  l.job_title,\n"
            "  l.seniority,\n"
            "  l.linkedin_url,\n"
            "  l.mobile_phone,\n"
            "  l.country,\n"
            "  l.state,\n"
            "  l.city,\n"
            "  l.source_type,\n"
            "  l.added_at,\n"
            "  l.last_updated_at,\n"
            "  c.id AS company_id,\n"
            "  c.name AS company_name,\n"
            "  c.domain,\n"
            "  c.website,\n"
            "  c.company_size,\n"
            "  c.full_enrichment\n"
            "FROM leads l LEFT JOIN companies c ON l.company_id = c.id;"
        )
    )

    conn.commit()
