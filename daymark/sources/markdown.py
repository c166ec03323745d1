"""Parse the SimplifyJobs internship README (HTML tables inside Markdown)."""
from __future__ import annotations

import re
from datetime import date, timedelta

from bs4 import BeautifulSoup, Tag

from daymark.log import get_logger
from daymark.models import Job, JobSource

log = get_logger(__name__)

NO_SPONSORSHIP_MARKER = "🛂"
US_ONLY_MARKER = "🇺🇸"
ADVANCED_DEGREE_MARKER = "🎓"
CLOSED_MARKER = "🔒"
SUB_ENTRY_MARKER = "↳"

# The README writes line breaks as </br>; they are rewritten to <br/> before parsing.
_BR_RE = re.compile(r"</?br\s*/?>", re.IGNORECASE)
_AGE_RE = re.compile(r"(\d+)d")

_CLEANUPS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\*\*"), ""),
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),
    (re.compile("🇺🇸|[🛂🔒🔥🎓↳]"), ""),
    (re.compile(r"^\s*[-•]\s*"), ""),
    (re.compile(r"\s+"), " "),
]


def clean_text(text: str) -> str:
    """Strip Markdown emphasis, links and list markers plus the status emoji."""
    for pattern, repl in _CLEANUPS:
        text = pattern.sub(repl, text)
    return text.strip()


def stable_job_id(company: str, role: str, location: str) -> str:
    """Signed 32-bit rolling hash (h*31 + c) of the natural key, as hex.

    Deterministic across runs so a listing keeps its id between fetches.
    """
    h = 0
    for ch in f"{company}-{role}-{location}".lower():
        h = ((h << 5) - h + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return format(abs(h), "x")


def _parse_company(cell: Tag, last_company: str) -> tuple[str, bool]:
    if SUB_ENTRY_MARKER in cell.get_text():
        return last_company, True
    link = cell.find("a")
    return clean_text((link or cell).get_text()), False


def _parse_location(cell: Tag) -> str:
    if cell.find("details"):
        summary = cell.find("summary")
        return clean_text(summary.get_text()) if summary else "Multiple Locations"
    for br in cell.find_all("br"):
        br.replace_with("\n")
    locations = [loc for loc in (clean_text(part) for part in cell.get_text().split("\n")) if loc]
    if len(locations) > 1:
        return f"{locations[0]} (+{len(locations) - 1} more)"
    return locations[0] if locations else ""


def _parse_application_url(cell: Tag) -> str:
    if CLOSED_MARKER in cell.get_text():
        return ""
    urls = [a["href"] for a in cell.find_all("a", href=True)]
    for url in urls:
        if "simplify.jobs/p/" not in url:
            return url
    return urls[0] if urls else ""


def _parse_age(cell: Tag | None, today: date) -> str:
    m = _AGE_RE.search(clean_text(cell.get_text())) if cell is not None else None
    if m:
        return (today - timedelta(days=int(m.group(1)))).isoformat()
    return today.isoformat()


def parse_jobs_from_markdown(markdown: str, today: date | None = None) -> list[Job]:
    today = today or date.today()
    soup = BeautifulSoup(_BR_RE.sub("<br/>", markdown or ""), "html.parser")
    rows = soup.find_all("tr")
    if not rows:
        log.warning("No HTML table rows found in SimplifyJobs content")
        return []

    jobs: list[Job] = []
    last_company = ""
    for row in rows:
        cells = row.find_all("td")
        if len(cells) < 4:
            continue  # header (<th>) or malformed row
        company_cell, role_cell, location_cell, app_cell = cells[:4]
        age_cell = cells[4] if len(cells) > 4 else None

        company, is_sub_entry = _parse_company(company_cell, last_company)
        if not is_sub_entry:
            last_company = company

        application_url = _parse_application_url(app_cell)
        if not application_url:
            continue  # closed or link-less row

        role_text = role_cell.get_text()
        role = clean_text(role_text)
        location = _parse_location(location_cell)
        no_sponsorship = NO_SPONSORSHIP_MARKER in role_text

        jobs.append(
            Job(
                id=stable_job_id(company, role, location),
                company=company,
                role=role,
                location=location,
                application_url=application_url,
                date_posted=_parse_age(age_cell, today),
                source=JobSource.SIMPLIFY_JOBS,
                sponsorship=not no_sponsorship,
                no_sponsorship=no_sponsorship,
                us_only=US_ONLY_MARKER in role_text,
                is_sub_entry=is_sub_entry,
            )
        )

    log.info("Parsed %d jobs from SimplifyJobs", len(jobs))
    return jobs
