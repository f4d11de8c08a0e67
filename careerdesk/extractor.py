"""
Extract job postings from mailbox messages.

Runs: per source search → fetch (capped) → decode body → heuristic field
extraction → one batch insert. The field extractors are ordered regex
families; within a family the first pattern that matches wins.
"""
from __future__ import annotations

import base64
import re
from typing import Iterable

from careerdesk.log import get_logger
from careerdesk.mail.base import MailClient
from careerdesk.models import (
    DEFAULT_COMPANY_NAME,
    DEFAULT_JOB_TITLE,
    RAW_EMAIL_LIMIT,
    SOURCES,
    ExtractionResult,
    JobOpportunity,
)
from careerdesk.store import Store

log = get_logger(__name__)

MAX_SEARCH_RESULTS = 50
MAX_MESSAGES_PER_SOURCE = 10

_SUBJECT_TERMS = ("job", "opportunity", "position")
_GENERAL_SUBJECT_TERMS = _SUBJECT_TERMS + ("hiring", "interview", "application")

SEARCH_SENDERS: dict[str, tuple[str, ...]] = {
    "linkedin": ("linkedin.com", "noreply@linkedin.com"),
    "glassdoor": ("glassdoor.com", "noreply@glassdoor.com"),
}

TITLE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"(?:position|role|job|opportunity):\s*([^\n\r,]+)", re.IGNORECASE),
    re.compile(
        r"(?:hiring|seeking|looking for)\s+(?:a\s+)?([^\n\r,]+?)\s+(?:at|for|with)\b",
        re.IGNORECASE,
    ),
    re.compile(r"(?:open\s+)?(?:position|role)\s+for\s+([^\n\r,]+)", re.IGNORECASE),
]

# The company must start with a capital letter; the surrounding words match in any case.
COMPANY_PATTERNS: list[re.Pattern[str]] = [
    re.compile(
        r"\b(?i:at|from|with)\s+([A-Z][a-zA-Z\s&.,]+?)"
        r"(?=\s+(?i:is|has|we|our|the)\b|\s*[,;:!?\r\n]|\s*$)"
    ),
    re.compile(r"(?:company|organization):\s*([^\n\r,]+)", re.IGNORECASE),
]

_URL_RE = re.compile(r"https?://[^\s<>\"]+", re.IGNORECASE)
_JOB_LINK_HINTS = ("job", "career", "apply", "linkedin.com/jobs", "glassdoor.com")

EMAIL_KEYWORDS: list[str] = [
    "remote", "onsite", "hybrid", "full-time", "part-time", "contract",
    "senior", "junior", "lead", "manager", "director", "engineer",
    "developer", "designer", "analyst", "consultant", "specialist",
    "react", "javascript", "python", "java", "sql", "aws", "azure",
    "marketing", "sales", "finance", "hr", "operations", "product",
]


# ── Search ───────────────────────────────────────────────────────────────


def normalize_sources(sources: Iterable[str]) -> list[str]:
    """Map requested names onto linkedin / glassdoor / general, without repeats."""
    out: list[str] = []
    for name in sources:
        key = (name or "").strip().lower()
        if key not in SEARCH_SENDERS:
            key = "general"
        if key not in out:
            out.append(key)
    return out


def build_search_query(source: str) -> str:
    senders = SEARCH_SENDERS.get(source)
    if not senders:
        return f"subject:({' OR '.join(_GENERAL_SUBJECT_TERMS)})"
    sender_filter = " OR ".join(f"from:{s}" for s in senders)
    return f"({sender_filter}) subject:({' OR '.join(_SUBJECT_TERMS)})"


# ── Message decoding ─────────────────────────────────────────────────────


def _b64url_decode(data: str) -> str:
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8", errors="replace")


def _header(headers: list[dict], name: str) -> str:
    wanted = name.lower()
    for h in headers:
        if (h.get("name") or "").lower() == wanted:
            return h.get("value") or ""
    return ""


def _plain_parts(parts: list[dict]) -> Iterable[str]:
    for part in parts:
        data = (part.get("body") or {}).get("data")
        if part.get("mimeType") == "text/plain" and data:
            yield _b64url_decode(data)
        if part.get("parts"):
            yield from _plain_parts(part["parts"])


def decode_body(payload: dict) -> str:
    """Single-part body wins; otherwise all text/plain parts are concatenated."""
    data = (payload.get("body") or {}).get("data")
    if data:
        return _b64url_decode(data)
    return "".join(_plain_parts(payload.get("parts") or []))


# ── Field extractors ─────────────────────────────────────────────────────


def _first_match(patterns: list[re.Pattern[str]], text: str) -> str:
    for pattern in patterns:
        m = pattern.search(text)
        if m and m.group(1):
            return m.group(1).strip()
    return ""


def extract_title(text: str) -> str:
    return _first_match(TITLE_PATTERNS, text)


def extract_company(text: str) -> str:
    return _first_match(COMPANY_PATTERNS, text).rstrip(".,").strip()


def extract_link(text: str) -> str:
    links = _URL_RE.findall(text)
    for link in links:
        low = link.lower()
        if any(hint in low for hint in _JOB_LINK_HINTS):
            return link
    return links[0] if links else ""


def extract_keywords(text: str) -> list[str]:
    low = (text or "").lower()
    return list(dict.fromkeys(k for k in EMAIL_KEYWORDS if k in low))


def classify_source(sender: str) -> str:
    low = (sender or "").lower()
    *named, fallback = SOURCES
    for source in named:
        if source in low:
            return source
    return fallback


def extract_job_info(message: dict) -> ExtractionResult | None:
    """Build a job record from one message, or None when nothing job-like is found."""
    payload = message.get("payload") or {}
    headers = payload.get("headers") or []
    subject = _header(headers, "Subject")
    sender = _header(headers, "From")
    body = decode_body(payload)

    title = extract_title(body + " " + subject)
    company = extract_company(body)
    if not title and not company:
        return None

    return ExtractionResult(
        job_title=title or DEFAULT_JOB_TITLE,
        company_name=company or DEFAULT_COMPANY_NAME,
        job_link=extract_link(body),
        source=classify_source(sender),
        email_subject=subject,
        email_sender=sender,
        extracted_keywords=extract_keywords(body + " " + subject),
        raw_email_content=body[:RAW_EMAIL_LIMIT],
    )


# ── Pipeline ─────────────────────────────────────────────────────────────


def collect_jobs(
    mail: MailClient,
    sources: Iterable[str],
    *,
    max_results: int = MAX_SEARCH_RESULTS,
    per_source_limit: int = MAX_MESSAGES_PER_SOURCE,
) -> list[ExtractionResult]:
    results: list[ExtractionResult] = []
    seen: set[str] = set()

    for source in normalize_sources(sources):
        query = build_search_query(source)
        try:
            message_ids = mail.search(query, max_results)
        except Exception as exc:
            log.warning("[%s] search failed, skipping source: %s", source, exc)
            continue
        log.info("[%s] %d matching message(s)", source, len(message_ids))

        found = 0
        for message_id in message_ids[:per_source_limit]:
            if message_id in seen:
                continue
            seen.add(message_id)
            try:
                extracted = extract_job_info(mail.get_message(message_id))
            except Exception as exc:
                log.warning("[%s] message %s skipped: %s", source, message_id, exc)
                continue
            if extracted is None:
                log.debug("[%s] message %s has no job signal", source, message_id)
                continue
            results.append(extracted)
            found += 1
        log.info("[%s] extracted %d job(s)", source, found)

    return results


def extract_and_store(
    store: Store,
    mail: MailClient,
    user_id: str,
    sources: Iterable[str],
) -> list[JobOpportunity]:
    """Extract jobs for *user_id* and persist them as one batch."""
    extracted = collect_jobs(mail, sources)
    if not extracted:
        log.info("No job opportunities found for %s", user_id)
        return []
    return store.insert_job_opportunities(user_id, extracted)
