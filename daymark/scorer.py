"""Score jobs against a user's skills with role-aware filtering."""
from __future__ import annotations

import math
import re
from dataclasses import replace
from functools import lru_cache

from daymark.log import get_logger
from daymark.models import Job, MatchResult, UserSkills
from daymark.skills import FRAMEWORKS, PROGRAMMING_LANGUAGES, TOOLS, canonical_key

log = get_logger(__name__)


def _normalize(s: str | None) -> str:
    return (s or "").lower().strip()


# Role type -> substrings looked for in the job title/company text.
ROLE_KEYWORDS: dict[str, list[str]] = {
    "Software Engineer": ["software engineer", "software developer", "swe", "sde",
                          "engineer intern", "developer intern", "engineering intern"],
    "Frontend": ["frontend", "front-end", "front end", "ui engineer", "react", "vue",
                 "angular", "web developer"],
    "Backend": ["backend", "back-end", "back end", "server", "api engineer"],
    "Full Stack": ["full stack", "fullstack", "full-stack"],
    "Mobile": ["mobile", "react native", "flutter"],
    "iOS": ["ios", "swift", "objective-c", "iphone", "ipad"],
    "Android": ["android", "kotlin"],
    "DevOps": ["devops", "dev ops", "ci/cd", "jenkins", "kubernetes", "docker"],
    "SRE": ["sre", "site reliability", "reliability engineer"],
    "Data Science": ["data science", "data scientist", "analytics", "statistics"],
    "Machine Learning": ["machine learning", "ml engineer", "deep learning", "neural network"],
    "AI": ["ai ", "artificial intelligence", "llm", "gpt", "nlp", "computer vision",
           "generative ai"],
    "Data Engineering": ["data engineer", "data engineering", "etl", "pipeline", "spark",
                         "hadoop", "airflow"],
    "Data Analyst": ["data analyst", "analytics", "business intelligence", "bi analyst"],
    "Security": ["security", "cybersecurity", "infosec", "penetration", "vulnerability",
                 "appsec"],
    "QA": ["qa", "quality assurance", "test engineer", "sdet"],
    "Testing": ["test", "testing", "automation test"],
    "Embedded": ["embedded", "firmware", "hardware", "iot", "microcontroller"],
    "Systems": ["systems engineer", "systems programming", "kernel", "os engineer"],
    "Cloud": ["cloud", "aws", "azure", "gcp", "google cloud", "cloud engineer"],
    "Infrastructure": ["infrastructure", "platform engineer"],
    "Product": ["product", "pm intern", "product manager", "apm"],
    "UX/UI": ["ux", "ui", "design", "user experience", "user interface", "product design"],
    "Research": ["research", "researcher", "r&d", "research engineer", "research scientist"],
}

# Lookup by canonical key so "backend" or "fullstack" find their keyword lists.
_ROLE_KEYWORDS_BY_KEY: dict[str, list[str]] = {canonical_key(role): kws for role, kws in ROLE_KEYWORDS.items()}

# Generic terms a posting may list besides named technologies.
GENERIC_JOB_KEYWORDS: list[str] = [
    "python", "javascript", "typescript", "java", "c++", "c#", "go", "rust", "ruby",
    "php", "swift", "kotlin", "scala", "sql",
    "react", "vue", "angular", "node", "express", "django", "flask", "spring", "rails",
    ".net", "next.js", "fastapi",
    "git", "docker", "kubernetes", "aws", "azure", "gcp", "linux", "postgresql", "mysql",
    "mongodb", "redis", "graphql",
    "tensorflow", "pytorch", "pandas", "numpy", "scikit-learn", "machine learning",
    "deep learning",
    "api", "rest", "microservices", "agile", "ci/cd", "testing", "debugging",
]

# Single letters ("C", "R") would match initials and list markers.
_MIN_KEYWORD_LEN = 2

JOB_KEYWORD_VOCABULARY: list[str] = [
    kw for kw in dict.fromkeys(
        t.lower() for t in [*GENERIC_JOB_KEYWORDS, *PROGRAMMING_LANGUAGES, *FRAMEWORKS, *TOOLS]
    )
    if len(kw) >= _MIN_KEYWORD_LEN
]

# Score constants.
BASE_MATCH_SCORE = 50
RATIO_BONUS = 50
NO_KEYWORD_BONUS_PER_MATCH = 10
NO_KEYWORD_BONUS_CAP = 40
GENERIC_JOB_SCORE = 60


@lru_cache(maxsize=4096)
def _word_pattern(term: str) -> re.Pattern[str]:
    """Keyword-boundary regex; works for terms that start/end with symbols (c++, .net)."""
    return re.compile(rf"(?<![a-z0-9]){re.escape(term)}(?![a-z0-9])")


def _contains_word(text: str, term: str) -> bool:
    return bool(term) and _word_pattern(term).search(text) is not None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _matched_roles(job_text: str, role_types: list[str]) -> list[str]:
    matched: list[str] = []
    for role in role_types:
        key = canonical_key(role)
        keywords = _ROLE_KEYWORDS_BY_KEY.get(key) or [key]
        if any(kw.lower() in job_text for kw in keywords):
            matched.append(role)
    return matched


def find_job_keywords(job_text: str) -> list[str]:
    """Vocabulary terms present in *job_text* as whole keywords."""
    return [kw for kw in JOB_KEYWORD_VOCABULARY if _contains_word(job_text, kw)]


def _skill_matches_keyword(skill: str, keyword: str) -> bool:
    if canonical_key(skill) == canonical_key(keyword):
        return True
    return _contains_word(skill, keyword) or _contains_word(keyword, skill)


def score_job(job: Job, skills: UserSkills, has_resume: bool = False) -> MatchResult:
    """Compatibility of *job* with *skills*; never raises, never mutates *job*."""
    job_text = f"{job.role} {job.company}".lower()
    selected_roles = skills.role_types

    matched_roles = _matched_roles(job_text, selected_roles)
    matches_role_filter = not selected_roles or bool(matched_roles)

    if not matches_role_filter:
        return MatchResult(
            job=replace(job, match_score=None),
            score=0,
            matched_keywords=[],
            matches_role_filter=False,
            has_resume_match=False,
        )

    if not has_resume:
        return MatchResult(
            job=replace(job, match_score=None),
            score=0,
            matched_keywords=matched_roles,
            matches_role_filter=True,
            has_resume_match=False,
        )

    resume_skills = [_normalize(s) for s in skills.resume_tokens()]
    resume_skills = [s for s in resume_skills if s]
    if not resume_skills:
        return MatchResult(
            job=replace(job, match_score=None),
            score=0,
            matched_keywords=matched_roles,
            matches_role_filter=True,
            has_resume_match=False,
        )

    job_keywords = find_job_keywords(job_text)

    matched: list[str] = []
    for keyword in job_keywords:
        if any(_skill_matches_keyword(skill, keyword) for skill in resume_skills):
            matched.append(keyword)

    # Resume terms written verbatim in the posting but missing from the vocabulary.
    for skill in resume_skills:
        if skill not in matched and _contains_word(job_text, skill):
            matched.append(skill)

    score = 0
    if matched:
        score = BASE_MATCH_SCORE
        if job_keywords:
            score += _round_half_up(RATIO_BONUS * len(matched) / len(job_keywords))
        else:
            score += min(len(matched) * NO_KEYWORD_BONUS_PER_MATCH, NO_KEYWORD_BONUS_CAP)
    elif not job_keywords:
        score = GENERIC_JOB_SCORE
    score = max(0, min(100, score))

    return MatchResult(
        job=replace(job, match_score=score),
        score=score,
        matched_keywords=list(dict.fromkeys([*matched_roles, *matched])),
        matches_role_filter=True,
        has_resume_match=True,
    )


def filter_and_rank(
    jobs: list[Job], skills: UserSkills, has_resume: bool = False
) -> list[Job]:
    """Score, drop role-filter misses, and sort by score when a resume exists.

    ``sorted`` is stable, so equal scores (and every job when there is no
    resume) keep their input order.
    """
    results = [score_job(j, skills, has_resume) for j in jobs]
    if skills.role_types:
        results = [r for r in results if r.matches_role_filter]
    if has_resume:
        results = sorted(results, key=lambda r: -r.score)
    log.debug("Ranked %d jobs → %d kept (resume=%s)", len(jobs), len(results), has_resume)
    return [r.job for r in results]


def has_resume_skills(skills: UserSkills) -> bool:
    return bool(skills.resume_tokens())


def has_any_skills(skills: UserSkills) -> bool:
    return bool(skills.resume_tokens() or skills.role_types)
