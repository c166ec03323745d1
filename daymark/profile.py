"""Skill and resume bookkeeping on a UserProfile."""
from __future__ import annotations

from daymark.log import get_logger
from daymark.models import UserProfile, UserSkills, utc_now_iso
from daymark.skills import canonical_key, normalize_skill

log = get_logger(__name__)

SKILL_CATEGORIES = ("languages", "frameworks", "tools", "role_types", "other_keywords")


def _check_category(category: str) -> None:
    if category not in SKILL_CATEGORIES:
        raise ValueError(f"Unknown skill category: {category!r}")


def set_skills(profile: UserProfile, **categories: list[str]) -> None:
    """Replace the given categories; others are left as they are."""
    for category, values in categories.items():
        _check_category(category)
        setattr(profile.skills, category, list(values))


def add_skill(profile: UserProfile, category: str, skill: str) -> bool:
    """Add the canonical form of *skill*; False if blank or already present."""
    _check_category(category)
    canonical = normalize_skill(skill.strip())
    if not canonical:
        return False
    current: list[str] = getattr(profile.skills, category)
    key = canonical_key(canonical)
    if any(canonical_key(s) == key for s in current):
        return False
    current.append(canonical)
    return True


def remove_skill(profile: UserProfile, category: str, skill: str) -> bool:
    _check_category(category)
    current: list[str] = getattr(profile.skills, category)
    key = canonical_key(skill)
    kept = [s for s in current if canonical_key(s) != key]
    setattr(profile.skills, category, kept)
    return len(kept) != len(current)


def clear_skills(profile: UserProfile) -> None:
    profile.skills = UserSkills()


def set_resume_info(profile: UserProfile, file_name: str) -> None:
    profile.resume_file_name = file_name
    profile.resume_uploaded_at = utc_now_iso()
    log.info("Resume recorded: %s", file_name)


def clear_resume_info(profile: UserProfile) -> None:
    """Forget the resume and everything extracted from it; role types stay."""
    profile.resume_file_name = None
    profile.resume_uploaded_at = None
    for category in UserSkills.RESUME_CATEGORIES:
        setattr(profile.skills, category, [])
    log.info("Resume removed; kept %d role type(s)", len(profile.skills.role_types))


def all_skill_keywords(profile: UserProfile) -> list[str]:
    return list(dict.fromkeys(s.lower() for s in profile.skills.resume_tokens()))
