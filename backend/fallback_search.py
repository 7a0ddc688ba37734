"""Keyword fallback search — used when embeddings are unavailable.

No models, no I/O: trigger words in the query select profile sections,
which are formatted directly from profile fields.  This is the floor of
the whole pipeline and never raises.
"""

from __future__ import annotations

import logging

from profile_documents import Profile

logger = logging.getLogger(__name__)

NAME_TRIGGERS = ("name", "who")
ABOUT_TRIGGERS = ("about", "bio")
SKILL_TRIGGERS = ("skill", "know")
PROJECT_TRIGGERS = ("project", "work", "built")
EXPERIENCE_TRIGGERS = ("experience", "job")
EDUCATION_TRIGGERS = ("education", "study", "degree")
YEARS_TRIGGERS = ("how many years", "experience in")


def _has(text: str, triggers: tuple[str, ...]) -> bool:
    return any(t in text for t in triggers)


def generic_introduction(profile: Profile) -> str:
    return (
        f"I'm an AI assistant for {profile.basics.name}. You can ask me about their "
        f"skills, projects, experience, education, or contact information."
    )


def fallback_search(query: str, profile: Profile) -> str:
    """Answer *query* by keyword matching against profile sections."""
    try:
        return _search(query or "", profile)
    except Exception as e:
        logger.error(f"Fallback search error: {e}")
        try:
            return generic_introduction(profile)
        except Exception:
            return "I'm an AI assistant for this portfolio. Ask me about skills, projects, or experience."


def _search(query: str, profile: Profile) -> str:
    text = query.lower()
    b = profile.basics
    results: list[str] = []

    if _has(text, NAME_TRIGGERS):
        results.append(f"{b.name} is a {b.title} based in {b.location}.")

    if _has(text, ABOUT_TRIGGERS):
        results.append(b.bio)

    if _has(text, SKILL_TRIGGERS):
        for category in profile.skills:
            results.append(f"{category.category} skills: {', '.join(category.items)}")

    if _has(text, PROJECT_TRIGGERS):
        for project in profile.projects:
            results.append(
                f"{project.title}: {project.description} "
                f"(Technologies: {', '.join(project.technologies)})"
            )

    if _has(text, EXPERIENCE_TRIGGERS):
        for exp in profile.experience:
            results.append(f"{exp.position} at {exp.company} ({exp.duration}): {exp.description}")

    if _has(text, EDUCATION_TRIGGERS):
        for edu in profile.education:
            results.append(f"{edu.degree} from {edu.institution} ({edu.duration})")

    if _has(text, YEARS_TRIGGERS):
        technology = next(
            (skill for skill in profile.all_skills() if skill.lower() in text),
            None,
        )
        if technology:
            results.append(
                f"I have several years of experience with {technology} "
                f"as part of my work as a {b.title}."
            )

    if not results:
        results.append(generic_introduction(profile))

    logger.info(f"Fallback search matched {len(results)} section(s)")
    return "\n\n".join(results)
