"""Profile model and document builder.

The profile is a static JSON document validated once at startup.
``build_documents`` flattens it into retrievable ``ProfileDocument`` rows:

    basics          → 1 document
    contact         → 1 document
    skills[]        → 1 per category
    projects[]      → 1 per project
    experience[]    → 1 per position
    education[]     → 1 per entry
    certifications  → 1 per string
    honors          → 1 per string
    languages[]     → 1 per language

Document ids are slugs of each entry's natural key so the UI can link a
citation back to the page anchor with the same id.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ValidationError

from errors import MalformedProfile

logger = logging.getLogger(__name__)

CATEGORIES = (
    "basics", "contact", "skills", "project", "experience",
    "education", "certification", "honor", "language",
)


# ═══════════════════════════════════════════════════════════════════════════
#  PROFILE SCHEMA
# ═══════════════════════════════════════════════════════════════════════════

class Basics(BaseModel):
    name: str
    title: str
    location: str
    bio: str
    email: str
    github: str
    linkedin: str
    avatar: str


class SkillCategory(BaseModel):
    category: str
    items: List[str]


class Project(BaseModel):
    title: str
    description: str
    technologies: List[str]
    github: str
    demo: Optional[str] = None
    image: str


class Experience(BaseModel):
    company: str
    position: str
    duration: str
    description: str


class Education(BaseModel):
    degree: str
    institution: str
    duration: str


class Language(BaseModel):
    name: str
    level: str


class Profile(BaseModel):
    basics: Basics
    skills: List[SkillCategory]
    projects: List[Project]
    experience: List[Experience]
    education: List[Education]
    certifications: List[str]
    honors: List[str]
    languages: List[Language]

    def all_skills(self) -> list[str]:
        """Every skill item, in category order."""
        return [item for category in self.skills for item in category.items]


def parse_profile(data: dict) -> Profile:
    """Validate raw profile data.  Raises MalformedProfile on any gap."""
    try:
        return Profile.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise MalformedProfile(f"Invalid profile: {fields}", cause=e) from e


def load_profile(path: str | Path) -> Profile:
    """Read and validate a profile JSON file."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise MalformedProfile(f"Cannot read profile {path}: {e}", cause=e) from e
    profile = parse_profile(data)
    logger.info(f"Profile loaded from {path} ({profile.basics.name})")
    return profile


# ═══════════════════════════════════════════════════════════════════════════
#  DOCUMENTS
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ProfileDocument:
    """One retrievable slice of the profile."""

    id: str
    category: str
    content: str
    label: Optional[str] = None

    def embedding_text(self) -> str:
        return f"{self.category}: {self.content}"

    def to_dict(self) -> dict:
        d = {"id": self.id, "category": self.category, "content": self.content}
        if self.label is not None:
            d["label"] = self.label
        return d


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


class _IdAllocator:
    """Hands out ``<category>-<slug>`` ids, suffixing duplicates."""

    def __init__(self):
        self._seen: dict[str, int] = {}

    def __call__(self, category: str, key: str = "") -> str:
        slug = slugify(key)
        base = f"{category}-{slug}" if slug else category
        count = self._seen.get(base, 0) + 1
        self._seen[base] = count
        return base if count == 1 else f"{base}-{count}"


def build_documents(profile: Profile) -> list[ProfileDocument]:
    """Flatten *profile* into documents.  Deterministic and total."""
    b = profile.basics
    new_id = _IdAllocator()
    docs: list[ProfileDocument] = [
        ProfileDocument(
            id=new_id("basics"),
            category="basics",
            label=b.name,
            content=f"My name is {b.name}. I am a {b.title} based in {b.location}. {b.bio}",
        ),
        ProfileDocument(
            id=new_id("contact"),
            category="contact",
            content=(
                f"You can contact me at {b.email}. "
                f"My GitHub is {b.github} and LinkedIn is {b.linkedin}."
            ),
        ),
    ]

    for skill in profile.skills:
        docs.append(ProfileDocument(
            id=new_id("skills", skill.category),
            category="skills",
            label=skill.category,
            content=f"In {skill.category}, I am skilled in: {', '.join(skill.items)}",
        ))

    for project in profile.projects:
        links = f" Code: {project.github}."
        if project.demo:
            links += f" Live demo: {project.demo}."
        docs.append(ProfileDocument(
            id=new_id("project", project.title),
            category="project",
            label=project.title,
            content=(
                f"{project.title}: {project.description} "
                f"(Technologies used: {', '.join(project.technologies)}).{links}"
            ),
        ))

    for exp in profile.experience:
        docs.append(ProfileDocument(
            id=new_id("experience", exp.company),
            category="experience",
            label=exp.company,
            content=f"{exp.position} at {exp.company} ({exp.duration}): {exp.description}",
        ))

    for edu in profile.education:
        docs.append(ProfileDocument(
            id=new_id("education", edu.institution),
            category="education",
            label=edu.institution,
            content=f"{edu.degree} from {edu.institution} ({edu.duration})",
        ))

    for cert in profile.certifications:
        docs.append(ProfileDocument(
            id=new_id("certification", cert),
            category="certification",
            label=cert,
            content=f"I hold the certification: {cert}.",
        ))

    for honor in profile.honors:
        docs.append(ProfileDocument(
            id=new_id("honor", honor),
            category="honor",
            label=honor,
            content=f"One of my honors: {honor}.",
        ))

    for lang in profile.languages:
        docs.append(ProfileDocument(
            id=new_id("language", lang.name),
            category="language",
            label=lang.name,
            content=f"I speak {lang.name} ({lang.level}).",
        ))

    return docs
