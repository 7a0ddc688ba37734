"""Response composer — retrieval stage + generation strategies.

Retrieval:
  1. Build the profile documents
  2. Embed the query and every ``"{category}: {content}"`` string
  3. Rank by cosine similarity
  4. Keep the top ``RETRIEVAL_K`` as context

Generation (tried in order):
  LLM       — streamed completion grounded in the context
  Template  — keyword intent → handler over the ranked documents

Retrieval failures are NOT handled here; ``ModelUnavailable`` propagates
so the session can switch to fallback search for the turn.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, Optional

from embeddings import EmbeddingProvider
from errors import ModelUnavailable
from intents import DEFAULT_INTENT, INTENTS
from llm.client import GenerativeClient
from llm.generators import stream_llm_response
from profile_documents import Profile, ProfileDocument, build_documents
from ranker import ScoredDocument, rank
from settings import settings

logger = logging.getLogger(__name__)

# Retrieved documents below this score do not count as a match for the
# template handlers; the structural sentence is used instead.
MIN_TEMPLATE_SCORE = 0.15

CONTRACTIONS = (
    ("I am ", "I'm "),
    ("I will ", "I'll "),
    ("I would ", "I'd "),
    ("do not ", "don't "),
    ("does not ", "doesn't "),
    ("It is ", "It's "),
    ("it is ", "it's "),
    ("that is ", "that's "),
)

CONVERSATION_STARTERS = (
    "Great question! ",
    "Sure! ",
    "Happy to share. ",
    "Good question. ",
)

PERSONAL_TOUCHES = (
    "Feel free to ask me more about any of this.",
    "I'm always happy to talk more about it.",
    "Let me know if you'd like more detail on anything.",
    "It's something I really enjoy.",
)

LEADERSHIP_WORDS = ("lead", "manag", "mentor", "team", "head")


@dataclass
class Retrieval:
    """Ranked documents for one query."""

    scored: list[ScoredDocument]
    k: int = 3

    @property
    def top(self) -> list[ScoredDocument]:
        return self.scored[: self.k]

    @property
    def sections(self) -> list[ProfileDocument]:
        return [s.document for s in self.top]

    @property
    def context(self) -> str:
        return "\n\n".join(s.content for s in self.top)


class ResponseComposer:
    """Turns a query into an answer about the profile owner."""

    def __init__(
        self,
        profile: Profile,
        embedder: EmbeddingProvider,
        generator: Optional[GenerativeClient] = None,
        *,
        rng: Optional[random.Random] = None,
        conversational: Optional[bool] = None,
        k: Optional[int] = None,
    ):
        self.profile = profile
        self.embedder = embedder
        self.generator = generator
        self.rng = rng or random.Random()
        self.conversational = settings.TEMPLATE_CONVERSATIONAL if conversational is None else conversational
        self.k = k or settings.RETRIEVAL_K

        handlers: dict[str, Callable[[list[ScoredDocument]], str]] = {
            "self_introduction": self._introduce,
            "contact": self._contact,
            "skills": self._skills,
            "projects": self._projects,
            "experience": self._experience,
            "education": self._education,
            "location": self._location,
            "current_focus": self._current_focus,
            "leadership": self._leadership,
            "hobbies": self._hobbies,
        }
        # Ordered (name, predicate, handler) routes; first match wins.
        self._routes = [(intent.name, intent.matches, handlers[intent.name]) for intent in INTENTS]

    # ═══════════════════════════════════════════════════════════════════
    #  RETRIEVAL
    # ═══════════════════════════════════════════════════════════════════

    async def retrieve(self, query: str) -> Retrieval:
        """Rank all profile documents against *query*.  Raises ModelUnavailable."""
        documents = build_documents(self.profile)
        query_vector = await self.embedder.embed(query)
        doc_vectors = await self.embedder.embed_many([d.embedding_text() for d in documents])
        scored = rank(query_vector, zip(documents, doc_vectors))
        logger.info(
            "Retrieved: %s",
            ", ".join(f"{s.id}={s.score:.2f}" for s in scored[: self.k]),
        )
        return Retrieval(scored=scored, k=self.k)

    # ═══════════════════════════════════════════════════════════════════
    #  GENERATION
    # ═══════════════════════════════════════════════════════════════════

    @property
    def llm_available(self) -> bool:
        return self.generator is not None and self.generator.available

    async def generate(
        self,
        query: str,
        retrieval: Retrieval,
        *,
        history: Optional[list] = None,
        on_partial: Optional[Callable[[str], None]] = None,
    ) -> str:
        """LLM answer when possible, template answer otherwise."""
        if self.llm_available:
            try:
                return await stream_llm_response(
                    self.generator,
                    query,
                    basics=self.profile.basics,
                    context=retrieval.context,
                    history=history,
                    on_partial=on_partial,
                )
            except ModelUnavailable as e:
                logger.warning(f"LLM strategy failed, using templates: {e}")
        return self.compose_template(query, retrieval.scored)

    def compose_template(self, query: str, scored: list[ScoredDocument]) -> str:
        query_lower = query.strip().lower()
        for name, matches, handler in self._routes:
            if matches(query_lower):
                logger.info(f"Template intent: {name}")
                return handler(scored)
        logger.info(f"Template intent: {DEFAULT_INTENT}")
        return self._default(scored)

    # ── Helpers ───────────────────────────────────────────────────

    def _matching(self, scored: list[ScoredDocument], category: str, limit: int = 3) -> list[ScoredDocument]:
        hits = [s for s in scored if s.category == category and s.score >= MIN_TEMPLATE_SCORE]
        return hits[:limit]

    def _polish(self, text: str) -> str:
        """Conversational register: contractions, a starter, a personal touch."""
        if not self.conversational:
            return text
        for formal, casual in CONTRACTIONS:
            text = text.replace(formal, casual)
        if self.rng.random() < 0.5:
            text = self.rng.choice(CONVERSATION_STARTERS) + text
        if self.rng.random() < 0.5:
            text = f"{text.rstrip()} {self.rng.choice(PERSONAL_TOUCHES)}"
        return text

    def _from_documents(self, hits: list[ScoredDocument], structural: Callable[[], str]) -> str:
        if hits:
            return self._polish("\n\n".join(s.content for s in hits))
        return structural()

    def _skill_names(self, n: int) -> str:
        return ", ".join(self.profile.all_skills()[:n])

    # ── Intent handlers ───────────────────────────────────────────

    def _introduce(self, scored: list[ScoredDocument]) -> str:
        b = self.profile.basics
        return f"I'm {b.name}, a {b.title} based in {b.location}. {b.bio}"

    def _contact(self, scored: list[ScoredDocument]) -> str:
        b = self.profile.basics
        return (
            f"You can contact me at {b.email}. You can also find me on GitHub at "
            f"{b.github} and LinkedIn at {b.linkedin}."
        )

    def _skills(self, scored: list[ScoredDocument]) -> str:
        def structural() -> str:
            if not self.profile.skills:
                return f"As a {self.profile.basics.title}, I work across a broad range of technologies."
            return f"My key skills include {self._skill_names(5)} and more."

        return self._from_documents(self._matching(scored, "skills"), structural)

    def _projects(self, scored: list[ScoredDocument]) -> str:
        def structural() -> str:
            titles = [p.title for p in self.profile.projects[:3]]
            if not titles:
                return "I haven't listed any projects here yet."
            return f"I've worked on various projects including {', '.join(titles)} and others."

        return self._from_documents(self._matching(scored, "project"), structural)

    def _experience(self, scored: list[ScoredDocument]) -> str:
        def structural() -> str:
            b = self.profile.basics
            if not self.profile.experience:
                return f"I work as a {b.title}."
            latest = self.profile.experience[0]
            text = f"I currently work as a {latest.position} at {latest.company}."
            if self.profile.skills:
                text += f" I have experience in {self._skill_names(3)} and other technologies."
            return text

        return self._from_documents(self._matching(scored, "experience"), structural)

    def _education(self, scored: list[ScoredDocument]) -> str:
        def structural() -> str:
            if self.profile.education:
                edu = self.profile.education[0]
                return f"I studied {edu.degree} at {edu.institution}."
            return "I keep learning through practical experience and self-study."

        return self._from_documents(self._matching(scored, "education", limit=len(scored)), structural)

    def _location(self, scored: list[ScoredDocument]) -> str:
        return f"I'm based in {self.profile.basics.location}."

    def _current_focus(self, scored: list[ScoredDocument]) -> str:
        b = self.profile.basics
        if self.profile.experience:
            latest = self.profile.experience[0]
            return self._polish(
                f"I'm currently focused on my role as {latest.position} at {latest.company}. "
                f"{latest.description}"
            )
        if self.profile.skills:
            return f"I'm currently focused on my work as a {b.title}, mostly with {self._skill_names(3)}."
        return f"I'm currently focused on my work as a {b.title}."

    def _leadership(self, scored: list[ScoredDocument]) -> str:
        hits = [
            s for s in scored
            if s.category == "experience" and any(w in s.content.lower() for w in LEADERSHIP_WORDS)
        ][:3]

        def structural() -> str:
            return (
                f"I haven't shared specific leadership roles here, but you can read about "
                f"my experience as a {self.profile.basics.title} in the experience section."
            )

        return self._from_documents(hits, structural)

    def _hobbies(self, scored: list[ScoredDocument]) -> str:
        titles = [p.title for p in self.profile.projects[:2]]
        if titles:
            text = f"Outside of work, I like building side projects such as {' and '.join(titles)}."
        else:
            text = "I haven't shared much about my hobbies here, but feel free to ask about my work."
        if self.profile.languages:
            langs = ", ".join(lang.name for lang in self.profile.languages)
            text += f" I also speak {langs}."
        return text

    def _default(self, scored: list[ScoredDocument]) -> str:
        if not scored:
            return self._introduce(scored)
        return self._polish("\n\n".join(s.content for s in scored[:2]))
