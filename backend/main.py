"""FastAPI application — portfolio assistant over a single profile.

Architecture layers:
  1. Settings       (settings.py)          — centralized configuration
  2. Profile        (profile_documents.py) — schema + document builder
  3. Embeddings     (embeddings.py)        — memoized sentence-transformers
  4. Ranker         (ranker.py)            — cosine similarity ranking
  5. LLM Package    (llm/)                 — pluggable streaming providers
  6. Composer       (composer.py)          — retrieval + LLM/template generation
  7. Fallback       (fallback_search.py)   — keyword search, no models
  8. Session        (session.py)           — turn lifecycle, history, events

Endpoints:
  POST   /chat           one turn, JSON answer
  POST   /chat/stream    one turn, Vercel AI SDK data stream
  GET    /conversation   rendered conversation
  DELETE /conversation   forget the conversation
  GET    /loading        model acquisition state
  GET    /documents      profile documents (ids double as page anchors)
  GET    /health
"""

from __future__ import annotations

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from errors import TurnInProgress
from events import LoadingState, StreamingResponse as StreamEvent
from llm.generators import settled_text
from profile_documents import build_documents, load_profile
from session import AssistantSession
from settings import settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
#  Application lifespan
# ---------------------------------------------------------------------------
session: Optional[AssistantSession] = None


def _log_loading(state: LoadingState) -> None:
    logger.info(f"Model loading: {state.status} ({state.progress:.0%})")


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: D401
    """Load and validate the profile; build the session."""
    global session
    profile = load_profile(settings.PROFILE_PATH)  # MalformedProfile aborts startup
    session = AssistantSession(profile)
    session.on_loading(_log_loading)
    logger.info(
        f"Assistant ready for {profile.basics.name} "
        f"({len(build_documents(profile))} documents, llm={session.generator.name})"
    )

    yield  # ← application runs here

    session = None


# ---------------------------------------------------------------------------
#  App
# ---------------------------------------------------------------------------
app = FastAPI(title="Portfolio Assistant", version="1.0.0", lifespan=lifespan)
_raw_origins = [o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()]
_allowed_origins = _raw_origins if _raw_origins else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ChatRequest(BaseModel):
    query: str = Field(min_length=1)


def _session() -> AssistantSession:
    if session is None:
        raise HTTPException(503, "Assistant not initialized")
    return session


# ═══════════════════════════════════════════════════════════════════════════
#  CHAT
# ═══════════════════════════════════════════════════════════════════════════

@app.post("/chat")
async def chat(request: ChatRequest):
    """Non-streaming chat — runs one turn and returns the answer."""
    s = _session()
    try:
        turn = await s.submit_query(request.query.strip())
    except TurnInProgress as e:
        raise HTTPException(409, e.message)
    return {
        "response": turn.content,
        "sections": [d.to_dict() for d in turn.sections or []],
    }


@app.post("/chat/stream")
async def chat_stream(request: ChatRequest):
    """Streaming chat — Vercel AI SDK data stream protocol over SSE.

    Lines emitted::

        8:[{"stage":..}]\\n       stage annotation
        0:"token"\\n              text delta
        8:[{"sections":[..]}]\\n  citations for the final answer
        e:{"finishReason":..}\\n  finish
        d:{"finishReason":..}\\n  done

    Text deltas are append-only: while the LLM is streaming only complete
    sentences are forwarded, so the trailing fragment that the final answer
    trims is never sent and joining every ``0:`` payload gives the answer.

    The one exception is an LLM failure after at least one sentence went
    out.  The template answer that takes over is then preceded by a
    ``{"stage": "replaced"}`` annotation; clients drop the text received so
    far when they see it.
    """
    s = _session()
    if s.busy:
        raise HTTPException(409, "A response is already being generated")

    queue: asyncio.Queue[StreamEvent] = asyncio.Queue()
    unsubscribe = s.on_stream(queue.put_nowait)
    task = asyncio.create_task(s.submit_query(request.query.strip()))
    await asyncio.sleep(0)  # let the turn claim the session
    if task.done() and isinstance(task.exception(), TurnInProgress):
        unsubscribe()
        raise HTTPException(409, "A response is already being generated")

    async def event_stream():
        sent = ""
        try:
            yield f'8:{json.dumps([{"stage": "generating"}])}\n'
            while True:
                event = await queue.get()
                # Partials only forward whole sentences so deltas stay append-only.
                text = event.content if event.done else settled_text(event.content)
                if text.startswith(sent):
                    delta = text[len(sent):]
                else:
                    yield f'8:{json.dumps([{"stage": "replaced"}])}\n'
                    delta = text
                if delta:
                    yield f"0:{json.dumps(delta)}\n"
                sent = text
                if event.done:
                    sections = [d.to_dict() for d in event.sections or []]
                    yield f'8:{json.dumps([{"sections": sections}])}\n'
                    break
            await task
            yield f'e:{json.dumps({"finishReason": "stop"})}\n'
            yield f'd:{json.dumps({"finishReason": "stop"})}\n'
        finally:
            # Detach only; the turn itself runs to completion.
            unsubscribe()

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


# ═══════════════════════════════════════════════════════════════════════════
#  CONVERSATION / STATE
# ═══════════════════════════════════════════════════════════════════════════

@app.get("/conversation")
def get_conversation():
    messages = _session().messages()
    return {"messages": messages, "count": len(messages)}


@app.delete("/conversation")
def clear_conversation():
    s = _session()
    if s.busy:
        raise HTTPException(409, "A response is already being generated")
    s.reset()
    return {"cleared": True}


@app.get("/loading")
def get_loading_state():
    return _session().loading_state.to_dict()


@app.get("/documents")
def list_documents():
    """Profile documents — ids match the page anchors used for citations."""
    docs = [d.to_dict() for d in build_documents(_session().profile)]
    return {"documents": docs, "count": len(docs)}


@app.get("/health")
def health_check():
    """Returns profile, provider and cache info."""
    s = _session()
    return {
        "status": "ok",
        "profile": s.profile.basics.name,
        "documents": len(build_documents(s.profile)),
        "llm_provider": s.generator.name,
        "llm_available": s.generator.available,
        "embedding_model": s.embedder.model_name,
        "embedding_model_loaded": s.embedder.loaded,
        "embeddings_cached": s.embedder.cache_size,
        "version": app.version,
    }
