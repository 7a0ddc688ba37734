"""Portfolio assistant CLI — validate, inspect, ask, chat, dev server.

Usage:
    python cli.py validate [PATH]     Validate a profile JSON file
    python cli.py documents [PATH]    Print the retrievable documents
    python cli.py ask "question"      Answer one question and exit
    python cli.py chat                Interactive conversation
    python cli.py dev                 Start uvicorn with hot-reload
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

logging.basicConfig(level=logging.WARNING, format="%(message)s")
logger = logging.getLogger("portfolio-cli")


def _load(path: str | None):
    """Load the profile or exit with the validation error."""
    from errors import MalformedProfile
    from profile_documents import load_profile
    from settings import settings

    try:
        return load_profile(path or settings.PROFILE_PATH)
    except MalformedProfile as e:
        logger.error(e.message)
        sys.exit(1)


def cmd_validate(args):
    """Validate the profile and print a one-line summary."""
    from profile_documents import build_documents

    profile = _load(args.path)
    docs = build_documents(profile)
    print(f"OK: {profile.basics.name} — {len(docs)} documents")


def cmd_documents(args):
    """Print every document id, category and content."""
    from profile_documents import build_documents

    profile = _load(args.path)
    for doc in build_documents(profile):
        print(f"[{doc.category:<13}] {doc.id}")
        _print_wrapped(doc.content, indent=4, width=72)


def _make_session(args):
    from session import AssistantSession

    return AssistantSession(_load(getattr(args, "profile", None)))


def cmd_ask(args):
    """Answer a single question (no conversation history)."""
    s = _make_session(args)
    answer = asyncio.run(s.generate_response(args.question))
    print(answer)


async def _chat_loop(s) -> None:
    from llm.generators import settled_text

    printed = {"text": ""}

    def on_stream(event):
        new = event.content if event.done else settled_text(event.content)
        if new.startswith(printed["text"]):
            sys.stdout.write(new[len(printed["text"]):])
        else:
            sys.stdout.write("\n" + new)
        sys.stdout.flush()
        printed["text"] = new
        if event.done:
            if event.sections:
                print(f"\n  (references: {', '.join(d.id for d in event.sections)})")
            else:
                print()

    s.on_stream(on_stream)
    s.on_loading(lambda st: print(f"  … {st.status}"))
    print(f"Ask me anything about {s.profile.basics.name}.  Ctrl-D to quit.\n")
    loop = asyncio.get_running_loop()
    while True:
        line = await loop.run_in_executor(None, _read_line)
        if line is None:
            break
        if not line.strip():
            continue
        printed["text"] = ""
        sys.stdout.write("> ")
        await s.submit_query(line.strip())


def _read_line() -> str | None:
    try:
        return input("you: ")
    except EOFError:
        return None


def cmd_chat(args):
    """Interactive multi-turn conversation with streamed answers."""
    s = _make_session(args)
    try:
        asyncio.run(_chat_loop(s))
    except KeyboardInterrupt:
        pass
    print()


def cmd_dev(args):
    """Start uvicorn development server with hot-reload."""
    import subprocess

    from settings import settings

    host = args.host or settings.HOST
    port = args.port or settings.PORT

    backend_dir = Path(__file__).resolve().parent
    logger.warning(f"Starting dev server at http://{host}:{port}")
    subprocess.run(
        [
            sys.executable, "-m", "uvicorn",
            "main:app",
            "--host", host,
            "--port", str(port),
            "--reload",
        ],
        cwd=str(backend_dir),
        check=False,
    )


def _print_wrapped(text: str, indent: int = 4, width: int = 60):
    """Print text wrapped to *width* with a leading indent."""
    prefix = " " * indent
    words = text.split()
    line = ""
    for w in words:
        if len(line) + len(w) + 1 > width:
            print(f"{prefix}{line}")
            line = w
        else:
            line = f"{line} {w}" if line else w
    if line:
        print(f"{prefix}{line}")


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        prog="portfolio",
        description="Portfolio assistant — CLI tools",
    )
    sub = parser.add_subparsers(dest="command", help="Available commands")

    p_validate = sub.add_parser("validate", help="Validate a profile JSON file")
    p_validate.add_argument("path", nargs="?", help="Profile path (default: PROFILE_PATH)")

    p_docs = sub.add_parser("documents", help="Print the retrievable documents")
    p_docs.add_argument("path", nargs="?", help="Profile path (default: PROFILE_PATH)")

    p_ask = sub.add_parser("ask", help="Answer one question")
    p_ask.add_argument("question", help="Question about the profile owner")
    p_ask.add_argument("--profile", help="Profile path (default: PROFILE_PATH)")

    p_chat = sub.add_parser("chat", help="Interactive conversation")
    p_chat.add_argument("--profile", help="Profile path (default: PROFILE_PATH)")

    p_dev = sub.add_parser("dev", help="Start development server")
    p_dev.add_argument("--host", help="Bind host")
    p_dev.add_argument("--port", type=int, help="Bind port")

    args = parser.parse_args(argv)

    if args.command == "validate":
        cmd_validate(args)
    elif args.command == "documents":
        cmd_documents(args)
    elif args.command == "ask":
        cmd_ask(args)
    elif args.command == "chat":
        cmd_chat(args)
    elif args.command == "dev":
        cmd_dev(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
