"""Terminal chat with a GenShai persona.

Streams replies from a running server and keeps the conversation going
across turns. Previous messages of the same session are shown first.

Usage:
    cd backend
    uv run python scripts/chat.py marcus-aurelius
    uv run python scripts/chat.py elon-musk --url http://localhost:8000 --session my-session
"""

import argparse
import asyncio

from genshai.client import GenShaiClient
from genshai.core.errors import GenShaiError, UpstreamQuotaExhausted, UpstreamRateLimited


async def main(agent_id: str, url: str, session: str | None) -> None:
    client = GenShaiClient(base_url=url, user_session=session)
    print(f"Session: {client.user_session}")

    history = await client.history(agent_id)
    for msg in history["messages"]:
        speaker = "you" if msg["role"] == "user" else agent_id
        print(f"\n[{speaker}] {msg['content']}")

    while True:
        try:
            text = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return
        if not text:
            continue
        if text in ("/quit", "/exit"):
            return

        print()
        try:
            async for delta in client.stream(agent_id, text):
                print(delta, end="", flush=True)
            print()
        except UpstreamRateLimited as e:
            print(f"[slow down] {e.message}")
        except UpstreamQuotaExhausted as e:
            print(f"[out of credits] {e.message}")
        except GenShaiError as e:
            print(f"[error] {e.message} Please try again.")


parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
parser.add_argument("agent_id", help="persona identifier, e.g. marcus-aurelius")
parser.add_argument("--url", default="http://localhost:8000")
parser.add_argument("--session", default=None, help="reuse an anonymous session token")
args = parser.parse_args()

asyncio.run(main(args.agent_id, args.url, args.session))
