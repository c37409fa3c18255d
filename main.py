"""
Job Board Agent - CLI Entry Point.

Opens an agent session for a job application number and chats with the agent
from the terminal. The session handle lives in memory for the CLI run.

Usage:
    python main.py JA-00042
"""

import asyncio
import sys

from dotenv import load_dotenv

load_dotenv()

from backend.agent import MessageRelay, SessionCoordinator, SessionTerminator  # noqa: E402
from backend.config import settings  # noqa: E402
from backend.crm import close_http_client, get_crm_client  # noqa: E402
from backend.errors import RelayError  # noqa: E402


def _print_turns(turns: list[dict]) -> None:
    for turn in turns:
        text = turn.get("message")
        if text:
            print(f"\nAgent: {text}\n")


async def run(application_ref: str) -> int:
    print("Job Board Agent")
    print("=" * 40)

    crm = get_crm_client()
    session: dict = {}
    coordinator = SessionCoordinator(crm, settings)
    relay = MessageRelay(crm, settings)
    terminator = SessionTerminator(crm, settings)

    print(f"\nOpening session for {application_ref}...")
    try:
        handle = await coordinator.create_session(application_ref, True, session)
    except RelayError as e:
        print(f"Error: {e.message}")
        await close_http_client()
        return 1

    print(f"Session {handle.session_id} ready!")
    _print_turns(handle.messages)

    print("Commands: /quit")
    print("-" * 40)

    try:
        while True:
            try:
                user_input = (await asyncio.to_thread(input, "You: ")).strip()
            except (KeyboardInterrupt, EOFError):
                break
            if not user_input:
                continue
            if user_input.lower() == "/quit":
                break

            try:
                reply = await relay.send_message(user_input, session)
            except RelayError as e:
                print(f"Error: {e.message}")
                continue
            if not reply.has_session:
                print("Session expired. Start a new one.")
                break
            _print_turns(reply.turns)
    finally:
        try:
            await terminator.close_session(session)
        except RelayError as e:
            print(f"Warning: could not close session: {e.message}")
        await close_http_client()

    print("Goodbye!")
    return 0


def main():
    """Run the agent chat CLI."""
    if len(sys.argv) < 2:
        print("Usage: python main.py <job application number>")
        return 2
    return asyncio.run(run(sys.argv[1].strip()))


if __name__ == "__main__":
    sys.exit(main())
