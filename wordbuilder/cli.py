"""
Word Builder CLI - Play the game from a terminal.

Usage:
    wordbuilder play              Restore the saved session (or start one) and play
    wordbuilder state             Show the saved session's current word
    wordbuilder forget            Forget the saved session token

Commands inside `play`:
    p <letter>    add a letter at the front
    s <letter>    add a letter at the back
    r <index>     remove the letter at index (0-based)
    reset         start the word over
    new           start a brand new session
    quit          leave (the session is kept for next time)
"""

from __future__ import annotations
import argparse
import asyncio
import logging
import sys

from .api.schemas import Position
from .config import ClientConfig
from .letters import split_letters
from .session import FileIdentityStore, RecoveryHandler, SessionController

logger = logging.getLogger(__name__)

HELP_TEXT = "p <letter> | s <letter> | r <index> | reset | new | quit"


def main(argv: list[str] | None = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Word Builder - grow a word one letter at a time",
        prog="wordbuilder",
    )
    parser.add_argument("--api-url", help="Builder service base URL")
    parser.add_argument("--dictionary-url", help="Dictionary service base URL")
    parser.add_argument("--session-file", help="Where the session token is kept")
    parser.add_argument("--log-level", help="Logging level (default: WARNING)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("play", help="Play interactively")
    subparsers.add_parser("state", help="Show the saved session")
    subparsers.add_parser("forget", help="Forget the saved session token")

    args = parser.parse_args(argv)
    config = build_config(args)
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "play":
        asyncio.run(cmd_play(config))
    elif args.command == "state":
        asyncio.run(cmd_state(config))
    elif args.command == "forget":
        cmd_forget(config)
    else:
        parser.print_help()
        sys.exit(1)


def build_config(args: argparse.Namespace) -> ClientConfig:
    """Environment config with command-line overrides."""
    config = ClientConfig.from_env()
    return ClientConfig(
        api_url=args.api_url or config.api_url,
        dictionary_url=args.dictionary_url or config.dictionary_url,
        timeout=config.timeout,
        session_file=args.session_file or config.session_file,
        session_key=config.session_key,
        log_level=(args.log_level or config.log_level).upper(),
    )


async def cmd_play(config: ClientConfig):
    """Interactive loop."""
    async with SessionController.from_config(config) as controller:
        await RecoveryHandler(controller).run()
        await controller.wait_for_details()
        print(render(controller))
        print(HELP_TEXT)

        while True:
            try:
                line = await asyncio.to_thread(input, "> ")
            except EOFError:
                break

            try:
                command, argument = parse_command(line)
            except ValueError as e:
                print(f"Error: {e}")
                continue

            if command == "quit":
                break
            if command == "help":
                print(HELP_TEXT)
                continue

            logger.debug("Command %s %r", command, argument)
            await run_command(controller, command, argument)
            await controller.wait_for_details()
            print(render(controller))


async def cmd_state(config: ClientConfig):
    """Show the saved session without changing it."""
    async with SessionController.from_config(config) as controller:
        token = controller.identity.load()
        if not token:
            print("No saved session.")
            return
        result = await controller.restore(token)
        if not result.success:
            print(f"Saved session {token} is not available: {result.error}")
            sys.exit(1)
        await controller.wait_for_details()
        print(f"Session: {token}")
        print(render(controller))


def cmd_forget(config: ClientConfig):
    """Remove the saved token."""
    FileIdentityStore(config.session_file, key=config.session_key).clear()
    print("Saved session forgotten.")


def parse_command(line: str) -> tuple[str, str | int | None]:
    """
    Parse one line typed in the play loop.

    Returns:
        (command, argument) where command is one of add_prefix, add_suffix,
        remove, reset, new, quit, help

    Raises:
        ValueError: if the line is not a valid command
    """
    parts = line.strip().split()
    if not parts:
        raise ValueError("empty command")

    verb = parts[0].lower()
    if verb in {"quit", "exit", "q"}:
        return "quit", None
    if verb in {"help", "?"}:
        return "help", None
    if verb in {"reset", "new"}:
        return verb, None

    if len(parts) != 2:
        raise ValueError(f"'{verb}' expects one argument")

    if verb in {"p", "prefix"}:
        return "add_prefix", _letter(parts[1])
    if verb in {"s", "suffix"}:
        return "add_suffix", _letter(parts[1])
    if verb in {"r", "remove"}:
        try:
            return "remove", int(parts[1])
        except ValueError:
            raise ValueError(f"not an index: {parts[1]}")

    raise ValueError(f"unknown command: {verb}")


def _letter(value: str) -> str:
    if len(value) != 1 or not value.isalpha():
        raise ValueError(f"not a single letter: {value}")
    return value.lower()


async def run_command(controller: SessionController, command: str, argument):
    """Dispatch a parsed command to the controller."""
    if command == "add_prefix":
        return await controller.add_letter(argument, Position.PREFIX)
    if command == "add_suffix":
        return await controller.add_letter(argument, Position.SUFFIX)
    if command == "remove":
        return await controller.remove_letter(argument)
    if command == "reset":
        return await controller.reset()
    if command == "new":
        return await controller.initialize()
    raise ValueError(f"unknown command: {command}")


def render(controller: SessionController) -> str:
    """Text view of the controller."""
    lines = []
    state = controller.state

    if state is None:
        lines.append("No active session. Type 'new' to start one.")
    else:
        word = " ".join(state.answer.upper()) if state.answer else "(empty)"
        marker = "  (valid word)" if state.is_valid_word else ""
        lines.append(f"Word: {word}{marker}   step {state.step}")
        lines.append(f"Front: {_format_letters(state.letter_set(Position.PREFIX))}")
        lines.append(f"Back:  {_format_letters(state.letter_set(Position.SUFFIX))}")

        details = controller.details
        if details is not None:
            if details.pronunciation:
                lines.append(f"  /{details.pronunciation}/")
            lines.append(f"  {details.meaning}")
            if details.example:
                lines.append(f"  e.g. {details.example}")
            if details.image_url:
                lines.append(f"  image: {details.image_url}")
        elif not state.is_valid_word and controller.valid_completions:
            lines.append(f"Could become: {', '.join(controller.valid_completions)}")
            if state.suggestion:
                lines.append(f"Hint: {state.suggestion}")

    if controller.error:
        lines.append(f"Error: {controller.error}")
    return "\n".join(lines)


def _format_letters(letters: list[str]) -> str:
    vowels, consonants = split_letters(letters)
    if not vowels and not consonants:
        return "-"
    return f"{' '.join(vowels) or '-'} | {' '.join(consonants) or '-'}"


if __name__ == "__main__":
    main()
