"""
Dadlands Draw System - Main Entry Point

A console table for the Dadlands token draw: one dad, a pool of law and
chaos tokens, and moves resolved by drawing from it.

This module provides the main entry point and the DadlandsSession class
that wires the roster, the Foundry bridge and the resolver together.
"""

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from dadlands.data_models import (
    DEFAULT_CHAOS,
    DEFAULT_LAW,
    MAX_POOL_TOKENS,
    DiceRoller,
    MoveRequest,
    TokenType,
)
from dadlands.draw import (
    DrawError,
    MoveResolver,
    PromptOptions,
    PromptResponse,
    ResolutionRecord,
    build_chat_card,
    open_move_dialog,
    open_special_move_dialog,
)
from dadlands.game_state import CharacterRoster
from dadlands.integrations.foundry import FoundryBridge, FoundryEventType
from dadlands.observability import get_run_log


# Configure logging
def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class GameConfig:
    """Configuration for the game session."""

    character_name: str = "Dad"
    law: int = DEFAULT_LAW
    chaos: int = DEFAULT_CHAOS
    max_pool_tokens: int = MAX_POOL_TOKENS

    # Reproducibility
    seed: Optional[int] = None
    run_log_path: Optional[Path] = None

    # Runtime options
    verbose: bool = False

    def __post_init__(self):
        """Ensure paths are Path objects."""
        if isinstance(self.run_log_path, str):
            self.run_log_path = Path(self.run_log_path)


# =============================================================================
# SESSION
# =============================================================================

class DadlandsSession:
    """One table: a roster, its Foundry bridge and the resolver between them."""

    def __init__(self, config: Optional[GameConfig] = None):
        self.config = config or GameConfig()

        if self.config.seed is not None:
            DiceRoller.set_seed(self.config.seed)
            get_run_log().set_seed(self.config.seed)

        self.roster = CharacterRoster()
        self.bridge = FoundryBridge(self.roster)
        self.resolver = MoveResolver(
            store=self.roster,
            message_log=self.bridge,
            notifier=self.bridge,
            max_pool_tokens=self.config.max_pool_tokens,
        )
        self.character = self.roster.create_character(
            self.config.character_name,
            law=self.config.law,
            chaos=self.config.chaos,
        )
        logger.info(f"Session ready for {self.character.name} ({self.character.pool})")

    def make_move(
        self,
        approach: TokenType,
        difficulty: int,
        is_difficult: bool = False,
        is_defining: bool = False,
        prompt_service: Any = None,
    ) -> Optional[ResolutionRecord]:
        request = MoveRequest(
            approach=approach,
            difficulty=difficulty,
            is_difficult=is_difficult,
            is_defining=is_defining,
        )
        return self.resolver.resolve(self.character, request, prompt_service)

    def status(self) -> str:
        """Get a status summary for the active character."""
        char = self.character
        lines = [
            "=" * 40,
            f"{char.name}",
            "=" * 40,
            f"Law: {char.law}  Chaos: {char.chaos}  (total {char.pool.total}/{self.resolver.max_pool_tokens})",
            f"Health: {char.health.value}/{char.health.max}  Power: {char.power.value}/{char.power.max}",
            f"Special moves: {len(char.special_moves)}",
        ]
        if char.has_failed():
            lines.append("This dad has failed.")
        return "\n".join(lines)

    def save_run_log(self) -> Optional[Path]:
        if self.config.run_log_path is None:
            return None
        get_run_log().save(str(self.config.run_log_path))
        return self.config.run_log_path


def create_session(config: Optional[GameConfig] = None) -> DadlandsSession:
    """Create a session from configuration."""
    return DadlandsSession(config)


# =============================================================================
# CONSOLE PROMPTS
# =============================================================================

class ConsolePromptService:
    """Asks the player through stdin. An empty answer or EOF dismisses."""

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print,
    ):
        self._input = input_func
        self._output = output_func

    def _read(self, prompt: str) -> Optional[str]:
        try:
            return self._input(prompt).strip()
        except EOFError:
            return None

    def ask_choice(self, options: PromptOptions) -> Optional[str]:
        self._output(f"\n{options.title}")
        if options.prompt:
            self._output(options.prompt)
        for i, button in enumerate(options.buttons, 1):
            self._output(f"  {i}. {button.label}")

        answer = self._read("> ")
        if not answer:
            return None
        ids = options.button_ids()
        if answer.isdigit() and 1 <= int(answer) <= len(ids):
            return ids[int(answer) - 1]
        return answer if answer in ids else None

    def ask_form(self, options: PromptOptions) -> Optional[PromptResponse]:
        self._output(f"\n{options.title}")
        if options.prompt:
            self._output(options.prompt)

        values: dict[str, Any] = {}
        for prompt_field in options.fields:
            if prompt_field.field_type == "radio":
                allowed = [value for value, _ in prompt_field.choices]
                labels = ", ".join(label for _, label in prompt_field.choices)
                while True:
                    answer = self._read(
                        f"{prompt_field.label} [{'/'.join(allowed)}] ({labels}, default {prompt_field.default}): "
                    )
                    if answer is None:
                        return None
                    value = answer.lower() or prompt_field.default
                    if value in allowed:
                        break
                    self._output(f"Choose one of: {', '.join(allowed)}")
                values[prompt_field.name] = value
            elif prompt_field.field_type == "checkbox":
                answer = self._read(f"{prompt_field.label}? [y/N]: ")
                if answer is None:
                    return None
                values[prompt_field.name] = answer.lower() in ("y", "yes")
            else:
                answer = self._read(
                    f"{prompt_field.label} ({prompt_field.min_value}-{prompt_field.max_value}, "
                    f"default {prompt_field.default}): "
                )
                if answer is None:
                    return None
                values[prompt_field.name] = answer or prompt_field.default

        button_id = self.ask_choice(PromptOptions(title="", buttons=options.buttons))
        if button_id is None:
            return None
        return PromptResponse(button_id=button_id, values=values)


# =============================================================================
# INTERACTIVE CLI
# =============================================================================

class DadlandsCLI:
    """Interactive command-line interface for the game."""

    def __init__(self, session: DadlandsSession, prompt_service: Optional[ConsolePromptService] = None):
        self.session = session
        self.prompts = prompt_service or ConsolePromptService()
        self.running = False
        self.commands = {
            "status": self.cmd_status,
            "help": self.cmd_help,
            "quit": self.cmd_quit,
            "exit": self.cmd_quit,
            "move": self.cmd_move,
            "special": self.cmd_special,
            "moves": self.cmd_moves,
            "addmove": self.cmd_addmove,
            "log": self.cmd_log,
        }

    def run(self) -> None:
        """Run the interactive CLI loop."""
        self.running = True
        print("\n" + "=" * 60)
        print("DADLANDS DRAW - Interactive Mode")
        print("=" * 60)
        print("Type 'help' for available commands, 'quit' to exit.\n")

        while self.running:
            try:
                user_input = input(f"[{self.session.character.pool}]> ").strip()
                if not user_input:
                    continue

                self.process_command(user_input)

            except KeyboardInterrupt:
                print("\nInterrupted. Type 'quit' to exit.")
            except EOFError:
                self.running = False

        print("\nGo get 'em, dad.")

    def process_command(self, user_input: str) -> None:
        """Process a user command."""
        parts = user_input.split(maxsplit=1)
        cmd = parts[0].lower()
        args = parts[1] if len(parts) > 1 else ""

        if cmd in self.commands:
            self.commands[cmd](args)
            self._show_notifications()
        else:
            print(f"Unknown command: {cmd}. Type 'help' for available commands.")

    def _show_notifications(self) -> None:
        for event in self.session.bridge.clear_pending_events():
            if event.event_type == FoundryEventType.NOTIFICATION:
                print(f"! {event.data['message']}")

    def _show_record(self, record: Optional[ResolutionRecord]) -> None:
        if record is not None:
            print(build_chat_card(record).to_text())

    def cmd_help(self, args: str) -> None:
        """Show help information."""
        print("""
Available Commands:
  status                          - Show the dad's tokens and sheet
  move                            - Make a move through the dialog
  move law|chaos N [difficult] [defining]
                                  - Make a move directly (e.g., 'move law 3 defining')
  special MOVE [N] [difficult] [defining]
                                  - Use a special move by id or name
  moves                           - List special moves
  addmove law|chaos NAME [| DESCRIPTION]
                                  - Add a special move
  log                             - Show the run log
  help                            - Show this help
  quit/exit                       - Exit
""")

    def cmd_status(self, args: str) -> None:
        """Show game status."""
        print(self.session.status())

    def cmd_quit(self, args: str) -> None:
        """Quit the game."""
        self.running = False

    @staticmethod
    def _parse_flags(words: list[str]) -> tuple[bool, bool]:
        lowered = [w.lower() for w in words]
        return "difficult" in lowered, "defining" in lowered

    def cmd_move(self, args: str) -> None:
        """Make a move."""
        if not args:
            try:
                record = open_move_dialog(self.session.character, self.session.resolver, self.prompts)
            except ValueError as e:
                print(f"Error: {e}")
                return
            self._show_record(record)
            return

        words = args.split()
        if len(words) < 2 or words[0].lower() not in ("law", "chaos") or not words[1].lstrip("-").isdigit():
            print("Usage: move law|chaos N [difficult] [defining]")
            return

        is_difficult, is_defining = self._parse_flags(words[2:])
        try:
            record = self.session.make_move(
                TokenType(words[0].lower()),
                int(words[1]),
                is_difficult=is_difficult,
                is_defining=is_defining,
                prompt_service=self.prompts,
            )
        except DrawError as e:
            print(f"Error: {e}")
            return
        self._show_record(record)

    def cmd_special(self, args: str) -> None:
        """Use a special move."""
        if not args:
            print("Usage: special MOVE [N] [difficult] [defining]")
            return

        words = args.split()
        difficulty_at = next((i for i, w in enumerate(words) if w.isdigit()), None)
        name_words = words[:difficulty_at] if difficulty_at is not None else words
        name_words = [w for w in name_words if w.lower() not in ("difficult", "defining")]
        character = self.session.character
        move = self.session.roster.get_special_move(character.character_id, " ".join(name_words))
        if move is None:
            print(f"No special move called '{' '.join(name_words)}'. Type 'moves' to list them.")
            return

        if difficulty_at is None:
            record = open_special_move_dialog(character, move, self.session.resolver, self.prompts)
        else:
            is_difficult, is_defining = self._parse_flags(words[difficulty_at + 1:])
            record = self.session.resolver.resolve_special_move(
                character,
                move,
                int(words[difficulty_at]),
                is_difficult=is_difficult,
                is_defining=is_defining,
                prompt_service=self.prompts,
            )
        self._show_record(record)

    def cmd_moves(self, args: str) -> None:
        """List special moves."""
        moves = self.session.character.special_moves
        if not moves:
            print("No special moves yet. Add one with 'addmove'.")
            return
        print("\nSpecial Moves:")
        print("-" * 40)
        for move in moves:
            print(f"  [{move.move_id}] {move.name} ({move.approach.value})")
            if move.description:
                print(f"    {move.description}")
        print("-" * 40)

    def cmd_addmove(self, args: str) -> None:
        """Add a special move."""
        head, _, description = args.partition("|")
        words = head.split(maxsplit=1)
        if len(words) < 2 or words[0].lower() not in ("law", "chaos"):
            print("Usage: addmove law|chaos NAME [| DESCRIPTION]")
            return

        move = self.session.roster.attach_special_move(
            self.session.character.character_id,
            name=words[1].strip(),
            approach=words[0].lower(),
            description=description.strip(),
        )
        print(f"Added {move.name} [{move.move_id}] ({move.approach.value})")

    def cmd_log(self, args: str) -> None:
        """Show the run log."""
        print(get_run_log().format_log(max_events=20))


# =============================================================================
# COMMAND LINE
# =============================================================================

def parse_arguments(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Dadlands Draw - resolve moves by drawing law and chaos tokens",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m dadlands.main                        # Run interactive mode
  python -m dadlands.main --seed 42              # Reproducible draws
  python -m dadlands.main --name Gary --law 6    # Start with a custom dad
  python -m dadlands.main --run-log run.json     # Save the run log on exit
        """
    )

    parser.add_argument(
        "--name",
        type=str,
        default="Dad",
        help="Character name (default: Dad)",
    )
    parser.add_argument(
        "--law",
        type=int,
        default=DEFAULT_LAW,
        help=f"Starting law tokens (default: {DEFAULT_LAW})",
    )
    parser.add_argument(
        "--chaos",
        type=int,
        default=DEFAULT_CHAOS,
        help=f"Starting chaos tokens (default: {DEFAULT_CHAOS})",
    )
    parser.add_argument(
        "--max-tokens",
        type=int,
        default=MAX_POOL_TOKENS,
        help=f"Pool size at which gains are discarded (default: {MAX_POOL_TOKENS})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for reproducible draws",
    )
    parser.add_argument(
        "--run-log",
        type=Path,
        help="Save the run log to this file on exit",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args(argv)


def create_config_from_args(args: argparse.Namespace) -> GameConfig:
    """Create GameConfig from parsed arguments."""
    return GameConfig(
        character_name=args.name,
        law=args.law,
        chaos=args.chaos,
        max_pool_tokens=args.max_tokens,
        seed=args.seed,
        run_log_path=args.run_log,
        verbose=args.verbose,
    )


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def main(argv: Optional[list[str]] = None) -> DadlandsSession:
    """Main entry point for CLI usage."""
    args = parse_arguments(argv)
    setup_logging(args.verbose)

    print("=" * 60)
    print("DADLANDS DRAW v0.1.0")
    print("=" * 60)

    config = create_config_from_args(args)
    session = create_session(config)

    print(session.status())

    cli = DadlandsCLI(session)
    try:
        cli.run()
    finally:
        saved = session.save_run_log()
        if saved:
            print(f"Run log saved to {saved}")

    return session


if __name__ == "__main__":
    main()
