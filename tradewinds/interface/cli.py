"""
Command-line interface for Trade Winds.

Main entry point and game loop.
"""

import argparse
import logging
from pathlib import Path

from prompt_toolkit import prompt as pt_prompt
from prompt_toolkit.completion import WordCompleter

from ..config import get_config_path, load_config
from ..engine import TradeEngine
from ..state import GameManager
from .commands import CommandHandler
from .renderer import THEME, console, pt_style, render_market, render_status, show_banner


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tradewinds", description="Trade Winds - a merchant trading game")
    parser.add_argument("--seed", type=int, default=None, help="Seed the random source for a replayable game")
    parser.add_argument("--save", type=Path, default=None, help="Save file (default from config)")
    parser.add_argument("--new", action="store_true", help="Ignore any saved game and start fresh")
    parser.add_argument("--config", type=Path, default=None, help="Config file (default .tradewinds_config.json)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log engine activity")
    return parser


def main(argv: list[str] | None = None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    config = load_config(args.config or get_config_path())
    save_path = args.save or Path(config["save_path"])

    engine = TradeEngine(config=config, seed=args.seed)
    manager = GameManager(save_path, engine)
    state = manager.restart() if args.new else manager.load_or_new()

    handler = CommandHandler(engine, manager)
    words = handler.completion_words()
    completer = WordCompleter(list(words), meta_dict=words, ignore_case=True, sentence=True)

    show_banner()
    console.print(render_status(engine, state))
    console.print(render_market(engine, state))
    console.print(f"[{THEME['dim']}]Type /help for commands.[/{THEME['dim']}]\n")

    while True:
        try:
            line = pt_prompt("> ", completer=completer, style=pt_style, complete_while_typing=True)
        except (KeyboardInterrupt, EOFError):
            manager.save()
            console.print(f"\n[{THEME['dim']}]Game saved. Goodbye.[/{THEME['dim']}]")
            break

        result = handler.handle(line)
        for renderable in result.output:
            console.print(renderable)
        if result.quit:
            break

    handler.close()


if __name__ == "__main__":
    main()
