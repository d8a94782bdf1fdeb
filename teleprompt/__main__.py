"""Main entry point for the Teleprompt memorization reader."""

import argparse
import asyncio
import logging
import os
import sys
import termios
import tty
from importlib.resources import files

from rich.console import Console

from . import config, input_handler
from .content_parser import extract_content
from .deck import Deck, DeckMenu
from .teleprompter import Teleprompter

SESSION_START_MARKER = "--- Application Starting ---"


def setup_logging():
    """Set up file-based logging for the application."""
    os.makedirs(config.LOG_DIR, exist_ok=True)
    log_file = os.path.join(config.LOG_DIR, config.LOG_FILE_NAME)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(name)s - %(message)s',
        filename=log_file,
        filemode='a',
        force=True,
    )
    logging.info(SESSION_START_MARKER)


def show_session_errors(console):
    """Print the errors logged since the application started, then clear the log."""
    log_file = os.path.join(config.LOG_DIR, config.LOG_FILE_NAME)
    try:
        with open(log_file, 'r', encoding='utf-8') as f:
            lines = f.readlines()
    except FileNotFoundError:
        return

    start_indices = [i for i, line in enumerate(lines) if SESSION_START_MARKER in line]
    session_lines = lines[start_indices[-1] if start_indices else 0:]
    error_lines = [line.strip() for line in session_lines if " - ERROR - " in line]

    if error_lines:
        console.print("\n[bold red]Errors recorded during this session:[/bold red]")
        for error in error_lines:
            message = ' - '.join(error.split(' - ')[3:])
            console.print(f"- {message}")

    os.remove(log_file)


def read_guide():
    """The bundled keyboard guide as text."""
    return (files('teleprompt') / 'guide.txt').read_text(encoding='utf-8')


def resolve_keys(keys_arg):
    # An explicit --keys wins over the config value
    if keys_arg and keys_arg != "default":
        return input_handler.resolve_keyboard_shortcuts_file(keys_arg)
    if config.CUSTOM_KEYBOARD_SHORTCUTS and config.CUSTOM_KEYBOARD_SHORTCUTS != "default":
        return input_handler.resolve_keyboard_shortcuts_file(config.CUSTOM_KEYBOARD_SHORTCUTS)
    return input_handler.resolve_keyboard_shortcuts_file("default")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="teleprompt",
        description="A terminal teleprompter for memorizing text at a steady pace",
        add_help=False,
    )
    parser.add_argument('-h', '--help', action='help', help='Show this help message and exit')
    parser.add_argument(
        '-g', '--guide',
        action='store_true',
        help='Add the keyboard shortcuts guide as a card',
    )
    parser.add_argument(
        "files",
        nargs='*',
        help="Documents to memorize (.txt, .md, .html, .docx, .pdf, .rtf). Each file becomes a card.",
    )
    parser.add_argument(
        "-t", "--text",
        action='append',
        default=[],
        help="Text to memorize. May be given more than once; each value becomes a card.",
    )
    parser.add_argument(
        "-w", "--wpm",
        type=int,
        default=config.DEFAULT_WPM,
        help=f"Starting pace in words per minute, {config.MIN_WPM}-{config.MAX_WPM} (default: {config.DEFAULT_WPM})",
    )
    parser.add_argument(
        "-k", "--keys",
        default="default",
        help="Keyboard configuration. Use a preset name (vim, default) or a path to a JSON file. Default: default",
    )
    return parser


def build_deck(args, console):
    """Create a card for every file, --text value and the guide, in command line order."""
    deck = Deck()
    for file_path in args.files:
        file_path = os.path.abspath(file_path)
        content = extract_content(file_path, console)
        deck.add(content, title=os.path.basename(file_path))
    for text in args.text:
        if deck.add(text) is None:
            console.print("[yellow]Skipping empty --text value.[/yellow]")
    if args.guide:
        deck.add(read_guide(), title="Teleprompt Guide")
    return deck


async def practice(card, wpm):
    """Run one teleprompter session over a card. Returns True if the user quit."""
    prompter = Teleprompter(card.content, title=card.display_title, wpm=wpm)

    # Hide cursor, enable mouse tracking
    sys.stdout.write('\033[?1000h\033[?1006h\033[?25l')
    sys.stdout.flush()

    fd = sys.stdin.fileno()
    old_settings = termios.tcgetattr(fd) if sys.stdin.isatty() else None
    try:
        if old_settings is not None:
            tty.setcbreak(fd)
        return await prompter.run()
    finally:
        sys.stdout.write('\033[?1000l\033[?1006l\033[?25h')
        sys.stdout.flush()
        if old_settings is not None:
            termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


async def main():
    parser = build_parser()
    args = parser.parse_args()

    console = Console()
    setup_logging()
    input_handler.load_keyboard_shortcuts(resolve_keys(args.keys))

    deck = build_deck(args, console)
    wpm = args.wpm

    try:
        if len(deck) == 1:
            await practice(next(iter(deck)), wpm)
            return

        menu = DeckMenu(deck, console)
        while True:
            card = menu.choose()
            if card is None:
                break
            if await practice(card, wpm):
                break
    finally:
        logging.info("--- Application Shutting Down ---")
        if config.SHOW_ERRORS_ON_EXIT:
            show_session_errors(console)


def cli():
    """Synchronous entry point for the command-line interface."""
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
    except Exception as e:
        logging.critical(f"Fatal error in application startup: {e}", exc_info=True)


if __name__ == "__main__":
    cli()
