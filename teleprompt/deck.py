"""In-memory deck of text cards and the menu used to pick one to practise."""

import uuid
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text

from . import config


@dataclass
class Card:
    content: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    title: Optional[str] = None

    @property
    def display_title(self) -> str:
        if self.title:
            return self.title
        first_line = self.content.strip().splitlines()[0] if self.content.strip() else ""
        return preview(first_line, 40)


def preview(content: str, limit: int = config.CARD_PREVIEW_LENGTH) -> str:
    """Shorten content to limit characters, marking truncation with '...'."""
    if len(content) <= limit:
        return content
    return f"{content[:limit]}..."


class Deck:
    """
    Cards of the current run, newest first.

    Cards live only as long as the process; nothing is written to disk.
    """

    def __init__(self):
        self._cards: List[Card] = []

    def __len__(self):
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    @property
    def cards(self) -> List[Card]:
        return list(self._cards)

    def add(self, content: str, title: Optional[str] = None) -> Optional[Card]:
        """
        Add a card to the top of the deck.

        Args:
            content: Card text; surrounding whitespace is removed
            title: Optional display title

        Returns:
            Card: The new card, or None if the content is blank
        """
        content = content.strip() if content else ""
        if not content:
            return None
        card = Card(content=content, title=title)
        self._cards.insert(0, card)
        return card

    def delete(self, card_id: str) -> bool:
        for i, card in enumerate(self._cards):
            if card.id == card_id:
                del self._cards[i]
                return True
        return False

    def get(self, card_id: str) -> Optional[Card]:
        for card in self._cards:
            if card.id == card_id:
                return card
        return None


class DeckMenu:
    """
    Interactive card list: practise, show, add or delete cards.

    Commands: a number practises that card, 's <n>' shows the full text of
    card n, 'a' adds a card from typed text (finish with a line holding only
    '.' or with Ctrl-D), 'd <n>' deletes card n, 'q' quits.
    """

    END_OF_TEXT = "."

    def __init__(self, deck: Deck, console: Optional[Console] = None):
        self.deck = deck
        self.console = console or Console()

    def render(self):
        if not len(self.deck):
            self.console.print("[yellow]No cards yet. Press 'a' to add the text you want to memorize.[/yellow]")
            return
        table = Table(title="Teleprompt", caption="Memorize anything", show_lines=True)
        table.add_column("#", justify="right", style="bold magenta")
        table.add_column("Card", style="white")
        table.add_column("Words", justify="right", style="bright_blue")
        for number, card in enumerate(self.deck, start=1):
            table.add_row(str(number), preview(card.content), str(len(card.content.split())))
        self.console.print(table)

    def show(self, card: Card):
        """Print the whole text of a card."""
        self.console.print(Panel(Text(card.content), title=Text(card.display_title), border_style="bright_blue", padding=(1, 2)))

    def read_card_text(self) -> str:
        self.console.print(
            f"[cyan]Paste or type the content you want to memorize. "
            f"Finish with a line containing only '{self.END_OF_TEXT}' or press Ctrl-D.[/cyan]"
        )
        lines = []
        while True:
            try:
                line = self.console.input()
            except EOFError:
                break
            if line.strip() == self.END_OF_TEXT:
                break
            lines.append(line)
        return "\n".join(lines)

    def _card_number(self, text: str, cards: List[Card]) -> Optional[Card]:
        text = text.strip()
        if text.isdigit() and 1 <= int(text) <= len(cards):
            return cards[int(text) - 1]
        self.console.print(f"[red]No card '{text}'.[/red]")
        return None

    def handle(self, answer: str) -> Optional[Card]:
        """
        Run one menu command.

        Returns:
            Card: The card to practise, or None if the menu should be shown again
        """
        answer = answer.strip().lower()
        cards = self.deck.cards
        if answer == "a":
            card = self.deck.add(self.read_card_text())
            if card is None:
                self.console.print("[yellow]Nothing to add.[/yellow]")
            else:
                self.console.print(f"[green]Added card with {len(card.content)} characters.[/green]")
            return None
        if answer.startswith("d"):
            card = self._card_number(answer[1:], cards)
            if card is not None:
                self.deck.delete(card.id)
                self.console.print(f"[green]Deleted card {answer[1:].strip()}.[/green]")
            return None
        if answer.startswith("s"):
            card = self._card_number(answer[1:], cards)
            if card is not None:
                self.show(card)
            return None
        if answer.isdigit() and 1 <= int(answer) <= len(cards):
            return cards[int(answer) - 1]
        self.console.print(f"[red]Unknown choice '{answer}'.[/red]")
        return None

    def choose(self) -> Optional[Card]:
        """Show the menu until a card is picked. Returns None when the user quits."""
        while True:
            self.render()
            answer = Prompt.ask(
                "[bold]Card number to practise, [cyan]s[/cyan] <n> show, [cyan]a[/cyan]dd, "
                "[cyan]d[/cyan] <n> delete, [cyan]q[/cyan]uit[/bold]",
                console=self.console,
                default="q" if not len(self.deck) else "1",
            )
            if answer.strip().lower() == "q":
                return None
            card = self.handle(answer)
            if card is not None:
                return card
