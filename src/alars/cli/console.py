from __future__ import annotations

from typing import Optional, Sequence, TypeVar

from rich.console import Console
from rich.prompt import Confirm, Prompt

from ..domain.models import Cancelled, ChainLog, Failure, OperationResult, Success


T = TypeVar("T")

console = Console()


class ConsoleInteraction:
    """
    Terminal implementation of the interaction port, built on ``rich.prompt``.
    """

    def __init__(self, output: Optional[Console] = None) -> None:
        self.console = output or console

    def confirm(self, question: str) -> bool:
        return Confirm.ask(f"[yellow]{question}[/]", default=False, console=self.console)

    def ask_text(self, prompt: str) -> Optional[str]:
        answer = Prompt.ask(f"[cyan]{prompt}[/]", default="", show_default=False, console=self.console)
        return answer.strip() or None

    def choose_one(self, prompt: str, candidates: Sequence[T]) -> Optional[T]:
        if not candidates:
            return None

        self.console.print(f"\n[bold]{prompt}[/]")
        for index, candidate in enumerate(candidates, start=1):
            self.console.print(f"  [cyan]{index}.[/] {candidate}")

        raw = Prompt.ask(
            f"[cyan]Enter your choice (1-{len(candidates)})[/]",
            default="",
            show_default=False,
            console=self.console,
        )
        try:
            choice = int(raw)
        except ValueError:
            self.console.print("[red]Invalid choice[/]")
            return None
        if not 1 <= choice <= len(candidates):
            self.console.print("[red]Invalid choice[/]")
            return None
        return candidates[choice - 1]

    def notify(self, message: str) -> None:
        self.console.print(f"[blue]{message}[/]", highlight=False)


def print_result(result: OperationResult, output: Optional[Console] = None) -> None:
    target = output or console
    if isinstance(result, Success):
        target.print(f"[green]✓ {result.message}[/]")
    elif isinstance(result, Failure):
        target.print(f"[red]✗ Failed: {result.message}[/]")
        if result.report_path:
            target.print(f"[yellow]Error report written to {result.report_path}[/]")
    elif isinstance(result, Cancelled):
        target.print(f"[yellow]{result.reason}[/]")


def print_chain(log: ChainLog, output: Optional[Console] = None) -> None:
    for _, result in log.entries:
        print_result(result, output)
