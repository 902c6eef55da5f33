from __future__ import annotations

from enum import Enum
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt

from ..domain.errors import AlarsError
from ..domain.models import OperationKind, Project
from ..workflow.orchestrator import ProjectOrchestrator
from .console import console, print_chain, print_result


class MenuState(str, Enum):
    """Where the interactive session currently is."""
    SELECTING_PROJECT = "SELECTING_PROJECT"
    PROJECT_MENU = "PROJECT_MENU"
    EXITING = "EXITING"


EXIT_INPUTS = {"q", "quit", "exit"}
BACK_INPUTS = {"x", "back"}


class MenuSession:
    """
    Interactive project/operation menu.

    Operations are picked by their one-letter shorthand, custom commands by
    alias.
    """

    def __init__(
        self,
        orchestrator: ProjectOrchestrator,
        projects: List[Project],
        selected: Optional[Project] = None,
        output: Optional[Console] = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.projects = projects
        self.current: Optional[Project] = selected
        self.console = output or console
        self.state = MenuState.PROJECT_MENU if selected else MenuState.SELECTING_PROJECT

    def run(self) -> None:
        self._show_welcome()
        while self.state != MenuState.EXITING:
            try:
                if self.state == MenuState.SELECTING_PROJECT:
                    self._handle_project_selection()
                elif self.state == MenuState.PROJECT_MENU:
                    self._handle_project_menu()
            except KeyboardInterrupt:
                self.console.print("\n[yellow]Interrupted. Returning to project selection.[/]")
                self.current = None
                self.state = MenuState.SELECTING_PROJECT
        self.console.print("[bold cyan]Goodbye![/]")

    def _show_welcome(self) -> None:
        self.console.print(
            Panel.fit(
                "[bold cyan]Alars[/]\n"
                "Clean, save, update, build, test and run your projects.\n\n"
                "[dim]Press Ctrl+C at any time to return to project selection.[/]",
                border_style="cyan",
            )
        )

    def _handle_project_selection(self) -> None:
        self.console.print("\n[bold green]Available Projects:[/]")
        for index, project in enumerate(self.projects, start=1):
            self.console.print(f"  [cyan]{index}.[/] [bold]{project.name}[/] - [dim]{project.working_directory}[/]")
        self.console.print("  [cyan]0.[/] Exit")

        raw = Prompt.ask("Select a project", default="0", console=self.console)
        try:
            choice = int(raw)
        except ValueError:
            self.console.print("[red]Invalid choice[/]")
            return

        if choice == 0:
            self.state = MenuState.EXITING
            return
        if not 1 <= choice <= len(self.projects):
            self.console.print("[red]Invalid project selection[/]")
            return

        project = self.projects[choice - 1]
        try:
            self.orchestrator.validate_project(project)
        except AlarsError as exc:
            self.console.print(f"[red]Invalid project: {exc}[/]")
            return
        self.current = project
        self.state = MenuState.PROJECT_MENU

    def _handle_project_menu(self) -> None:
        project = self.current
        if project is None:
            self.state = MenuState.SELECTING_PROJECT
            return

        self._show_project_menu(project)
        choice = Prompt.ask("Select an option", default="", show_default=False, console=self.console)
        choice = choice.strip().lower()

        if choice in EXIT_INPUTS:
            self.state = MenuState.EXITING
            return
        if choice in BACK_INPUTS:
            self.current = None
            self.state = MenuState.SELECTING_PROJECT
            return

        kind = OperationKind.from_letter(choice) if len(choice) == 1 else None
        try:
            if kind is not None:
                print_result(self.orchestrator.run_operation(project, kind), self.console)
            elif project.find_command(choice) is not None:
                print_chain(self.orchestrator.run_custom_command(project, choice), self.console)
            else:
                self.console.print("[red]Invalid choice[/]")
                return
        except AlarsError as exc:
            self.console.print(f"[red]Error: {exc}[/]")

        Prompt.ask("[dim]Press Enter to continue[/]", default="", show_default=False, console=self.console)

    def _show_project_menu(self, project: Project) -> None:
        lines = [
            f"[dim]Directory: {project.working_directory}[/]",
            "",
            "[cyan]c[/] Clean Slate - Reset working directory",
            "[cyan]s[/] Save - Stash or branch uncommitted changes",
            "[cyan]u[/] Update - Pull latest changes",
            "[cyan]b[/] Build - Build the project",
            "[cyan]t[/] Test - Run tests",
            "[cyan]r[/] Run - Launch the app",
            "[cyan]e[/] Reset - Clean build, DerivedData and reinstall dependencies",
        ]
        if project.custom_commands:
            lines.append("")
            lines.append("[bold]Custom Commands:[/]")
            for command in project.custom_commands:
                lines.append(f"[magenta]{command.alias}[/] - {command.description}")
        lines += ["", "[cyan]x[/] Back to project selection", "[cyan]q[/] Exit"]
        self.console.print(Panel.fit("\n".join(lines), title=f"Project: {project.name}", border_style="green"))
