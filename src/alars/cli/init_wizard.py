from __future__ import annotations

from typing import Dict, List, Optional

from prompt_toolkit import prompt as prompt_toolkit_prompt
from prompt_toolkit.completion import PathCompleter
from rich.console import Console
from rich.prompt import Confirm, Prompt

from ..domain.models import (
    CustomCommand,
    Operation,
    OperationKind,
    Project,
    ProjectConfiguration,
    SavePreference,
)
from .console import console


class InitWizard:
    """
    Walks the user through describing projects for ``xprojects.json``.
    """

    def __init__(self, output: Optional[Console] = None) -> None:
        self.console = output or console

    def collect_projects(self) -> List[Project]:
        projects: List[Project] = []
        while True:
            project = self.create_project()
            if project is not None:
                projects.append(project)
                self.console.print(f"[green]Project '{project.name}' added[/]")
            if not Confirm.ask("Add another project?", default=False, console=self.console):
                return projects

    def create_project(self) -> Optional[Project]:
        self.console.rule("New Project Configuration")

        name = self._ask("Project name")
        if not name:
            self.console.print("[red]Project name is required[/]")
            return None

        working_directory = self._ask_path()
        if not working_directory:
            self.console.print("[red]Working directory is required[/]")
            return None

        repository_url = self._ask("Repository URL (optional)")
        default_branch = self._ask("Default branch", default="main") or "main"
        default_scheme = self._ask("Default build scheme (optional)")
        default_test_scheme = self._ask("Default test scheme (optional)")
        default_simulator = self._ask("Default simulator (optional, e.g. iPhone 15)")

        save_preference: Optional[SavePreference] = None
        if Confirm.ask("Configure save preference?", default=False, console=self.console):
            choice = Prompt.ask(
                "Save uncommitted work with",
                choices=[item.value for item in SavePreference],
                default=SavePreference.STASH.value,
                console=self.console,
            )
            save_preference = SavePreference(choice)

        commands: List[CustomCommand] = []
        if Confirm.ask("Add custom commands?", default=False, console=self.console):
            while True:
                command = self.create_custom_command()
                if command is not None:
                    commands.append(command)
                    self.console.print(f"[green]Custom command '{command.alias}' added[/]")
                if not Confirm.ask("Add another custom command?", default=False, console=self.console):
                    break

        return Project(
            name=name,
            working_directory=working_directory,
            repository_url=repository_url,
            configuration=ProjectConfiguration(
                default_branch=default_branch,
                default_scheme=default_scheme,
                default_test_scheme=default_test_scheme,
                default_simulator=default_simulator,
                save_preference=save_preference,
            ),
            custom_commands=tuple(commands),
        )

    def create_custom_command(self) -> Optional[CustomCommand]:
        alias = self._ask("Command alias")
        if not alias:
            self.console.print("[red]Command alias is required[/]")
            return None
        description = self._ask("Command description")
        if not description:
            self.console.print("[red]Command description is required[/]")
            return None

        operations: List[Operation] = []
        self.console.print("[cyan]Add operations for this command (in order)[/]")
        kinds = [kind.value for kind in OperationKind]
        while True:
            raw = Prompt.ask("Operation type", choices=kinds + ["done"], default="done", console=self.console)
            if raw == "done":
                break
            kind = OperationKind(raw)
            parameters: Dict[str, str] = {}
            if kind in (OperationKind.BUILD, OperationKind.TEST, OperationKind.RUN):
                scheme = self._ask("Specific scheme (optional)")
                if scheme:
                    parameters["scheme"] = scheme
            if kind == OperationKind.RUN:
                simulator = self._ask("Specific simulator (optional)")
                if simulator:
                    parameters["simulator"] = simulator
            operations.append(Operation(kind, parameters))

        if not operations:
            self.console.print("[red]At least one operation is required[/]")
            return None
        return CustomCommand(alias=alias, description=description, operations=tuple(operations))

    def _ask(self, prompt: str, default: str = "") -> Optional[str]:
        answer = Prompt.ask(prompt, default=default, show_default=bool(default), console=self.console)
        return answer.strip() or None

    def _ask_path(self) -> Optional[str]:
        self.console.print("Working directory path (press Tab for completion):")
        try:
            raw = prompt_toolkit_prompt(
                "> ",
                completer=PathCompleter(only_directories=True, expanduser=True),
            ).strip()
        except (KeyboardInterrupt, EOFError):
            self.console.print("[yellow]Cancelled[/]")
            return None
        return raw or None
