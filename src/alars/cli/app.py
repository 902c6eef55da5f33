from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from ..config.settings import get_settings
from ..domain.errors import AlarsError, ChangesetNotFound, ProjectsFileNotFound
from ..domain.models import Failure, OperationKind, Project
from ..persistence.project_store import ProjectStore
from ..workflow.orchestrator import ProjectOrchestrator
from .console import ConsoleInteraction, console, print_chain, print_result
from .init_wizard import InitWizard
from .menu import MenuSession

app = typer.Typer(add_completion=False, help="Clean, save, update, build, test and run Xcode projects.")
changeset_app = typer.Typer(add_completion=False, help="Manage work across tickets using changesets.")
app.add_typer(changeset_app, name="changeset")


def _get_orchestrator() -> ProjectOrchestrator:
    return ProjectOrchestrator(interaction=ConsoleInteraction(console))


def _fail(exc: Exception) -> None:
    console.print(f"[red]Error: {exc}[/]")
    raise typer.Exit(code=1)


def _load_projects(orchestrator: ProjectOrchestrator) -> List[Project]:
    try:
        return orchestrator.load_projects()
    except ProjectsFileNotFound as exc:
        console.print(f"[red]Error: {exc}[/]")
        console.print(f"[cyan]Current directory:[/] {Path.cwd()}")
        if Confirm.ask("Would you like to create one now?", default=False, console=console):
            _write_projects_file(orchestrator.store)
            return orchestrator.load_projects()
        console.print("[dim]You can create one later by running: alars init[/]")
        raise typer.Exit(code=1)


def _resolve_project(orchestrator: ProjectOrchestrator, name: str) -> Project:
    project = orchestrator.get_project(name, _load_projects(orchestrator))
    orchestrator.validate_project(project)
    return project


def _write_projects_file(store: ProjectStore) -> None:
    projects = InitWizard(console).collect_projects()
    if not projects:
        console.print("[yellow]No projects added. Initialization cancelled[/]")
        raise typer.Exit(code=1)
    store.save(projects)
    console.print(f"[green]{store.path.name} created successfully with {len(projects)} project(s)[/]")


def _run_single(project_name: str, kind: OperationKind) -> None:
    orchestrator = _get_orchestrator()
    try:
        project = _resolve_project(orchestrator, project_name)
        result = orchestrator.run_operation(project, kind)
    except AlarsError as exc:
        _fail(exc)
        return
    print_result(result)
    if isinstance(result, Failure):
        raise typer.Exit(code=1)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every external command."),
) -> None:
    """
    Without a subcommand, start the interactive menu.
    """
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level_value,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if ctx.invoked_subcommand is None:
        run(project=None, operation=None, command=None)


@app.command()
def run(
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project name to work with directly."),
    operation: Optional[OperationKind] = typer.Option(None, "--operation", "-o", help="Operation to execute directly."),
    command: Optional[str] = typer.Option(None, "--command", "-c", help="Custom command alias to execute."),
) -> None:
    """
    Run an operation or custom command, or open the interactive menu.
    """
    orchestrator = _get_orchestrator()
    console.print(f"[cyan]Working directory:[/] {Path.cwd()}")

    try:
        projects = _load_projects(orchestrator)
        if not projects:
            console.print("[yellow]No projects found in the projects file.[/]")
            return

        if project is None:
            MenuSession(orchestrator, projects).run()
            return

        selected = orchestrator.get_project(project, projects)
        orchestrator.validate_project(selected)

        if operation is not None:
            result = orchestrator.run_operation(selected, operation)
            print_result(result)
            if isinstance(result, Failure):
                raise typer.Exit(code=1)
        elif command is not None:
            log = orchestrator.run_custom_command(selected, command)
            print_chain(log)
            if any(isinstance(result, Failure) for result in log.results):
                raise typer.Exit(code=1)
        else:
            MenuSession(orchestrator, projects, selected=selected).run()
    except AlarsError as exc:
        _fail(exc)


@app.command("list")
def list_projects() -> None:
    """
    List all configured projects.
    """
    orchestrator = _get_orchestrator()
    console.print(f"[cyan]Working directory:[/] {Path.cwd()}")
    try:
        projects = _load_projects(orchestrator)
    except AlarsError as exc:
        _fail(exc)
        return

    if not projects:
        console.print("[yellow]No projects found in the projects file.[/]")
        return

    table = Table(title="Configured Projects")
    table.add_column("Name", style="bold")
    table.add_column("Directory")
    table.add_column("Branch")
    table.add_column("Default Scheme")
    table.add_column("Custom Commands")
    for item in projects:
        table.add_row(
            item.name,
            item.working_directory,
            item.configuration.default_branch,
            item.configuration.default_scheme or "-",
            ", ".join(command.alias for command in item.custom_commands) or "-",
        )
    console.print(table)
    console.print(f"Total: {len(projects)} project(s)")


@app.command()
def init() -> None:
    """
    Create a projects file interactively.
    """
    settings = get_settings()
    store = ProjectStore(settings.projects_file)
    if store.exists() and not Confirm.ask(f"{store.path.name} already exists. Overwrite?", default=False, console=console):
        console.print("[yellow]Initialization cancelled[/]")
        return
    console.print(f"[cyan]Let's create {store.path}[/]")
    _write_projects_file(store)


@app.command()
def build(project_name: str = typer.Argument(..., help="Project name to build.")) -> None:
    """
    Build a project directly.
    """
    _run_single(project_name, OperationKind.BUILD)


@app.command()
def test(project_name: str = typer.Argument(..., help="Project name to test.")) -> None:
    """
    Run a project's tests directly.
    """
    _run_single(project_name, OperationKind.TEST)


@app.command()
def clean(project_name: str = typer.Argument(..., help="Project name to clean.")) -> None:
    """
    Discard all uncommitted changes in a project.
    """
    _run_single(project_name, OperationKind.CLEAN_SLATE)


@app.command()
def save(project_name: str = typer.Argument(..., help="Project name to save.")) -> None:
    """
    Stash or branch a project's uncommitted changes.
    """
    _run_single(project_name, OperationKind.SAVE)


@app.command()
def quick(
    sequence: str = typer.Argument(..., help="Operation letters, e.g. 'cbtr' for clean, build, test, run."),
    project_name: str = typer.Argument(..., help="Project name to run the sequence on."),
) -> None:
    """
    Run a quick sequence of operations.

    Letters: c=clean, s=save, u=update, b=build, t=test, r=run, e=reset.
    """
    orchestrator = _get_orchestrator()
    try:
        project = _resolve_project(orchestrator, project_name)
        log, skipped = orchestrator.run_sequence(project, sequence)
    except AlarsError as exc:
        _fail(exc)
        return

    for letter in skipped:
        console.print(f"[yellow]Skipping invalid operation letter: '{letter}'[/]")
    if not log.entries:
        console.print(f"[red]No valid operations found in sequence '{sequence}'[/]")
        console.print("[dim]Valid letters: " + ", ".join(f"{kind.letter}={kind.value}" for kind in OperationKind) + "[/]")
        raise typer.Exit(code=1)

    print_chain(log)
    if any(isinstance(result, Failure) for result in log.results):
        raise typer.Exit(code=1)
    if log.succeeded:
        console.print("[bold green]All operations completed successfully![/]")


@changeset_app.command("fresh")
def changeset_fresh(
    changeset_id: str = typer.Argument(..., help="Changeset/ticket identifier (e.g. TICKET-123)."),
    project: str = typer.Option(..., "--project", "-p", help="Project name."),
) -> None:
    """
    Stash current work and start (or switch to) a changeset branch.
    """
    orchestrator = _get_orchestrator()
    try:
        selected = _resolve_project(orchestrator, project)
        console.print(f"[cyan]Creating fresh changeset: {changeset_id}[/]")
        outcome = orchestrator.start_changeset(selected, changeset_id)
    except AlarsError as exc:
        _fail(exc)
        return

    lines = [f"[bold]Branch:[/] {outcome.branch}"]
    if outcome.stashed_as:
        lines.append(f"[bold]Stashed changes as:[/] {outcome.stashed_as}")
    lines.append("[bold]Created:[/] " + ("yes" if outcome.created_branch else "no, switched to existing branch"))
    console.print(Panel.fit("\n".join(lines), title="Fresh changeset ready", border_style="green"))


@changeset_app.command("resume")
def changeset_resume(
    changeset_id: str = typer.Argument(..., help="Changeset/ticket identifier to resume."),
    project: str = typer.Option(..., "--project", "-p", help="Project name."),
) -> None:
    """
    Stash current work and restore a previous changeset.
    """
    orchestrator = _get_orchestrator()
    try:
        selected = _resolve_project(orchestrator, project)
        console.print(f"[cyan]Resuming changeset: {changeset_id}[/]")
        outcome = orchestrator.resume_changeset(selected, changeset_id)
    except AlarsError as exc:
        if isinstance(exc, ChangesetNotFound):
            console.print(f"[dim]Use 'alars changeset fresh {changeset_id} -p {project}' to create it[/]")
        _fail(exc)
        return

    lines = [f"[bold]Branch:[/] {outcome.branch}"]
    if outcome.stashed_as:
        lines.append(f"[bold]Stashed changes as:[/] {outcome.stashed_as}")
    if outcome.restored_stash:
        lines.append("[green]Stashed changes restored[/]")
    else:
        lines.append("[dim]No stashed changes found for this changeset[/]")
    console.print(Panel.fit("\n".join(lines), title="Changeset resumed", border_style="green"))


def main() -> None:
    app()
