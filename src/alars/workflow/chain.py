from __future__ import annotations

import logging
from typing import Iterable, List, Tuple

from ..domain.models import (
    Cancelled,
    ChainLog,
    CustomCommand,
    Failure,
    Operation,
    OperationKind,
    Project,
    Success,
)
from ..services.interaction.base import InteractionPort
from .executor import OperationExecutor


LOG = logging.getLogger(__name__)


def parse_sequence(letters: str) -> Tuple[List[Operation], List[str]]:
    """
    Expand compact notation such as ``"cbtr"``.

    Unknown letters are returned separately instead of aborting the parse.
    """
    operations: List[Operation] = []
    skipped: List[str] = []
    for letter in letters.strip().lower():
        kind = OperationKind.from_letter(letter)
        if kind is None:
            skipped.append(letter)
            continue
        operations.append(Operation(kind))
    return operations, skipped


class ChainRunner:
    """
    Executes an ordered list of operations against one project.

    The chain halts after the first ``Failure``. A ``Cancelled`` step is logged
    and the chain keeps going.
    """

    def __init__(self, executor: OperationExecutor, interaction: InteractionPort) -> None:
        self.executor = executor
        self.interaction = interaction

    def run(self, project: Project, operations: Iterable[Operation]) -> ChainLog:
        log = ChainLog()
        for operation in operations:
            self.interaction.notify(f"Running: {operation.kind.label}")
            result = self.executor.execute(project, operation.kind, operation.parameters)
            log.record(operation, result)

            if isinstance(result, Failure):
                LOG.info("Stopping chain on %s after failure: %s", project.name, result.message)
                self.interaction.notify("Operation failed. Stopping execution.")
                break
            if isinstance(result, Cancelled):
                # TODO: decide whether a cancelled step should halt the chain like a failure does.
                LOG.info("%s was cancelled; continuing chain", operation.kind.value)
            elif isinstance(result, Success):
                LOG.debug("%s succeeded: %s", operation.kind.value, result.message)
        return log

    def run_custom_command(self, project: Project, command: CustomCommand) -> ChainLog:
        self.interaction.notify(f"Executing custom command: {command.alias}")
        return self.run(project, command.operations)
