from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence

from ..domain.errors import NoCandidatesAvailable
from ..domain.models import RunTarget
from .interaction.base import InteractionPort


LOG = logging.getLogger(__name__)

USABLE_RUN_TARGET_STATES = ("Booted", "Shutdown")


class TargetResolver:
    """
    Picks a concrete build, test or run target.

    Precedence is fixed: explicit parameter, configured default, interactive
    choice, then the first candidate.
    """

    def __init__(self, interaction: InteractionPort) -> None:
        self.interaction = interaction

    def resolve(
        self,
        name: str,
        parameters: Optional[Mapping[str, str]],
        default: Optional[str],
        candidates: Sequence[str],
        prompt: Optional[str] = None,
        choices: Optional[Sequence[str]] = None,
    ) -> str:
        """
        ``choices`` narrows what is offered interactively; explicit and default
        values are always checked against the full candidate list.
        """
        if not candidates:
            raise NoCandidatesAvailable(name)

        explicit = (parameters or {}).get(name)
        if explicit and explicit in candidates:
            return explicit
        if explicit:
            LOG.warning("Ignoring %s=%s: not among available candidates", name, explicit)

        if default and default in candidates:
            return default

        offered = list(choices) if choices else list(candidates)
        selected = self.interaction.choose_one(prompt or f"Select {name}:", offered)
        if selected:
            return selected
        return offered[0]

    def resolve_test_target(
        self,
        parameters: Optional[Mapping[str, str]],
        default: Optional[str],
        candidates: Sequence[str],
    ) -> str:
        test_like = [candidate for candidate in candidates if "test" in candidate.lower()]
        return self.resolve(
            "scheme",
            parameters,
            default,
            candidates,
            prompt="Select test scheme:" if test_like else "Select scheme to test:",
            choices=test_like or None,
        )

    def resolve_run_target(
        self,
        parameters: Optional[Mapping[str, str]],
        default: Optional[str],
        targets: Sequence[RunTarget],
    ) -> Optional[RunTarget]:
        """Returns ``None`` when nothing is picked; callers launch on the fallback device."""
        explicit = (parameters or {}).get("simulator")
        if explicit:
            for target in targets:
                if target.name == explicit:
                    return target
            # An unknown explicit simulator does not launch on the fallback device;
            # it falls through to the default and then the interactive choice.
            LOG.warning("Simulator '%s' not found", explicit)

        if default:
            for target in targets:
                if default in target.name:
                    return target

        usable: List[RunTarget] = [target for target in targets if target.state in USABLE_RUN_TARGET_STATES]
        if not usable:
            return None
        return self.interaction.choose_one("Select simulator:", usable)
