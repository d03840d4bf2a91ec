"""
rainmix Stage Contracts

This module provides:
- StageContract: Frozen, declarative contract for a stage
- StageContext: Immutable execution context snapshot
- Stage: Abstract base class for all stages
- StageValidator: Centralized input/output validation
- ValidationError: Structured validation failure

INVARIANTS:
- Contracts are frozen and immutable
- Validation happens before any engine invocation
- Stages do NOT validate their own inputs
- Stages do NOT mutate context
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from rainmix.config import RenderConfig
from rainmix.probe import ProbedDuration
from rainmix.stages.base import ArtifactRef, Invocation
from rainmix.workspace import RenderPaths


# =============================================================================
# StageContract - Frozen, Declarative
# =============================================================================


@dataclass(frozen=True)
class StageContract:
    """
    Frozen contract declaring what a stage requires and produces.

    Attributes:
        name: Stage identifier (e.g., "clean", "layer")
        requires: Artifact roles required to run (e.g., {"audio/source"})
        produces: Artifact roles this stage creates (e.g., {"audio/clean"})
    """
    name: str
    requires: frozenset[str]
    produces: frozenset[str]


# =============================================================================
# StageContext - Immutable Execution Snapshot
# =============================================================================


@dataclass(frozen=True)
class StageContext:
    """
    Immutable snapshot passed to a stage.

    Attributes:
        config: Render configuration for the run
        paths: Every path the run reads or writes
        duration: Length used for generated noise/tone beds
        artifacts: Artifacts declared by the source and prior stages
    """
    config: RenderConfig
    paths: RenderPaths
    duration: ProbedDuration
    artifacts: tuple[ArtifactRef, ...]

    def input_for(self, role: str) -> ArtifactRef:
        """Return the most recent artifact with role."""
        for artifact in reversed(self.artifacts):
            if artifact.role == role:
                return artifact
        raise KeyError(role)


# =============================================================================
# Stage - Abstract Base Class
# =============================================================================


class Stage(ABC):
    """
    Abstract base class for all pipeline stages.

    Subclasses must:
        - Define a `contract` class attribute of type StageContract
        - Implement describe(), outputs() and plan()

    A stage never runs the engine itself; the pipeline executes its plan.
    """

    contract: StageContract

    def enabled(self, config: RenderConfig) -> bool:
        """Whether this stage runs under config."""
        return True

    @abstractmethod
    def describe(self, ctx: StageContext) -> str:
        """One-line progress description."""
        ...

    @abstractmethod
    def outputs(self, ctx: StageContext) -> list[ArtifactRef]:
        """
        Artifacts this stage writes.

        Must match exactly the roles declared in contract.produces; the last
        entry is the stage's primary output.
        """
        ...

    @abstractmethod
    def plan(self, ctx: StageContext) -> list[Invocation]:
        """Engine invocations, in the order they must run."""
        ...


# =============================================================================
# ValidationError - Structured Validation Failure
# =============================================================================


class ValidationError(Exception):
    """
    Raised when stage validation fails.

    Attributes:
        stage: Name of the stage that failed validation
        missing_roles: Roles required but not available
        available_roles: Roles that were available
        type_errors: List of role/type compatibility errors
    """

    def __init__(
        self,
        stage: str,
        missing_roles: set[str],
        available_roles: set[str],
        type_errors: list[str],
    ):
        self.stage = stage
        self.missing_roles = missing_roles
        self.available_roles = available_roles
        self.type_errors = type_errors

        parts = [f"Validation failed for stage '{stage}'"]
        if missing_roles:
            parts.append(f"Missing roles: {sorted(missing_roles)}")
            parts.append(f"Available roles: {sorted(available_roles)}")
        if type_errors:
            parts.append(f"Type errors: {type_errors}")

        super().__init__("; ".join(parts))


# =============================================================================
# StageValidator - Centralized Validation
# =============================================================================


class StageValidator:
    """
    Validates stage inputs and declared outputs against contracts.

    Checks:
        1. All required artifact roles exist in available artifacts
        2. audio/* roles carry an audio/* MIME type
        3. Declared outputs cover exactly contract.produces
    """

    def validate(self, contract: StageContract, available_artifacts: list[ArtifactRef]) -> None:
        """
        Raises:
            ValidationError: If a required role is missing or mistyped.
        """
        available_roles: set[str] = {a.role for a in available_artifacts}
        missing_roles = set(contract.requires - available_roles)
        type_errors = _type_errors(available_artifacts)

        if missing_roles or type_errors:
            raise ValidationError(
                stage=contract.name,
                missing_roles=missing_roles,
                available_roles=available_roles,
                type_errors=type_errors,
            )

    def validate_outputs(self, contract: StageContract, outputs: list[ArtifactRef]) -> None:
        """
        Raises:
            ValidationError: If outputs do not match contract.produces.
        """
        produced = {a.role for a in outputs}
        type_errors = _type_errors(outputs)
        if produced != contract.produces:
            type_errors.append(
                f"Produced roles {sorted(produced)} do not match contract {sorted(contract.produces)}"
            )
        if type_errors:
            raise ValidationError(
                stage=contract.name,
                missing_roles=set(contract.produces - produced),
                available_roles=produced,
                type_errors=type_errors,
            )


def _type_errors(artifacts: list[ArtifactRef]) -> list[str]:
    errors: list[str] = []
    for artifact in artifacts:
        if artifact.role.startswith("audio/") and not artifact.type.startswith("audio/"):
            errors.append(
                f"Role '{artifact.role}' has type '{artifact.type}', expected type starting with 'audio/'"
            )
    return errors
