"""
rainmix Pipeline Orchestrator

PIPELINE STAGES (FIXED ORDER):

    1. Clean            → rainmix.stages.clean
    2. Layer            → rainmix.stages.layer
    3. Loop splice      → rainmix.stages.loop
    4. Normalize        → rainmix.stages.normalize
    5. Phone export     → rainmix.stages.phone
    6. Room export      → rainmix.stages.room
    7. Storm undertone  → rainmix.stages.storm (only with rumble_on)

INVARIANTS:
    - Stages execute in order 1 → 7
    - Stages never call each other (only the orchestrator sequences)
    - Every stage is planned and validated before the engine runs once
    - Pipeline stops on the first failure; no retries, no cleanup
"""

import importlib
import logging
import mimetypes
from dataclasses import dataclass

from rainmix.config import RenderConfig
from rainmix.contracts import Stage, StageContext, StageValidator
from rainmix.probe import ProbedDuration
from rainmix.report import Reporter
from rainmix.stages.base import ArtifactRef, Invocation, build_artifact_ref, run_invocation
from rainmix.workspace import RenderPaths, create_output_dir


logger = logging.getLogger(__name__)

# Stage registry: (name, module_path, class_name)
STAGE_ORDER = [
    ("clean", "rainmix.stages.clean", "CleanStage"),
    ("layer", "rainmix.stages.layer", "LayerStage"),
    ("loop", "rainmix.stages.loop", "LoopStage"),
    ("normalize", "rainmix.stages.normalize", "NormalizeStage"),
    ("phone", "rainmix.stages.phone", "PhoneStage"),
    ("room", "rainmix.stages.room", "RoomStage"),
    ("storm", "rainmix.stages.storm", "StormStage"),
]


@dataclass(frozen=True)
class PlannedStage:
    """A stage with its context, engine invocations and declared outputs."""
    stage: Stage
    ctx: StageContext
    invocations: tuple[Invocation, ...]
    outputs: tuple[ArtifactRef, ...]

    @property
    def name(self) -> str:
        return self.stage.contract.name


def load_stages() -> list[Stage]:
    """Instantiate every registered stage, in order."""
    stages = []
    for name, module_path, class_name in STAGE_ORDER:
        module = importlib.import_module(module_path)
        stage = getattr(module, class_name)()
        if stage.contract.name != name:
            raise RuntimeError(f"{module_path}.{class_name} declares stage '{stage.contract.name}', expected '{name}'")
        stages.append(stage)
    return stages


def source_artifact(paths: RenderPaths) -> ArtifactRef:
    """The raw input, as the artifact the first stage consumes."""
    guessed, _ = mimetypes.guess_type(paths.input_path.name)
    artifact_type = guessed if guessed and guessed.startswith("audio/") else "audio/unknown"
    return build_artifact_ref(paths.input_path, artifact_type, "audio/source", "Raw input recording")


def plan_pipeline(
    config: RenderConfig,
    paths: RenderPaths,
    duration: ProbedDuration,
) -> list[PlannedStage]:
    """
    Validate and plan every enabled stage without running anything.

    Raises:
        ValidationError: If a stage's required roles are not produced earlier.
        FilterError: If a filter parameter is invalid.
        StageFailure: If a stage rejects its inputs at plan time.
    """
    validator = StageValidator()
    artifacts: list[ArtifactRef] = [source_artifact(paths)]
    planned: list[PlannedStage] = []

    for stage in load_stages():
        if not stage.enabled(config):
            logger.debug("Stage %s disabled", stage.contract.name)
            continue
        # Catches a STAGE_ORDER entry ahead of the stage producing its input,
        # and outputs that drift from the stage's contract.
        validator.validate(stage.contract, artifacts)
        ctx = StageContext(config=config, paths=paths, duration=duration, artifacts=tuple(artifacts))
        outputs = stage.outputs(ctx)
        validator.validate_outputs(stage.contract, outputs)
        invocations = stage.plan(ctx)
        planned.append(PlannedStage(stage, ctx, tuple(invocations), tuple(outputs)))
        artifacts.extend(outputs)

    return planned


def run_pipeline(
    config: RenderConfig,
    paths: RenderPaths,
    engine,
    duration: ProbedDuration,
    reporter: Reporter | None = None,
) -> list[ArtifactRef]:
    """
    Execute all enabled stages in order.

    Args:
        config: Render configuration
        paths: Derived render paths
        engine: Object exposing run(args)
        duration: Length for generated beds
        reporter: Progress printer (default: stdout)

    Returns:
        The source artifact followed by every artifact written, in order.

    Raises:
        StageFailure: On the first failed engine invocation.
    """
    reporter = reporter or Reporter()
    planned = plan_pipeline(config, paths, duration)
    create_output_dir(paths)

    artifacts = [source_artifact(paths)]
    for step in planned:
        reporter.stage_started(step.stage.describe(step.ctx), step.outputs[-1].path)
        logger.info("Stage %s: %d invocation(s)", step.name, len(step.invocations))
        for invocation in step.invocations:
            run_invocation(engine, step.name, invocation)
        artifacts.extend(step.outputs)

    return artifacts
