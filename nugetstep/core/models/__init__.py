"""
Domain models — Pydantic types for the build step.

    from nugetstep.core.models import Installation, Node, BuildStepConfig, BuildContext
"""

from nugetstep.core.models.build import BuildContext, BuildStepConfig, StepOutcome
from nugetstep.core.models.installation import Installation, InstallationsConfig, Node

__all__ = [
    "BuildContext",
    "BuildStepConfig",
    "Installation",
    "InstallationsConfig",
    "Node",
    "StepOutcome",
]
