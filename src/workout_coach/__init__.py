"""Conversational workout tracking coach."""

from .models import (
    ActionKind,
    CheckIn,
    ParsedAction,
    Routine,
    SetRecord,
    UserProfile,
    Workout,
    canonical_kind,
    parse_action,
)
from .recommendations import adjust_intensity, describe_adjustment
from .services import (
    ActionDispatcher,
    ActionInterpreter,
    CoachReply,
    CoachService,
    EntityResolver,
    build_coach_service,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Models
    "ActionKind",
    "CheckIn",
    "ParsedAction",
    "Routine",
    "SetRecord",
    "UserProfile",
    "Workout",
    "canonical_kind",
    "parse_action",
    # Intensity
    "adjust_intensity",
    "describe_adjustment",
    # Services
    "EntityResolver",
    "ActionInterpreter",
    "ActionDispatcher",
    "CoachService",
    "CoachReply",
    "build_coach_service",
]
