"""Build the coach system prompt from profile and conversation context."""

from datetime import date
from typing import Optional, Sequence

from .prompts import ACTION_TAXONOMY, COACH_SYSTEM, EQUIPMENT_CONTEXT, PROFILE_CONTEXT
from ..models.entities import UserProfile


def _format_value(value: Optional[float]) -> str:
    if value is None:
        return "N/A"
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def _format_goal(goal: Optional[str]) -> str:
    if not goal:
        return "N/A"
    return goal.replace("_", " ")


def build_profile_context(profile: Optional[UserProfile]) -> str:
    """Profile block for the prompt, empty unless the profile is complete."""
    if profile is None or not profile.profile_complete:
        return ""
    return PROFILE_CONTEXT.format(
        current_weight=_format_value(profile.current_weight),
        height=_format_value(profile.height),
        goal_weight=_format_value(profile.goal_weight),
        fitness_goal=_format_goal(profile.fitness_goal),
    )


def build_system_prompt(
    profile: Optional[UserProfile],
    recent_history: Sequence[str],
    today: Optional[date] = None,
) -> str:
    """
    Build the system prompt for action interpretation.

    Args:
        profile: The user's fitness profile, if any
        recent_history: Recent conversation turns, oldest first
        today: Date used as the default in the logging schema

    Returns:
        The complete system prompt
    """
    today = today or date.today()
    return COACH_SYSTEM.format(
        profile_context=build_profile_context(profile),
        equipment_context=EQUIPMENT_CONTEXT,
        action_taxonomy=ACTION_TAXONOMY.format(today=today.isoformat()),
        recent_history="\n".join(recent_history) or "(no previous messages)",
    )
