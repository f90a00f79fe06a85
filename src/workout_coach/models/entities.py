"""Persisted domain entities: routines, workouts, sets and user profiles."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional


FITNESS_GOALS = ("lose_weight", "gain_weight", "maintain_weight", "add_muscle")


@dataclass
class Routine:
    """A named, user-owned grouping of workouts."""

    id: str
    name: str
    owner_user_id: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "owner_user_id": self.owner_user_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class Workout:
    """A named exercise occurrence within a routine."""

    id: str
    name: str
    routine_id: str
    date: Optional[date] = None
    total_calories: Optional[float] = None
    duration_minutes: Optional[int] = None
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "routine_id": self.routine_id,
            "date": self.date.isoformat() if self.date else None,
            "total_calories": self.total_calories,
            "duration_minutes": self.duration_minutes,
            "notes": self.notes,
        }


@dataclass
class SetRecord:
    """One logged reps-and-weight unit belonging to a workout."""

    id: str
    workout_id: str
    reps: int
    weight: float
    calories: Optional[float] = None
    date: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "workout_id": self.workout_id,
            "reps": self.reps,
            "weight": self.weight,
            "calories": self.calories,
            "date": self.date.isoformat() if self.date else None,
        }


@dataclass
class NamedEntity:
    """Id/name pair used as a fuzzy-match candidate."""

    id: str
    name: str


@dataclass
class UserProfile:
    """User fitness profile used to personalize coaching prompts."""

    user_id: str
    current_weight: Optional[float] = None
    height: Optional[float] = None
    goal_weight: Optional[float] = None
    fitness_goal: Optional[str] = None
    profile_complete: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_weight": self.current_weight,
            "height": self.height,
            "goal_weight": self.goal_weight,
            "fitness_goal": self.fitness_goal,
            "profile_complete": self.profile_complete,
        }
