#!/usr/bin/env python3
"""
Workout Coach CLI.

Talk to the coach from a terminal and inspect what it stored.

Usage:
    workout-coach chat                              # Interactive session
    workout-coach chat -m "bench press 3x10 at 135" # Single message
    workout-coach profile --weight 82 --height 180 --goal-weight 78 --goal lose_weight
    workout-coach routines                          # Routines, workouts and sets
    workout-coach history --clear                   # Forget recent messages
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from .config import get_settings
from .db.repositories import (
    ConversationHistoryRepository,
    FitnessRepository,
    UserProfileRepository,
)
from .exceptions import WorkoutCoachError
from .models.entities import FITNESS_GOALS, UserProfile
from .services.coach import CoachService, build_coach_service
from .utils.log_sanitizer import install_log_sanitizer

console = Console()

EXIT_WORDS = {"exit", "quit", "bye"}


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging and install the sanitizer on its handlers."""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    install_log_sanitizer()


def _format_value(value) -> str:
    return "-" if value is None else str(value)


async def _send(coach: CoachService, message: str, user_id: str) -> None:
    try:
        reply = await coach.handle_message(message, user_id)
    except WorkoutCoachError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        return
    console.print(f"[bold cyan]Coach:[/bold cyan] {reply.response}")
    console.print(f"[dim]({reply.action_kind})[/dim]")


async def _chat_loop(coach: CoachService, user_id: str) -> None:
    console.print(Panel("[bold]Workout Coach[/bold]\nType 'exit' to leave."))
    while True:
        try:
            message = console.input("[bold green]You:[/bold green] ").strip()
        except (EOFError, KeyboardInterrupt):
            console.print()
            break
        if not message:
            continue
        if message.lower() in EXIT_WORDS:
            break
        await _send(coach, message, user_id)


def cmd_chat(args) -> None:
    """Send messages to the coach."""
    coach = build_coach_service(db_path=args.db)
    if args.message:
        asyncio.run(_send(coach, args.message, args.user))
    else:
        asyncio.run(_chat_loop(coach, args.user))


def cmd_profile(args) -> None:
    """Show or update the fitness profile used to personalize prompts."""
    repo = UserProfileRepository(db_path=args.db)
    profile = asyncio.run(repo.get_profile(args.user)) or UserProfile(user_id=args.user)

    updates = {
        "current_weight": args.weight,
        "height": args.height,
        "goal_weight": args.goal_weight,
        "fitness_goal": args.goal,
    }
    if any(value is not None for value in updates.values()):
        for field_name, value in updates.items():
            if value is not None:
                setattr(profile, field_name, value)
        profile.profile_complete = all(
            getattr(profile, field_name) is not None for field_name in updates
        )
        profile = asyncio.run(repo.save_profile(profile))
        console.print("[green]Profile updated![/green]")

    table = Table(title="Fitness Profile", box=box.ROUNDED)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Current Weight (kg)", _format_value(profile.current_weight))
    table.add_row("Height (cm)", _format_value(profile.height))
    table.add_row("Goal Weight (kg)", _format_value(profile.goal_weight))
    table.add_row("Fitness Goal", _format_value(profile.fitness_goal))
    table.add_row("Complete", "yes" if profile.profile_complete else "no")
    console.print(table)

    if not profile.profile_complete:
        console.print("[yellow]Fill in every field to personalize coaching.[/yellow]")


async def _load_routines(repo, user_id: str):
    rows = []
    for routine in await repo.list_routines(user_id):
        workouts = await repo.list_workouts(routine.id)
        if not workouts:
            rows.append((routine, None, []))
        for workout in workouts:
            rows.append((routine, workout, await repo.list_sets(workout.id)))
    return rows


def cmd_routines(args) -> None:
    """List routines with their workouts and logged sets."""
    repo = FitnessRepository(db_path=args.db)
    rows = asyncio.run(_load_routines(repo, args.user))

    if not rows:
        console.print("[yellow]No routines yet. Log a workout to create one.[/yellow]")
        return

    table = Table(title=f"Routines for {args.user}", box=box.ROUNDED)
    table.add_column("Routine", style="cyan")
    table.add_column("Workout", style="white")
    table.add_column("Date", style="dim")
    table.add_column("Sets", justify="right")
    table.add_column("Reps x Weight", style="green")
    table.add_column("Calories", justify="right")

    for routine, workout, sets in rows:
        if workout is None:
            table.add_row(routine.name, "-", "-", "0", "-", "-")
            continue
        detail = ", ".join(f"{s.reps}x{s.weight:g}" for s in sets) or "-"
        table.add_row(
            routine.name,
            workout.name,
            workout.date.isoformat() if workout.date else "-",
            str(len(sets)),
            detail,
            _format_value(workout.total_calories),
        )

    console.print(table)


def cmd_history(args) -> None:
    """Show or clear the recent conversation history."""
    repo = ConversationHistoryRepository(db_path=args.db)
    if args.clear:
        asyncio.run(repo.clear(args.user))
        console.print("[green]History cleared.[/green]")
        return

    messages = asyncio.run(repo.get(args.user))
    if not messages:
        console.print("[yellow]No recent messages.[/yellow]")
        return
    for i, message in enumerate(messages, 1):
        console.print(f"[dim]{i}.[/dim] {message}")


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Workout Coach - conversational workout tracking",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  workout-coach chat
  workout-coach chat -m "I did 2 sets of 10 reps bench press at 135 lbs"
  workout-coach profile --weight 82 --height 180 --goal-weight 78 --goal lose_weight
  workout-coach routines
  workout-coach history --clear
        """,
    )
    parser.add_argument("--user", "-u", default="local", help="User id to act as")
    parser.add_argument("--db", type=str, help="SQLite database path")
    parser.add_argument("--log-level", type=str, help="Logging level (default from settings)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Chat command
    chat_p = subparsers.add_parser("chat", help="Talk to the coach")
    chat_p.add_argument("--message", "-m", type=str, help="Send one message and exit")

    # Profile command
    profile_p = subparsers.add_parser("profile", help="Show or update fitness profile")
    profile_p.add_argument("--weight", type=float, help="Current weight in kg")
    profile_p.add_argument("--height", type=float, help="Height in cm")
    profile_p.add_argument("--goal-weight", type=float, help="Goal weight in kg")
    profile_p.add_argument("--goal", choices=FITNESS_GOALS, help="Fitness goal")

    # Routines command
    subparsers.add_parser("routines", help="List routines, workouts and sets")

    # History command
    history_p = subparsers.add_parser("history", help="Show recent messages")
    history_p.add_argument("--clear", action="store_true", help="Forget recent messages")

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    commands = {
        "chat": cmd_chat,
        "profile": cmd_profile,
        "routines": cmd_routines,
        "history": cmd_history,
    }
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return 1

    try:
        command(args)
    except WorkoutCoachError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
