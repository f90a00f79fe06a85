"""SQLite schema for the Workout Coach store."""

SCHEMA = """
-- Routines: named, user-owned groupings of workouts
CREATE TABLE IF NOT EXISTS routines (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    user_id TEXT NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_routines_user ON routines(user_id);

-- Workouts: exercise occurrences inside a routine, possibly with zero sets
CREATE TABLE IF NOT EXISTS workouts (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    routine_id TEXT NOT NULL REFERENCES routines(id) ON DELETE CASCADE,
    date TEXT,
    total_calories REAL,
    duration_minutes INTEGER,
    notes TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_workouts_routine ON workouts(routine_id);

-- Sets: append-only, deleted in bulk per workout
CREATE TABLE IF NOT EXISTS sets (
    id TEXT PRIMARY KEY,
    workout_id TEXT NOT NULL REFERENCES workouts(id) ON DELETE CASCADE,
    reps INTEGER NOT NULL,
    weight REAL NOT NULL DEFAULT 0,
    calories REAL,
    date TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_sets_workout ON sets(workout_id);

-- Recent conversation turns per user, stored as a JSON array of strings
CREATE TABLE IF NOT EXISTS chat_history (
    user_id TEXT PRIMARY KEY,
    messages_json TEXT NOT NULL DEFAULT '[]',
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);

-- Fitness profile used for prompt personalization
CREATE TABLE IF NOT EXISTS user_profiles (
    user_id TEXT PRIMARY KEY,
    current_weight REAL,
    height REAL,
    goal_weight REAL,
    fitness_goal TEXT,
    profile_complete INTEGER DEFAULT 0,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""
