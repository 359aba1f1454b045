from .dungeon import Dungeon, DungeonCategory, UserDungeonCompletion
from .exercise import DungeonExercise, Exercise, ExerciseType

__all__ = [
    "Dungeon",
    "DungeonCategory",
    "UserDungeonCompletion",
    "DungeonExercise",
    "Exercise",
    "ExerciseType",
]
