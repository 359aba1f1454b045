"""
Progression engine.

Components (all run inside the caller's transaction):
- ExperienceLedger: experience deposits
- StatAccumulator: create-or-update stat gains
- LevelEvaluator: level-ups to fixpoint
- RankEvaluator: single-step rank promotion
- ProgressionPipeline: ordered chain of the above

ProgressionService exposes each operation in its own transaction.
"""

from hunter.modules.progression.ledger import ExperienceLedger, LedgerEntry
from hunter.modules.progression.level import LevelEvaluation, LevelEvaluator, LevelUp
from hunter.modules.progression.pipeline import ProgressionOutcome, ProgressionPipeline
from hunter.modules.progression.rank import RankEvaluator, RankUp
from hunter.modules.progression.service import ProgressionService
from hunter.modules.progression.stats import StatAccumulator, StatWrite, StatWriteKind

__all__ = [
    "ExperienceLedger",
    "LedgerEntry",
    "LevelEvaluation",
    "LevelEvaluator",
    "LevelUp",
    "ProgressionOutcome",
    "ProgressionPipeline",
    "ProgressionService",
    "RankEvaluator",
    "RankUp",
    "StatAccumulator",
    "StatWrite",
    "StatWriteKind",
]
