"""Reward, topic resolution, mastery tracking and answer scoring."""

from .mastery import MasteryTracker, Recommendation, SubjectProgress, TopicProgress, observe
from .reward import DifficultyRewardEngine, RewardBreakdown, RewardConfig, RewardResult
from .scoring import AnswerOutcome, AnswerScorer
from .session import SessionSummary, summarize_session
from .topics import TopicResolver, normalize_difficulty

__all__ = [
    "MasteryTracker",
    "Recommendation",
    "SubjectProgress",
    "TopicProgress",
    "observe",
    "DifficultyRewardEngine",
    "RewardBreakdown",
    "RewardConfig",
    "RewardResult",
    "AnswerOutcome",
    "AnswerScorer",
    "SessionSummary",
    "summarize_session",
    "TopicResolver",
    "normalize_difficulty",
]
