"""Extraction stage implementations."""

from app.ai.agents.base import BaseStage
from app.ai.agents.exercises import ExerciseGenerator
from app.ai.agents.expressions import ExpressionExtractor
from app.ai.agents.grammar import GrammarExtractor
from app.ai.agents.vocabulary import VocabularyExtractor

__all__ = ["BaseStage", "ExerciseGenerator", "ExpressionExtractor", "GrammarExtractor", "VocabularyExtractor"]
