"""Schema package exports."""

from .generation import ChoiceExercise, ExtractedExpression, ExtractedGrammar, ExtractedVocabulary, GeneratedExercise, GeneratedLesson, GenerationCommand, ListeningExercise, MatchingExercise, MatchingPair, Script, ScriptSource, VocabularyCategory

__all__ = ["ChoiceExercise", "ExtractedExpression", "ExtractedGrammar", "ExtractedVocabulary", "GeneratedExercise", "GeneratedLesson", "GenerationCommand", "ListeningExercise", "MatchingExercise", "MatchingPair", "Script", "ScriptSource", "VocabularyCategory"]
