"""
Services layer for ScriptPolish.
Topic classification, example selection, voice analysis, polishing and
correction feedback.
"""

from scriptpolish.services.correction_service import CorrectionResult, CorrectionService
from scriptpolish.services.example_selector import ExampleSelector
from scriptpolish.services.polish_service import PolishResult, PolishService, StyleMode
from scriptpolish.services.topic_classifier import TopicClassifier
from scriptpolish.services.voice_analyzer import VoiceAnalyzer

__all__ = [
    "CorrectionResult",
    "CorrectionService",
    "ExampleSelector",
    "PolishResult",
    "PolishService",
    "StyleMode",
    "TopicClassifier",
    "VoiceAnalyzer",
]
