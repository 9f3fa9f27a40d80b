"""Database models"""

from scriptpolish.models.polish_history import PolishHistory
from scriptpolish.models.profile import Profile
from scriptpolish.models.voice_example import TopicCategory, VoiceExample

__all__ = [
    "PolishHistory",
    "Profile",
    "TopicCategory",
    "VoiceExample",
]
