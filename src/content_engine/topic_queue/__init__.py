# Topic Queue — file-backed list of pending article topics
from .queue import TopicQueue

__all__ = ["TopicQueue"]
