"""
Exceptions raised by the story engine
"""


class StoryflowError(Exception):
    """Base class for storyflow errors"""


class StoryDocumentError(StoryflowError, ValueError):
    """Raised when a story document does not match the document schema"""


class UnknownConditionTypeError(StoryflowError, LookupError):
    """Raised when a condition kind has no registered strategy.

    Documents produced by the authoring tool never contain one, so this
    signals a corrupted document rather than a runtime condition.
    """

    def __init__(self, condition_type: str):
        self.condition_type = condition_type
        super().__init__(f"Unknown condition type: {condition_type!r}")
