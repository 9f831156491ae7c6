"""Exception types raised by the engine."""


class TutorError(Exception):
    """Base class for all scripture tutor errors."""


class SessionError(TutorError):
    """The session state machine was driven out of order."""


class QuestionKindError(TutorError, TypeError):
    """A candidate answer was validated against the wrong question variant."""


class ContentError(TutorError):
    """Verse content could not be loaded or a reference could not be parsed."""
