# Artwin Feedback Errors


class FeedbackError(Exception):
    """Base class for feedback desk errors"""


class ValidationError(FeedbackError):
    """Bad user input. The message is shown to the user as-is."""


class RemoteWriteError(FeedbackError):
    """Appending a row to the remote sheet failed"""


class RemoteReadFailure(FeedbackError):
    """Reading rows from the remote sheet failed"""


class AIUnavailable(FeedbackError):
    """The AI completion endpoint could not produce a usable answer"""
