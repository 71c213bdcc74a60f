"""Exception types shared by the wizard, the handlers and the POM patcher."""


class InitializrError(Exception):
    """Base class for every error raised on purpose by this package."""


class OperationCanceledError(InitializrError):
    """The user dismissed a prompt that had no earlier step to fall back to."""


class UserError(InitializrError):
    """A precondition on the user's input or workspace does not hold.

    Raised, for example, when the target POM does not have exactly one
    ``<project>`` element.
    """


class MetadataError(InitializrError):
    """The service metadata could not be fetched or understood."""


class DownloadError(InitializrError):
    """The generated project archive could not be downloaded."""


class ExtractError(InitializrError):
    """The downloaded project archive could not be extracted."""
