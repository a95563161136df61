"""Exceptions raised by the sync pipeline collaborators."""


class SyncStageError(RuntimeError):
    """Base class for a failure inside one pipeline stage."""


class PelotonDownloadError(SyncStageError):
    """Raised when workouts cannot be listed or fetched from Peloton."""


class ConversionError(SyncStageError):
    """Raised when a workout cannot be converted into an output file."""


class GarminUploadError(SyncStageError):
    """Raised when staged files cannot be uploaded to Garmin Connect."""


class ReleaseCheckError(RuntimeError):
    """Raised when the latest release cannot be fetched from GitHub."""
