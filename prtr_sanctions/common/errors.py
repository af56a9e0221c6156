"""Domain errors and failure typing."""


class PipelineError(Exception):
    """Base class for pipeline failures."""

    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class StageError(PipelineError):
    """Raised for period-level failures that abort a bounded run."""

    error_code = "STAGE_ERROR"


class FetchError(StageError):
    """Raised for a non-200 response or a transport failure."""

    error_code = "FETCH_ERROR"


class DecodeError(StageError):
    """Raised when a response body is neither a usable ZIP nor usable JSON."""

    error_code = "DECODE_ERROR"


class RowError(PipelineError):
    """A single record could not be identified or written."""

    error_code = "ROW_ERROR"


class FilesystemError(PipelineError):
    """Raised when the top-level output directory cannot be created."""

    error_code = "FILESYSTEM_ERROR"
