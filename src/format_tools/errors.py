from __future__ import annotations


class FormatToolsError(RuntimeError):
    code = "UNKNOWN"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


class NotFoundError(FormatToolsError):
    """Raised when an input file, template or archive member is missing."""

    code = "NOT_FOUND"


class StorageError(FormatToolsError):
    """Raised when a filesystem step (create, copy, read, write) fails."""

    code = "IO_ERROR"


class ArchiveError(FormatToolsError):
    code = "ARCHIVE_ERROR"


class DecryptionError(FormatToolsError):
    code = "DECRYPTION_FAILED"


class EngineMissingError(FormatToolsError):
    code = "ENGINE_MISSING"


class EngineFailedError(FormatToolsError):
    code = "ENGINE_FAILED"

    def __init__(self, message: str, *, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr


class InvalidMetadataError(FormatToolsError):
    code = "INVALID_METADATA"


class InvalidPresetError(FormatToolsError):
    code = "INVALID_PRESET"

    def __init__(self, message: str, *, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])


__all__ = [
    "FormatToolsError",
    "NotFoundError",
    "StorageError",
    "ArchiveError",
    "DecryptionError",
    "EngineMissingError",
    "EngineFailedError",
    "InvalidMetadataError",
    "InvalidPresetError",
]
