"""Exception types shared by the assembler service and its helpers."""

GENERIC_FAILURE = "Something went wrong!"


class AssemblerError(Exception):
    """Base class for every error the service reports to callers."""


class InvalidMode(AssemblerError, ValueError):
    def __init__(self, mode):
        self.mode = mode
        super().__init__(f"{mode} is not a valid mode.")


class UnsafeCode(AssemblerError):
    # Deliberately vague: callers never learn which check tripped.
    def __init__(self):
        super().__init__(
            "The code is too long or contains a disallowed directive.")


class AssemblyFailure(AssemblerError):
    def __init__(self, message=GENERIC_FAILURE):
        self.message = message
        super().__init__(message)
