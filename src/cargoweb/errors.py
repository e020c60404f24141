from typing import Optional


class CargoWebError(Exception):
    """Base class for errors reported to the user with a non-zero exit."""

    exit_code = 101


class ConfigurationError(CargoWebError):
    """User-correctable problem: unknown package or target, bad flags, missing tools."""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.hint = hint

    def __str__(self) -> str:
        message = super().__str__()
        if self.hint:
            return f"{message}\n  hint: {self.hint}"
        return message


class BuildError(CargoWebError):
    """Cargo failed; it has already printed the details."""

    def __init__(self, message: str = "build failed"):
        super().__init__(message)


class InternalError(Exception):
    """Contract breach between the build and the test dispatcher."""
    pass
