class RmdError(Exception):
    stage = "rmd"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.stage}: {self.message}"


class ConfigError(RmdError):
    stage = "config"


class InputOpenError(RmdError):
    stage = "input"


class InputReadError(RmdError):
    stage = "input"


class TempDirError(RmdError):
    stage = "sink"


class TempFileError(RmdError):
    stage = "sink"


class TemplateError(RmdError):
    stage = "style"


class RenderError(RmdError):
    stage = "render"


class LaunchError(RmdError):
    stage = "preview"


class CleanupError(RmdError):
    """Reported on stderr only, never changes the exit status."""

    stage = "cleanup"
