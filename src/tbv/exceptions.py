class VerificationError(Exception):
    pass


class NetworkError(VerificationError):
    pass


class ResolutionError(VerificationError):
    pass


class ProcessError(VerificationError):
    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class IoError(VerificationError):
    pass


class ParseError(VerificationError):
    pass


class ConfigError(Exception):
    pass
