"""Exception hierarchy for swarmdrop."""


class SwarmDropError(Exception):
    """Base class for all swarmdrop errors."""


# -- Pre-flight ----------------------------------------------------------------


class PreflightError(SwarmDropError):
    """Environment is not ready to share files. Always fatal."""


class DependencyMissingError(PreflightError):
    """A required external binary is not on PATH."""

    def __init__(self, binary: str, hint: str = ""):
        self.binary = binary
        self.hint = hint
        msg = f"'{binary}' not found on PATH"
        if hint:
            msg += f". Install it with: {hint}"
        super().__init__(msg)


class DirectoryNotFoundError(PreflightError):
    pass


class UnsupportedPlatformError(PreflightError):
    pass


class NoArtifactsError(PreflightError):
    """None of the credential files exist."""


# -- Serving -------------------------------------------------------------------


class ServeError(SwarmDropError):
    """File server or tunnel failure.

    ``log`` holds the captured subprocess output, if any, for diagnostics.
    """

    def __init__(self, message: str, log: str = ""):
        super().__init__(message)
        self.log = log

    def log_tail(self, lines: int = 20) -> str:
        """Last N lines of the captured log, for error messages."""
        return "\n".join(self.log.splitlines()[-lines:])


class PortBindError(ServeError):
    """The file server could not bind its port. Retryable."""

    def __init__(self, port: int, log: str = ""):
        super().__init__(f"Port {port} is already in use", log)
        self.port = port


class ServerStartupError(ServeError):
    """The file server exited for a reason other than a busy port."""


class PortsExhaustedError(ServeError):
    pass


class RetryBudgetExhaustedError(ServeError):
    def __init__(self, attempts: int, log: str = ""):
        super().__init__(f"Failed after {attempts} attempts", log)
        self.attempts = attempts


class TunnelError(ServeError):
    """Tunnel client could not be started or did not report a URL."""


class TunnelURLNotFoundError(TunnelError):
    """No public URL showed up in the tunnel log. Retryable."""
