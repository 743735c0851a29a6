"""Errors raised while regenerating the bindings tree.

Every error is fatal: the CLI prints it and exits non-zero.
"""


class GenError(Exception):
    """Base class for generator failures."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message
        # Filled in by the orchestrator: ("Linux v4.2", "architecture arm", ...)
        self.where = ()

    def __str__(self):
        if self.where:
            return f"{', '.join(self.where)}: {self.message}"
        return self.message


class ConfigError(GenError):
    """The static tables or the repository layout are out of date or invalid."""


class InvariantError(GenError):
    """Generated output would be inconsistent (e.g. a feature name collision)."""


class CommandError(GenError):
    """An external tool (git, make, bindgen) exited non-zero."""

    def __init__(self, cmd, returncode):
        self.cmd = list(cmd)
        self.returncode = returncode
        if returncode == 127:
            msg = f"{self.cmd[0]} not found"
        else:
            msg = f"{self.cmd[0]} failed with exit code {returncode}: {' '.join(self.cmd)}"
        super().__init__(msg)


class FileError(GenError):
    """Reading, writing or removing a file in the checkout or crate failed."""

    def __init__(self, err):
        self.filename = err.filename
        msg = err.strerror or str(err)
        if err.filename is not None:
            msg = f"{msg}: {err.filename}"
        super().__init__(msg)
