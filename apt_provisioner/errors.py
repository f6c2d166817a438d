from __future__ import annotations

from typing import Sequence


class ProvisionError(RuntimeError):
    """Fatal provisioning failure; the CLI maps it to exit status 1."""


class InputError(ProvisionError):
    """Input file or config missing, unreadable or malformed."""


class PrivilegeError(ProvisionError):
    pass


class ValidationError(ProvisionError):
    def __init__(self, invalid: Sequence[str]) -> None:
        self.invalid = list(invalid)
        super().__init__(
            "Aborting due to invalid package names: "
            + " ".join(self.invalid)
            + ". Use --ignore-missing to skip."
        )


class BackendError(ProvisionError):
    """The package manager (or another external tool) reported failure."""

    def __init__(self, message: str, *, argv: Sequence[str] = (), returncode: int | None = None, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)
