"""Fatal provisioning errors, one class per failure category.

Each error carries the diagnostic output of the command that failed (if
any) and an optional follow-up command for the operator.
"""


class ProvisionError(Exception):
    """Base class for every error that halts a provisioning run."""

    def __init__(self, message: str, detail: str = "", hint: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail
        self.hint = hint


class PrivilegeError(ProvisionError):
    pass


class UnsupportedArchitectureError(ProvisionError):
    pass


class DownloadError(ProvisionError):
    pass


class EmptyInputError(ProvisionError):
    pass


class InvalidDomainError(ProvisionError):
    pass


class CertificateIssuanceError(ProvisionError):
    pass


class ServiceStartError(ProvisionError):
    pass


class CommandFailedError(ProvisionError):
    """An external tool outside the other categories exited non-zero."""
