"""
Exception types raised by stackmon.
"""


class StackmonError(Exception):
    """Base class for stackmon errors."""


class DeploymentFailedError(StackmonError):
    """A stack resource failed and the operation ended in a failure state."""

    def __init__(self, resource: str, reason: str):
        self.resource = resource
        self.reason = reason
        super().__init__(f"An error occurred: {resource} - {reason}.")
