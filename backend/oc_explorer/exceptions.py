"""
Errors raised while talking to oc.
"""
from typing import List


class OcError(Exception):
    """Base error for anything that went wrong talking to oc."""

    def __init__(self, message: str, details: str = ""):
        super().__init__(message)
        self.message = message
        self.details = details


class OcCommandError(OcError):
    """oc could not be run, exited non-zero or timed out."""

    def __init__(self, command: List[str], message: str, details: str = ""):
        super().__init__(message, details)
        self.command = command


class OcOutputError(OcError):
    """oc succeeded but printed something we cannot use."""
