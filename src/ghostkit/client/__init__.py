"""Homeserver clients."""

from ghostkit.client.base import MatrixClient
from ghostkit.client.http import HTTPMatrixClient
from ghostkit.client.mock import MockCall, MockMatrixClient

__all__ = [
    "HTTPMatrixClient",
    "MatrixClient",
    "MockCall",
    "MockMatrixClient",
]
