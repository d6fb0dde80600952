"""
Nexmo Client

A Python client library for the Nexmo SMS and number management REST API.
"""

from .client import NexmoClient, create_client
from .config import Credentials, NexmoConfig
from .errors import (
    ArgumentError,
    ConfigError,
    HTTPStatusError,
    InvalidArgument,
    InvalidConfig,
    MissingCallback,
    NexmoError,
    ParseError,
    TransportError,
)
from .responses import STATUS_CODES, MessageStatus, describe_status, raise_for_error
from .transport import RequestDescriptor, RequestsTransport

__all__ = [
    'NexmoClient',
    'create_client',
    'NexmoConfig',
    'Credentials',
    'RequestDescriptor',
    'RequestsTransport',
    'STATUS_CODES',
    'MessageStatus',
    'describe_status',
    'raise_for_error',
    'NexmoError',
    'ConfigError',
    'InvalidConfig',
    'ArgumentError',
    'InvalidArgument',
    'MissingCallback',
    'TransportError',
    'HTTPStatusError',
    'ParseError',
]

__version__ = "0.1.0"
