"""
Exceptions raised by the Nexmo client.

Configuration and argument problems are raised synchronously, before any
request goes out. Network-stage failures are delivered to the completion
callback instead.
"""


class NexmoError(Exception):
    """Base exception for the Nexmo client."""


class ConfigError(NexmoError, ValueError):
    """Missing or invalid credentials / configuration."""


class ArgumentError(NexmoError, ValueError):
    """Missing or invalid operation parameters."""


class MissingCallback(ArgumentError, TypeError):
    """The completion callback is not callable."""


class TransportError(NexmoError):
    """Network-level failure reported by the HTTP transport."""


class HTTPStatusError(NexmoError):
    """Response arrived with a status other than 200 (or without a body)."""

    def __init__(self, response):
        self.response = response
        self.status_code = getattr(response, 'status_code', None)
        super().__init__(f"Unexpected response status: {self.status_code}")


class ParseError(NexmoError, ValueError):
    """Response body is not valid JSON."""

    def __init__(self, message, body=None):
        super().__init__(message)
        self.body = body


# Names used by the API documentation
InvalidConfig = ConfigError
InvalidArgument = ArgumentError
