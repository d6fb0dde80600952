"""
Response handling shared by every Nexmo API call

Each response goes through the same checks in order: transport error, then
status/body presence, then JSON parsing. The completion callback gets
``(error,)`` on failure and ``(False, value)`` on success.
"""

import json
import logging
from types import MappingProxyType
from typing import Any, Callable, NamedTuple, Optional

from .errors import HTTPStatusError, ParseError
from .logging_config import log_api_event

logger = logging.getLogger(__name__)


class MessageStatus(NamedTuple):
    type: str
    message: str


# Per-message status codes returned by /sms/json
STATUS_CODES = MappingProxyType({
    0: MessageStatus('Success', 'The message was successfully accepted for delivery by nexmo'),
    1: MessageStatus('Throttled', 'You have exceeded the submission capacity allowed on this account, please back-off and retry'),
    2: MessageStatus('Missing params', 'Your request is incomplete and missing some mandatory parameters'),
    3: MessageStatus('Invalid params', 'The value of one or more parameters is invalid'),
    4: MessageStatus('Invalid credentials', 'The username / password you supplied is either invalid or disabled'),
    5: MessageStatus('Internal error', 'An error has occurred in the nexmo platform whilst processing this message'),
    6: MessageStatus('Invalid message', 'The Nexmo platform was unable to process this message, for example, an un-recognized number prefix'),
    7: MessageStatus('Number barred', 'The number you are trying to submit to is blacklisted and may not receive messages'),
    8: MessageStatus('Partner account barred', 'The username you supplied is for an account that has been barred from submitting messages'),
    9: MessageStatus('Partner quota exceeded', 'Your pre-pay account does not have sufficient credit to process this message'),
    10: MessageStatus('Too many existing binds', 'The number of simultaneous connections to the platform exceeds the capabilities of your account'),
    11: MessageStatus('Account not enabled for REST', 'This account is not provisioned for REST submission, you should use SMPP instead'),
    12: MessageStatus('Message too long', 'Applies to Binary submissions, where the length of the UDF and the message body combined exceed 140 octets'),
    15: MessageStatus('Invalid sender address', 'The sender address (from parameter) was not allowed for this message'),
    16: MessageStatus('Invalid TTL', 'The ttl parameter values is invalid'),
})


def describe_status(code) -> Optional[MessageStatus]:
    """Look up a message status code (int or numeric string, as found in responses)"""
    try:
        return STATUS_CODES.get(int(code))
    except (TypeError, ValueError):
        return None


def decode_response(callback: Callable, error, response, body) -> None:
    """
    Apply the standard result checks and invoke the completion callback.

    Args:
        callback: Completion callback
        error: Transport error, if any
        response: Response object exposing ``status_code``
        body: Response body text
    """
    if error or not body or response is None or response.status_code != 200:
        callback(error or response)
        return

    try:
        result = json.loads(body)
    except ValueError as e:
        parse_error = ParseError(f"Invalid JSON in response: {e}", body=body)
        parse_error.__cause__ = e
        logger.debug(f"Discarding unparseable response body ({len(body)} chars)")
        callback(parse_error)
        return

    callback(False, result)


def make_response_handler(callback: Callable, on_success: Optional[Callable[[Any], None]] = None,
                          operation: Optional[str] = None, method: Optional[str] = None,
                          url: Optional[str] = None) -> Callable:
    """
    Wrap a completion callback into a transport callback.

    Args:
        callback: Completion callback receiving (error) or (False, value)
        on_success: Hook run with the decoded value before the callback, on success only
        operation: Operation name used for logging
        method: HTTP method used for logging
        url: Redacted request URL used for logging

    Returns:
        Callable taking (error, response, body)
    """
    def handle(error, response, body):
        status_code = getattr(response, 'status_code', None)

        def finish(error, *value):
            # Failures arrive without a value; a non-200 response object is falsy
            if not value:
                log_api_event(operation, method=method, url=url, status_code=status_code,
                              success=False, error=_describe_error(error))
                callback(error)
                return
            if on_success is not None:
                on_success(value[0])
            log_api_event(operation, method=method, url=url, status_code=status_code)
            callback(error, *value)

        decode_response(finish, error, response, body)

    return handle


def raise_for_error(error) -> None:
    """
    Raise the error handed to a completion callback, if there is one.

    Exceptions are re-raised as-is; a raw response object (non-200 status or
    empty body) is raised as HTTPStatusError.
    """
    if error is None or error is False:
        return
    if isinstance(error, BaseException):
        raise error
    raise HTTPStatusError(error)


def _describe_error(error) -> str:
    if isinstance(error, BaseException):
        return error.__class__.__name__
    return f"HTTP {getattr(error, 'status_code', '?')}"
