"""
Nexmo API Client Module

Client for the Nexmo SMS/number management REST API. Every operation
validates its arguments up front, issues a single request through the
transport and reports the outcome to a completion callback as either
``callback(error)`` or ``callback(False, value)``.
"""

import logging
import math
from collections.abc import Mapping
from functools import singledispatch
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import quote, urlencode

from .config import Credentials, NexmoConfig, percent_encode
from .errors import ArgumentError, ConfigError, MissingCallback
from .logging_config import redact_url
from .responses import STATUS_CODES, make_response_handler
from .transport import RequestDescriptor, RequestsTransport

logger = logging.getLogger(__name__)

MESSAGE_TYPES = frozenset(['binary', 'default', 'text', 'unicode', 'vcal', 'vcard', 'wappush'])
TEXT_TYPES = frozenset(['default', 'text', 'unicode'])

# Forwarded to /sms/json verbatim when present
SEND_PASSTHROUGH_FIELDS = ('type', 'status-report-req', 'client-ref', 'network-code', 'vcard', 'vcal', 'ttl')

MAX_SECRET_LENGTH = 8


def encode_query(params: Dict[str, Any]) -> str:
    """URL-encode query parameters; list values become repeated keys"""
    return urlencode(params, doseq=True, safe="-_.!~*'()", quote_via=quote)


@singledispatch
def resolve_config(config) -> NexmoConfig:
    raise ConfigError("Invalid config: expected NexmoConfig or a mapping with key and secret")


@resolve_config.register
def _(config: NexmoConfig) -> NexmoConfig:
    return config


@resolve_config.register(Mapping)
def _(config) -> NexmoConfig:
    return NexmoConfig.from_mapping(config)


# "country code or options" arguments

@singledispatch
def resolve_country_code(value) -> Tuple[Optional[str], Dict[str, str]]:
    """Return (country code, extra search params) for a code string or an options mapping"""
    return None, {}


@resolve_country_code.register
def _(value: str) -> Tuple[Optional[str], Dict[str, str]]:
    return value, {}


@resolve_country_code.register(Mapping)
def _(value) -> Tuple[Optional[str], Dict[str, str]]:
    params = {}
    if value.get('pattern'):
        params['pattern'] = value['pattern']
    return value.get('country-code'), params


# "new secret or options" arguments

@singledispatch
def resolve_settings(value) -> Dict[str, str]:
    """Return the settings query params for a new secret string or an options mapping"""
    return {}


@resolve_settings.register
def _(value: str) -> Dict[str, str]:
    return {'newSecret': value}


@resolve_settings.register(Mapping)
def _(value) -> Dict[str, str]:
    params = {}
    if value.get('newSecret'):
        params['newSecret'] = value['newSecret']
    mo_callback = value.get('moCallBackUrl') or value.get('mo-callback-url')
    if mo_callback:
        params['moCallBackUrl'] = mo_callback
    dr_callback = value.get('drCallBackUrl') or value.get('dr-callback-url')
    if dr_callback:
        params['drCallBackUrl'] = dr_callback
    return params


def to_hex_octets(values, field: str) -> List[str]:
    """
    Convert a binary message part into two-digit hex strings.

    Text elements are taken as a single character code point, anything else
    as a numeric byte value.
    """
    if values is None:
        raise ArgumentError(f"{field} is required for binary messages")
    try:
        items = list(values)
    except TypeError:
        raise ArgumentError(f"{field} must be a sequence of bytes or characters")

    octets = []
    for item in items:
        if isinstance(item, str):
            if not item:
                raise ArgumentError(f"{field} contains an empty string")
            code = ord(item[0])
        else:
            try:
                code = int(item)
            except (TypeError, ValueError):
                raise ArgumentError(f"{field} contains a non-numeric value: {item!r}")
        if not 0 <= code <= 0xFF:
            raise ArgumentError(f"{field} value out of byte range: {item!r}")
        octets.append(format(code, '02x'))

    if not octets:
        raise ArgumentError(f"{field} is required for binary messages")
    return octets


def _is_number(value) -> bool:
    try:
        return not math.isnan(float(value))
    except (TypeError, ValueError):
        return False


def _require_callback(callback) -> None:
    if not callable(callback):
        raise MissingCallback("Expected callback")


class NexmoClient:
    """Client for the Nexmo REST API"""

    STATUS_CODES = STATUS_CODES

    def __init__(self, config, transport: Optional[Callable] = None):
        self.config = resolve_config(config)
        self.credentials: Credentials = self.config.credentials()
        self.transport = transport if transport is not None else RequestsTransport(timeout=self.config.timeout)

    @property
    def key(self) -> str:
        """Percent-encoded API key"""
        return self.credentials.key

    @property
    def secret(self) -> str:
        """Percent-encoded API secret"""
        return self.credentials.secret

    def set_secret(self, new_secret: str) -> Credentials:
        """
        Replace the stored API secret.

        Not coordinated with requests already in flight: those keep the
        credentials they were built with.
        """
        self.credentials = self.credentials.with_secret(new_secret)
        return self.credentials

    def _request(self, operation: str, method: str, url: str, callback: Callable,
                 credentials: Credentials, on_success: Optional[Callable] = None):
        """Issue one request through the transport"""
        display_url = redact_url(url, credentials.key, credentials.secret)
        logger.debug(f"{operation}: {method} {display_url}")

        handler = make_response_handler(callback, on_success=on_success, operation=operation,
                                        method=method, url=display_url)
        return self.transport(RequestDescriptor(method, url), handler)

    def get_balance(self, callback: Callable):
        """Fetch the account balance"""
        _require_callback(callback)
        credentials = self.credentials
        url = self._account_url('get-balance', credentials)
        return self._request('getBalance', 'GET', url, callback, credentials)

    def get_pricing(self, country_code_or_options, callback: Callable):
        """Fetch outbound pricing for a country"""
        _require_callback(callback)
        country_code, _ = resolve_country_code(country_code_or_options)
        if not country_code:
            raise ArgumentError("Invalid countryCode")

        credentials = self.credentials
        url = self._account_url('get-pricing/outbound', credentials, country_code)
        return self._request('getPricing', 'GET', url, callback, credentials)

    def update_settings(self, new_secret_or_options, callback: Callable):
        """
        Update account settings (secret and callback URLs).

        On success the client switches to the new secret for later calls.
        """
        _require_callback(callback)
        params = resolve_settings(new_secret_or_options)
        new_secret = params.get('newSecret')
        if new_secret and len(str(new_secret)) > MAX_SECRET_LENGTH:
            raise ArgumentError("Invalid newSecret")

        credentials = self.credentials
        url = self._account_url('settings', credentials)
        if params:
            url = f"{url}?{encode_query(params)}"

        on_success = None
        if new_secret:
            def on_success(_result):
                self.set_secret(new_secret)
                logger.info("API secret updated")

        return self._request('updateSettings', 'POST', url, callback, credentials, on_success)

    def get_numbers(self, callback: Callable):
        """List the numbers owned by the account"""
        _require_callback(callback)
        credentials = self.credentials
        url = self._account_url('numbers', credentials)
        return self._request('getNumbers', 'GET', url, callback, credentials)

    def search_numbers(self, country_code_or_options, callback: Callable):
        """Search numbers available for purchase, optionally filtered by pattern"""
        _require_callback(callback)
        country_code, params = resolve_country_code(country_code_or_options)
        if not country_code:
            raise ArgumentError("country-code required")

        credentials = self.credentials
        url = self._number_url('search', credentials, country_code)
        if params:
            url = f"{url}?{encode_query(params)}"
        return self._request('searchNumbers', 'GET', url, callback, credentials)

    def buy_number(self, options: Mapping, callback: Callable):
        """Buy a number"""
        _require_callback(callback)
        country_code, msisdn = self._number_options(options)
        credentials = self.credentials
        url = self._number_url('buy', credentials, country_code, msisdn)
        return self._request('buyNumber', 'POST', url, callback, credentials)

    def cancel_number(self, options: Mapping, callback: Callable):
        """
        Cancel a number.

        Posts to the buy endpoint, as the upstream library does, unless the
        config sets use_cancel_endpoint.
        """
        _require_callback(callback)
        country_code, msisdn = self._number_options(options)
        credentials = self.credentials
        action = 'cancel' if self.config.use_cancel_endpoint else 'buy'
        url = self._number_url(action, credentials, country_code, msisdn)
        return self._request('cancelNumber', 'POST', url, callback, credentials)

    def send(self, options: Mapping, callback: Callable):
        """Send a message; see build_send_params() for the accepted options"""
        _require_callback(callback)
        credentials = self.credentials
        params = self.build_send_params(options, credentials)
        url = f"{self.config.sms_base_url}/sms/json?{encode_query(params)}"
        return self._request('send', 'POST', url, callback, credentials)

    def build_send_params(self, options: Mapping, credentials: Optional[Credentials] = None) -> Dict[str, Any]:
        """
        Validate message options and build the /sms/json query parameters.

        Args:
            options: Message fields; from and to are always required
            credentials: Credentials to embed (defaults to the current ones)

        Returns:
            Dict: Query parameters, credentials included
        """
        if not isinstance(options, Mapping):
            raise ArgumentError("Invalid options")
        credentials = credentials or self.credentials

        params: Dict[str, Any] = {
            'username': credentials.raw_key,
            'password': credentials.raw_secret,
            'from': options.get('from'),
            'to': options.get('to'),
        }
        for field in SEND_PASSTHROUGH_FIELDS:
            if options.get(field):
                params[field] = options[field]

        if not params['from'] or not params['to']:
            raise ArgumentError("Invalid options: from and to are required")

        message_type = params.get('type')
        if message_type and message_type not in MESSAGE_TYPES:
            raise ArgumentError(f"Invalid type: {message_type!r}")

        if message_type == 'binary':
            params['body'] = to_hex_octets(options.get('body'), 'body')
            params['udh'] = to_hex_octets(options.get('udh'), 'udh')
        elif message_type == 'wappush':
            for field in ('title', 'url', 'validity'):
                if not options.get(field):
                    raise ArgumentError(f"Invalid options: {field} is required for wappush messages")
                params[field] = options[field]
            if not _is_number(params['validity']):
                raise ArgumentError("Invalid options: validity must be a number")
        elif not message_type or message_type in TEXT_TYPES:
            if not options.get('text'):
                raise ArgumentError("Invalid options: text is required")
            params['text'] = options['text']

        return params

    def _account_url(self, action: str, credentials: Credentials, *segments: str) -> str:
        return f"{self.config.rest_base_url}/account/{action}/{self._path(credentials, *segments)}"

    def _number_url(self, action: str, credentials: Credentials, *segments: str) -> str:
        return f"{self.config.rest_base_url}/number/{action}/{self._path(credentials, *segments)}"

    @staticmethod
    def _path(credentials: Credentials, *segments: str) -> str:
        return '/'.join([credentials.key, credentials.secret] + [percent_encode(s) for s in segments])

    @staticmethod
    def _number_options(options) -> Tuple[str, str]:
        if not isinstance(options, Mapping):
            raise ArgumentError("Invalid options")
        country_code = options.get('country-code')
        msisdn = options.get('msisdn')
        if not country_code or not msisdn:
            raise ArgumentError("Invalid options: country-code and msisdn are required")
        return country_code, msisdn

    # Names used by the REST API documentation
    getBalance = get_balance
    getPricing = get_pricing
    updateSettings = update_settings
    getNumbers = get_numbers
    searchNumbers = search_numbers
    buyNumber = buy_number
    cancelNumber = cancel_number


def create_client(config, transport: Optional[Callable] = None) -> NexmoClient:
    """
    Create a Nexmo client

    Args:
        config: NexmoConfig or a mapping with 'key' and 'secret'
        transport: Optional transport callable (defaults to RequestsTransport)

    Returns:
        NexmoClient: Configured client
    """
    return NexmoClient(config, transport)
