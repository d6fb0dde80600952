"""
Logging configuration for the Nexmo client

The library itself only emits records through module loggers. Applications
that want output from it without configuring logging themselves can call
setup_logging().
"""

import logging
import logging.handlers
import os
import re
import sys
from datetime import datetime, timezone

_QUERY_CREDENTIALS = re.compile(r'((?:username|password|newSecret)=)[^&]*')
LIBRARY_LOGGER = 'nexmo_client'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(log_level=None, log_file=None, max_bytes=10*1024*1024, backup_count=5):
    """
    Attach a handler to the ``nexmo_client`` logger namespace.

    The root logger and any handlers the application installed are left
    alone. Calling this again replaces the handler added by the previous call.

    Args:
        log_level: Level name for the nexmo_client loggers (default NEXMO_LOG_LEVEL or INFO)
        log_file: Rotating log file path (default NEXMO_LOG_FILE, else stderr)
        max_bytes: Size at which the log file rotates
        backup_count: Rotated files to keep

    Returns:
        The configured ``nexmo_client`` logger
    """
    if log_level is None:
        log_level = os.environ.get('NEXMO_LOG_LEVEL', 'INFO')
    if log_file is None:
        log_file = os.environ.get('NEXMO_LOG_FILE')

    library_logger = logging.getLogger(LIBRARY_LOGGER)
    for previous in [h for h in library_logger.handlers if getattr(h, '_nexmo_client_handler', False)]:
        library_logger.removeHandler(previous)
        previous.close()

    if log_file:
        handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler._nexmo_client_handler = True
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))

    library_logger.setLevel(log_level.upper())
    library_logger.addHandler(handler)
    library_logger.debug(f"nexmo_client logging to {log_file or 'stderr'} at {log_level.upper()}")

    return library_logger


def redact_url(url, *secrets):
    """Mask credentials embedded in an API URL path or query"""
    for secret in secrets:
        if secret:
            url = url.replace(f"/{secret}/", "/***/").replace(f"/{secret}?", "/***?")
            if url.endswith(f"/{secret}"):
                url = url[:-len(secret)] + "***"
    return _QUERY_CREDENTIALS.sub(r'\1***', url)


def log_api_event(operation, method=None, url=None, status_code=None, success=True, error=None):
    """
    Log an API call outcome as key=value pairs.

    Args:
        operation: Client operation name (e.g. 'send', 'getBalance')
        method: HTTP method
        url: Request URL, already redacted with redact_url()
        status_code: HTTP status of the response, if any
        success: Whether the call succeeded
        error: Error description if applicable
    """
    logger = logging.getLogger('nexmo_client.api')

    log_data = {
        'operation': operation,
        'success': success,
        'timestamp': datetime.now(timezone.utc).isoformat(),
    }

    if method:
        log_data['method'] = method
    if url:
        log_data['url'] = url
    if status_code is not None:
        log_data['status_code'] = status_code
    if error:
        log_data['error'] = error

    log_message = ' '.join([f"{k}={v}" for k, v in log_data.items()])

    if success:
        logger.info(f"API: {log_message}")
    else:
        logger.error(f"API: {log_message}")
