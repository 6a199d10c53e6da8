# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module contains the JSON envelopes of a module method invocation.

Request:  {"methodName":"<name>","timeout":<seconds>,"payload":<payload>}
Response: {"status":<number>,"payload":<any JSON value>}
"""

import json
import logging
import math
from .exceptions import BuildError, DecodeError
from .models import MethodRequest, MethodResponse

logger = logging.getLogger(__name__)

REQUEST_BODY_FORMAT = '{{"methodName":{name},"timeout":{timeout},"payload":{payload}}}'

RESPONSE_KEY_STATUS = "status"
RESPONSE_KEY_PAYLOAD = "payload"


def build_request_body(method_request: MethodRequest) -> bytes:
    """Serialize a MethodRequest into the request envelope.

    The payload is inserted verbatim. The method name is written as a JSON string literal.

    :param method_request: The request to serialize
    :type method_request: :class:`MethodRequest`

    :returns: The UTF-8 encoded request body
    :raises: :class:`BuildError` if the body cannot be formatted or encoded
    """
    try:
        body = REQUEST_BODY_FORMAT.format(
            name=json.dumps(method_request.name, ensure_ascii=False),
            timeout=int(method_request.timeout),
            payload=method_request.payload,
        )
        return body.encode("utf-8")
    except (TypeError, ValueError) as e:
        # NOTE: UnicodeEncodeError (e.g. lone surrogates) is a ValueError
        logger.error("Failed to build method request body")
        raise BuildError("Unable to build method request body") from e


def decode_response(raw: bytes) -> MethodResponse:
    """Parse a response envelope into a MethodResponse.

    The payload of the response is the compact JSON serialization of the received payload
    value, and so may differ in whitespace from what the target module sent.

    :param bytes raw: The response body
    :returns: The decoded response
    :rtype: :class:`MethodResponse`

    :raises: :class:`DecodeError` if the response is malformed or incomplete
    """
    try:
        root = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        logger.error("Method response is not valid JSON")
        raise DecodeError("Unable to parse method response") from e

    if not isinstance(root, dict):
        logger.error("Method response is not a JSON object")
        raise DecodeError("Method response is not a JSON object")

    try:
        status_value = root[RESPONSE_KEY_STATUS]
    except KeyError as e:
        logger.error("Method response missing '{}'".format(RESPONSE_KEY_STATUS))
        raise DecodeError("Method response missing status") from e
    try:
        payload_value = root[RESPONSE_KEY_PAYLOAD]
    except KeyError as e:
        logger.error("Method response missing '{}'".format(RESPONSE_KEY_PAYLOAD))
        raise DecodeError("Method response missing payload") from e

    # bool is a subclass of int, but is not a JSON number
    if isinstance(status_value, bool) or not isinstance(status_value, (int, float)):
        raise DecodeError("Method response status is not a number")
    if not math.isfinite(status_value):
        raise DecodeError("Method response status is not a finite number")

    try:
        payload = json.dumps(payload_value, ensure_ascii=False, separators=(",", ":"))
        payload_bytes = payload.encode("utf-8")
    except (TypeError, ValueError, RecursionError) as e:
        raise DecodeError("Unable to serialize method response payload") from e

    return MethodResponse(status=int(status_value), payload=payload_bytes)
