# --------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module contains the client for the IoT Edge workload API, which signs SAS tokens on
behalf of a module and serves the trust bundle of the Edge hub.
"""

import base64
import json
import logging
import requests
import requests_unixsocket
import urllib.parse
from typing import Any, AnyStr, Dict
from .exceptions import IoTEdgeError
from .signing_mechanism import SigningMechanism
from . import user_agent

# requests.get/requests.post will now also accept http+unix:// URLs
requests_unixsocket.monkeypatch()
logger = logging.getLogger(__name__)

UNIX_SOCKET_SCHEME = "unix://"
REQUESTS_UNIX_SOCKET_SCHEME = "http+unix://"

SIGN_KEY_ID = "primary"
SIGN_ALGORITHM = "HMACSHA256"


class IoTEdgeHsm(SigningMechanism):
    """Signing mechanism backed by the key the IoT Edge security daemon holds for a module.

    The same endpoint also provides the trust bundle used to validate the TLS connection to
    the Edge hub.
    """

    def __init__(
        self, module_id: str, generation_id: str, workload_uri: str, api_version: str
    ) -> None:
        """
        :param str module_id: The ID of the module the key belongs to
        :param str generation_id: The generation ID of the module
        :param str workload_uri: The workload API URI, as found in IOTEDGE_WORKLOADURI
        :param str api_version: The workload API version
        """
        self.module_id = urllib.parse.quote(module_id, safe="")
        self.generation_id = generation_id
        self.workload_uri = _format_socket_uri(workload_uri)
        self.api_version = api_version

    def get_certificate(self) -> str:
        """Retrieve the PEM certificate chain trusted by the Edge hub.

        :raises: :class:`IoTEdgeError` if the trust bundle could not be retrieved
        """
        logger.debug("Requesting trust bundle from IoT Edge")
        try:
            response = requests.get(
                self.workload_uri + "trust-bundle",
                params={"api-version": self.api_version},
                headers=self._create_headers(),
            )
        except requests.exceptions.RequestException as e:
            logger.error("Unable to reach IoT Edge for trust bundle")
            raise IoTEdgeError("Unable to reach IoT Edge for trust bundle") from e
        return _read_field(response, "certificate", "trust bundle")

    def sign(self, data_str: AnyStr) -> str:
        """Sign data with the module key, using HMAC-SHA256.

        :param data_str: The data to sign
        :type data_str: str or bytes

        :returns: The base64 encoded signature
        :raises: :class:`IoTEdgeError` if the data could not be signed
        """
        if isinstance(data_str, str):
            data_str = data_str.encode("utf-8")
        sign_request = {
            "keyId": SIGN_KEY_ID,
            "algo": SIGN_ALGORITHM,
            "data": base64.b64encode(data_str).decode(),
        }
        url = "{workload_uri}modules/{module_id}/genid/{gen_id}/sign".format(
            workload_uri=self.workload_uri, module_id=self.module_id, gen_id=self.generation_id
        )

        logger.debug("Requesting signature from IoT Edge")
        try:
            response = requests.post(
                url=url,
                params={"api-version": self.api_version},
                headers=self._create_headers(),
                data=json.dumps(sign_request),
            )
        except requests.exceptions.RequestException as e:
            logger.error("Unable to reach IoT Edge for signature")
            raise IoTEdgeError("Unable to reach IoT Edge for signature") from e
        return _read_field(response, "digest", "signature")

    def _create_headers(self) -> Dict[str, str]:
        return {"User-Agent": urllib.parse.quote(user_agent.get_iothub_user_agent(), safe="")}


def _read_field(response: requests.Response, field: str, description: str) -> Any:
    """Return a field of a JSON workload API response, raising IoTEdgeError on any failure"""
    try:
        response.raise_for_status()
    except requests.exceptions.HTTPError as e:
        logger.error("IoT Edge failed to provide {}".format(description))
        raise IoTEdgeError("Unable to get {} from IoT Edge".format(description)) from e
    try:
        body = response.json()
    except ValueError as e:
        raise IoTEdgeError("Unable to decode {} from IoT Edge".format(description)) from e
    try:
        return body[field]
    except (KeyError, TypeError) as e:
        raise IoTEdgeError("No {} in IoT Edge response".format(description)) from e


def _format_socket_uri(workload_uri: str) -> str:
    """Convert a workload URI to the form expected by requests.

    "unix:///var/run/iotedge/workload.sock" becomes
    "http+unix://%2Fvar%2Frun%2Fiotedge%2Fworkload.sock/". Other URIs only gain a trailing slash.
    """
    if workload_uri.startswith(UNIX_SOCKET_SCHEME):
        socket_path = workload_uri[len(UNIX_SOCKET_SCHEME) :].rstrip("/")
        workload_uri = REQUESTS_UNIX_SOCKET_SCHEME + urllib.parse.quote(socket_path, safe="")
    if not workload_uri.endswith("/"):
        workload_uri += "/"
    return workload_uri
