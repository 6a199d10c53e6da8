# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module contains classes related to module method invocations.
"""


class MethodRequest:
    """Represents a request to invoke a method on a module.

    :ivar str name: The name of the method to be invoked.
    :ivar int timeout: The time, in seconds, the target module has to execute the method.
    :ivar str payload: The JSON text sent with the request.
    """

    def __init__(self, name: str, timeout: int, payload: str) -> None:
        """Initializer for a MethodRequest.

        :param str name: The name of the method to be invoked
        :param int timeout: The time, in seconds, the target module has to execute the method.
        :param str payload: The JSON text sent with the request. It is sent as-is, and must
            already be valid JSON.
        """
        self._name = name
        self._timeout = timeout
        self._payload = payload

    @property
    def name(self) -> str:
        return self._name

    @property
    def timeout(self) -> int:
        return self._timeout

    @property
    def payload(self) -> str:
        return self._payload


class MethodResponse:
    """Represents the response of a module to a method invocation.

    :ivar int status: The status reported by the target module.
    :ivar bytes payload: The JSON text of the payload returned by the target module, UTF-8 encoded.
    """

    def __init__(self, status: int, payload: bytes) -> None:
        """Initializer for MethodResponse.

        :param int status: The status reported by the target module.
        :param bytes payload: The JSON text of the payload returned by the target module.
        """
        self.status = status
        self.payload = payload

    @property
    def payload_length(self) -> int:
        return len(self.payload)

    def __repr__(self) -> str:
        return "MethodResponse(status={status}, payload={payload!r})".format(
            status=self.status, payload=self.payload
        )
