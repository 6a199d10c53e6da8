# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module contains the client used by a module to invoke methods on other modules
through IoT Edge.
"""

import enum
import logging
import uuid
from typing import Any, Callable, Dict, NamedTuple, Optional
from .auth import AuthorizationProvider, SymmetricKeyAuthorizationProvider
from .config import EdgeEnvironmentConfig, MethodClientConfig
from .exceptions import (
    MethodInvokeError,
    InvalidArgumentError,
    AuthError,
    TransportError,
)
from .http_transport import HTTPTransport
from .models import MethodRequest, MethodResponse
from . import auth, constant, envelope, http_path, user_agent
from . import connection_string as cs

logger = logging.getLogger(__name__)

# Header Definitions
HEADER_AUTHORIZATION = "Authorization"
HEADER_REQUEST_ID = "Request-Id"
HEADER_USER_AGENT = "User-Agent"
HEADER_CONTENT_TYPE = "Content-Type"

# Replaced by the SAS token once it has been minted
AUTHORIZATION_PLACEHOLDER = " "
CONTENT_TYPE_JSON = "application/json; charset=utf-8"

HTTP_STATUS_OK = 200


class InvokeResult(enum.Enum):
    """Coarse outcome of a method invocation"""

    OK = "OK"
    INVALID_ARG = "INVALID_ARG"
    ERROR = "ERROR"


class InvocationHandle(NamedTuple):
    """Identity of the invoking module, shared read-only by every invocation"""

    hostname: str
    device_id: str
    module_id: str
    authorization_provider: AuthorizationProvider


class SignedRequestContext(NamedTuple):
    """Credentials for a single exchange. Never reused across invocations."""

    scope: str
    sastoken: str
    trust_bundle: Optional[str]


class MethodInvokeResult:
    """The result of a method invocation.

    Evaluates as True only if the invocation succeeded, in which case ``response`` holds the
    response of the target module. Otherwise ``error`` holds the failure.

    :ivar result: The coarse outcome
    :type result: :class:`InvokeResult`
    :ivar response: The response of the target module, if successful
    :type response: :class:`MethodResponse`
    :ivar error: The failure, if unsuccessful
    :type error: :class:`MethodInvokeError`
    """

    def __init__(
        self,
        result: InvokeResult,
        response: Optional[MethodResponse] = None,
        error: Optional[MethodInvokeError] = None,
    ) -> None:
        self.result = result
        self.response = response
        self.error = error

    @classmethod
    def from_response(cls, response: MethodResponse) -> "MethodInvokeResult":
        return cls(InvokeResult.OK, response=response)

    @classmethod
    def from_error(cls, error: MethodInvokeError) -> "MethodInvokeResult":
        if isinstance(error, InvalidArgumentError):
            return cls(InvokeResult.INVALID_ARG, error=error)
        else:
            return cls(InvokeResult.ERROR, error=error)

    def __bool__(self) -> bool:
        return self.result is InvokeResult.OK

    def __repr__(self) -> str:
        return "MethodInvokeResult(result={result}, response={response!r}, error={error!r})".format(
            result=self.result.value, response=self.response, error=self.error
        )

    def raise_for_error(self) -> None:
        """Raise the captured failure, if there was one"""
        if self.error is not None:
            raise self.error


TransportFactory = Callable[..., HTTPTransport]


class ModuleMethodClient:
    """A synchronous client for invoking methods on modules through IoT Edge.

    Each invocation blocks for the duration of token retrieval and the HTTPS round trip,
    and uses its own token, headers and connection.
    """

    def __init__(
        self,
        handle: InvocationHandle,
        client_config: Optional[MethodClientConfig] = None,
        transport_factory: TransportFactory = HTTPTransport,
    ) -> None:
        """Initializer for a ModuleMethodClient

        :param handle: The identity of the invoking module
        :type handle: :class:`InvocationHandle`
        :param client_config: Transport options (optional)
        :type client_config: :class:`MethodClientConfig`
        :param transport_factory: Callable creating the transport for an exchange (optional)
        """
        if not (handle.hostname and handle.device_id and handle.module_id):
            raise ValueError("InvocationHandle requires a hostname, device_id and module_id")
        if handle.authorization_provider is None:
            raise ValueError("InvocationHandle requires an authorization_provider")
        if client_config is None:
            client_config = MethodClientConfig()
        self._handle = handle
        self._config = client_config
        self._transport_factory = transport_factory
        self._user_agent_string = user_agent.get_iothub_user_agent() + client_config.product_info

    @property
    def handle(self) -> InvocationHandle:
        return self._handle

    @classmethod
    def create_from_edge_environment(
        cls, edge_config: EdgeEnvironmentConfig, **kwargs: Any
    ) -> "ModuleMethodClient":
        """
        Instantiate the client from a snapshot of the IoT Edge environment.

        :param edge_config: The Edge environment, typically from
            :meth:`EdgeEnvironmentConfig.from_environ`
        :type edge_config: :class:`EdgeEnvironmentConfig`
        :param kwargs: Options for :class:`MethodClientConfig`

        :raises: ValueError if the debugging connection string contains an invalid key
        """
        handle = InvocationHandle(
            hostname=edge_config.gateway_hostname,
            device_id=edge_config.device_id,
            module_id=edge_config.module_id,
            authorization_provider=auth.create_from_edge_environment(edge_config),
        )
        return cls(handle, client_config=MethodClientConfig(**kwargs))

    @classmethod
    def create_from_connection_string(
        cls,
        connection_string: str,
        server_verification_cert: Optional[str] = None,
        **kwargs: Any
    ) -> "ModuleMethodClient":
        """
        Instantiate the client from a module connection string.

        Requests are sent to the GatewayHostName if present, otherwise the HostName.

        :param str connection_string: The module connection string
        :param str server_verification_cert: PEM certificate chain to trust (optional)
        :param kwargs: Options for :class:`MethodClientConfig`

        :raises: ValueError if the connection string is invalid
        """
        connection_string = cs.ConnectionString(connection_string)
        hostname = connection_string.get(cs.GATEWAY_HOST_NAME) or connection_string[cs.HOST_NAME]
        provider = SymmetricKeyAuthorizationProvider(
            connection_string[cs.SHARED_ACCESS_KEY],
            server_verification_cert=server_verification_cert,
        )
        handle = InvocationHandle(
            hostname=hostname,
            device_id=connection_string[cs.DEVICE_ID],
            module_id=connection_string[cs.MODULE_ID],
            authorization_provider=provider,
        )
        return cls(handle, client_config=MethodClientConfig(**kwargs))

    def invoke_method(
        self, device_id: str, module_id: str, method_name: str, payload: str, timeout: int
    ) -> MethodInvokeResult:
        """Invoke a method on a module and wait for its response.

        This call is not retried on failure.

        :param str device_id: The target device ID
        :param str module_id: The target module ID
        :param str method_name: The name of the method to invoke
        :param str payload: JSON text sent to the target as-is
        :param int timeout: The time, in seconds, the target has to execute the method

        :returns: The result of the invocation
        :rtype: :class:`MethodInvokeResult`
        """
        try:
            logger.debug("Validating method invocation arguments")
            _validate_invoke_args(device_id, module_id, method_name, payload, timeout)

            logger.debug("Building method request for {}/{}".format(device_id, module_id))
            method_request = MethodRequest(name=method_name, timeout=timeout, payload=payload)
            body = envelope.build_request_body(method_request)
            path = http_path.get_method_invoke_path(device_id, module_id)

            response = self._send_method_request(path, body)
        except MethodInvokeError as e:
            logger.error(
                "Failed to invoke method '{}' on {}/{}: {}".format(method_name, device_id, module_id, e)
            )
            return MethodInvokeResult.from_error(e)

        logger.debug(
            "Method '{}' on {}/{} returned status {}".format(
                method_name, device_id, module_id, response.status
            )
        )
        return MethodInvokeResult.from_response(response)

    def _send_method_request(self, path: str, body: bytes) -> MethodResponse:
        headers = self._create_http_headers()

        logger.debug("Authorizing method request")
        context = self._create_signed_request_context()
        headers[HEADER_AUTHORIZATION] = context.sastoken

        logger.debug("Exchanging method request with {}".format(self._handle.hostname))
        transport = self._transport_factory(
            hostname=self._handle.hostname,
            server_verification_cert=context.trust_bundle,
            proxy_options=self._config.proxy_options,
            timeout=self._config.http_timeout,
        )
        http_response = transport.request("POST", path, headers=headers, body=body)
        if http_response.status_code != HTTP_STATUS_OK:
            logger.error("Http Failure status code {}.".format(http_response.status_code))
            logger.error("response body: {!r}".format(http_response.body))
            raise TransportError(
                "Method invocation failed with status {status} - {reason}".format(
                    status=http_response.status_code, reason=http_response.reason
                ),
                status_code=http_response.status_code,
            )

        logger.debug("Decoding method response")
        return envelope.decode_response(http_response.body)

    def _create_http_headers(self) -> Dict[str, str]:
        # Insertion order is the order the headers are sent in
        return {
            HEADER_AUTHORIZATION: AUTHORIZATION_PLACEHOLDER,
            HEADER_REQUEST_ID: str(uuid.uuid4()),
            HEADER_USER_AGENT: self._user_agent_string,
            HEADER_CONTENT_TYPE: CONTENT_TYPE_JSON,
        }

    def _create_signed_request_context(self) -> SignedRequestContext:
        provider = self._handle.authorization_provider
        scope = http_path.get_sastoken_scope(
            self._handle.hostname, self._handle.device_id, self._handle.module_id
        )
        sastoken = provider.get_sastoken(scope, constant.SASTOKEN_LIFETIME)
        if not sastoken:
            raise AuthError("Authorization provider returned no SasToken")
        trust_bundle = provider.get_trust_bundle()
        return SignedRequestContext(scope=scope, sastoken=sastoken, trust_bundle=trust_bundle)


def _validate_invoke_args(device_id, module_id, method_name, payload, timeout):
    for name, value in (
        ("device_id", device_id),
        ("module_id", module_id),
        ("method_name", method_name),
        ("payload", payload),
    ):
        if not isinstance(value, str):
            raise InvalidArgumentError("'{}' must be a string".format(name))
        if not value:
            raise InvalidArgumentError("'{}' cannot be empty".format(name))
    # bool is a subclass of int, but not a valid timeout
    if isinstance(timeout, bool) or not isinstance(timeout, int):
        raise InvalidArgumentError("'timeout' must be an integer")
    if timeout < 0:
        raise InvalidArgumentError("'timeout' cannot be negative")
