# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------

import io
import logging
import os
import socks
from typing import Mapping, Optional, NamedTuple
from .exceptions import IoTEdgeEnvironmentError
from . import constant
from . import connection_string as cs


logger = logging.getLogger(__name__)

# Edge container variables
ENV_AUTH_SCHEME = "IOTEDGE_AUTHSCHEME"
ENV_DEVICE_ID = "IOTEDGE_DEVICEID"
ENV_MODULE_ID = "IOTEDGE_MODULEID"
ENV_IOTHUB_HOSTNAME = "IOTEDGE_IOTHUBHOSTNAME"
ENV_GATEWAY_HOSTNAME = "IOTEDGE_GATEWAYHOSTNAME"
ENV_MODULE_GENERATION_ID = "IOTEDGE_MODULEGENERATIONID"
ENV_WORKLOAD_URI = "IOTEDGE_WORKLOADURI"
ENV_API_VERSION = "IOTEDGE_APIVERSION"

# Edge local debugging variables (set by VS/VS Code)
ENV_EDGEHUB_CONNECTION_STRING = "EdgeHubConnectionString"
ENV_EDGE_CA_CERT_FILE = "EdgeModuleCACertificateFile"


string_to_socks_constant_map = {"HTTP": socks.HTTP, "SOCKS4": socks.SOCKS4, "SOCKS5": socks.SOCKS5}
socks_constant_to_string_map = {socks.HTTP: "HTTP", socks.SOCKS4: "SOCKS4", socks.SOCKS5: "SOCKS5"}


class ProxyOptions:
    """
    A class containing various options to send traffic through proxy servers by enabling
    proxying of the HTTPS connection.
    """

    def __init__(
        self,
        proxy_type: str,
        proxy_address: str,
        proxy_port: Optional[int] = None,
        proxy_username: Optional[str] = None,
        proxy_password: Optional[str] = None,
    ):
        """
        Initializer for proxy options.
        :param str proxy_type: The type of the proxy server. This can be one of three possible choices: "HTTP", "SOCKS4", or "SOCKS5"
        :param str proxy_address: IP address or DNS name of proxy server
        :param int proxy_port: The port of the proxy server. Defaults to 1080 for socks and 8080 for http.
        :param str proxy_username: (optional) username for the proxy server.
        :param str proxy_password: (optional) password for the proxy server.
        """
        (self.proxy_type, self.proxy_type_socks) = _format_proxy_type(proxy_type)
        self.proxy_address = proxy_address
        if proxy_port is None:
            self.proxy_port = _derive_default_proxy_port(self.proxy_type)
        else:
            self.proxy_port = int(proxy_port)
        self.proxy_username = proxy_username
        self.proxy_password = proxy_password


class MethodClientConfig:
    """
    Class for storing the transport options of a ModuleMethodClient.
    """

    def __init__(
        self,
        *,
        proxy_options: Optional[ProxyOptions] = None,
        http_timeout: Optional[float] = None,
        product_info: str = "",
    ) -> None:
        """Initializer for MethodClientConfig

        :param proxy_options: Details of proxy configuration
        :type proxy_options: :class:`ProxyOptions`
        :param float http_timeout: Local socket timeout for the HTTPS exchange, in seconds.
            Default is None (block until the server responds). This is unrelated to the
            method timeout sent to the target module.
        :param str product_info: A custom identification string appended to the user agent.
        """
        self.proxy_options = proxy_options
        self.http_timeout = _sanitize_http_timeout(http_timeout)
        self.product_info = product_info


class EdgeEnvironmentConfig(NamedTuple):
    """Immutable snapshot of the IoT Edge module environment.

    Populate it once at startup with :meth:`from_environ` and pass it to the client.
    """

    device_id: str
    module_id: str
    iothub_hostname: str
    gateway_hostname: str
    module_generation_id: Optional[str] = None
    workload_uri: Optional[str] = None
    api_version: Optional[str] = None
    connection_string: Optional[str] = None
    server_verification_cert: Optional[str] = None

    @property
    def uses_edge_hsm(self) -> bool:
        return self.connection_string is None

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> "EdgeEnvironmentConfig":
        """Build the config from a mapping of environment variables.

        :param environ: The variables to read. Defaults to ``os.environ``.

        :raises: :class:`IoTEdgeEnvironmentError` if the environment is not configured correctly
        :raises: ValueError if the debugging connection string is invalid
        """
        if environ is None:
            environ = os.environ

        # Local dev variables take precedence, and all other settings are ignored
        connection_string = environ.get(ENV_EDGEHUB_CONNECTION_STRING)
        if connection_string:
            logger.debug("Using {} from the environment".format(ENV_EDGEHUB_CONNECTION_STRING))
            return cls._from_debug_environ(connection_string, environ)

        auth_scheme = _get_required(environ, ENV_AUTH_SCHEME)
        if auth_scheme.lower() != constant.EDGE_AUTH_SCHEME_SAS.lower():
            logger.error(
                "Environment {} was set to {}, but only {} is supported".format(
                    ENV_AUTH_SCHEME, auth_scheme, constant.EDGE_AUTH_SCHEME_SAS
                )
            )
            raise IoTEdgeEnvironmentError(
                "Unsupported IoT Edge auth scheme: {}".format(auth_scheme)
            )

        device_id = _get_required(environ, ENV_DEVICE_ID)
        iothub_hostname = _get_required(environ, ENV_IOTHUB_HOSTNAME)
        gateway_hostname = _get_required(environ, ENV_GATEWAY_HOSTNAME)
        module_id = _get_required(environ, ENV_MODULE_ID)
        _validate_iothub_hostname(iothub_hostname)

        return cls(
            device_id=device_id,
            module_id=module_id,
            iothub_hostname=iothub_hostname,
            gateway_hostname=gateway_hostname,
            module_generation_id=_get_required(environ, ENV_MODULE_GENERATION_ID),
            workload_uri=_get_required(environ, ENV_WORKLOAD_URI),
            api_version=_get_required(environ, ENV_API_VERSION),
        )

    @classmethod
    def _from_debug_environ(
        cls, connection_string: str, environ: Mapping[str, str]
    ) -> "EdgeEnvironmentConfig":
        parsed = cs.ConnectionString(connection_string)
        hostname = parsed[cs.HOST_NAME]
        gateway_hostname = parsed.get(cs.GATEWAY_HOST_NAME, hostname)

        server_verification_cert = None
        ca_cert_filepath = environ.get(ENV_EDGE_CA_CERT_FILE)
        if ca_cert_filepath:
            try:
                with io.open(ca_cert_filepath, mode="r") as ca_cert_file:
                    server_verification_cert = ca_cert_file.read()
            except OSError as e:
                raise IoTEdgeEnvironmentError("Invalid CA certificate file") from e

        return cls(
            device_id=parsed[cs.DEVICE_ID],
            module_id=parsed[cs.MODULE_ID],
            iothub_hostname=hostname,
            gateway_hostname=gateway_hostname,
            connection_string=connection_string,
            server_verification_cert=server_verification_cert,
        )


# Sanitization #


def _get_required(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name)
    if not value:
        logger.error("Environment {} not set".format(name))
        raise IoTEdgeEnvironmentError("IoT Edge environment variable {} not set".format(name))
    return value


def _validate_iothub_hostname(iothub_hostname: str) -> None:
    """The hub hostname must be of the form <name>.<suffix>"""
    name, separator, suffix = iothub_hostname.partition(".")
    if not separator:
        raise IoTEdgeEnvironmentError(
            "Environment {} invalid, requires '.' separator".format(ENV_IOTHUB_HOSTNAME)
        )
    if not name or not suffix:
        raise IoTEdgeEnvironmentError(
            "Environment {} invalid, no content around '.' separator".format(ENV_IOTHUB_HOSTNAME)
        )


def _format_proxy_type(proxy_type):
    """Returns a tuple of formats for proxy type (string, socks library constant)"""
    try:
        return (proxy_type, string_to_socks_constant_map[proxy_type])
    except KeyError:
        # Also accept the socks library constants
        try:
            return (socks_constant_to_string_map[proxy_type], proxy_type)
        except KeyError:
            raise ValueError("Invalid Proxy Type")


def _derive_default_proxy_port(proxy_type):
    if proxy_type == "HTTP":
        return 8080
    else:
        return 1080


def _sanitize_http_timeout(http_timeout):
    if http_timeout is None:
        return None
    try:
        http_timeout = float(http_timeout)
    except (ValueError, TypeError):
        raise TypeError("Invalid type for 'http_timeout'. Must be a numeric value.")

    if http_timeout <= 0:
        raise ValueError("'http_timeout' must be greater than 0")

    return http_timeout
