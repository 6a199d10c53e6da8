# --------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------

import logging
import ssl
import requests
from typing import Dict, NamedTuple, Optional
from .config import ProxyOptions
from .exceptions import TransportError

logger = logging.getLogger(__name__)


class HTTPResponse(NamedTuple):
    status_code: int
    reason: str
    body: bytes


class HTTPTransport:
    """
    A wrapper class that provides an implementation-agnostic HTTPS interface.

    A transport is created for a single exchange, using the trust bundle retrieved for it.
    """

    def __init__(
        self,
        hostname: str,
        server_verification_cert: Optional[str] = None,
        proxy_options: Optional[ProxyOptions] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Constructor to instantiate an HTTPS protocol wrapper.

        :param str hostname: Hostname or IP address of the remote host.
        :param str server_verification_cert: Certificate which can be used to validate a server-side TLS connection (optional).
        :param proxy_options: Options for sending traffic through proxy servers (optional).
        :param float timeout: Local socket timeout, in seconds (optional).

        :raises: :class:`TransportError` if the server verification cert cannot be loaded
        """
        self._hostname = hostname
        self._server_verification_cert = server_verification_cert
        self._proxies = format_proxies(proxy_options)
        self._timeout = timeout
        self._http_adapter = self._create_http_adapter()

    def _create_http_adapter(self) -> requests.adapters.HTTPAdapter:
        """
        This method creates a custom HTTPAdapter for use with a requests library session.
        It will allow for use of a custom configured SSL context.
        """
        ssl_context = self._create_ssl_context()

        class CustomSSLContextHTTPAdapter(requests.adapters.HTTPAdapter):
            def init_poolmanager(self, *args, **kwargs):
                kwargs["ssl_context"] = ssl_context
                return super().init_poolmanager(*args, **kwargs)

            def proxy_manager_for(self, *args, **kwargs):
                kwargs["ssl_context"] = ssl_context
                return super().proxy_manager_for(*args, **kwargs)

        return CustomSSLContextHTTPAdapter()

    def _create_ssl_context(self) -> ssl.SSLContext:
        """
        This method creates the SSLContext object used to authenticate the connection.
        """
        logger.debug("creating a SSL context")
        ssl_context = ssl.SSLContext(protocol=ssl.PROTOCOL_TLS_CLIENT)
        ssl_context.minimum_version = ssl.TLSVersion.TLSv1_2

        if self._server_verification_cert:
            try:
                ssl_context.load_verify_locations(cadata=self._server_verification_cert)
            except (ssl.SSLError, ValueError) as e:
                logger.error("Setting trusted certificate failed")
                raise TransportError("Unable to load server verification certificate") from e
        else:
            ssl_context.load_default_certs()

        ssl_context.verify_mode = ssl.CERT_REQUIRED
        ssl_context.check_hostname = True

        return ssl_context

    def request(self, method: str, path: str, headers: Dict[str, str], body: bytes = b"") -> HTTPResponse:
        """
        This method creates a connection to a remote host, sends a request to that host, and then waits for and reads the response from that request.

        :param str method: The request method (e.g. "POST")
        :param str path: The path for the URL, including any query string
        :param dict headers: A dictionary that provides the HTTP headers to be sent with the request.
        :param bytes body: The body of the HTTP request to be sent following the headers.

        :returns: The status code, reason and body of the response
        :raises: :class:`TransportError` if the request could not be completed
        :raises: ValueError if the method is not supported
        """
        if method not in ("GET", "POST", "PUT", "PATCH", "DELETE"):
            raise ValueError("Invalid method type: {}".format(method))

        logger.info("sending https {} request to {} .".format(method, path))
        url = "https://{hostname}{path}".format(hostname=self._hostname, path=path)

        # The session, and the connection pool it owns, does not outlive the request
        with requests.Session() as session:
            session.mount("https://", self._http_adapter)
            try:
                response = session.request(
                    method,
                    url,
                    data=body,
                    headers=headers,
                    proxies=self._proxies,
                    timeout=self._timeout,
                )
            except requests.exceptions.Timeout as e:
                logger.error("HTTPS {} request to {} timed out".format(method, path))
                raise TransportError("HTTPS request timed out") from e
            except requests.exceptions.RequestException as e:
                logger.error("HTTPS {} request to {} failed".format(method, path))
                raise TransportError("Unexpected HTTPS failure during connect") from e

            return HTTPResponse(
                status_code=response.status_code, reason=response.reason, body=response.content
            )


def format_proxies(proxy_options: Optional[ProxyOptions]) -> Dict[str, str]:
    """
    Format the data from the proxy_options object into a format for use with the requests library
    """
    proxies = {}
    if proxy_options:
        # Basic address/port formatting
        proxy = "{address}:{port}".format(
            address=proxy_options.proxy_address, port=proxy_options.proxy_port
        )
        # Add credentials if necessary
        if proxy_options.proxy_username and proxy_options.proxy_password:
            auth = "{username}:{password}".format(
                username=proxy_options.proxy_username, password=proxy_options.proxy_password
            )
            proxy = auth + "@" + proxy
        # Set proxy for use on HTTP or HTTPS connections
        if proxy_options.proxy_type == "HTTP":
            proxies["http"] = "http://" + proxy
            proxies["https"] = "http://" + proxy
        elif proxy_options.proxy_type == "SOCKS4":
            proxies["http"] = "socks4://" + proxy
            proxies["https"] = "socks4://" + proxy
        elif proxy_options.proxy_type == "SOCKS5":
            proxies["http"] = "socks5://" + proxy
            proxies["https"] = "socks5://" + proxy
        else:
            # This should be unreachable due to validation on the ProxyOptions object
            raise ValueError("Invalid proxy type: {}".format(proxy_options.proxy_type))

    return proxies
