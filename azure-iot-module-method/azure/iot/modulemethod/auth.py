# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module contains the authorization providers which supply scoped SAS tokens and the
trust bundle used to validate the server during a method invocation.
"""

import abc
import logging
from typing import Optional
from .config import EdgeEnvironmentConfig
from .edge_hsm import IoTEdgeHsm
from .exceptions import AuthError, IoTEdgeError
from .sastoken import SasTokenError, SasTokenGenerator
from .signing_mechanism import SigningMechanism, SymmetricKeySigningMechanism
from . import connection_string as cs

logger = logging.getLogger(__name__)


class AuthorizationProvider(abc.ABC):
    """Supplies credentials for a single method invocation.

    Implementations must be safe to call from multiple threads at once.
    """

    @abc.abstractmethod
    def get_sastoken(self, scope: str, ttl: int) -> str:
        """Return a SAS token string authorizing access to the given scope

        :param str scope: The resource scope the token is bound to
        :param int ttl: Time to live for the token, in seconds

        :raises: :class:`AuthError` if the token cannot be generated
        """
        pass

    @abc.abstractmethod
    def get_trust_bundle(self) -> Optional[str]:
        """Return the PEM certificate chain used to validate the server, or None to use the
        default certificate store.

        :raises: :class:`AuthError` if the trust bundle cannot be retrieved
        """
        pass


class SigningAuthorizationProvider(AuthorizationProvider):
    """AuthorizationProvider that mints tokens locally using a SigningMechanism"""

    def __init__(self, signing_mechanism: SigningMechanism) -> None:
        self._generator = SasTokenGenerator(signing_mechanism)

    def get_sastoken(self, scope: str, ttl: int) -> str:
        try:
            sastoken = self._generator.generate_sastoken(scope, ttl)
        except SasTokenError as e:
            logger.error("SasToken generation failed for scope {}".format(scope))
            raise AuthError("Unable to generate SasToken") from e
        return str(sastoken)


class EdgeHsmAuthorizationProvider(SigningAuthorizationProvider):
    def __init__(self, hsm: IoTEdgeHsm) -> None:
        """Provider that signs with, and fetches the trust bundle from, the IoT Edge HSM

        :param hsm: The HSM of the Edge workload API
        :type hsm: :class:`IoTEdgeHsm`
        """
        super().__init__(hsm)
        self._hsm = hsm

    def get_trust_bundle(self) -> Optional[str]:
        try:
            return self._hsm.get_certificate()
        except IoTEdgeError as e:
            logger.error("Failed to get trust bundle from IoT Edge")
            raise AuthError("Unable to retrieve trust bundle") from e


class SymmetricKeyAuthorizationProvider(SigningAuthorizationProvider):
    def __init__(self, shared_access_key: str, server_verification_cert: Optional[str] = None):
        """Provider that signs with a shared access key

        :param str shared_access_key: The base64 encoded symmetric key
        :param str server_verification_cert: PEM certificate chain to trust (optional)

        :raises: ValueError if the key is invalid
        """
        super().__init__(SymmetricKeySigningMechanism(shared_access_key))
        self._server_verification_cert = server_verification_cert

    def get_trust_bundle(self) -> Optional[str]:
        return self._server_verification_cert


def create_from_edge_environment(edge_config: EdgeEnvironmentConfig) -> AuthorizationProvider:
    """Return the AuthorizationProvider appropriate for an Edge environment

    :param edge_config: The snapshot of the Edge environment
    :type edge_config: :class:`EdgeEnvironmentConfig`

    :raises: ValueError if the debugging connection string contains an invalid key
    """
    if edge_config.uses_edge_hsm:
        logger.debug("Using IoT Edge HSM for authorization")
        hsm = IoTEdgeHsm(
            module_id=edge_config.module_id,
            generation_id=edge_config.module_generation_id,
            workload_uri=edge_config.workload_uri,
            api_version=edge_config.api_version,
        )
        return EdgeHsmAuthorizationProvider(hsm)
    else:
        logger.debug("Using symmetric key from connection string for authorization")
        connection_string = cs.ConnectionString(edge_config.connection_string)
        return SymmetricKeyAuthorizationProvider(
            connection_string[cs.SHARED_ACCESS_KEY],
            server_verification_cert=edge_config.server_verification_cert,
        )
