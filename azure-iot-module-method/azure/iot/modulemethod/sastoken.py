# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module contains tools for working with Shared Access Signature (SAS) Tokens"""

import logging
import time
import urllib.parse
from typing import Dict, List
from .signing_mechanism import SigningMechanism


logger = logging.getLogger(__name__)

REQUIRED_SASTOKEN_FIELDS: List[str] = ["sr", "sig", "se"]
TOKEN_FORMAT: str = "SharedAccessSignature sr={resource}&sig={signature}&se={expiry}"


class SasTokenError(Exception):
    """Error in SasToken"""

    pass


class SasToken:
    def __init__(self, sastoken_str: str) -> None:
        """Create a SasToken object from a SAS Token string
        :param str sastoken_str: The SAS Token string

        :raises: ValueError if SAS Token string is invalid
        """
        _validate_sastoken_string(sastoken_str)
        self._token_str: str = sastoken_str

    def __str__(self) -> str:
        return self._token_str


class SasTokenGenerator:
    def __init__(self, signing_mechanism: SigningMechanism) -> None:
        """An object that can generate SasTokens for any resource scope

        :param signing_mechanism: The signing mechanism that will be used to sign data
        :type signing mechanism: :class:`SigningMechanism`
        """
        self.signing_mechanism = signing_mechanism

    def generate_sastoken(self, uri: str, ttl: int) -> SasToken:
        """Generate a new SasToken

        :param str uri: The URI of the resource you are generating a token to access
        :param int ttl: Time to live for the token, in seconds

        :raises: SasTokenError if the token cannot be generated
        """
        expiry_time = int(time.time()) + ttl
        url_encoded_uri = urllib.parse.quote(uri, safe="")
        message = url_encoded_uri + "\n" + str(expiry_time)
        try:
            signature = self.signing_mechanism.sign(message)
        except Exception as e:
            # Because of variant signing mechanisms, we don't know what error might be raised.
            # So we catch all of them.
            raise SasTokenError("Unable to generate SasToken") from e
        url_encoded_signature = urllib.parse.quote(signature, safe="")
        token_str = TOKEN_FORMAT.format(
            resource=url_encoded_uri,
            signature=url_encoded_signature,
            expiry=str(expiry_time),
        )
        return SasToken(token_str)


def _validate_sastoken_string(sastoken_string: str) -> None:
    """Raise ValueError if the string is not a SAS Token with all required fields"""
    pieces = sastoken_string.split("SharedAccessSignature ")
    if len(pieces) != 2:
        raise ValueError("Invalid SAS Token string: Not a SAS Token ")

    fields: Dict[str, str] = {}
    for sub in pieces[1].split("&"):
        key, separator, value = sub.partition("=")
        if not separator:
            raise ValueError("Invalid SAS Token string: Incorrectly formatted")
        fields[key.strip()] = value.strip()

    if not all(fields.get(key) for key in REQUIRED_SASTOKEN_FIELDS):
        raise ValueError("Invalid SAS Token string: Not all required fields present")

    # Warn if extraneous fields are present
    if not all(key in REQUIRED_SASTOKEN_FIELDS for key in fields):
        logger.warning("Unexpected fields present in SAS Token")
