# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module contains the mechanisms used to sign the message of a SAS token"""

import abc
import base64
import binascii
import hashlib
import hmac
from typing import AnyStr


def _to_bytes(value: AnyStr) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return value


class SigningMechanism(abc.ABC):
    @abc.abstractmethod
    def sign(self, data_str: AnyStr) -> str:
        """Return the base64 encoded signature of the data"""
        pass


class SymmetricKeySigningMechanism(SigningMechanism):
    """Signs with HMAC-SHA256, keyed by a module's shared access key"""

    def __init__(self, key: AnyStr) -> None:
        """
        :param key: The base64 encoded shared access key
        :type key: str or bytes

        :raises: ValueError if the key is not valid base64
        """
        try:
            self._signing_key = base64.b64decode(_to_bytes(key), validate=True)
        except binascii.Error:
            raise ValueError("Invalid Symmetric Key")

    def sign(self, data_str: AnyStr) -> str:
        """
        :raises: ValueError if the data cannot be signed
        """
        try:
            digest = hmac.new(self._signing_key, _to_bytes(data_str), hashlib.sha256).digest()
        except TypeError:
            raise ValueError("Unable to sign string using the provided symmetric key")
        return base64.b64encode(digest).decode("utf-8")
