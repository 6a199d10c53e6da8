# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module contains the parser for module connection strings, of the form
HostName=<host>;DeviceId=<device>;ModuleId=<module>;SharedAccessKey=<key>[;GatewayHostName=<gw>]
"""

from typing import Dict, Optional

__all__ = ["ConnectionString"]

HOST_NAME = "HostName"
SHARED_ACCESS_KEY_NAME = "SharedAccessKeyName"
SHARED_ACCESS_KEY = "SharedAccessKey"
DEVICE_ID = "DeviceId"
MODULE_ID = "ModuleId"
GATEWAY_HOST_NAME = "GatewayHostName"

VALID_KEYS = frozenset(
    [HOST_NAME, SHARED_ACCESS_KEY_NAME, SHARED_ACCESS_KEY, DEVICE_ID, MODULE_ID, GATEWAY_HOST_NAME]
)
REQUIRED_KEYS = (HOST_NAME, DEVICE_ID, MODULE_ID)


class ConnectionString:
    """Read-only, dictionary style access to the values of a module connection string"""

    def __init__(self, connection_string: str) -> None:
        """
        :param str connection_string: The module connection string
        :raises: ValueError if the connection string is malformed, or is not for a module
        :raises: TypeError if the connection string is not a string
        """
        if not isinstance(connection_string, str):
            raise TypeError("Connection String must be of type str")
        self._values = _parse(connection_string)
        self._strrep = connection_string

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __repr__(self) -> str:
        return self._strrep

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._values.get(key, default)


def _parse(connection_string: str) -> Dict[str, str]:
    values = {}
    for segment in connection_string.split(";"):
        key, separator, value = segment.partition("=")
        if not separator or key in values:
            # Missing separator, duplicate key, etc.
            raise ValueError("Invalid Connection String - Unable to parse")
        if key not in VALID_KEYS:
            raise ValueError("Invalid Connection String - Invalid Key")
        values[key] = value

    if not values.get(SHARED_ACCESS_KEY):
        raise ValueError("Invalid Connection String - No authentication scheme")
    # Method invocation is only available to modules
    if not all(values.get(key) for key in REQUIRED_KEYS):
        raise ValueError("Invalid Connection String - Missing connection details")
    return values
