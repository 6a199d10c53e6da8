# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""Define Azure IoT module method exceptions to be shared across package"""
from typing import Optional


# Method Invocation Exceptions
class MethodInvokeError(Exception):
    """Represents a failure of a module method invocation"""

    pass


class InvalidArgumentError(MethodInvokeError, ValueError):
    """Represents a missing, empty or malformed invocation argument"""

    pass


class AuthError(MethodInvokeError):
    """Represents a failure retrieving a SAS token or trust bundle"""

    pass


class BuildError(MethodInvokeError):
    """Represents a failure constructing the request envelope or path"""

    pass


class TransportError(MethodInvokeError):
    """Represents a failure in the HTTP exchange, including a failed status code"""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(MethodInvokeError):
    """Represents a malformed or incomplete method response"""

    pass


# Service/Environment Exceptions
class IoTEdgeError(Exception):
    """Represents a failure reported by IoT Edge"""

    pass


class IoTEdgeEnvironmentError(Exception):
    """Represents a failure retrieving data from the IoT Edge environment"""

    pass
