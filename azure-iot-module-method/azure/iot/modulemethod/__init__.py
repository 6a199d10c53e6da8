""" Azure IoT Module Method Library

This library provides a client for invoking methods on IoT Edge modules from another module,
over HTTPS.
"""

from .method_client import (  # noqa: F401
    ModuleMethodClient,
    InvocationHandle,
    InvokeResult,
    MethodInvokeResult,
)
from .models import MethodRequest, MethodResponse  # noqa: F401
from .config import EdgeEnvironmentConfig, MethodClientConfig, ProxyOptions  # noqa: F401
from .auth import (  # noqa: F401
    AuthorizationProvider,
    EdgeHsmAuthorizationProvider,
    SymmetricKeyAuthorizationProvider,
)
from .exceptions import (  # noqa: F401
    MethodInvokeError,
    InvalidArgumentError,
    AuthError,
    BuildError,
    TransportError,
    DecodeError,
    IoTEdgeError,
    IoTEdgeEnvironmentError,
)
