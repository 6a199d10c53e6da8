# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------
"""This module defines constants for use across the azure-iot-module-method package
"""

VERSION = "1.0.0"
IOTHUB_IDENTIFIER = "azure-iot-module-method-py"
METHOD_INVOKE_API_VERSION = "2017-11-08-preview"

# Lifetime of the SAS token minted for a single invocation. Not configurable.
SASTOKEN_LIFETIME = 3600

# Edge auth scheme supported by the workload API
EDGE_AUTH_SCHEME_SAS = "sasToken"
