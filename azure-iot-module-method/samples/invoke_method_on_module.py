# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# -------------------------------------------------------------------------

import json
import logging
import os
from azure.iot.modulemethod import EdgeEnvironmentConfig, ModuleMethodClient

logging.basicConfig(level=logging.ERROR)

# The target of the invocation. The target module must have a handler for the method.
target_device_id = os.getenv("TARGET_DEVICE_ID", "fakeDeviceId")
target_module_id = os.getenv("TARGET_MODULE_ID", "fakeModuleId")

# Method invocation is only supported in the context of Azure IoT Edge.
# Read the module identity once, at startup, from the variables set by the Edge runtime
# (or by the Edge simulator when debugging locally).
edge_config = EdgeEnvironmentConfig.from_environ()
module_client = ModuleMethodClient.create_from_edge_environment(edge_config, http_timeout=60)

# The payload must already be JSON text. It is sent as-is.
payload = json.dumps({"message": "foo"})

# Blocks until the target module responds, or the invocation fails.
result = module_client.invoke_method(
    device_id=target_device_id,
    module_id=target_module_id,
    method_name="doSomethingInteresting",
    payload=payload,
    timeout=5,
)

if result:
    print("Method Response Status: {}".format(result.response.status))
    print("Method Response Payload: {}".format(result.response.payload.decode("utf-8")))
else:
    print("Method invocation failed ({}): {}".format(result.result.value, result.error))
