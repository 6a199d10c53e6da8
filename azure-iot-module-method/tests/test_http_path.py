# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------

import pytest
import logging
from azure.iot.modulemethod import http_path

logging.basicConfig(level=logging.DEBUG)


@pytest.mark.describe(".get_method_invoke_path()")
class TestGetMethodInvokePath:
    @pytest.mark.it("Returns the relative method invocation path, including the API version query")
    @pytest.mark.parametrize(
        "device_id, module_id, expected_path",
        [
            pytest.param(
                "my_device",
                "my_module",
                "/twins/my_device/modules/my_module/methods?api-version=2017-11-08-preview",
                id="Simple IDs",
            ),
            pytest.param(
                "my-device.01",
                "edge~module_2",
                "/twins/my-device.01/modules/edge~module_2/methods?api-version=2017-11-08-preview",
                id="IDs with URL-safe symbols",
            ),
            pytest.param(
                "my/device",
                "my module+1",
                "/twins/my%2Fdevice/modules/my%20module%2B1/methods?api-version=2017-11-08-preview",
                id="IDs requiring encoding",
            ),
        ],
    )
    def test_path(self, device_id, module_id, expected_path):
        assert http_path.get_method_invoke_path(device_id, module_id) == expected_path


@pytest.mark.describe(".get_sastoken_scope()")
class TestGetSasTokenScope:
    @pytest.mark.it("Returns the resource scope of the invoking module")
    def test_scope(self):
        scope = http_path.get_sastoken_scope("mygateway", "my_device", "my_module")
        assert scope == "mygateway/devices/my_device/modules/my_module"

    @pytest.mark.it("Does not encode the resource scope")
    def test_scope_not_encoded(self):
        scope = http_path.get_sastoken_scope("myhub.azure-devices.net", "my device", "my/module")
        assert scope == "myhub.azure-devices.net/devices/my device/modules/my/module"
