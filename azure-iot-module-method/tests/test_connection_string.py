# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------

import pytest
import logging
from azure.iot.modulemethod.connection_string import ConnectionString

logging.basicConfig(level=logging.DEBUG)

MODULE_CS = "HostName=my.host.name;DeviceId=my-device;ModuleId=my-module;SharedAccessKey=Zm9vYmFy"
MODULE_CS_GATEWAY = MODULE_CS + ";GatewayHostName=mygateway"


@pytest.mark.describe("ConnectionString")
class TestConnectionString:
    @pytest.mark.it("Instantiates from a given module connection string")
    @pytest.mark.parametrize(
        "input_string",
        [
            pytest.param(MODULE_CS, id="Module connection string"),
            pytest.param(MODULE_CS_GATEWAY, id="Module connection string w/ gatewayhostname"),
            pytest.param(
                MODULE_CS + ";SharedAccessKeyName=mykeyname",
                id="Module connection string w/ sharedaccesskeyname",
            ),
        ],
    )
    def test_instantiates_correctly_from_string(self, input_string):
        cs = ConnectionString(input_string)
        assert isinstance(cs, ConnectionString)

    @pytest.mark.it("Raises ValueError on invalid string input during instantiation")
    @pytest.mark.parametrize(
        "input_string",
        [
            pytest.param("", id="Empty string"),
            pytest.param("garbage", id="Not a connection string"),
            pytest.param("HostName=my.host.name", id="Incomplete connection string"),
            pytest.param(
                "InvalidKey=my.host.name;DeviceId=my-device;ModuleId=my-module;SharedAccessKey=Zm9vYmFy",
                id="Invalid key",
            ),
            pytest.param(MODULE_CS + ";DeviceId=my-device", id="Duplicate key"),
            pytest.param(
                "HostName=my.host.name;DeviceId=my-device;SharedAccessKey=Zm9vYmFy",
                id="Device connection string (no ModuleId)",
            ),
            pytest.param(
                "HostName=my.host.name;DeviceId=my-device;ModuleId=my-module",
                id="No SharedAccessKey",
            ),
            pytest.param(
                "HostName=my.host.name;DeviceId=my-device;ModuleId=;SharedAccessKey=Zm9vYmFy",
                id="Empty ModuleId",
            ),
        ],
    )
    def test_raises_value_error_on_invalid_input(self, input_string):
        with pytest.raises(ValueError):
            ConnectionString(input_string)

    @pytest.mark.it("Raises TypeError on non-string input during instantiation")
    @pytest.mark.parametrize(
        "input_val",
        [
            pytest.param(2123, id="Integer"),
            pytest.param(23.098, id="Float"),
            pytest.param(b"bytes", id="Bytes"),
            pytest.param(object(), id="Complex object"),
            pytest.param(["a", "b"], id="List"),
            pytest.param(None, id="None"),
        ],
    )
    def test_raises_type_error_on_non_string_input(self, input_val):
        with pytest.raises(TypeError):
            ConnectionString(input_val)

    @pytest.mark.it("Uses the input connection string as a string representation")
    def test_string_representation_of_object_is_the_input_string(self):
        cs = ConnectionString(MODULE_CS)
        assert str(cs) == MODULE_CS

    @pytest.mark.it("Supports indexing syntax to return the stored value for a given key")
    def test_indexing_key_returns_corresponding_value(self):
        cs = ConnectionString(MODULE_CS_GATEWAY)
        assert cs["HostName"] == "my.host.name"
        assert cs["DeviceId"] == "my-device"
        assert cs["ModuleId"] == "my-module"
        assert cs["SharedAccessKey"] == "Zm9vYmFy"
        assert cs["GatewayHostName"] == "mygateway"

    @pytest.mark.it("Raises KeyError if indexing on a key not contained in the ConnectionString")
    def test_indexing_key_raises_key_error_if_key_not_in_string(self):
        cs = ConnectionString(MODULE_CS)
        with pytest.raises(KeyError):
            cs["GatewayHostName"]

    @pytest.mark.it("Splits values on the first '=' only")
    def test_value_containing_separator(self):
        cs = ConnectionString(
            "HostName=my.host.name;DeviceId=my-device;ModuleId=my-module;SharedAccessKey=Zm9vYmFy=="
        )
        assert cs["SharedAccessKey"] == "Zm9vYmFy=="

    @pytest.mark.it("Supports the 'in' operator for validating if a key is contained")
    def test_item_in_string(self):
        cs = ConnectionString(MODULE_CS)
        assert "SharedAccessKey" in cs
        assert "GatewayHostName" not in cs

    @pytest.mark.it(
        "Supports using the .get() method to return the stored value for a given key, or a default"
    )
    def test_calling_get_with_key_returns_corresponding_value(self):
        cs = ConnectionString(MODULE_CS)
        assert cs.get("HostName") == "my.host.name"
        assert cs.get("GatewayHostName") is None
        assert cs.get("GatewayHostName", "mydefault") == "mydefault"
