# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------

import pytest
import logging
import io
import socks
from azure.iot.modulemethod.config import (
    EdgeEnvironmentConfig,
    MethodClientConfig,
    ProxyOptions,
)
from azure.iot.modulemethod.exceptions import IoTEdgeEnvironmentError

logging.basicConfig(level=logging.DEBUG)

FAKE_CONNECTION_STRING = (
    "HostName=myhub.azure-devices.net;DeviceId=my-device;ModuleId=my-module;SharedAccessKey=Zm9vYmFy"
)
FAKE_CONNECTION_STRING_GATEWAY = FAKE_CONNECTION_STRING + ";GatewayHostName=mygateway"
FAKE_CA_CERT_PATH = "/fake/path/to/cert.pem"
FAKE_CA_CERT = "-----BEGIN CERTIFICATE-----fake-----END CERTIFICATE-----"


@pytest.fixture
def edge_environ():
    return {
        "IOTEDGE_AUTHSCHEME": "sasToken",
        "IOTEDGE_DEVICEID": "my-device",
        "IOTEDGE_MODULEID": "my-module",
        "IOTEDGE_IOTHUBHOSTNAME": "myhub.azure-devices.net",
        "IOTEDGE_GATEWAYHOSTNAME": "mygateway",
        "IOTEDGE_MODULEGENERATIONID": "my-generation-id",
        "IOTEDGE_WORKLOADURI": "unix:///var/run/iotedge/workload.sock",
        "IOTEDGE_APIVERSION": "2019-01-30",
    }


@pytest.mark.describe("ProxyOptions")
class TestProxyOptions:
    @pytest.mark.it("Instantiates with the provided values")
    def test_values(self):
        proxy_options = ProxyOptions(
            proxy_type="HTTP",
            proxy_address="127.0.0.1",
            proxy_port=8888,
            proxy_username="user",
            proxy_password="pass",
        )
        assert proxy_options.proxy_type == "HTTP"
        assert proxy_options.proxy_type_socks == socks.HTTP
        assert proxy_options.proxy_address == "127.0.0.1"
        assert proxy_options.proxy_port == 8888
        assert proxy_options.proxy_username == "user"
        assert proxy_options.proxy_password == "pass"

    @pytest.mark.it("Accepts the socks library constants as a proxy type")
    @pytest.mark.parametrize(
        "proxy_type, expected_str",
        [
            pytest.param(socks.HTTP, "HTTP", id="HTTP"),
            pytest.param(socks.SOCKS4, "SOCKS4", id="SOCKS4"),
            pytest.param(socks.SOCKS5, "SOCKS5", id="SOCKS5"),
        ],
    )
    def test_socks_constant(self, proxy_type, expected_str):
        proxy_options = ProxyOptions(proxy_type=proxy_type, proxy_address="127.0.0.1")
        assert proxy_options.proxy_type == expected_str
        assert proxy_options.proxy_type_socks == proxy_type

    @pytest.mark.it("Defaults the proxy port based on the proxy type")
    @pytest.mark.parametrize(
        "proxy_type, expected_port",
        [
            pytest.param("HTTP", 8080, id="HTTP"),
            pytest.param("SOCKS4", 1080, id="SOCKS4"),
            pytest.param("SOCKS5", 1080, id="SOCKS5"),
        ],
    )
    def test_default_port(self, proxy_type, expected_port):
        proxy_options = ProxyOptions(proxy_type=proxy_type, proxy_address="127.0.0.1")
        assert proxy_options.proxy_port == expected_port

    @pytest.mark.it("Converts a string proxy port to an integer")
    def test_string_port(self):
        proxy_options = ProxyOptions(proxy_type="HTTP", proxy_address="127.0.0.1", proxy_port="8888")
        assert proxy_options.proxy_port == 8888

    @pytest.mark.it("Raises a ValueError if the proxy type is invalid")
    def test_invalid_proxy_type(self):
        with pytest.raises(ValueError):
            ProxyOptions(proxy_type="FTP", proxy_address="127.0.0.1")


@pytest.mark.describe("MethodClientConfig")
class TestMethodClientConfig:
    @pytest.mark.it("Has defaults of no proxy, no local timeout and no product info")
    def test_defaults(self):
        config = MethodClientConfig()
        assert config.proxy_options is None
        assert config.http_timeout is None
        assert config.product_info == ""

    @pytest.mark.it("Stores the provided values")
    def test_values(self):
        proxy_options = ProxyOptions(proxy_type="HTTP", proxy_address="127.0.0.1")
        config = MethodClientConfig(
            proxy_options=proxy_options, http_timeout=30, product_info="my-product"
        )
        assert config.proxy_options is proxy_options
        assert config.http_timeout == 30.0
        assert config.product_info == "my-product"

    @pytest.mark.it("Only accepts keyword arguments")
    def test_keyword_only(self):
        with pytest.raises(TypeError):
            MethodClientConfig(None, 30)

    @pytest.mark.it("Raises a TypeError if the http_timeout is not numeric")
    @pytest.mark.parametrize(
        "http_timeout",
        [pytest.param("abc", id="Non-numeric string"), pytest.param(object(), id="Object")],
    )
    def test_http_timeout_type(self, http_timeout):
        with pytest.raises(TypeError):
            MethodClientConfig(http_timeout=http_timeout)

    @pytest.mark.it("Raises a ValueError if the http_timeout is not greater than zero")
    @pytest.mark.parametrize(
        "http_timeout", [pytest.param(0, id="Zero"), pytest.param(-1.5, id="Negative")]
    )
    def test_http_timeout_value(self, http_timeout):
        with pytest.raises(ValueError):
            MethodClientConfig(http_timeout=http_timeout)


@pytest.mark.describe("EdgeEnvironmentConfig - .from_environ() -- Edge container")
class TestEdgeEnvironmentConfigFromContainerEnviron:
    @pytest.mark.it("Reads the module identity and Edge workload details from the environment")
    def test_values(self, edge_environ):
        config = EdgeEnvironmentConfig.from_environ(edge_environ)

        assert config.device_id == "my-device"
        assert config.module_id == "my-module"
        assert config.iothub_hostname == "myhub.azure-devices.net"
        assert config.gateway_hostname == "mygateway"
        assert config.module_generation_id == "my-generation-id"
        assert config.workload_uri == "unix:///var/run/iotedge/workload.sock"
        assert config.api_version == "2019-01-30"
        assert config.connection_string is None
        assert config.server_verification_cert is None
        assert config.uses_edge_hsm

    @pytest.mark.it("Reads from os.environ if no mapping is provided")
    def test_os_environ(self, mocker, edge_environ):
        mocker.patch.dict("os.environ", edge_environ, clear=True)

        config = EdgeEnvironmentConfig.from_environ()

        assert config.device_id == "my-device"

    @pytest.mark.it("Accepts the auth scheme regardless of case")
    def test_auth_scheme_case(self, edge_environ):
        edge_environ["IOTEDGE_AUTHSCHEME"] = "SASTOKEN"

        config = EdgeEnvironmentConfig.from_environ(edge_environ)

        assert config.uses_edge_hsm

    @pytest.mark.it("Raises IoTEdgeEnvironmentError if the auth scheme is not supported")
    def test_unsupported_auth_scheme(self, edge_environ):
        edge_environ["IOTEDGE_AUTHSCHEME"] = "x509"

        with pytest.raises(IoTEdgeEnvironmentError):
            EdgeEnvironmentConfig.from_environ(edge_environ)

    @pytest.mark.it("Raises IoTEdgeEnvironmentError if a required variable is missing or empty")
    @pytest.mark.parametrize(
        "missing_var",
        [
            "IOTEDGE_AUTHSCHEME",
            "IOTEDGE_DEVICEID",
            "IOTEDGE_MODULEID",
            "IOTEDGE_IOTHUBHOSTNAME",
            "IOTEDGE_GATEWAYHOSTNAME",
            "IOTEDGE_MODULEGENERATIONID",
            "IOTEDGE_WORKLOADURI",
            "IOTEDGE_APIVERSION",
        ],
    )
    @pytest.mark.parametrize("empty", [pytest.param(False, id="Missing"), pytest.param(True, id="Empty")])
    def test_missing_var(self, edge_environ, missing_var, empty):
        if empty:
            edge_environ[missing_var] = ""
        else:
            del edge_environ[missing_var]

        with pytest.raises(IoTEdgeEnvironmentError):
            EdgeEnvironmentConfig.from_environ(edge_environ)

    @pytest.mark.it("Raises IoTEdgeEnvironmentError if the IoT Hub hostname is malformed")
    @pytest.mark.parametrize(
        "hostname",
        [
            pytest.param("myhub", id="No separator"),
            pytest.param(".azure-devices.net", id="No name"),
            pytest.param("myhub.", id="No suffix"),
        ],
    )
    def test_bad_hostname(self, edge_environ, hostname):
        edge_environ["IOTEDGE_IOTHUBHOSTNAME"] = hostname

        with pytest.raises(IoTEdgeEnvironmentError):
            EdgeEnvironmentConfig.from_environ(edge_environ)


@pytest.mark.describe("EdgeEnvironmentConfig - .from_environ() -- Local debug")
class TestEdgeEnvironmentConfigFromDebugEnviron:
    @pytest.mark.it("Reads the module identity from the EdgeHubConnectionString")
    def test_values(self):
        config = EdgeEnvironmentConfig.from_environ(
            {"EdgeHubConnectionString": FAKE_CONNECTION_STRING_GATEWAY}
        )

        assert config.device_id == "my-device"
        assert config.module_id == "my-module"
        assert config.iothub_hostname == "myhub.azure-devices.net"
        assert config.gateway_hostname == "mygateway"
        assert config.connection_string == FAKE_CONNECTION_STRING_GATEWAY
        assert not config.uses_edge_hsm

    @pytest.mark.it("Uses the HostName as the gateway hostname if no GatewayHostName is present")
    def test_no_gateway(self):
        config = EdgeEnvironmentConfig.from_environ(
            {"EdgeHubConnectionString": FAKE_CONNECTION_STRING}
        )

        assert config.gateway_hostname == "myhub.azure-devices.net"

    @pytest.mark.it("Takes precedence over the Edge container variables")
    def test_precedence(self, edge_environ):
        edge_environ["EdgeHubConnectionString"] = FAKE_CONNECTION_STRING
        edge_environ["IOTEDGE_AUTHSCHEME"] = "x509"

        config = EdgeEnvironmentConfig.from_environ(edge_environ)

        assert config.connection_string == FAKE_CONNECTION_STRING
        assert config.gateway_hostname == "myhub.azure-devices.net"
        assert config.workload_uri is None

    @pytest.mark.it("Reads the server verification certificate from the EdgeModuleCACertificateFile")
    def test_ca_cert(self, mocker):
        mock_open = mocker.patch.object(io, "open", mocker.mock_open(read_data=FAKE_CA_CERT))

        config = EdgeEnvironmentConfig.from_environ(
            {
                "EdgeHubConnectionString": FAKE_CONNECTION_STRING,
                "EdgeModuleCACertificateFile": FAKE_CA_CERT_PATH,
            }
        )

        assert mock_open.call_count == 1
        assert mock_open.call_args == mocker.call(FAKE_CA_CERT_PATH, mode="r")
        assert config.server_verification_cert == FAKE_CA_CERT

    @pytest.mark.it("Raises IoTEdgeEnvironmentError if the certificate file cannot be read")
    def test_bad_ca_cert(self, mocker):
        error = FileNotFoundError()
        mocker.patch.object(io, "open", side_effect=error)

        with pytest.raises(IoTEdgeEnvironmentError) as e_info:
            EdgeEnvironmentConfig.from_environ(
                {
                    "EdgeHubConnectionString": FAKE_CONNECTION_STRING,
                    "EdgeModuleCACertificateFile": FAKE_CA_CERT_PATH,
                }
            )
        assert e_info.value.__cause__ is error

    @pytest.mark.it("Raises ValueError if the EdgeHubConnectionString is invalid")
    def test_bad_connection_string(self):
        with pytest.raises(ValueError):
            EdgeEnvironmentConfig.from_environ({"EdgeHubConnectionString": "garbage"})
