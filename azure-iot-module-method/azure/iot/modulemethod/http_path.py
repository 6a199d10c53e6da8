# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------

import logging
import urllib.parse
from . import constant

logger = logging.getLogger(__name__)


def get_method_invoke_path(device_id: str, module_id: str) -> str:
    """
    :return: The relative path, including query, for invoking a method on a module. It is of the format
    /twins/uri_encode($device_id)/modules/uri_encode($module_id)/methods?api-version=$api_version
    """
    return "/twins/{device_id}/modules/{module_id}/methods?api-version={api_version}".format(
        device_id=urllib.parse.quote(device_id, safe=""),
        module_id=urllib.parse.quote(module_id, safe=""),
        api_version=constant.METHOD_INVOKE_API_VERSION,
    )


def get_sastoken_scope(hostname: str, device_id: str, module_id: str) -> str:
    """
    The scope is not encoded here, as the SAS token generation encodes it in full.

    :return: The resource scope a SAS token must be bound to in order to invoke a method on behalf
    of a module. It is of the format $hostname/devices/$device_id/modules/$module_id
    """
    return "{hostname}/devices/{device_id}/modules/{module_id}".format(
        hostname=hostname, device_id=device_id, module_id=module_id
    )
