# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------

import pytest

"""
NOTE: Tests that need a non-specific, arbitrary exception should use one of the following
fixtures. The exception classes are not defined anywhere else, so they are guaranteed to be
unexpected and unhandled except by broad all-encompassing handling, and tests checking that they
are raised cannot spuriously pass due to a different exception being raised.
"""


@pytest.fixture
def arbitrary_exception():
    class ArbitraryException(Exception):
        pass

    return ArbitraryException("arbitrary description")


@pytest.fixture
def arbitrary_base_exception():
    class ArbitraryBaseException(BaseException):
        pass

    return ArbitraryBaseException("arbitrary description")
