"""
Tests for the in-process FakeGateway.
"""

import pytest

from payments.adapters import FakeGateway
from payments.exceptions import GatewayBadRequestError


class TestFakeGateway:
    def test_ids_unique_across_instances(self):
        """Each request builds its own gateway, so ids must not restart."""
        ids = {FakeGateway().create_remote_order(100, "INR", {}) for _ in range(500)}

        assert len(ids) == 500
        assert all(remote_id.startswith("order_fake_") for remote_id in ids)

    def test_records_calls(self):
        gateway = FakeGateway(prefix="order_test")

        remote_id = gateway.create_remote_order(29900, "INR", {"receipt": "order_1"})

        assert len(gateway.calls) == 1
        call = gateway.calls[0]
        assert call.remote_order_id == remote_id
        assert call.amount_minor_units == 29900
        assert call.metadata == {"receipt": "order_1"}
        assert remote_id.startswith("order_test_")

    def test_injected_failure(self):
        gateway = FakeGateway(fail_with=GatewayBadRequestError("bad amount"))

        with pytest.raises(GatewayBadRequestError):
            gateway.create_remote_order(1, "INR", {})

        assert gateway.calls == []
