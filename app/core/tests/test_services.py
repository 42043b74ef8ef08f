"""
Tests for ServiceResult and BaseService.
"""

from core.services import BaseService, ServiceResult


class TestServiceResult:
    """Tests for ServiceResult."""

    def test_success(self):
        result = ServiceResult.success({"id": "order_1"})

        assert result
        assert result.to_response() == {"success": True, "data": {"id": "order_1"}}

    def test_success_serializes_to_dict(self):
        """Data objects with to_dict are converted for the response."""

        class Outcome:
            def to_dict(self):
                return {"handled": False}

        assert ServiceResult.success(Outcome()).to_response()["data"] == {"handled": False}


class TestBaseService:
    """Tests for BaseService helpers."""

    def test_logger_named_after_class(self):
        class CheckoutService(BaseService):
            pass

        assert CheckoutService.get_logger().name.endswith("CheckoutService")

    def test_missing_fields(self):
        missing = BaseService.missing_fields(order_id="order_1", payment_id="  ", signature=None)

        assert missing == ["payment_id", "signature"]

    def test_no_missing_fields(self):
        assert BaseService.missing_fields(order_id="order_1", attempts=0) == []
