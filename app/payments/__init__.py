"""
Payments app for Razorpay integration.

This app handles:
- Plan catalog and order creation
- Payment confirmation signature verification
- Webhook event handling
- Order status and payment history

Usage:
    from payments.services import build_order_lifecycle

    lifecycle = build_order_lifecycle()
    descriptor = lifecycle.create_order("u1", "standard")
    lifecycle.verify_payment(order_id, payment_id, signature)
"""
