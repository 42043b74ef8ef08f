"""
URL configuration for the payments app.

Routes:
    - GET  /plans/ - Plan catalog
    - POST /orders/ - Create an order
    - GET  /orders/<order_id>/ - Order status
    - POST /confirm/ - Verify a payment confirmation
    - POST /failure/ - Record a failed attempt
    - GET  /users/<user_id>/payments/ - Payment history
    - POST /webhooks/razorpay/ - Razorpay webhook endpoint

All routes are prefixed with /api/v1/payments/ when included in the main URLconf.
"""

from django.urls import path

from payments import views

app_name = "payments"

urlpatterns = [
    path("plans/", views.PlanListView.as_view(), name="plans"),
    path("orders/", views.CreateOrderView.as_view(), name="create_order"),
    path("orders/<str:order_id>/", views.OrderStatusView.as_view(), name="order_status"),
    path("confirm/", views.VerifyPaymentView.as_view(), name="verify_payment"),
    path("failure/", views.PaymentFailureView.as_view(), name="payment_failure"),
    path("users/<str:user_id>/payments/", views.PaymentHistoryView.as_view(), name="payment_history"),
    # Webhook endpoints
    path("webhooks/razorpay/", views.razorpay_webhook, name="razorpay_webhook"),
]
