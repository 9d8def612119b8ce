import django_filters

from modules.orders.constants import OrderStatus, PaymentMethod
from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.MultipleChoiceFilter(choices=OrderStatus.choices)
    payment_method = django_filters.ChoiceFilter(choices=PaymentMethod.choices)
    customer = django_filters.UUIDFilter(field_name="customer_id")
    manufacturer = django_filters.UUIDFilter(field_name="manufacturer_id")
    start_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    end_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")
    min_total = django_filters.NumberFilter(
        field_name="total_amount", lookup_expr="gte"
    )
    max_total = django_filters.NumberFilter(
        field_name="total_amount", lookup_expr="lte"
    )

    class Meta:
        model = Order
        fields = [
            "status",
            "payment_method",
            "customer",
            "manufacturer",
            "start_date",
            "end_date",
            "min_total",
            "max_total",
        ]
