from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.notifications"
    label = "notifications"

    def ready(self) -> None:
        from modules.notifications.handlers import (
            order_created_notification,
            order_delivered_notification,
            order_status_changed_notification,
        )
        from modules.orders.events import (
            OrderCreated,
            OrderDelivered,
            OrderStatusChanged,
        )
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe(OrderCreated, order_created_notification)
        event_bus.subscribe(OrderStatusChanged, order_status_changed_notification)
        event_bus.subscribe(OrderDelivered, order_delivered_notification)
