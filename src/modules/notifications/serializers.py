from rest_framework import serializers

from modules.notifications.models import NotificationConfig, NotificationRecipient


class NotificationRecipientSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = NotificationRecipient
        fields = ["id", "kind", "user_id", "email", "name", "enabled", "created_at"]
        read_only_fields = fields


class NotificationConfigSerializer(serializers.ModelSerializer):
    recipients = serializers.SerializerMethodField()
    updated_by = serializers.CharField(
        source="updated_by.username", default=None, read_only=True
    )

    class Meta:
        model = NotificationConfig
        fields = [
            "enabled",
            "notify_on_order_create",
            "notify_on_status_change",
            "notify_on_delivery",
            "recipients",
            "updated_by",
            "updated_at",
        ]
        read_only_fields = fields

    def get_recipients(self, obj):
        return NotificationRecipientSerializer(
            NotificationRecipient.configured(), many=True
        ).data
