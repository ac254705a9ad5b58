from tortoise import fields
from tortoise.models import Model


class AppState(Model):
    """Key/value row holding a serialised document (the global config lives under one fixed key)."""

    key = fields.CharField(max_length=64, pk=True)
    value = fields.JSONField(default=dict)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "app_state"
