"""Django ORM models (persistence layer).

A single table backs the ItemStore contract. Domain logic lives in
domain/models.py and the item layout in stores/records.py.
"""

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class StoredItem(models.Model):
    """One key-value item addressed by (partition_key, sort_key)."""

    partition_key = models.CharField(max_length=255)
    sort_key = models.CharField(max_length=255)
    attributes = models.JSONField(default=dict, encoder=DjangoJSONEncoder)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["partition_key", "sort_key"]
        constraints = [
            models.UniqueConstraint(
                fields=["partition_key", "sort_key"],
                name="unique_item_key",
            ),
        ]
        indexes = [
            models.Index(fields=["sort_key", "partition_key"], name="eventreg_item_sort_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.partition_key} / {self.sort_key}"
