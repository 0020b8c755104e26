import uuid

from django.db import models


class TimestampedModel(models.Model):
    """
    An abstract base class model that provides self-updating
    `created_at` and `updated_at` fields and a UUID primary key.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True, editable=False)
    updated_at = models.DateTimeField(auto_now=True, editable=False)

    class Meta:
        abstract = True
        ordering = ["-created_at"]  # Default ordering


class OrderedModel(TimestampedModel):
    """Abstract base for rows displayed in an author-defined sequence."""

    order = models.PositiveIntegerField(
        default=0, db_index=True, help_text="Display order within the parent"
    )

    class Meta:
        abstract = True
        ordering = ["order", "created_at"]
