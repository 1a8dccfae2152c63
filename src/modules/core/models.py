"""Abstract models shared by the catalogue and the orders app."""

from __future__ import annotations

import uuid6
from django.db import models


class TimestampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class UUIDv7Model(TimestampedModel):
    """Time-ordered UUIDv7 primary key.

    Used for records whose id leaves the system (an order id travels to the
    payment provider as ``external_reference`` and into customer emails),
    so ids must be unguessable yet still sort by creation time.
    """

    id = models.UUIDField(primary_key=True, default=uuid6.uuid7, editable=False)

    class Meta:
        abstract = True
