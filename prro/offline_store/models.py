"""
PRRO Offline Store — Chain Record Model
=========================================
One row per offline chain record, keyed by (session_id, offline_local_num).

RULES:
- INSERT only through persist_record(); save() refuses updates
- Rows are never deleted
- The only state change is PENDING → TRANSMITTED, done in bulk by
  mark_transmitted()

This file contains NO chain logic.
"""

import uuid

from django.db import models


class EntryKind(models.TextChoices):
    SESSION_BEGIN = "SESSION_BEGIN", "Session begin"
    SESSION_END = "SESSION_END", "Session end"
    SALE = "SALE", "Sale"
    REFUND = "REFUND", "Refund"
    Z_REPORT = "Z_REPORT", "Z-report"


class EntryStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    TRANSMITTED = "TRANSMITTED", "Transmitted"


class OfflineDocumentEntry(models.Model):
    """Stored offline chain record."""

    entry_id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )

    # ── Chain position ────────────────────────────────────────
    session_id = models.CharField(
        max_length=64,
        help_text="Server-issued offline session id.",
    )
    offline_local_num = models.PositiveIntegerField(
        help_text="Gapless local number within the session.",
    )
    kind = models.CharField(max_length=20, choices=EntryKind.choices)

    # ── Document ──────────────────────────────────────────────
    xml = models.TextField(help_text="Final document including chain metadata.")
    uid = models.CharField(max_length=64, null=True, blank=True)
    fiscal_num = models.CharField(max_length=64)
    control_number = models.PositiveSmallIntegerField()
    total_amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        null=True,
        blank=True,
    )

    # ── Integrity (Hash-Chain) ────────────────────────────────
    prev_doc_hash = models.CharField(
        max_length=64,
        null=True,
        blank=True,
        help_text="Hash of the previous financial record; null for the first.",
    )
    doc_hash = models.CharField(
        max_length=64,
        help_text="SHA-256 of xml.",
    )

    # ── Temporal & status ─────────────────────────────────────
    created_at = models.DateTimeField(help_text="When the record was built.")
    received_at = models.DateTimeField(auto_now_add=True)
    status = models.CharField(
        max_length=20,
        choices=EntryStatus.choices,
        default=EntryStatus.PENDING,
    )
    transmitted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "prro_offline_documents"
        ordering = ["session_id", "offline_local_num"]
        constraints = [
            models.UniqueConstraint(
                fields=["session_id", "offline_local_num"],
                name="uq_offline_session_local_num",
            ),
        ]
        indexes = [
            models.Index(
                fields=["session_id", "status"],
                name="idx_offline_session_status",
            ),
        ]

    def save(self, *args, **kwargs):
        """GUARD: INSERT only. Stored chain records are immutable."""
        if not self._state.adding:
            raise PermissionError(
                "Offline chain records are immutable. "
                "Cannot update a persisted record."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """GUARD: chain records are never deleted."""
        raise PermissionError("Offline chain records are never deleted.")

    def __str__(self):
        return f"[{self.kind}] {self.fiscal_num} ({self.status})"
