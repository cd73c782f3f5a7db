"""
PRRO — Offline Store App Configuration
========================================
Durable, append-only home of offline chain records while the
register is disconnected.

This app:
- Persists chain records insert-only
- Re-checks chain continuity before every append
- Marks records transmitted after a successful upload

This app does NOT:
- Build or sign documents
- Transmit packages
- Delete records
"""

from django.apps import AppConfig


class OfflineStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "prro.offline_store"
    label = "offline_store"
    verbose_name = "PRRO Offline Store"
