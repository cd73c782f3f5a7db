import uuid

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="OfflineDocumentEntry",
            fields=[
                (
                    "entry_id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "session_id",
                    models.CharField(
                        help_text="Server-issued offline session id.",
                        max_length=64,
                    ),
                ),
                (
                    "offline_local_num",
                    models.PositiveIntegerField(
                        help_text="Gapless local number within the session.",
                    ),
                ),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("SESSION_BEGIN", "Session begin"),
                            ("SESSION_END", "Session end"),
                            ("SALE", "Sale"),
                            ("REFUND", "Refund"),
                            ("Z_REPORT", "Z-report"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "xml",
                    models.TextField(
                        help_text="Final document including chain metadata.",
                    ),
                ),
                ("uid", models.CharField(blank=True, max_length=64, null=True)),
                ("fiscal_num", models.CharField(max_length=64)),
                ("control_number", models.PositiveSmallIntegerField()),
                (
                    "total_amount",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=15, null=True
                    ),
                ),
                (
                    "prev_doc_hash",
                    models.CharField(
                        blank=True,
                        help_text="Hash of the previous financial record; null for the first.",
                        max_length=64,
                        null=True,
                    ),
                ),
                (
                    "doc_hash",
                    models.CharField(help_text="SHA-256 of xml.", max_length=64),
                ),
                (
                    "created_at",
                    models.DateTimeField(help_text="When the record was built."),
                ),
                ("received_at", models.DateTimeField(auto_now_add=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("TRANSMITTED", "Transmitted"),
                        ],
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                ("transmitted_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "db_table": "prro_offline_documents",
                "ordering": ["session_id", "offline_local_num"],
                "indexes": [
                    models.Index(
                        fields=["session_id", "status"],
                        name="idx_offline_session_status",
                    )
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("session_id", "offline_local_num"),
                        name="uq_offline_session_local_num",
                    )
                ],
            },
        ),
    ]
