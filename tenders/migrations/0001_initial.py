from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Tender",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=[("stored", "Dans le coffre"), ("active", "Affiché"), ("archived", "Attribué"), ("expired", "Retiré")], default="stored", max_length=20)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField()),
                ("category_id", models.PositiveIntegerField(blank=True, null=True)),
                ("sub_category_id", models.PositiveIntegerField(blank=True, null=True)),
                ("sub_sub_category_id", models.PositiveIntegerField(blank=True, null=True)),
                ("budget_min", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("budget_max", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("currency", models.CharField(default="JD", max_length=10)),
                ("duration_value", models.PositiveIntegerField(blank=True, null=True)),
                ("duration_unit", models.CharField(blank=True, max_length=20)),
                ("country", models.CharField(blank=True, max_length=100)),
                ("attachments", models.JSONField(blank=True, default=list)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("usage_count", models.PositiveIntegerField(default=0)),
                ("max_usage", models.PositiveIntegerField(default=4)),
                ("last_displayed_at", models.DateTimeField(blank=True, null=True)),
                ("temporary_archived_until", models.DateTimeField(blank=True, null=True)),
                ("display_start_time", models.DateTimeField(blank=True, null=True)),
                ("display_end_time", models.DateTimeField(blank=True, null=True)),
                ("is_deleted", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("owner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="vault_tenders", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["status", "usage_count", "temporary_archived_until"], name="tender_rotation_idx"),
                    models.Index(fields=["display_end_time"], name="tender_display_end_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("usage_count__lte", models.F("max_usage"))), name="tender_usage_within_max"),
                ],
            },
        ),
        migrations.CreateModel(
            name="TenderCycle",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("cycle_number", models.PositiveIntegerField()),
                ("public_id", models.CharField(max_length=50, unique=True)),
                ("status", models.CharField(choices=[("active", "Affiché"), ("expired", "Expiré"), ("awarded", "Attribué")], default="active", max_length=20)),
                ("display_start_time", models.DateTimeField()),
                ("display_end_time", models.DateTimeField()),
                ("closed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("order", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="vault_cycles", to="orders.order")),
                ("tender", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="cycles", to="tenders.tender")),
            ],
            options={
                "ordering": ["tender_id", "-cycle_number"],
                "indexes": [
                    models.Index(fields=["status", "display_end_time"], name="cycle_status_end_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("tender", "cycle_number"), name="unique_cycle_number_per_tender"),
                    models.UniqueConstraint(condition=models.Q(("status", "active")), fields=("tender",), name="one_active_cycle_per_tender"),
                ],
            },
        ),
        migrations.CreateModel(
            name="RotationLock",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=64, unique=True)),
                ("token", models.CharField(blank=True, max_length=64)),
                ("locked_until", models.DateTimeField(blank=True, null=True)),
                ("acquired_at", models.DateTimeField(blank=True, null=True)),
            ],
        ),
    ]
