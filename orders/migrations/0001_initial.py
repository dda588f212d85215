from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("category_id", models.PositiveIntegerField(blank=True, null=True)),
                ("sub_category_id", models.PositiveIntegerField(blank=True, null=True)),
                ("sub_sub_category_id", models.PositiveIntegerField(blank=True, null=True)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("budget_min", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("budget_max", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("currency", models.CharField(default="JD", max_length=10)),
                ("duration_value", models.PositiveIntegerField(blank=True, null=True)),
                ("duration_unit", models.CharField(blank=True, max_length=20)),
                ("country", models.CharField(blank=True, max_length=100)),
                ("attachments", models.JSONField(blank=True, default=list)),
                ("project_type", models.CharField(choices=[("bidding", "Appel d'offres"), ("fixed", "Prix fixe")], default="bidding", max_length=20)),
                ("status", models.CharField(choices=[("bidding", "Ouvert aux offres"), ("in_progress", "En cours"), ("completed", "Terminé")], default="bidding", max_length=20)),
                ("completion_status", models.CharField(choices=[("not_started", "Non démarré"), ("in_progress", "En cours")], default="not_started", max_length=20)),
                ("is_deleted", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("owner", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="orders", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="Offer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("message", models.TextField(blank=True)),
                ("status", models.CharField(choices=[("pending", "En attente"), ("accepted", "Acceptée"), ("rejected", "Refusée")], default="pending", max_length=20)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("freelancer", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="offers", to=settings.AUTH_USER_MODEL)),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="offers", to="orders.order")),
            ],
        ),
        migrations.CreateModel(
            name="Assignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=[("active", "Active"), ("closed", "Clôturée")], default="active", max_length=20)),
                ("assigned_at", models.DateTimeField(auto_now_add=True)),
                ("freelancer", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="assignments", to=settings.AUTH_USER_MODEL)),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="assignments", to="orders.order")),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("order", "freelancer"), name="unique_assignment_per_order")],
            },
        ),
    ]
