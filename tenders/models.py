"""
Modèles du coffre d'appels d'offres (tender vault).

Un `Tender` est une annonce dormante conservée dans le coffre. La rotation
l'affiche temporairement sous la forme d'une annonce publique anonyme ; chaque
affichage est tracé par un `TenderCycle`.

Cycle de vie d'un tender :
    stored -> active -> stored      (fenêtre expirée sans attribution, cooldown)
    stored -> active -> archived    (offre acceptée pendant la fenêtre)
    stored -> active -> expired     (dernier affichage autorisé expiré)
"""

from django.contrib.auth.models import User
from django.db import models
from django.db.models import F, Q


class Tender(models.Model):
    STATUS_STORED = "stored"
    STATUS_ACTIVE = "active"
    STATUS_ARCHIVED = "archived"
    STATUS_EXPIRED = "expired"
    STATUS_CHOICES = [
        (STATUS_STORED, "Dans le coffre"),
        (STATUS_ACTIVE, "Affiché"),
        (STATUS_ARCHIVED, "Attribué"),
        (STATUS_EXPIRED, "Retiré"),
    ]

    DEFAULT_MAX_USAGE = 4

    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name="vault_tenders")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_STORED)

    title = models.CharField(max_length=255)
    description = models.TextField()
    category_id = models.PositiveIntegerField(null=True, blank=True)
    sub_category_id = models.PositiveIntegerField(null=True, blank=True)
    sub_sub_category_id = models.PositiveIntegerField(null=True, blank=True)
    budget_min = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    budget_max = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=10, default="JD")
    duration_value = models.PositiveIntegerField(null=True, blank=True)
    duration_unit = models.CharField(max_length=20, blank=True)
    country = models.CharField(max_length=100, blank=True)
    attachments = models.JSONField(default=list, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    usage_count = models.PositiveIntegerField(default=0)
    max_usage = models.PositiveIntegerField(default=DEFAULT_MAX_USAGE)
    last_displayed_at = models.DateTimeField(null=True, blank=True)
    temporary_archived_until = models.DateTimeField(null=True, blank=True)
    display_start_time = models.DateTimeField(null=True, blank=True)
    display_end_time = models.DateTimeField(null=True, blank=True)

    is_deleted = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(usage_count__lte=F("max_usage")),
                name="tender_usage_within_max",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "usage_count", "temporary_archived_until"], name="tender_rotation_idx"),
            models.Index(fields=["display_end_time"], name="tender_display_end_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.title} [{self.status}] {self.usage_count}/{self.max_usage}"

    @property
    def has_reached_max_usage(self) -> bool:
        return self.usage_count >= self.max_usage

    def clear_display_window(self):
        self.display_start_time = None
        self.display_end_time = None

    def listing_fields(self) -> dict:
        """Champs recopiés sur l'annonce publique anonyme d'un cycle."""
        return {
            "title": self.title,
            "description": self.description,
            "category_id": self.category_id,
            "sub_category_id": self.sub_category_id,
            "sub_sub_category_id": self.sub_sub_category_id,
            "budget_min": self.budget_min,
            "budget_max": self.budget_max,
            "currency": self.currency or "JD",
            "duration_value": self.duration_value,
            "duration_unit": self.duration_unit,
            "country": self.country,
            "attachments": list(self.attachments or []),
        }


class TenderCycle(models.Model):
    """Un épisode d'affichage d'un tender.

    `public_id` est l'identifiant client anonyme présenté au public ; il est
    unique sur l'ensemble des cycles jamais créés. Les statuts `expired` et
    `awarded` sont terminaux.
    """

    STATUS_ACTIVE = "active"
    STATUS_EXPIRED = "expired"
    STATUS_AWARDED = "awarded"
    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Affiché"),
        (STATUS_EXPIRED, "Expiré"),
        (STATUS_AWARDED, "Attribué"),
    ]
    TERMINAL_STATUSES = (STATUS_EXPIRED, STATUS_AWARDED)

    tender = models.ForeignKey(Tender, on_delete=models.CASCADE, related_name="cycles")
    cycle_number = models.PositiveIntegerField()
    public_id = models.CharField(max_length=50, unique=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    display_start_time = models.DateTimeField()
    display_end_time = models.DateTimeField()
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="vault_cycles",
    )
    closed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["tender_id", "-cycle_number"]
        constraints = [
            models.UniqueConstraint(fields=["tender", "cycle_number"], name="unique_cycle_number_per_tender"),
            models.UniqueConstraint(
                fields=["tender"],
                condition=Q(status="active"),
                name="one_active_cycle_per_tender",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "display_end_time"], name="cycle_status_end_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.public_id} (tender {self.tender_id}, cycle {self.cycle_number}) [{self.status}]"

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES


class RotationLock(models.Model):
    """Verrou d'exécution unique d'un job planifié (une ligne par job)."""

    name = models.CharField(max_length=64, unique=True)
    token = models.CharField(max_length=64, blank=True)
    locked_until = models.DateTimeField(null=True, blank=True)
    acquired_at = models.DateTimeField(null=True, blank=True)

    def __str__(self) -> str:
        return f"{self.name} (jusqu'à {self.locked_until})"
