"""
Modèles de la place de marché utilisés par le coffre.

`Order` est l'annonce publique (projet en appel d'offres). Les annonces
éphémères créées par la rotation du coffre n'ont pas de propriétaire
(`owner` NULL) afin de rester anonymes.
"""

from django.contrib.auth.models import User
from django.db import models


class Order(models.Model):
    TYPE_BIDDING = "bidding"
    TYPE_FIXED = "fixed"
    TYPE_CHOICES = [
        (TYPE_BIDDING, "Appel d'offres"),
        (TYPE_FIXED, "Prix fixe"),
    ]

    STATUS_BIDDING = "bidding"
    STATUS_IN_PROGRESS = "in_progress"
    STATUS_COMPLETED = "completed"
    STATUS_CHOICES = [
        (STATUS_BIDDING, "Ouvert aux offres"),
        (STATUS_IN_PROGRESS, "En cours"),
        (STATUS_COMPLETED, "Terminé"),
    ]

    COMPLETION_NOT_STARTED = "not_started"
    COMPLETION_IN_PROGRESS = "in_progress"
    COMPLETION_CHOICES = [
        (COMPLETION_NOT_STARTED, "Non démarré"),
        (COMPLETION_IN_PROGRESS, "En cours"),
    ]

    owner = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="orders")
    category_id = models.PositiveIntegerField(null=True, blank=True)
    sub_category_id = models.PositiveIntegerField(null=True, blank=True)
    sub_sub_category_id = models.PositiveIntegerField(null=True, blank=True)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    budget_min = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    budget_max = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=10, default="JD")
    duration_value = models.PositiveIntegerField(null=True, blank=True)
    duration_unit = models.CharField(max_length=20, blank=True)
    country = models.CharField(max_length=100, blank=True)
    attachments = models.JSONField(default=list, blank=True)
    project_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_BIDDING)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_BIDDING)
    completion_status = models.CharField(max_length=20, choices=COMPLETION_CHOICES, default=COMPLETION_NOT_STARTED)
    is_deleted = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.title} [{self.status}]"

    @property
    def is_anonymous(self):
        return self.owner_id is None


class Offer(models.Model):
    """Offre d'un freelance sur une annonce."""

    STATUS_PENDING = "pending"
    STATUS_ACCEPTED = "accepted"
    STATUS_REJECTED = "rejected"
    STATUS_CHOICES = [
        (STATUS_PENDING, "En attente"),
        (STATUS_ACCEPTED, "Acceptée"),
        (STATUS_REJECTED, "Refusée"),
    ]

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="offers")
    freelancer = models.ForeignKey(User, on_delete=models.CASCADE, related_name="offers")
    amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    message = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Offer {self.pk} by {self.freelancer.username} on Order:{self.order_id}"


class Assignment(models.Model):
    STATUS_ACTIVE = "active"
    STATUS_CLOSED = "closed"
    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_CLOSED, "Clôturée"),
    ]

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="assignments")
    freelancer = models.ForeignKey(User, on_delete=models.CASCADE, related_name="assignments")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["order", "freelancer"], name="unique_assignment_per_order"),
        ]

    def __str__(self):
        return f"{self.freelancer.username} -> Order:{self.order_id}"
