"""
Leads Models - Primary business records synchronized to the external CRM

This module implements:
- Lead: prospect contact details plus the external reference assigned by the CRM
- LeadQuerySet: bulk writes that report their changes to the change source
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class LeadQuerySet(models.QuerySet):

    def bulk_update(self, objs, fields, batch_size=None):
        """
        Bulk update that emits one ``lead_changes`` batch for the written rows.

        Django skips save signals for bulk writes; the change source still has to
        see them so the recursion guard can act on the sync engine's own writes.
        """
        objs = list(objs)
        rows = super().bulk_update(objs, fields, batch_size=batch_size)

        from .signals import send_bulk_update_events
        send_bulk_update_events(self.model, objs)
        return rows


class Lead(models.Model):
    """
    A prospect captured by sales or marketing.
    Tracked contact fields are pushed to the external CRM, which answers
    with an identifier stored in ``external_reference``.
    """

    class Status(models.TextChoices):
        NEW = 'new', _('New')
        CONTACTED = 'contacted', _('Contacted')
        QUALIFIED = 'qualified', _('Qualified')
        CONVERTED = 'converted', _('Converted')
        DISQUALIFIED = 'disqualified', _('Disqualified')

    # Contact details
    first_name = models.CharField(max_length=128, blank=True)
    last_name = models.CharField(max_length=128, blank=True)
    company = models.CharField(max_length=256, blank=True)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=32, blank=True)
    source = models.CharField(
        max_length=256,
        blank=True,
        help_text=_('Lead source or campaign')
    )
    status = models.CharField(
        max_length=32,
        choices=Status.choices,
        default=Status.NEW
    )

    # External CRM
    external_reference = models.CharField(
        max_length=255,
        blank=True,
        db_index=True,
        help_text=_('Identifier assigned by the external CRM')
    )
    last_synced_at = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = LeadQuerySet.as_manager()

    class Meta:
        verbose_name = _('Lead')
        verbose_name_plural = _('Leads')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='leads_lead_status_5b1d4c_idx'),
            models.Index(fields=['last_synced_at'], name='leads_lead_last_sy_8e2f0a_idx'),
        ]

    def __str__(self):
        name = f"{self.first_name} {self.last_name}".strip() or self.email
        return f"{name} ({self.company})" if self.company else name

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        # Remember loaded values so an update event can carry the old snapshot
        instance._loaded_snapshot = {
            name: value for name, value in zip(field_names, values)
            if name != cls._meta.pk.attname
        }
        return instance

    @property
    def is_synced(self):
        return bool(self.external_reference)

    def snapshot(self):
        """Current values of every concrete field except the primary key."""
        return {
            field.attname: getattr(self, field.attname)
            for field in self._meta.concrete_fields
            if not field.primary_key
        }

    def get_loaded_snapshot(self):
        """Snapshot as last read from or written to the database, or None."""
        return getattr(self, '_loaded_snapshot', None)

    def reset_loaded_snapshot(self):
        self._loaded_snapshot = self.snapshot()


# Register models with auditlog
from auditlog.registry import auditlog  # noqa: E402
auditlog.register(Lead)
