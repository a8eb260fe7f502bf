"""Notification model - stored inbox written by the database backend."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Notification(models.Model):
    """User-facing notification (bonus claimed, achievement unlocked, ...)."""

    account = models.ForeignKey(
        "rewardman.Account",
        on_delete=models.CASCADE,
        related_name="notifications",
        verbose_name=_("account"),
    )
    title = models.CharField(_("title"), max_length=200)
    message = models.TextField(_("message"))
    category = models.CharField(_("category"), max_length=20, db_index=True)
    is_read = models.BooleanField(_("read"), default=False)
    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)

    class Meta:
        db_table = "rewardman_notification"
        verbose_name = _("notification")
        verbose_name_plural = _("notifications")
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["account", "is_read"], name="rewardman_notif_unread_idx"),
        ]

    def __str__(self):
        return f"[{self.category}] {self.title}"
