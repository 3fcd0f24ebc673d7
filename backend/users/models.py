from django.contrib.auth.hashers import check_password, make_password
from django.db import models
from django.utils.translation import gettext_lazy as _


class Role(models.TextChoices):
    MANAGER = "Manager", _("Manager")
    KITCHEN = "Kitchen", _("Kitchen")
    CASHIER = "Cashier", _("Cashier")


class StaffAccess(models.Model):
    """
    Singleton row holding the shared staff secret.

    Until a password is set here the STAFF_DEFAULT_PASSWORD setting applies.
    """

    password = models.CharField(_("password"), max_length=128)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Staff Access")
        verbose_name_plural = _("Staff Access")

    def __str__(self):
        return "Staff access secret"

    def set_password(self, raw_password):
        self.password = make_password(raw_password)

    def check_password(self, raw_password):
        return check_password(raw_password, self.password)
