import logging
from typing import Optional

from django.conf import settings
from django.utils.crypto import constant_time_compare

from core_backend.exceptions import ValidationError
from .models import Role, StaffAccess

logger = logging.getLogger(__name__)


class RoleSessionService:
    """
    Shared-secret staff login.

    A successful login stores the chosen role in the Django session; the
    role is then an opaque input to orders.policies.OrderActionPolicy.
    """

    SESSION_KEY = "pos_role"

    @staticmethod
    def check_password(password: str) -> bool:
        access = StaffAccess.objects.first()
        if access is not None:
            return access.check_password(password)
        return constant_time_compare(password or "", settings.STAFF_DEFAULT_PASSWORD)

    @staticmethod
    def login(request, role: str, password: str) -> bool:
        if role not in Role.values:
            raise ValidationError(f"'{role}' is not a valid staff role.")

        if not RoleSessionService.check_password(password):
            logger.warning(f"Failed staff login attempt for role {role}")
            return False

        request.session.cycle_key()
        request.session[RoleSessionService.SESSION_KEY] = role
        logger.info(f"Staff session established for role {role}")
        return True

    @staticmethod
    def logout(request) -> None:
        request.session.pop(RoleSessionService.SESSION_KEY, None)

    @staticmethod
    def current_role(request) -> Optional[str]:
        session = getattr(request, "session", None)
        if session is None:
            return None
        role = session.get(RoleSessionService.SESSION_KEY)
        return role if role in Role.values else None

    @staticmethod
    def change_password(current_password: str, new_password: str) -> bool:
        """
        Replace the shared secret.

        Returns False when `current_password` is wrong.

        Raises:
            ValidationError: if the new password is too short.
        """
        min_length = settings.STAFF_PASSWORD_MIN_LENGTH
        if len(new_password or "") < min_length:
            raise ValidationError(f"Password must be at least {min_length} characters long.")

        if not RoleSessionService.check_password(current_password):
            logger.warning("Staff password change rejected: wrong current password")
            return False

        access = StaffAccess.objects.first() or StaffAccess()
        access.set_password(new_password)
        access.save()
        logger.info("Staff password changed")
        return True
