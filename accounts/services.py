"""
Identity store operations.

Everything that creates an identity or moves it through its lifecycle goes
through IdentityService. Status changes are conditional updates on the
current status, so two racing callers cannot both move the same identity.
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from core.exceptions import DuplicateEmail, DuplicatePhone, NotFound, ValidationError

from .models import CustomUser

logger = logging.getLogger(__name__)


class CredentialCollision(Exception):
    """A generated credential hit a unique index; the caller should regenerate"""


class EmployeeIdCollision(CredentialCollision):
    pass


class UsernameCollision(CredentialCollision):
    pass


def normalize_email(email):
    return (email or '').strip().lower()


def normalize_phone(phone):
    phone = (phone or '').strip()
    return phone or None


class IdentityService:
    """Create, look up and transition staff identities"""

    @staticmethod
    def find_by_email(email):
        email = normalize_email(email)
        if not email:
            return None
        return CustomUser.objects.filter(email__iexact=email).first()

    @staticmethod
    def find_by_phone(phone):
        phone = normalize_phone(phone)
        if not phone:
            return None
        return CustomUser.objects.filter(phone=phone).first()

    @staticmethod
    def find_by_username(username):
        username = (username or '').strip().lower()
        if not username:
            return None
        return CustomUser.objects.filter(username=username).first()

    @staticmethod
    def find_by_login(handle):
        """Resolve a login handle, either an email or a generated username"""
        if '@' in (handle or ''):
            return IdentityService.find_by_email(handle)
        return IdentityService.find_by_username(handle)

    @staticmethod
    def get(user_id):
        try:
            return CustomUser.objects.get(pk=user_id)
        except (CustomUser.DoesNotExist, DjangoValidationError, ValueError, TypeError):
            raise NotFound('User not found.')

    @staticmethod
    def assert_available(email, phone=None):
        if IdentityService.find_by_email(email):
            raise DuplicateEmail()
        if phone and IdentityService.find_by_phone(phone):
            raise DuplicatePhone()

    @staticmethod
    def create_identity(*, email, password, role, first_name='', last_name='', phone=None,
                        status=CustomUser.Status.PENDING, employee_id=None, username=None,
                        created_by=None, must_reset_password=True):
        """Create an identity, mapping unique-index violations to domain errors.

        The pre-check gives a clean error in the common case; the IntegrityError
        handler covers two registrations racing for the same email or phone.
        """
        email = normalize_email(email)
        phone = normalize_phone(phone)
        if not email:
            raise ValidationError('Email is required.')

        IdentityService.assert_available(email, phone)

        try:
            with transaction.atomic():
                user = CustomUser.objects.create_user(
                    email=email,
                    password=password,
                    first_name=first_name,
                    last_name=last_name,
                    phone=phone,
                    role=role,
                    status=status,
                    employee_id=employee_id,
                    username=username,
                    created_by=created_by,
                    must_reset_password=must_reset_password,
                )
        except IntegrityError as exc:
            raise IdentityService._classify_integrity_error(exc, email, phone, employee_id, username)

        logger.info("Created %s identity %s (%s)", role, user.id, status)
        return user

    @staticmethod
    def _classify_integrity_error(exc, email, phone, employee_id, username=None):
        if CustomUser.objects.filter(email__iexact=email).exists():
            return DuplicateEmail()
        if phone and CustomUser.objects.filter(phone=phone).exists():
            return DuplicatePhone()
        if employee_id and CustomUser.objects.filter(employee_id=employee_id).exists():
            return EmployeeIdCollision(employee_id)
        if username and CustomUser.objects.filter(username=username.strip().lower()).exists():
            return UsernameCollision(username)
        return exc

    @staticmethod
    def transition_status(user_id, new_status, reason=''):
        """Move an identity to ``new_status`` if its current status allows it"""
        sources = [
            source for source, targets in CustomUser.STATUS_TRANSITIONS.items()
            if new_status in targets
        ]
        updated = CustomUser.objects.filter(pk=user_id, status__in=sources).update(
            status=new_status,
            is_active=new_status == CustomUser.Status.ACTIVE,
            status_reason=reason or '',
            updated_at=timezone.now(),
        )
        if updated:
            logger.info("Identity %s moved to %s", user_id, new_status)
            return True

        current = CustomUser.objects.filter(pk=user_id).values_list('status', flat=True).first()
        if current is None:
            raise NotFound('User not found.')
        raise ValidationError(f'Cannot change user status from {current} to {new_status}.')

    @staticmethod
    def activate(user_id):
        return IdentityService.transition_status(user_id, CustomUser.Status.ACTIVE)

    @staticmethod
    def deactivate(user_id, reason, status=CustomUser.Status.SUSPENDED):
        if status not in (CustomUser.Status.SUSPENDED, CustomUser.Status.INACTIVE):
            raise ValidationError('Identities can only be deactivated to SUSPENDED or INACTIVE.')
        return IdentityService.transition_status(user_id, status, reason=reason)

    @staticmethod
    def set_password(user_id, raw_password, must_reset=None):
        user = IdentityService.get(user_id)
        user.set_password(raw_password)
        fields = ['password', 'updated_at']
        if must_reset is not None:
            user.must_reset_password = must_reset
            fields.append('must_reset_password')
        user.save(update_fields=fields)
        return user
