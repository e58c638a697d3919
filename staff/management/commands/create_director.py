"""
Bootstrap a Director: the root of the registration hierarchy.

Directors are never registered through the API, so the first one (and any
later ones) are created here with an APPROVED DirectorProfile.
"""
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from accounts.credentials import generate_employee_id, generate_temporary_password
from accounts.models import CustomUser
from accounts.services import IdentityService
from core.exceptions import DuplicateEmail, DuplicatePhone
from staff.matrix import DIRECTOR_EMPLOYEE_ID_PREFIX
from staff.models import ApprovalStatus, DirectorProfile


class Command(BaseCommand):
    help = 'Create an active Director identity with its profile'

    def add_arguments(self, parser):
        parser.add_argument('email')
        parser.add_argument('--first-name', default='')
        parser.add_argument('--last-name', default='')
        parser.add_argument('--phone', default=None)
        parser.add_argument(
            '--password', default=None,
            help='Initial password (a temporary one is generated when omitted)'
        )

    def handle(self, *args, **options):
        password = options['password'] or generate_temporary_password(settings.TEMPORARY_PASSWORD_LENGTH)
        first_name = options['first_name']
        last_name = options['last_name']

        try:
            with transaction.atomic():
                user = IdentityService.create_identity(
                    email=options['email'],
                    password=password,
                    role=CustomUser.Role.DIRECTOR,
                    first_name=first_name,
                    last_name=last_name,
                    phone=options['phone'],
                    status=CustomUser.Status.ACTIVE,
                    employee_id=generate_employee_id(DIRECTOR_EMPLOYEE_ID_PREFIX),
                    must_reset_password=not options['password'],
                )
                DirectorProfile.objects.create(
                    user=user,
                    employee_id=user.employee_id,
                    full_name=f'{first_name} {last_name}'.strip() or user.email,
                    approval_status=ApprovalStatus.APPROVED,
                )
        except (DuplicateEmail, DuplicatePhone) as exc:
            raise CommandError(str(exc.detail))

        self.stdout.write(self.style.SUCCESS(f'Created director {user.email} ({user.employee_id})'))
        if not options['password']:
            self.stdout.write(f'Temporary password: {password}')
