"""
Repair identities whose status disagrees with their resolved profile.

Resolution updates the profile and the identity in one transaction, so a
mismatch only appears after manual database edits or an interrupted import.
APPROVED profiles get their identity activated; REJECTED ones get it
suspended with the rejection reason.
"""
import logging

from django.core.management.base import BaseCommand

from accounts.models import CustomUser
from accounts.services import IdentityService
from core.exceptions import ValidationError
from staff.models import ApprovalStatus, GATED_PROFILE_MODELS

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Align identity status with approved or rejected staff profiles'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run', action='store_true',
            help='Report mismatches without changing anything'
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        fixed = 0
        failed = 0

        for model in GATED_PROFILE_MODELS:
            approved = model.objects.select_related('user').filter(
                approval_status=ApprovalStatus.APPROVED,
                user__status=CustomUser.Status.PENDING,
            )
            rejected = model.objects.select_related('user').filter(
                approval_status=ApprovalStatus.REJECTED,
                user__status__in=[CustomUser.Status.PENDING, CustomUser.Status.ACTIVE],
            )

            for profile in approved:
                self.stdout.write(f'{model.__name__} {profile.id}: activate {profile.user.email}')
                if dry_run:
                    continue
                try:
                    IdentityService.activate(profile.user_id)
                    fixed += 1
                except ValidationError as exc:
                    failed += 1
                    logger.warning("Could not activate identity %s: %s", profile.user_id, exc.detail)

            for profile in rejected:
                self.stdout.write(f'{model.__name__} {profile.id}: suspend {profile.user.email}')
                if dry_run:
                    continue
                try:
                    IdentityService.deactivate(
                        profile.user_id, profile.rejection_reason, CustomUser.Status.SUSPENDED
                    )
                    fixed += 1
                except ValidationError as exc:
                    failed += 1
                    logger.warning("Could not suspend identity %s: %s", profile.user_id, exc.detail)

        if dry_run:
            self.stdout.write(self.style.NOTICE('Dry run: no changes made'))
        else:
            self.stdout.write(self.style.SUCCESS(f'Reconciled {fixed} identities ({failed} failed)'))
