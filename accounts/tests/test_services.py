from unittest import mock

from django.test import TestCase

from accounts.models import CustomUser
from accounts.services import IdentityService, UsernameCollision
from core.exceptions import DuplicateEmail, DuplicatePhone, NotFound, ValidationError


class IdentityServiceTest(TestCase):
    def create(self, **overrides):
        data = {
            'email': 'karim@sentinel.test',
            'password': 'Temp#Pass99',
            'role': CustomUser.Role.SUPERVISOR,
            'first_name': 'Karim',
            'last_name': 'Saidi',
            'phone': '+212611111111',
        }
        data.update(overrides)
        return IdentityService.create_identity(**data)

    def test_create_identity_defaults_to_pending(self):
        user = self.create(email='  Karim@Sentinel.TEST ')
        self.assertEqual(user.email, 'karim@sentinel.test')
        self.assertEqual(user.status, CustomUser.Status.PENDING)
        self.assertFalse(user.is_active)
        self.assertTrue(user.must_reset_password)
        self.assertTrue(user.check_password('Temp#Pass99'))

    def test_lookup_is_case_insensitive(self):
        user = self.create()
        self.assertEqual(IdentityService.find_by_email('KARIM@sentinel.test'), user)
        self.assertEqual(IdentityService.find_by_phone(' +212611111111 '), user)
        self.assertIsNone(IdentityService.find_by_email(''))
        self.assertIsNone(IdentityService.find_by_phone(None))

    def test_duplicate_email(self):
        self.create()
        with self.assertRaises(DuplicateEmail):
            self.create(email='KARIM@sentinel.test', phone=None)

    def test_duplicate_phone(self):
        self.create()
        with self.assertRaises(DuplicatePhone):
            self.create(email='other@sentinel.test')

    def test_racing_duplicate_is_classified(self):
        self.create()
        # Pre-check passes as if the other registration had not committed yet
        with mock.patch.object(IdentityService, 'assert_available'):
            with self.assertRaises(DuplicateEmail):
                self.create(phone=None)

    def test_username_collision(self):
        self.create(username='karim.saidi512')
        with self.assertRaises(UsernameCollision):
            self.create(email='other@sentinel.test', phone=None, username='Karim.Saidi512')

    def test_find_by_login(self):
        user = self.create(username='karim.saidi512')
        self.assertEqual(IdentityService.find_by_login('KARIM@sentinel.test'), user)
        self.assertEqual(IdentityService.find_by_login(' Karim.Saidi512 '), user)
        self.assertIsNone(IdentityService.find_by_login('nobody.here100'))
        self.assertIsNone(IdentityService.find_by_login(''))

    def test_email_required(self):
        with self.assertRaises(ValidationError):
            self.create(email='   ')

    def test_get_unknown(self):
        with self.assertRaises(NotFound):
            IdentityService.get('00000000-0000-0000-0000-000000000000')
        with self.assertRaises(NotFound):
            IdentityService.get('not-a-uuid')


class StatusTransitionTest(TestCase):
    def setUp(self):
        self.user = CustomUser.objects.create_user(
            email='lina@sentinel.test', password='Temp#Pass99', role=CustomUser.Role.OPERATOR
        )

    def test_activate(self):
        IdentityService.activate(self.user.id)
        self.user.refresh_from_db()
        self.assertEqual(self.user.status, CustomUser.Status.ACTIVE)
        self.assertTrue(self.user.is_active)

    def test_deactivate_records_reason(self):
        IdentityService.deactivate(self.user.id, 'Rejected at review')
        self.user.refresh_from_db()
        self.assertEqual(self.user.status, CustomUser.Status.SUSPENDED)
        self.assertEqual(self.user.status_reason, 'Rejected at review')
        self.assertFalse(self.user.is_active)

    def test_deactivate_only_to_terminal_states(self):
        with self.assertRaises(ValidationError):
            IdentityService.deactivate(self.user.id, 'x', CustomUser.Status.ACTIVE)

    def test_suspended_cannot_be_activated(self):
        IdentityService.deactivate(self.user.id, 'Rejected', CustomUser.Status.SUSPENDED)
        with self.assertRaises(ValidationError) as ctx:
            IdentityService.activate(self.user.id)
        self.assertEqual(str(ctx.exception.detail), 'Cannot change user status from SUSPENDED to ACTIVE.')

    def test_nothing_moves_back_to_pending(self):
        IdentityService.activate(self.user.id)
        with self.assertRaises(ValidationError):
            IdentityService.transition_status(self.user.id, CustomUser.Status.PENDING)

    def test_unknown_identity(self):
        with self.assertRaises(NotFound):
            IdentityService.activate('00000000-0000-0000-0000-000000000000')

    def test_can_transition_to(self):
        self.assertTrue(self.user.can_transition_to(CustomUser.Status.ACTIVE))
        self.assertFalse(self.user.can_transition_to(CustomUser.Status.PENDING))

    def test_set_password(self):
        IdentityService.set_password(self.user.id, 'Another#Pass1', must_reset=False)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('Another#Pass1'))
        self.assertFalse(self.user.must_reset_password)
