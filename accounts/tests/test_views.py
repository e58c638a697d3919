from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import CustomUser
from activity.models import ActivityLog


class LoginViewTest(APITestCase):
    url = '/api/auth/login/'

    def setUp(self):
        self.user = CustomUser.objects.create_user(
            email='sara@sentinel.test',
            password='Sara#Pass2024',
            role=CustomUser.Role.MANAGER,
            status=CustomUser.Status.ACTIVE,
            first_name='Sara',
            last_name='Mansouri',
        )

    def test_login_returns_tokens(self):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(self.url, {'email': 'SARA@sentinel.test', 'password': 'Sara#Pass2024'})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertTrue(response.data['success'])
        self.assertIn('access', response.data['tokens'])
        self.assertIn('refresh', response.data['tokens'])
        self.assertEqual(response.data['user']['email'], 'sara@sentinel.test')
        self.assertEqual(response.data['user']['full_name'], 'Sara Mansouri')
        self.assertTrue(ActivityLog.objects.filter(user=self.user, action=ActivityLog.Action.LOGIN).exists())

    def test_login_with_generated_username(self):
        CustomUser.objects.filter(pk=self.user.pk).update(username='sara.mansouri314')
        response = self.client.post(self.url, {'email': 'Sara.Mansouri314', 'password': 'Sara#Pass2024'})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data['user']['username'], 'sara.mansouri314')

    def test_pending_identity_refused_by_username(self):
        CustomUser.objects.create_user(
            email='new.test', password='New#Pass2024', role=CustomUser.Role.SUPERVISOR,
            username='new.comer101',
        )
        response = self.client.post(self.url, {'email': 'new.comer101', 'password': 'New#Pass2024'})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Your account is pending approval.')

    def test_wrong_password(self):
        response = self.client.post(self.url, {'email': 'sara@sentinel.test', 'password': 'nope'})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Invalid credentials')

    def test_pending_identity_cannot_log_in(self):
        pending = CustomUser.objects.create_user(
            email='new@sentinel.test', password='New#Pass2024', role=CustomUser.Role.SUPERVISOR
        )
        response = self.client.post(self.url, {'email': pending.email, 'password': 'New#Pass2024'})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Your account is pending approval.')

    def test_suspended_identity_cannot_log_in(self):
        CustomUser.objects.filter(pk=self.user.pk).update(status=CustomUser.Status.SUSPENDED, is_active=False)
        response = self.client.post(self.url, {'email': 'sara@sentinel.test', 'password': 'Sara#Pass2024'})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_token_authenticates_me(self):
        response = self.client.post(self.url, {'email': 'sara@sentinel.test', 'password': 'Sara#Pass2024'})
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['tokens']['access']}")
        me = self.client.get('/api/auth/me/')
        self.assertEqual(me.status_code, status.HTTP_200_OK)
        self.assertEqual(me.data['role'], CustomUser.Role.MANAGER)


class ChangePasswordViewTest(APITestCase):
    url = '/api/auth/change-password/'

    def setUp(self):
        self.user = CustomUser.objects.create_user(
            email='ali@sentinel.test',
            password='Temp#Pass2024',
            role=CustomUser.Role.OPERATOR,
            status=CustomUser.Status.ACTIVE,
            must_reset_password=True,
        )
        self.client.force_authenticate(user=self.user)

    def test_change_password_clears_reset_flag(self):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(
                self.url, {'current_password': 'Temp#Pass2024', 'new_password': 'Brand-new#Secret7'}
            )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('Brand-new#Secret7'))
        self.assertFalse(self.user.must_reset_password)
        self.assertTrue(
            ActivityLog.objects.filter(user=self.user, action=ActivityLog.Action.PASSWORD_CHANGED).exists()
        )

    def test_wrong_current_password(self):
        response = self.client.post(self.url, {'current_password': 'wrong', 'new_password': 'Brand-new#Secret7'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_new_password_must_differ(self):
        response = self.client.post(self.url, {'current_password': 'Temp#Pass2024', 'new_password': 'Temp#Pass2024'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
