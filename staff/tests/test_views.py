from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import CustomUser
from notifications.models import Notification
from staff.models import ApprovalStatus, SupervisorProfile

from .helpers import make_supervisor_profile, make_user, staff_hierarchy

Role = CustomUser.Role


class StaffApiTestCase(APITestCase):
    def setUp(self):
        self.people = staff_hierarchy()
        self.director = self.people['director']
        self.manager = self.people['manager']
        self.gs = self.people['gs']
        self.gs_profile = self.people['gs_profile']
        self.supervisor = self.people['supervisor']

    def register_general_supervisor(self, email='nadia.benali@sentinel.test'):
        self.client.force_authenticate(user=self.manager)
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(
                '/api/staff/register/general-supervisor/',
                {'first_name': 'Nadia', 'last_name': 'Benali', 'email': email, 'phone': '+212600000001'},
            )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return response


class RegisterProfileViewTest(StaffApiTestCase):
    def test_register_returns_credentials_once(self):
        response = self.register_general_supervisor()

        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['profile']['approvalStatus'], ApprovalStatus.PENDING)
        self.assertEqual(response.data['user']['status'], CustomUser.Status.PENDING)
        self.assertEqual(response.data['user']['phone'], '+212600000001')
        self.assertIn('temporaryPassword', response.data['credentials'])
        self.assertEqual(response.data['message'], 'Registration submitted. Awaiting approval.')

    def test_unauthenticated(self):
        response = self.client.post('/api/staff/register/secretary/', {})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_role_without_registration_rights(self):
        operator = make_user(Role.OPERATOR)
        self.client.force_authenticate(user=operator)
        response = self.client.post(
            '/api/staff/register/secretary/',
            {'first_name': 'A', 'last_name': 'B', 'email': 'ab@sentinel.test'},
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_matrix_denial_is_forbidden(self):
        self.client.force_authenticate(user=self.manager)
        response = self.client.post(
            '/api/staff/register/supervisor/',
            {'first_name': 'A', 'last_name': 'B', 'email': 'ab@sentinel.test'},
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['code'], 'forbidden')

    def test_unknown_profile_type(self):
        self.client.force_authenticate(user=self.manager)
        response = self.client.post(
            '/api/staff/register/janitor/',
            {'first_name': 'A', 'last_name': 'B', 'email': 'ab@sentinel.test'},
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_invalid_payload(self):
        self.client.force_authenticate(user=self.manager)
        response = self.client.post('/api/staff/register/secretary/', {'first_name': 'A'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data['errors'])

    def test_duplicate_email_conflict(self):
        self.client.force_authenticate(user=self.manager)
        response = self.client.post(
            '/api/staff/register/secretary/',
            {'first_name': 'A', 'last_name': 'B', 'email': self.director.email},
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'duplicate_email')

    def test_ungated_registration_message(self):
        self.client.force_authenticate(user=self.director)
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(
                '/api/staff/register/manager/',
                {'first_name': 'Omar', 'last_name': 'Haddad', 'email': 'omar@sentinel.test', 'salary': '4200.00'},
            )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['profile']['approvalStatus'], ApprovalStatus.APPROVED)
        self.assertEqual(response.data['message'], 'Staff member registered successfully.')


class ApprovalViewsTest(StaffApiTestCase):
    def test_director_approves(self):
        registered = self.register_general_supervisor()
        profile_id = registered.data['profile']['id']

        self.client.force_authenticate(user=self.director)
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(f'/api/staff/approvals/{profile_id}/approve/')

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data['profile']['approvalStatus'], ApprovalStatus.APPROVED)
        self.assertEqual(
            response.data['credentials']['temporaryPassword'],
            registered.data['credentials']['temporaryPassword'],
        )
        self.assertTrue(
            Notification.objects.filter(
                receiver=self.manager, notification_type=Notification.Type.SUPERVISOR_APPROVED
            ).exists()
        )

    def test_second_approval_conflicts(self):
        profile_id = self.register_general_supervisor().data['profile']['id']
        self.client.force_authenticate(user=self.director)
        self.client.post(f'/api/staff/approvals/{profile_id}/approve/')
        response = self.client.post(f'/api/staff/approvals/{profile_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'not_pending')

    def test_manager_cannot_approve_general_supervisor(self):
        profile_id = self.register_general_supervisor().data['profile']['id']
        response = self.client.post(f'/api/staff/approvals/{profile_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_reject_requires_reason(self):
        profile_id = self.register_general_supervisor().data['profile']['id']
        self.client.force_authenticate(user=self.director)

        response = self.client.post(f'/api/staff/approvals/{profile_id}/reject/', {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Rejection reason is required.')

        response = self.client.post(f'/api/staff/approvals/{profile_id}/reject/', {'reason': 'Wrong region'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['profile']['approvalStatus'], ApprovalStatus.REJECTED)
        self.assertNotIn('credentials', response.data)

    def test_unknown_profile(self):
        self.client.force_authenticate(user=self.director)
        response = self.client.post('/api/staff/approvals/00000000-0000-0000-0000-000000000000/approve/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_pending_list(self):
        self.register_general_supervisor()
        self.client.force_authenticate(user=self.director)
        response = self.client.get('/api/staff/approvals/pending/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['profiles'][0]['fullName'], 'Nadia Benali')

    def test_pending_list_requires_approver(self):
        self.client.force_authenticate(user=self.supervisor)
        response = self.client.get('/api/staff/approvals/pending/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_stats(self):
        self.register_general_supervisor()
        self.client.force_authenticate(user=self.director)
        response = self.client.get('/api/staff/approvals/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stats']['pending'], 1)


class GeneralSupervisorSupervisorsViewTest(StaffApiTestCase):
    def url(self, profile_id):
        return f'/api/staff/general-supervisors/{profile_id}/supervisors/'

    def test_owner_sees_own_supervisors(self):
        self.client.force_authenticate(user=self.gs)
        response = self.client.get(self.url(self.gs_profile.id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['supervisors']), 1)
        self.assertEqual(response.data['supervisors'][0]['user_details']['email'], self.supervisor.email)

    def test_oversight_role_can_look(self):
        self.client.force_authenticate(user=self.director)
        response = self.client.get(self.url(self.gs_profile.id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_other_general_supervisor_is_refused(self):
        other = make_user(Role.GENERAL_SUPERVISOR)
        make_supervisor_profile(other)
        self.client.force_authenticate(user=other)
        response = self.client.get(self.url(self.gs_profile.id))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_supervisor_profile_is_not_a_general_supervisor(self):
        self.client.force_authenticate(user=self.director)
        supervisor_profile = SupervisorProfile.objects.get(user=self.supervisor)
        response = self.client.get(self.url(supervisor_profile.id))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
