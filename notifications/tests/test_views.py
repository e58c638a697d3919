from rest_framework import status
from rest_framework.test import APITestCase

from notifications.models import Notification
from notifications.services import notification_service
from staff.models import ProfileType
from staff.tests.helpers import staff_hierarchy


class NotificationApiTest(APITestCase):
    def setUp(self):
        self.people = staff_hierarchy()
        self.manager = self.people['manager']
        self.director = self.people['director']
        self.notice = notification_service.notify_approval_result(
            ProfileType.GENERAL_SUPERVISOR,
            self.people['gs_profile'].id,
            self.manager.id,
            self.director.id,
            True,
            credentials={'employeeId': 'GS-1', 'email': 'gs@sentinel.test', 'temporaryPassword': 'Ab1!cdefghij'},
        )
        self.client.force_authenticate(user=self.manager)

    def test_list_hides_credentials(self):
        response = self.client.get('/api/notifications/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['unread_count'], 1)
        item = response.data['notifications'][0]
        self.assertTrue(item['has_credentials'])
        self.assertNotIn('credentials', item['metadata'])
        self.assertEqual(item['sender_name'], self.director.display_name)

    def test_unread_count(self):
        response = self.client.get('/api/notifications/unread-count/')
        self.assertEqual(response.data['count'], 1)

    def test_view_credentials_then_status(self):
        response = self.client.post(
            f'/api/notifications/{self.notice.id}/view-credentials/', HTTP_USER_AGENT='pytest-client'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['canView'])
        self.assertEqual(response.data['credentials']['temporaryPassword'], 'Ab1!cdefghij')
        self.assertEqual(response.data['remainingViews'], 2)

        response = self.client.get(f'/api/notifications/{self.notice.id}/view-status/')
        self.assertEqual(response.data['viewCount'], 1)
        self.assertEqual(response.data['remainingViews'], 2)

    def test_exhausted_notice_answers_ok(self):
        Notification.objects.filter(pk=self.notice.pk).update(view_count=3)
        response = self.client.post(f'/api/notifications/{self.notice.id}/view-credentials/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['canView'])
        self.assertIsNone(response.data['credentials'])

    def test_foreign_notification_is_not_found(self):
        self.client.force_authenticate(user=self.director)
        response = self.client.post(f'/api/notifications/{self.notice.id}/view-credentials/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Notification not found')

    def test_mark_read(self):
        response = self.client.post(f'/api/notifications/{self.notice.id}/read/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['notification']['is_read'])

        response = self.client.post('/api/notifications/read-all/')
        self.assertEqual(response.data['updated_count'], 0)

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)
        response = self.client.get('/api/notifications/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
