from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

User = get_user_model()


class AuthenticationTestCase(APITestCase):
    """Test authentication flows."""

    def test_user_registration(self):
        """Self-registration always yields a student with a token."""
        data = {
            'username': 'testuser',
            'email': 'test@example.com',
            'password': 'securepass123',
            'first_name': 'Test',
            'last_name': 'User',
            'role': 'ADMIN',
        }
        response = self.client.post('/api/auth/register/', data)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('token', response.data)
        self.assertEqual(response.data['role'], User.Role.STUDENT)

        user = User.objects.get(username='testuser')
        self.assertTrue(user.is_student)
        self.assertEqual(Token.objects.get(user=user).key, response.data['token'])

    def test_registration_rejects_duplicate_email(self):
        User.objects.create_user(username='first', email='dup@example.com', password='testpass123')
        response = self.client.post('/api/auth/register/', {
            'username': 'second',
            'email': 'dup@example.com',
            'password': 'securepass123',
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data)

    def test_user_login(self):
        """Test student can login with valid credentials."""
        User.objects.create_user(
            username='testuser',
            email='test@example.com',
            password='testpass123'
        )
        data = {'username': 'testuser', 'password': 'testpass123'}
        response = self.client.post('/api/auth/login/', data)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('token', response.data)

    def test_login_with_wrong_password(self):
        User.objects.create_user(username='testuser', email='t@example.com', password='testpass123')
        response = self.client.post('/api/auth/login/', {'username': 'testuser', 'password': 'wrong'})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_login_requires_both_fields(self):
        response = self.client.post('/api/auth/login/', {'username': 'testuser'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_suspended_user_cannot_login(self):
        User.objects.create_user(
            username='testuser', email='t@example.com', password='testpass123',
            status=User.Status.SUSPENDED, is_active=False,
        )
        response = self.client.post('/api/auth/login/', {'username': 'testuser', 'password': 'testpass123'})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_openapi_schema_is_served(self):
        response = self.client.get('/api/schema/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
