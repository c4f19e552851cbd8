from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from apps.api.exceptions import ValidationFailed
from apps.catalog.seed import seed_catalog
from apps.users.commands import UserWriteCommand
from apps.users.container import build_user_service
from apps.users.models import Role, User
from apps.users.repositories import UserRepository


class UserRepositoryTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        seed_catalog()

    def test_email_exists_is_case_insensitive_and_excludes_self(self):
        repo = UserRepository()
        alex = User.objects.get(email="alex@gmail.com")
        self.assertTrue(repo.email_exists("ALEX@gmail.com"))
        self.assertFalse(repo.email_exists("alex@gmail.com", exclude_id=alex.id))
        self.assertFalse(repo.email_exists("nobody@gmail.com"))

    def test_seeded_roles(self):
        maria = User.objects.get(email="maria@gmail.com")
        self.assertEqual(maria.authorities, frozenset({"ROLE_OPERATOR", "ROLE_ADMIN"}))
        self.assertTrue(maria.check_password("123456"))


class UserServiceIntegrationTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        seed_catalog()
        cls.operator = Role.objects.get(authority="ROLE_OPERATOR")

    def setUp(self):
        self.service = build_user_service()

    def command(self, **overrides):
        values = dict(
            first_name="Bob",
            last_name="Brown",
            email="bob@gmail.com",
            password="secret1",
            role_ids=[self.operator.id],
        )
        values.update(overrides)
        return UserWriteCommand(**values)

    def test_second_insert_with_same_email_fails(self):
        self.service.insert(self.command())
        with self.assertRaises(ValidationFailed) as ctx:
            self.service.insert(self.command(first_name="Robert"))
        self.assertIn("email", ctx.exception.errors)
        self.assertEqual(User.objects.filter(email__iexact="bob@gmail.com").count(), 1)

    def test_update_keeps_password_when_absent(self):
        dto = self.service.insert(self.command())
        self.service.update(dto.id, self.command(last_name="Black", password=None))
        user = User.objects.get(pk=dto.id)
        self.assertEqual(user.last_name, "Black")
        self.assertTrue(user.check_password("secret1"))

    def test_update_changes_password_when_supplied(self):
        dto = self.service.insert(self.command())
        self.service.update(dto.id, self.command(password="another1"))
        self.assertTrue(User.objects.get(pk=dto.id).check_password("another1"))


class UserApiTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        seed_catalog()

    def setUp(self):
        self.admin = User.objects.get(email="maria@gmail.com")
        self.operator = User.objects.get(email="alex@gmail.com")

    def test_operator_cannot_manage_users(self):
        self.client.force_authenticate(user=self.operator)
        res = self.client.get("/api/users/")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_user_lifecycle(self):
        self.client.force_authenticate(user=self.admin)
        role_id = Role.objects.get(authority="ROLE_OPERATOR").id
        listed = self.client.get("/api/users/", {"sort": "email,asc"})
        self.assertEqual(listed.status_code, status.HTTP_200_OK)
        self.assertEqual(listed.data["totalElements"], 2)
        self.assertEqual(listed.data["content"][0]["email"], "alex@gmail.com")

        payload = {
            "first_name": "Bob",
            "last_name": "Brown",
            "email": "bob@gmail.com",
            "password": "secret1",
            "roles": [role_id],
        }
        created = self.client.post("/api/users/", payload, format="json")
        self.assertEqual(created.status_code, status.HTTP_201_CREATED)
        self.assertNotIn("password", created.data)
        uid = created.data["id"]

        duplicate = self.client.post("/api/users/", payload, format="json")
        self.assertEqual(duplicate.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("email", duplicate.data["error"]["details"])

        updated = self.client.put(
            f"/api/users/{uid}/",
            {**payload, "first_name": "Robert", "password": ""},
            format="json",
        )
        self.assertEqual(updated.status_code, status.HTTP_200_OK)
        self.assertEqual(updated.data["first_name"], "Robert")

        deleted = self.client.delete(f"/api/users/{uid}/")
        self.assertEqual(deleted.status_code, status.HTTP_204_NO_CONTENT)
        missing = self.client.get(f"/api/users/{uid}/")
        self.assertEqual(missing.status_code, status.HTTP_404_NOT_FOUND)
