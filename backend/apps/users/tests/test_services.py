import unittest

from django.db import IntegrityError

from apps.api.exceptions import (
    AssociationNotFound,
    ReferentialConflict,
    ResourceNotFound,
    ValidationFailed,
)
from apps.common.pagination import PageSpec, SortKey
from apps.users.commands import UserWriteCommand
from apps.users.services import UserService
from apps.users.validators import UserValidator

from .fakes import ADMIN, OPERATOR, FakeUserRepository, StubUser


def make_command(**overrides):
    values = dict(
        first_name="Bob",
        last_name="Brown",
        email="bob@gmail.com",
        password="secret1",
        role_ids=[1],
    )
    values.update(overrides)
    return UserWriteCommand(**values)


class UserServiceTests(unittest.TestCase):
    def setUp(self):
        self.repo = FakeUserRepository(
            [
                StubUser(1, "Alex", "Brown", "alex@gmail.com", [OPERATOR]),
                StubUser(2, "Maria", "Green", "maria@gmail.com", [OPERATOR, ADMIN]),
            ]
        )
        self.service = UserService(self.repo, UserValidator(self.repo, password_min_length=6))

    def test_find_page(self):
        page = self.service.find_page(PageSpec(page=0, size=1))
        self.assertEqual([u.email for u in page.content], ["alex@gmail.com"])
        self.assertEqual(page.total_pages, 2)

    def test_find_page_rejects_unknown_sort(self):
        with self.assertRaises(ValidationFailed):
            self.service.find_page(PageSpec(sort=(SortKey.parse("password"),)))

    def test_find_by_id_never_exposes_password(self):
        dto = self.service.find_by_id(2)
        self.assertEqual([r.authority for r in dto.roles], ["ROLE_OPERATOR", "ROLE_ADMIN"])
        self.assertFalse(hasattr(dto, "password"))

    def test_find_by_id_missing(self):
        with self.assertRaises(ResourceNotFound):
            self.service.find_by_id(99)

    def test_insert_hashes_password(self):
        dto = self.service.insert(make_command(role_ids=[1, 2]))
        self.assertEqual(dto.email, "bob@gmail.com")
        self.assertEqual([r.id for r in dto.roles], [1, 2])
        stored = self.repo.rows[dto.id]
        self.assertNotEqual(stored.password, "secret1")
        self.assertTrue(stored.password)

    def test_insert_duplicate_email_cites_email(self):
        with self.assertRaises(ValidationFailed) as ctx:
            self.service.insert(make_command(email="alex@gmail.com"))
        self.assertEqual(list(ctx.exception.errors), ["email"])
        self.assertEqual(len(self.repo.rows), 2)

    def test_insert_race_on_email_is_reported_as_field_error(self):
        self.repo.write_error = IntegrityError("UNIQUE constraint failed: users_user.email")
        self.repo.concurrent_rows = [StubUser(9, "Bob", "Other", "BOB@gmail.com")]
        with self.assertRaises(ValidationFailed) as ctx:
            self.service.insert(make_command())
        self.assertEqual(list(ctx.exception.errors), ["email"])

    def test_insert_integrity_error_not_about_email_propagates(self):
        self.repo.write_error = IntegrityError("FOREIGN KEY constraint failed")
        with self.assertRaises(IntegrityError):
            self.service.insert(make_command())

    def test_update_race_on_email_is_reported_as_field_error(self):
        self.repo.write_error = IntegrityError("UNIQUE constraint failed: users_user.email")
        self.repo.concurrent_rows = [StubUser(9, "Bob", "Other", "bob@gmail.com")]
        with self.assertRaises(ValidationFailed) as ctx:
            self.service.update(1, make_command())
        self.assertEqual(ctx.exception.errors, {"email": ["Email already in use."]})

    def test_update_integrity_error_not_about_email_propagates(self):
        self.repo.write_error = IntegrityError("NOT NULL constraint failed")
        with self.assertRaises(IntegrityError):
            self.service.update(1, make_command())

    def test_insert_reports_non_integer_role_ids(self):
        with self.assertRaises(ValidationFailed) as ctx:
            self.service.insert(
                {
                    "first_name": "Bob",
                    "email": "bob@gmail.com",
                    "password": "secret1",
                    "roles": [1, "abc", None],
                }
            )
        self.assertEqual(list(ctx.exception.errors), ["role_ids"])
        self.assertEqual(len(self.repo.rows), 2)

    def test_insert_with_numeric_password_is_a_validation_error(self):
        with self.assertRaises(ValidationFailed) as ctx:
            self.service.insert(
                {"first_name": "Bob", "email": "bob@gmail.com", "password": 1234567}
            )
        self.assertEqual(
            ctx.exception.errors, {"password": ["Password must be a string."]}
        )

    def test_insert_without_password_fails(self):
        with self.assertRaises(ValidationFailed) as ctx:
            self.service.insert(make_command(password=None))
        self.assertIn("password", ctx.exception.errors)

    def test_insert_with_unknown_role(self):
        with self.assertRaises(AssociationNotFound) as ctx:
            self.service.insert(make_command(role_ids=[7]))
        self.assertEqual(ctx.exception.details, {"resource": "role", "id": "7"})
        self.assertEqual(len(self.repo.rows), 2)

    def test_update_without_password_keeps_hash(self):
        dto = self.service.update(
            1, make_command(first_name="Alexander", email="alex@gmail.com", password=None)
        )
        self.assertEqual(dto.first_name, "Alexander")
        self.assertEqual(self.repo.rows[1].password, "hashed")

    def test_update_with_password_rehashes(self):
        self.service.update(1, make_command(email="alex@gmail.com", password="newsecret"))
        self.assertEqual(self.repo.rows[1].password, "hashed:newsecret")

    def test_update_to_another_users_email_fails(self):
        with self.assertRaises(ValidationFailed) as ctx:
            self.service.update(1, make_command(email="maria@gmail.com", password=None))
        self.assertIn("email", ctx.exception.errors)
        self.assertEqual(self.repo.rows[1].email, "alex@gmail.com")

    def test_update_missing(self):
        with self.assertRaises(ResourceNotFound):
            self.service.update(99, make_command())

    def test_delete_outcomes(self):
        self.service.delete(1)
        self.assertNotIn(1, self.repo.rows)
        with self.assertRaises(ResourceNotFound):
            self.service.delete(1)
        self.repo.referenced.add(2)
        with self.assertRaises(ReferentialConflict):
            self.service.delete(2)
