"""
Tests for the User model and manager.
"""

import pytest

from apps.accounts.models import User


@pytest.mark.django_db
class TestUserManager:
    def test_create_user_normalizes_email(self) -> None:
        user = User.objects.create_user("Member@Example.COM", password="s3cret-pass")

        assert user.email == "member@example.com"
        assert user.check_password("s3cret-pass")
        assert user.membership_status == User.MembershipStatus.INACTIVE
        assert user.reminder_days == [7, 3, 1]

    def test_create_user_without_password(self) -> None:
        user = User.objects.create_user("nopass@example.com")

        assert not user.has_usable_password()

    def test_create_user_requires_email(self) -> None:
        with pytest.raises(ValueError, match="Email is required"):
            User.objects.create_user("")

    def test_create_superuser(self) -> None:
        user = User.objects.create_superuser("admin@example.com", password="s3cret-pass")

        assert user.is_staff
        assert user.is_superuser


class TestUserHelpers:
    def test_name_parts(self) -> None:
        user = User(name="Nimal Perera")

        assert user.first_name == "Nimal"
        assert user.last_name == "Perera"

    def test_single_name(self) -> None:
        user = User(name="Nimal")

        assert user.first_name == "Nimal"
        assert user.last_name == ""

    def test_wants_reminder(self) -> None:
        user = User(reminder_days=[7, 1])

        assert user.wants_reminder(7)
        assert not user.wants_reminder(3)
        assert not User(reminder_days=[]).wants_reminder(7)
