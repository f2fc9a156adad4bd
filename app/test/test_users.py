from uuid import UUID, uuid4

from httpx import AsyncClient

from app.models.models import User
from app.test.factories import UserFactory
from app.test.helpers import ADMIN_EMAIL, SENDER_EMAIL, auth_headers


BASE_URL = "/users"


class TestUserCreation:
    """First-login registration."""

    async def test_create_user(self, client: AsyncClient, fetch):
        """Test registering a new user."""
        payload = {
            "email": "new.user@zapshift.io",
            "displayName": "New User",
            "photoURL": "https://img.zapshift.io/u.png",
        }
        response = await client.post(BASE_URL, json=payload)

        assert response.status_code == 200
        data = response.json()
        assert data["created"] is True
        assert data["user"]["email"] == payload["email"]
        assert data["user"]["role"] == "user"
        assert data["user"]["photoURL"] == payload["photoURL"]

        user = await fetch(User, UUID(data["user"]["id"]))
        assert user.display_name == "New User"

    async def test_existing_user_logging_in(self, client: AsyncClient, sender_user):
        """Test registering an email that already has an account."""
        response = await client.post(BASE_URL, json={"email": SENDER_EMAIL})

        assert response.status_code == 200
        data = response.json()
        assert data["created"] is False
        assert data["message"] == "existing user logging in."
        assert data["user"]["id"] == str(sender_user.id)
        assert data["user"]["lastLoginAt"] is not None

    async def test_invalid_email(self, client: AsyncClient):
        """Test registering with a malformed email."""
        response = await client.post(BASE_URL, json={"email": "not-an-email"})
        assert response.status_code == 422


class TestUserListing:
    """Test the admin user listing."""

    async def test_pagination(self, client: AsyncClient, admin_user, save):
        """Test skip and limit."""
        await save(*[UserFactory() for _ in range(5)])

        response = await client.get(
            f"{BASE_URL}?limit=2&skip=0", headers=auth_headers(ADMIN_EMAIL)
        )
        assert response.status_code == 200
        assert len(response.json()) == 2

        response = await client.get(
            f"{BASE_URL}?limit=10&skip=4", headers=auth_headers(ADMIN_EMAIL)
        )
        assert len(response.json()) == 2

    async def test_search_by_display_name(self, client: AsyncClient, admin_user, save):
        """Test case-insensitive display name search."""
        await save(
            UserFactory(display_name="Karim Hossain"),
            UserFactory(display_name="Nadia Karim"),
            UserFactory(display_name="Someone Else"),
        )

        response = await client.get(
            f"{BASE_URL}?searchText=karim", headers=auth_headers(ADMIN_EMAIL)
        )
        assert response.status_code == 200
        names = sorted(user["displayName"] for user in response.json())
        assert names == ["Karim Hossain", "Nadia Karim"]


class TestUserRole:
    """Test role changes and lookups."""

    async def test_approve_as_admin(self, client: AsyncClient, admin_user, sender_user, fetch):
        """Test promoting a user to admin."""
        response = await client.patch(
            f"{BASE_URL}/{sender_user.id}/role",
            json={"approvalStatus": "approved"},
            headers=auth_headers(ADMIN_EMAIL),
        )
        assert response.status_code == 200
        assert response.json()["role"] == "admin"
        assert (await fetch(User, sender_user.id)).role == "admin"

    async def test_remove_admin(self, client: AsyncClient, admin_user, save, fetch):
        """Test demoting an admin."""
        other_admin = await save(UserFactory(role="admin"))

        response = await client.patch(
            f"{BASE_URL}/{other_admin.id}/role",
            json={"approvalStatus": "removed"},
            headers=auth_headers(ADMIN_EMAIL),
        )
        assert response.status_code == 200
        assert (await fetch(User, other_admin.id)).role == "user"

    async def test_unknown_approval_status(self, client: AsyncClient, admin_user, sender_user):
        """Test an approval status that does not exist."""
        response = await client.patch(
            f"{BASE_URL}/{sender_user.id}/role",
            json={"approvalStatus": "promoted"},
            headers=auth_headers(ADMIN_EMAIL),
        )
        assert response.status_code == 422

    async def test_unknown_user(self, client: AsyncClient, admin_user):
        """Test changing the role of an unknown user."""
        response = await client.patch(
            f"{BASE_URL}/{uuid4()}/role",
            json={"approvalStatus": "approved"},
            headers=auth_headers(ADMIN_EMAIL),
        )
        assert response.status_code == 404

    async def test_get_role(self, client: AsyncClient, admin_user, sender_user):
        """Test looking up a user's role."""
        response = await client.get(
            f"{BASE_URL}/{ADMIN_EMAIL}/role", headers=auth_headers(SENDER_EMAIL)
        )
        assert response.status_code == 200
        assert response.json() == {"role": "admin"}

    async def test_get_role_unknown_email(self, client: AsyncClient, sender_user):
        """Test looking up the role of an unknown email."""
        response = await client.get(
            f"{BASE_URL}/nobody@zapshift.io/role", headers=auth_headers(SENDER_EMAIL)
        )
        assert response.status_code == 404
