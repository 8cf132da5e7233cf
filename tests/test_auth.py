from datetime import datetime, timedelta, timezone

from horizon.config import Settings
from horizon.security import create_access_token, verify_token

from .helpers import ADMIN_KEY, ApiTestCase, build_settings


class AuthTests(ApiTestCase):
    def register(self, **overrides):
        body = {
            "email": "maria@bt2horizon.com",
            "password": "sunny-beaches",
            "firstName": "Maria",
            "lastName": "Lopez",
            "gender": "female",
            "age_range": "30-39",
        }
        body.update(overrides)
        return self.client.post("/api/auth/register", json=body)

    def test_register_then_me(self):
        response = self.register()
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["user"]["name"], "Maria Lopez")
        self.assertEqual(data["user"]["role"], "user")
        self.assertNotIn("password_hash", data["user"])

        me = self.client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["user"]["email"], "maria@bt2horizon.com")

    def test_register_splits_full_name(self):
        response = self.register(firstName=None, lastName=None, name="Jane Ann Doe")
        user = response.json()["user"]
        self.assertEqual(user["first_name"], "Jane")
        self.assertEqual(user["last_name"], "Ann Doe")
        self.assertEqual(user["name"], "Jane Ann Doe")

    def test_register_validation(self):
        response = self.register(firstName=None, lastName=None)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "First name and last name are required"})

        response = self.register(age_range="18-25")
        self.assertEqual(response.json()["error"], "Invalid age range")

        response = self.register(gender="robot")
        self.assertEqual(response.json()["error"], "Invalid gender")

        response = self.register(password=None)
        self.assertEqual(response.json()["error"], "Email and password are required")

    def test_register_duplicate_email(self):
        self.register()
        response = self.register()
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "User already exists")

    def test_login(self):
        self.register()
        response = self.client.post(
            "/api/auth/login", json={"email": "maria@bt2horizon.com", "password": "sunny-beaches"}
        )
        self.assertEqual(response.status_code, 200)
        claims = verify_token(response.json()["token"], self.app.state.settings)
        self.assertEqual(claims["email"], "maria@bt2horizon.com")
        self.assertEqual(claims["role"], "user")

        response = self.client.post(
            "/api/auth/login", json={"email": "maria@bt2horizon.com", "password": "wrong"}
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"], "Invalid credentials")

        response = self.client.post("/api/auth/login", json={"email": "maria@bt2horizon.com"})
        self.assertEqual(response.status_code, 400)

    def test_me_rejects_missing_and_bad_tokens(self):
        response = self.client.get("/api/auth/me")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"], "No token provided")

        response = self.client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        self.assertEqual(response.json()["error"], "Invalid token")

        user = self.create_user("ana@bt2horizon.com")
        foreign = create_access_token(user, build_settings(SECRET_KEY="someone-else"))
        response = self.client.get("/api/auth/me", headers={"Authorization": f"Bearer {foreign}"})
        self.assertEqual(response.status_code, 401)

    def test_expired_token_is_rejected(self):
        user = self.create_user("ana@bt2horizon.com")
        token = create_access_token(user, self.app.state.settings, expires_delta=timedelta(seconds=-5))
        self.assertIsNone(verify_token(token, self.app.state.settings))

    def test_users_list_is_admin_only(self):
        user = self.create_user("ana@bt2horizon.com")
        admin = self.create_user("boss@bt2horizon.com", role="admin")

        self.assertEqual(self.client.get("/api/users").status_code, 401)

        response = self.client.get("/api/users", headers=self.auth(user))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["error"], "Admin access required")

        response = self.client.get("/api/users", headers=self.auth(admin))
        self.assertEqual([u["email"] for u in response.json()], ["ana@bt2horizon.com", "boss@bt2horizon.com"])
        self.assertEqual(self.client.get("/api/users", headers=self.admin_key).status_code, 200)


class AdminKeyTests(ApiTestCase):
    def test_admin_key_active_window(self):
        self.assertFalse(Settings(_env_file=None, ADMIN_KEY="").admin_key_active())

        expires = datetime(2026, 1, 1, tzinfo=timezone.utc)
        settings = Settings(_env_file=None, ADMIN_KEY="k", ADMIN_KEY_EXPIRES_AT=expires)
        self.assertTrue(settings.admin_key_active(now=expires - timedelta(minutes=1)))
        self.assertFalse(settings.admin_key_active(now=expires))

    def test_wrong_admin_key(self):
        response = self.client.get("/api/users", headers={"x-admin-key": "guess"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"], "Unauthorized")


class ExpiredAdminKeyTests(ApiTestCase):
    settings_overrides = {"ADMIN_KEY_EXPIRES_AT": datetime(2020, 1, 1, tzinfo=timezone.utc)}

    def test_expired_admin_key_is_rejected(self):
        response = self.client.get("/api/users", headers={"x-admin-key": ADMIN_KEY})
        self.assertEqual(response.status_code, 401)


class DisabledAdminKeyTests(ApiTestCase):
    settings_overrides = {"ADMIN_KEY": ""}

    def test_empty_header_does_not_match_empty_key(self):
        response = self.client.get("/api/users", headers={"x-admin-key": ""})
        self.assertEqual(response.status_code, 401)
