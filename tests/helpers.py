"""
Shared fixtures for the API tests: an app on in-memory SQLite with the
Telegram notifier and blob storage swapped for in-process fakes.
"""
import unittest
from types import SimpleNamespace

from fastapi.testclient import TestClient

from horizon import crud
from horizon.config import Settings
from horizon.main import create_app
from horizon.security import create_access_token, get_password_hash

ADMIN_KEY = "test-admin-key"


def build_settings(**overrides) -> Settings:
    values = dict(
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret",
        ADMIN_KEY=ADMIN_KEY,
        LOG_LEVEL="WARNING",
        MAIL_USERNAME="",
        MAIL_PASSWORD="",
        MAIL_SUPPRESS_SEND=False,
        TELEGRAM_BOT_TOKEN="",
        TELEGRAM_ADMIN_CHAT_IDS="",
        AZURE_STORAGE_CONNECTION_STRING="",
        FRONTEND_URL="https://bt2horizon.com",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeNotifier:
    """Records admin alerts instead of calling Telegram"""

    def __init__(self, admin_chat_ids=(1001,)):
        self.admin_chat_ids = list(admin_chat_ids)
        self.alerts = []
        self.test_messages = []

    @property
    def configured(self):
        return bool(self.admin_chat_ids)

    async def send_new_request_notification(self, **kwargs):
        self.alerts.append(kwargs)
        return True

    async def send_test_message(self, chat_id):
        self.test_messages.append(chat_id)
        return True


class FakeStorage:
    """Blob storage kept in a dict keyed by (bucket, path)"""

    def __init__(self):
        self.blobs = {}

    def upload(self, bucket, path, data, content_type=None):
        self.blobs[(bucket, path)] = data
        return {"url": f"https://blobs.test/{bucket}/{path}", "path": path}

    def list(self, bucket, folder=""):
        prefix = f"{folder}/" if folder else ""
        return [
            {"name": path[len(prefix):], "url": f"https://blobs.test/{bucket}/{path}", "size": len(data)}
            for (b, path), data in self.blobs.items()
            if b == bucket and path.startswith(prefix)
        ]

    def delete(self, bucket, path):
        self.blobs.pop((bucket, path), None)


class ApiTestCase(unittest.TestCase):
    settings_overrides = {}

    def setUp(self):
        self.app = create_app(build_settings(**self.settings_overrides))
        self.notifier = FakeNotifier()
        self.storage = FakeStorage()
        self.app.state.notifier = self.notifier
        self.app.state.storage = self.storage
        self.client = TestClient(self.app)

    def tearDown(self):
        self.app.state.engine.dispose()

    # Data helpers
    def add_row(self, accessor, **values):
        db = self.app.state.SessionLocal()
        try:
            return accessor.insert(db, **values)
        finally:
            db.close()

    def query(self, model, *criteria):
        db = self.app.state.SessionLocal()
        try:
            return db.query(model).filter(*criteria).all()
        finally:
            db.close()

    def create_user(self, email, password="secret123", role="user", name="Test Traveler"):
        return self.add_row(
            crud.users,
            email=email,
            password_hash=get_password_hash(password),
            name=name,
            role=role,
        )

    # Auth helpers
    def auth(self, user):
        token = create_access_token(user, self.app.state.settings)
        return {"Authorization": f"Bearer {token}"}

    def auth_as(self, user_id, role="user"):
        """Bearer header for a user that only exists in the token"""
        user = SimpleNamespace(id=user_id, email=f"user{user_id}@bt2horizon.com", role=role)
        return self.auth(user)

    @property
    def admin_key(self):
        return {"x-admin-key": ADMIN_KEY}
