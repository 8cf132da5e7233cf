from horizon import models

from .helpers import ApiTestCase


class RequestVisibilityTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.owner = self.create_user("owner@bt2horizon.com")
        self.other = self.create_user("other@bt2horizon.com")
        self.admin = self.create_user("admin@bt2horizon.com", role="admin")

        response = self.client.post(
            "/api/requests",
            json={"requestType": "visa", "title": "Schengen visa", "userId": self.other.id},
            headers=self.auth(self.owner),
        )
        self.assertEqual(response.status_code, 200)
        self.request = response.json()

    def test_token_identity_wins_over_body_user_id(self):
        self.assertEqual(self.request["user_id"], self.owner.id)
        self.assertEqual(self.request["status"], "pending")
        self.assertEqual(self.request["payment_status"], "none")

    def test_list_is_scoped_to_caller(self):
        self.assertEqual(self.client.get("/api/requests").json(), [])

        mine = self.client.get("/api/requests", headers=self.auth(self.owner)).json()
        self.assertEqual([r["id"] for r in mine], [self.request["id"]])

        self.assertEqual(self.client.get("/api/requests", headers=self.auth(self.other)).json(), [])
        spoofed = self.client.get(
            f"/api/requests?userId={self.owner.id}", headers=self.auth(self.other)
        ).json()
        self.assertEqual(spoofed, [])

        self.assertEqual(len(self.client.get("/api/requests", headers=self.auth(self.admin)).json()), 1)
        self.assertEqual(len(self.client.get("/api/requests", headers=self.admin_key).json()), 1)

    def test_list_filters(self):
        self.client.post(
            "/api/requests",
            json={"requestType": "passport", "title": "Renewal"},
            headers=self.auth(self.owner),
        )
        rows = self.client.get("/api/requests?requestType=passport", headers=self.auth(self.admin)).json()
        self.assertEqual([r["title"] for r in rows], ["Renewal"])

        rows = self.client.get("/api/requests", headers=self.auth(self.admin)).json()
        self.assertEqual([r["title"] for r in rows], ["Renewal", "Schengen visa"])

    def test_get_single(self):
        url = f"/api/requests/{self.request['id']}"
        self.assertEqual(self.client.get(url).status_code, 401)

        response = self.client.get(url, headers=self.auth(self.other))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["error"], "Access denied")

        self.assertEqual(self.client.get(url, headers=self.auth(self.owner)).status_code, 200)
        self.assertEqual(self.client.get(url, headers=self.admin_key).status_code, 200)
        self.assertEqual(self.client.get("/api/requests/999", headers=self.admin_key).status_code, 404)

    def test_create_requires_identity(self):
        response = self.client.post("/api/requests", json={"requestType": "visa", "title": "Visa"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"], "User ID required")

        response = self.client.post("/api/requests", json={"title": "Visa"}, headers=self.auth(self.owner))
        self.assertEqual(response.json()["error"], "Request type and title are required")


class RequestUpdateTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.owner = self.create_user("owner@bt2horizon.com")
        self.admin = self.create_user("admin@bt2horizon.com", role="admin")
        self.request_id = self.client.post(
            "/api/requests",
            json={"requestType": "package", "title": "Greek Islands"},
            headers=self.auth(self.owner),
        ).json()["id"]
        self.url = f"/api/requests/{self.request_id}"

    def test_update_is_admin_only(self):
        response = self.client.put(self.url, json={"status": "completed"}, headers=self.auth(self.owner))
        self.assertEqual(response.status_code, 403)

    def test_invalid_values(self):
        response = self.client.put(self.url, json={"status": "lost"}, headers=self.auth(self.admin))
        self.assertEqual(response.json()["error"], "Invalid status")

        response = self.client.put(self.url, json={"paymentStatus": "refunded"}, headers=self.auth(self.admin))
        self.assertEqual(response.json()["error"], "Invalid payment status")

    def test_status_and_notes(self):
        response = self.client.put(
            self.url,
            json={"status": "in_progress", "adminNotes": "Called the client"},
            headers=self.auth(self.admin),
        )
        data = response.json()
        self.assertEqual(data["status"], "in_progress")
        self.assertEqual(data["admin_notes"], "Called the client")
        self.assertEqual(data["payment_status"], "none")

    def test_payment_flow(self):
        response = self.client.put(
            self.url,
            json={"paymentStatus": "awaiting_payment", "paymentInfo": {"amount": 1099}},
            headers=self.auth(self.admin),
        )
        self.assertEqual(response.json()["payment_info"], {"amount": 1099})

        received = self.client.post(f"{self.url}/payment-received", headers=self.auth(self.owner))
        self.assertEqual(received.json()["payment_status"], "payment_received")

        confirmed = self.client.put(
            self.url, json={"paymentStatus": "payment_confirmed"}, headers=self.auth(self.admin)
        ).json()
        self.assertEqual(confirmed["payment_status"], "payment_confirmed")
        self.assertEqual(confirmed["payment_confirmed_by"], self.admin.id)
        self.assertIsNotNone(confirmed["payment_confirmed_at"])

        # A repeat confirmation keeps the original stamp
        again = self.client.put(
            self.url, json={"paymentStatus": "payment_confirmed"}, headers=self.admin_key
        ).json()
        self.assertEqual(again["payment_confirmed_by"], self.admin.id)
        self.assertEqual(again["payment_confirmed_at"], confirmed["payment_confirmed_at"])

    def test_payment_received_by_someone_else(self):
        stranger = self.create_user("stranger@bt2horizon.com")
        response = self.client.post(f"{self.url}/payment-received", headers=self.auth(stranger))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.client.post(f"{self.url}/payment-received").status_code, 401)


class MissingRequestsTableTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        models.ServiceRequest.__table__.drop(self.app.state.engine)

    def test_reads_degrade_to_empty(self):
        self.assertEqual(self.client.get("/api/requests", headers=self.admin_key).json(), [])
        response = self.client.get("/api/requests/1", headers=self.admin_key)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "Request not found")
