from .helpers import ApiTestCase

ACCOUNT = {
    "bank_name": "National Commercial Bank",
    "account_name": "BT2 Horizon Ltd",
    "account_number": "404-555-1234",
    "swift_code": "JNCBJMKX",
}


class BankDetailTests(ApiTestCase):
    def create(self, **overrides):
        return self.client.post("/api/bank-details", json=dict(ACCOUNT, **overrides), headers=self.admin_key)

    def test_create_defaults(self):
        data = self.create().json()
        self.assertEqual(data["currency"], "USD")
        self.assertTrue(data["active"])
        self.assertEqual([d["id"] for d in self.client.get("/api/bank-details").json()], [data["id"]])

    def test_required_fields(self):
        response = self.create(account_number="")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["error"], "Bank name, account name, and account number are required"
        )
        self.assertEqual(self.client.post("/api/bank-details", json=ACCOUNT).status_code, 401)

    def test_partial_update_keeps_required_fields(self):
        detail = self.create(currency="JMD").json()
        url = f"/api/bank-details/{detail['id']}"

        data = self.client.put(
            url, json={"bank_name": "", "currency": None, "instructions": "Use your request number"},
            headers=self.admin_key,
        ).json()
        self.assertEqual(data["bank_name"], "National Commercial Bank")
        self.assertEqual(data["currency"], "JMD")
        self.assertEqual(data["instructions"], "Use your request number")

        self.client.put(url, json={"active": False}, headers=self.admin_key)
        self.assertEqual(self.client.get("/api/bank-details").json(), [])

        self.assertEqual(self.client.put("/api/bank-details/999", json={}, headers=self.admin_key).status_code, 404)
