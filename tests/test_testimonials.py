from horizon import models

from .helpers import ApiTestCase

REVIEW = {
    "name": "  Shanice Campbell ",
    "location": "Kingston, Jamaica",
    "text": "Everything about the Punta Cana trip was arranged perfectly.",
    "rating": 5,
}


class TestimonialTests(ApiTestCase):
    def submit(self, **overrides):
        return self.client.post("/api/testimonials", json=dict(REVIEW, **overrides))

    def test_submission_waits_for_approval(self):
        data = self.submit().json()
        self.assertTrue(data["success"])
        self.assertEqual(data["testimonial"]["status"], "pending")
        self.assertEqual(data["testimonial"]["name"], "Shanice Campbell")
        self.assertEqual(self.client.get("/api/testimonials").json(), [])

        url = f"/api/testimonials/{data['testimonial']['id']}"
        approved = self.client.put(
            url, json={"status": "approved", "adminNotes": "Verified booking"}, headers=self.admin_key
        ).json()
        self.assertEqual(approved["status"], "approved")
        self.assertEqual(approved["admin_notes"], "Verified booking")

        public = self.client.get("/api/testimonials").json()
        self.assertEqual([t["id"] for t in public], [data["testimonial"]["id"]])

    def test_validation(self):
        self.assertEqual(self.submit(text="Great!").json()["error"],
                         "Testimonial text must be at least 20 characters")
        self.assertEqual(self.submit(name="").json()["error"], "Name and testimonial text are required")
        self.assertEqual(self.submit(rating=6).status_code, 400)

    def test_default_rating_and_user_link(self):
        user = self.create_user("shanice@bt2horizon.com")
        data = self.client.post(
            "/api/testimonials", json=dict(REVIEW, rating=None), headers=self.auth(user)
        ).json()
        self.assertEqual(data["testimonial"]["rating"], 5)
        self.assertEqual(data["testimonial"]["user_id"], user.id)

    def test_admin_listing_and_moderation(self):
        first = self.submit().json()["testimonial"]
        self.submit(name="Omar").json()
        self.client.put(f"/api/testimonials/{first['id']}", json={"status": "rejected"}, headers=self.admin_key)

        pending = self.client.get("/api/testimonials/all?status=pending", headers=self.admin_key).json()
        self.assertEqual([t["name"] for t in pending], ["Omar"])
        self.assertEqual(len(self.client.get("/api/testimonials/all", headers=self.admin_key).json()), 2)
        self.assertEqual(self.client.get("/api/testimonials/all").status_code, 401)

        response = self.client.put(
            f"/api/testimonials/{first['id']}", json={"status": "hidden"}, headers=self.admin_key
        )
        self.assertEqual(response.json()["error"], "Invalid status")
        self.assertEqual(
            self.client.put("/api/testimonials/999", json={"status": "approved"}, headers=self.admin_key)
            .status_code,
            404,
        )

        response = self.client.delete(f"/api/testimonials/{first['id']}", headers=self.admin_key)
        self.assertEqual(response.json(), {"success": True})
        self.assertEqual(len(self.client.get("/api/testimonials/all", headers=self.admin_key).json()), 1)


class MissingTestimonialsTableTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        models.Testimonial.__table__.drop(self.app.state.engine)

    def test_public_list_is_empty(self):
        self.assertEqual(self.client.get("/api/testimonials").json(), [])

    def test_submission_reports_unavailable_feature(self):
        response = self.client.post("/api/testimonials", json=REVIEW)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"], "Testimonials feature not available. Please contact support.")
