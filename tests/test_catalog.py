from datetime import datetime, timedelta

from horizon import crud
from horizon.routers.packages import package_images

from .helpers import ApiTestCase


class PostTests(ApiTestCase):
    def test_crud(self):
        created = self.client.post(
            "/api/posts", json={"title": "Visa tips", "slug": "visa-tips", "content": "Apply early."},
            headers=self.admin_key,
        ).json()
        self.client.post("/api/posts", json={"title": "Packing list", "slug": "packing"}, headers=self.admin_key)

        posts = self.client.get("/api/posts").json()
        self.assertEqual([p["slug"] for p in posts], ["packing", "visa-tips"])

        url = f"/api/posts/{created['id']}"
        self.assertEqual(self.client.put(url, json={"title": "Visa tips 2026"}, headers=self.admin_key).json(),
                         {"ok": True})
        post = next(p for p in self.client.get("/api/posts").json() if p["id"] == created["id"])
        self.assertEqual(post["title"], "Visa tips 2026")
        self.assertEqual(post["content"], "Apply early.")

        self.assertEqual(self.client.delete(url, headers=self.admin_key).json(), {"ok": True})
        self.assertEqual(len(self.client.get("/api/posts").json()), 1)
        self.assertEqual(self.client.put(url, json={"title": "x"}, headers=self.admin_key).status_code, 404)

    def test_writes_need_admin(self):
        self.assertEqual(self.client.post("/api/posts", json={"title": "x"}).status_code, 401)


class PackageTests(ApiTestCase):
    def test_package_images(self):
        self.assertEqual(package_images(["", "a.jpg", "  ", "b.jpg"], None), ["a.jpg", "b.jpg"])
        self.assertEqual(package_images(None, "legacy.jpg"), ["legacy.jpg"])
        self.assertEqual(package_images([], " "), [])

    def test_create_and_list(self):
        response = self.client.post(
            "/api/packages",
            json={"code": "BT2-JAM-04", "title": "Jamaica", "nights": 5, "price": 999,
                  "images": ["", "https://cdn.bt2horizon.com/jam.jpg"]},
            headers=self.admin_key,
        )
        self.assertEqual(response.status_code, 200)

        package = self.client.get("/api/packages").json()[0]
        self.assertEqual(package["id"], response.json()["id"])
        self.assertEqual(package["price"], "999")
        self.assertEqual(package["images"], ["https://cdn.bt2horizon.com/jam.jpg"])
        self.assertEqual(package["img"], "https://cdn.bt2horizon.com/jam.jpg")

    def test_image_required(self):
        response = self.client.post(
            "/api/packages", json={"code": "X", "title": "No pictures", "images": [""]}, headers=self.admin_key
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "At least 1 image is required")

    def test_legacy_row_exposes_img_as_images(self):
        self.add_row(crud.packages, code="OLD", title="Old package", img="/assets/old.jpg", images=None)
        package = self.client.get("/api/packages").json()[0]
        self.assertEqual(package["images"], ["/assets/old.jpg"])

    def test_update(self):
        package_id = self.client.post(
            "/api/packages", json={"title": "London", "nights": 4, "img": "/a.jpg"}, headers=self.admin_key
        ).json()["id"]
        url = f"/api/packages/{package_id}"

        response = self.client.put(url, json={"nights": 5}, headers=self.admin_key)
        self.assertEqual(response.status_code, 400)

        response = self.client.put(url, json={"nights": 5, "images": ["/b.jpg", "/c.jpg"]}, headers=self.admin_key)
        self.assertEqual(response.json(), {"ok": True})
        package = self.client.get("/api/packages").json()[0]
        self.assertEqual(package["title"], "London")
        self.assertEqual(package["nights"], 5)
        self.assertEqual(package["img"], "/b.jpg")

        self.assertEqual(self.client.put("/api/packages/999", json={"img": "/a.jpg"}, headers=self.admin_key)
                         .status_code, 404)


class CrazyDealTests(ApiTestCase):
    def test_only_active_unexpired_deals_are_public(self):
        now = datetime.utcnow()
        self.add_row(crud.crazy_deals, title="Later", end_date=now + timedelta(days=3), active=True)
        self.add_row(crud.crazy_deals, title="Soon", end_date=now + timedelta(hours=2), active=True)
        self.add_row(crud.crazy_deals, title="Expired", end_date=now - timedelta(hours=1), active=True)
        self.add_row(crud.crazy_deals, title="Paused", end_date=now + timedelta(days=1), active=False)

        titles = [d["title"] for d in self.client.get("/api/crazy-deals").json()]
        self.assertEqual(titles, ["Soon", "Later"])
        self.assertEqual(len(self.client.get("/api/crazy-deals/all", headers=self.admin_key).json()), 4)

    def test_create_normalises_end_date_to_utc(self):
        response = self.client.post(
            "/api/crazy-deals",
            json={"title": "Santorini", "discount_percent": 40, "end_date": "2030-06-01T12:00:00+02:00"},
            headers=self.admin_key,
        )
        deal = response.json()
        self.assertEqual(deal["end_date"], "2030-06-01T10:00:00")
        self.assertTrue(deal["active"])

        response = self.client.post("/api/crazy-deals", json={"title": "No end"}, headers=self.admin_key)
        self.assertEqual(response.json()["error"], "Title and end date are required")

    def test_update_and_delete(self):
        deal = self.client.post(
            "/api/crazy-deals", json={"title": "Cancun", "end_date": "2030-01-01T00:00:00"}, headers=self.admin_key
        ).json()
        url = f"/api/crazy-deals/{deal['id']}"
        self.client.put(url, json={"active": False}, headers=self.admin_key)
        self.assertEqual(self.client.get("/api/crazy-deals").json(), [])
        self.assertEqual(self.client.delete(url, headers=self.admin_key).json(), {"ok": True})
        self.assertEqual(self.client.get("/api/crazy-deals/all", headers=self.admin_key).json(), [])


class DestinationTests(ApiTestCase):
    def test_ordered_by_display_order(self):
        for order, city in ((2, "Cancun"), (1, "Montego Bay"), (3, "Cartagena")):
            self.client.post(
                "/api/affordable-destinations",
                json={"country": "Somewhere", "city": city, "price": 299, "display_order": order},
                headers=self.admin_key,
            )
        rows = self.client.get("/api/affordable-destinations").json()
        self.assertEqual([r["city"] for r in rows], ["Montego Bay", "Cancun", "Cartagena"])
        self.assertEqual(rows[0]["price"], "299")

        self.client.put(f"/api/affordable-destinations/{rows[0]['id']}", json={"active": False},
                        headers=self.admin_key)
        self.assertEqual(len(self.client.get("/api/affordable-destinations").json()), 2)
        self.assertEqual(
            len(self.client.get("/api/affordable-destinations/all", headers=self.admin_key).json()), 3
        )

    def test_country_and_city_required(self):
        response = self.client.post(
            "/api/affordable-destinations", json={"country": "Mexico"}, headers=self.admin_key
        )
        self.assertEqual(response.json()["error"], "Country and city are required")


class CalendarDealTests(ApiTestCase):
    def save(self, **body):
        return self.client.post("/api/calendar-deals", json=body, headers=self.admin_key)

    def test_one_deal_per_day(self):
        first = self.save(deal_date="2026-12-24", deal_type="flight", title="Xmas flights").json()
        second = self.save(deal_date="2026-12-24", deal_type="hotel", title="Xmas hotels").json()
        self.assertEqual(first["id"], second["id"])
        self.assertEqual(second["deal_type"], "hotel")
        self.assertEqual(len(self.client.get("/api/calendar-deals").json()), 1)

    def test_date_range_and_inactive(self):
        self.save(deal_date="2026-11-01", deal_type="visa")
        self.save(deal_date="2026-12-01", deal_type="package")
        self.save(deal_date="2026-12-15", deal_type="flight", active=False)

        rows = self.client.get("/api/calendar-deals?startDate=2026-11-15&endDate=2026-12-31").json()
        self.assertEqual([r["deal_date"] for r in rows], ["2026-12-01"])
        self.assertEqual(len(self.client.get("/api/calendar-deals/all", headers=self.admin_key).json()), 3)

    def test_validation_and_delete(self):
        self.assertEqual(self.save(deal_date="2026-11-01", deal_type="cruise").json()["error"], "Invalid deal type")
        self.assertEqual(self.save(deal_type="flight").json()["error"], "Deal date and type are required")

        deal = self.save(deal_date="2026-11-01", deal_type="visa").json()
        response = self.client.delete(f"/api/calendar-deals/{deal['id']}", headers=self.admin_key)
        self.assertEqual(response.json(), {"success": True})
        self.assertEqual(self.client.get("/api/calendar-deals").json(), [])
