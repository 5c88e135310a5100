from datetime import timedelta
from decimal import Decimal
from io import BytesIO

from agromart.extensions import db
from agromart.models import Equipment
from agromart.models.base import as_utc, utcnow
from tests.base import ApiTestCase, png_bytes


class EquipmentWriteTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.login_as_admin()

    def test_create_with_legacy_payload_computes_availability(self):
        response = self.client.post(
            "/api/v1/equipment",
            json={
                "toolName": "Tiller-X",
                "category": "Tiller",
                "rentalPricePerHour": 50,
                "availableFrom": "2024-01-01",
                "availableTo": "2024-01-02",
            },
        )
        self.assertEqual(response.status_code, 201)
        data = response.get_json()["data"]
        self.assertEqual(data["name"], "Tiller-X")
        self.assertEqual(data["price_per_hour"], 50.0)
        self.assertFalse(data["is_available"])
        self.assertEqual(Equipment.query.count(), 1)

    def test_window_must_be_ordered(self):
        for start, end in (("2024-01-02", "2024-01-01"), ("2024-01-01", "2024-01-01")):
            response = self.client.post(
                "/api/v1/equipment",
                json={
                    "name": "Backwards",
                    "category": "Tractor",
                    "price_per_hour": "30",
                    "available_from": start,
                    "available_to": end,
                },
            )
            self.assertEqual(response.status_code, 400)
            self.assertEqual(response.get_json()["error"], "Available To date must be after Available From date")
        self.assertEqual(Equipment.query.count(), 0)

    def test_offset_bounds_are_stored_in_utc(self):
        response = self.client.post(
            "/api/v1/equipment",
            json={
                "name": "Offset Tiller",
                "category": "Tiller",
                "price_per_hour": "40",
                "availableFrom": "2024-01-01T10:00:00+05:30",
                "availableTo": "2024-01-01T06:00:00+00:00",
            },
        )
        self.assertEqual(response.status_code, 201)
        data = response.get_json()["data"]
        self.assertEqual(data["available_from"], "2024-01-01T04:30:00+00:00")
        self.assertEqual(data["available_to"], "2024-01-01T06:00:00+00:00")

        stored = db.session.get(Equipment, data["id"])
        db.session.refresh(stored)
        self.assertEqual(as_utc(stored.available_from).isoformat(), "2024-01-01T04:30:00+00:00")

    def test_offset_window_that_overlaps_in_utc_is_rejected(self):
        response = self.client.post(
            "/api/v1/equipment",
            json={
                "name": "Offset Harvester",
                "category": "Harvester",
                "price_per_hour": "90",
                "available_from": "2024-01-01T12:00:00+05:30",
                "available_to": "2024-01-01T06:00:00Z",
            },
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(Equipment.query.count(), 0)

    def test_category_must_be_known(self):
        response = self.client.post(
            "/api/v1/equipment",
            json={
                "name": "Mystery",
                "category": "Drone",
                "price_per_hour": "30",
                "available_from": "2024-01-01",
                "available_to": "2024-02-01",
            },
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("Invalid category", response.get_json()["error"])

    def test_missing_fields(self):
        response = self.client.post("/api/v1/equipment", json={"name": "Half"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.get_json()["error"],
            "Missing required fields: category, price_per_hour, available_from, available_to",
        )

    def test_duplicate_name_is_a_conflict(self):
        self.add_equipment(name="Harvester 9")
        response = self.client.post(
            "/api/v1/equipment",
            json={
                "name": "Harvester 9",
                "category": "Harvester",
                "price_per_hour": "90",
                "available_from": "2024-01-01",
                "available_to": "2024-02-01",
            },
        )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.get_json()["error"], "Machine with this name already exists")
        self.assertEqual(Equipment.query.count(), 1)

    def test_create_with_image_upload(self):
        data = {
            "name": "Rotary tiller",
            "category": "Tiller",
            "price_per_hour": "35",
            "available_from": "2024-01-01T06:00:00",
            "available_to": "2030-01-01T18:00:00",
            "image": (BytesIO(png_bytes()), "tiller.webp"),
        }
        response = self.client.post("/api/v1/equipment", data=data, content_type="multipart/form-data")
        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.get_json()["data"]["image_path"].startswith("uploads/equipment/"))
        self.assertEqual(len(self.stored_files()), 1)

    def test_update_window_checked_against_stored_bound(self):
        equipment = self.add_equipment()
        too_late = (as_utc(equipment.available_to) + timedelta(days=1)).isoformat()
        response = self.client.put(f"/api/v1/equipment/{equipment.id}", json={"available_from": too_late})
        self.assertEqual(response.status_code, 400)

    def test_update_with_both_bounds_reversed(self):
        equipment = self.add_equipment()
        response = self.client.put(
            f"/api/v1/equipment/{equipment.id}",
            json={"availableFrom": "2025-05-02", "availableTo": "2025-05-01"},
        )
        self.assertEqual(response.status_code, 400)

    def test_update_is_all_or_nothing(self):
        equipment = self.add_equipment()
        response = self.client.put(
            f"/api/v1/equipment/{equipment.id}",
            json={"price_per_hour": "80", "owner": "someone"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["error"], "Invalid updates!")
        db.session.refresh(equipment)
        self.assertEqual(equipment.price_per_hour, Decimal("45"))

    def test_partial_update(self):
        equipment = self.add_equipment()
        response = self.client.put(
            f"/api/v1/equipment/{equipment.id}",
            json={"rentalTerms": "Fuel not included", "pickupOption": "Farm gate"},
        )
        self.assertEqual(response.status_code, 200)
        data = response.get_json()["data"]
        self.assertEqual(data["rental_terms"], "Fuel not included")
        self.assertEqual(data["pickup_option"], "Farm gate")
        self.assertEqual(data["name"], "Mahindra 575")

    def test_delete(self):
        equipment = self.add_equipment()
        response = self.client.delete(f"/api/v1/equipment/{equipment.id}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {"success": True, "data": {}})
        self.assertEqual(Equipment.query.count(), 0)

    def test_malformed_ids(self):
        for method in ("get", "put", "delete"):
            response = getattr(self.client, method)("/api/v1/equipment/12345", json={})
            self.assertEqual(response.status_code, 400)
            self.assertEqual(response.get_json()["error"], "Invalid machine ID format")


class EquipmentReadTests(ApiTestCase):
    def test_current_window_is_available(self):
        equipment = self.add_equipment()
        body = self.client.get(f"/api/v1/equipment/{equipment.id}").get_json()
        self.assertTrue(body["data"]["is_available"])

    def test_expired_window_is_unavailable(self):
        now = utcnow()
        equipment = self.add_equipment(available_from=now - timedelta(days=10), available_to=now - timedelta(days=1))
        body = self.client.get(f"/api/v1/equipment/{equipment.id}").get_json()
        self.assertFalse(body["data"]["is_available"])

    def test_not_found(self):
        response = self.client.get(f"/api/v1/equipment/{'d' * 24}")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json(), {"success": False, "error": "Machine not found"})

    def test_list_filters_by_price_range_and_category(self):
        self.add_equipment(name="Small tractor", price_per_hour=Decimal("30"))
        self.add_equipment(name="Big tractor", price_per_hour=Decimal("70"))
        self.add_equipment(name="Combine", category="Harvester", price_per_hour=Decimal("60"))
        body = self.client.get("/api/v1/equipment?category=Tractor&price_per_hour[lte]=60").get_json()
        self.assertEqual([item["name"] for item in body["data"]], ["Small tractor"])

    def test_list_projection_includes_computed_availability(self):
        self.add_equipment()
        body = self.client.get("/api/v1/equipment?fields=name,is_available").get_json()
        self.assertEqual(set(body["data"][0]), {"id", "name", "is_available"})
        self.assertTrue(body["data"][0]["is_available"])

    def test_list_rejects_unknown_operator(self):
        response = self.client.get("/api/v1/equipment?price_per_hour[regex]=1")
        self.assertEqual(response.status_code, 400)
