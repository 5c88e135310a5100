from unittest import mock

from tests.base import ApiTestCase


class AppTests(ApiTestCase):
    def test_index(self):
        body = self.client.get("/").get_json()
        self.assertTrue(body["success"])

    def test_unknown_route_returns_json_404(self):
        response = self.client.get("/api/v1/does-not-exist")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json(), {"success": False, "error": "Route not found"})

    def test_wrong_method(self):
        response = self.client.patch("/api/v1/listings")
        self.assertEqual(response.status_code, 405)
        self.assertFalse(response.get_json()["success"])

    def test_oversized_upload_is_rejected(self):
        self.login_as_admin()
        self.app.config["MAX_CONTENT_LENGTH"] = 16
        response = self.client.post(
            "/api/v1/listings",
            data={"name": "x" * 64},
            content_type="multipart/form-data",
        )
        self.assertEqual(response.status_code, 413)
        self.assertEqual(self.stored_files(), [])

    def test_unexpected_errors_are_hidden(self):
        with mock.patch(
            "agromart.services.listing_service.ListingService.list_listings", side_effect=RuntimeError("secret")
        ):
            response = self.client.get("/api/v1/listings")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.get_json(), {"success": False, "error": "Internal Server Error"})
