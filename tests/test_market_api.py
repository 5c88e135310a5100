from tests.base import ApiTestCase


class MarketPriceTests(ApiTestCase):
    def _record(self, **overrides):
        payload = {
            "commodity": "Tomato",
            "unit": "kg",
            "min_price": "18",
            "max_price": "26",
            "market": "Kalimati",
            "price_date": "2025-06-01",
        }
        payload.update(overrides)
        return self.client.post("/api/v1/prices", json=payload)

    def test_today_is_empty_without_data(self):
        body = self.client.get("/api/v1/prices/today").get_json()
        self.assertEqual(body, {"success": True, "date": None, "prices": []})

    def test_today_returns_latest_day_only(self):
        self.login_as_admin()
        self.assertEqual(self._record().status_code, 201)
        self.assertEqual(self._record(commodity="Onion", price_date="2025-06-02").status_code, 201)
        self.assertEqual(self._record(commodity="Apple", price_date="2025-06-02", avg_price="20").status_code, 201)

        body = self.client.get("/api/v1/prices/today").get_json()
        self.assertEqual(body["date"], "2025-06-02")
        self.assertEqual([row["commodity"] for row in body["prices"]], ["Apple", "Onion"])
        self.assertEqual(body["prices"][1]["avg_price"], 22.0)

    def test_price_bounds_are_validated(self):
        self.login_as_admin()
        self.assertEqual(self._record(min_price="30", max_price="20").status_code, 400)
        self.assertEqual(self._record(avg_price="99").status_code, 400)
        self.assertEqual(self._record(commodity="").status_code, 400)

    def test_duplicate_day_is_a_conflict(self):
        self.login_as_admin()
        self.assertEqual(self._record().status_code, 201)
        self.assertEqual(self._record().status_code, 409)

    def test_only_admins_record_prices(self):
        self.login_as_farmer()
        self.assertEqual(self._record().status_code, 403)

    def test_non_finite_prices_are_rejected(self):
        self.login_as_admin()
        for overrides in ({"min_price": "NaN"}, {"max_price": "Infinity"}, {"avg_price": "sNaN"}):
            response = self._record(**overrides)
            self.assertEqual(response.status_code, 400, overrides)
            self.assertFalse(response.get_json()["success"])
