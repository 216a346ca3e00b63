import unittest

from tests.helpers import API, create_customer, create_vehicle, days_from_today, make_client, register_admin, reset_database


class TestWarranties(unittest.TestCase):
    warranty = None

    @classmethod
    def setUpClass(cls):
        reset_database()
        cls.client = make_client()
        cls.headers = register_admin(cls.client)
        cls.owner = create_customer(cls.client, cls.headers, "Kim King", "kim@mail.com")
        cls.vehicle = create_vehicle(cls.client, cls.headers, cls.owner["id"], "WAR-1")

    def create(self, **fields):
        payload = {
            "customer_id": self.owner["id"],
            "vehicle_id": self.vehicle["id"],
            "warranty_type": "extended",
            "name": "Extended Care",
            "start_date": days_from_today(-30),
            "end_date": days_from_today(700),
            "mileage_limit": 100000,
            "current_mileage": 40000,
            "max_claim_amount": 1000,
            "coverage": {"engine": True, "brakes": True},
            **fields,
        }
        return self.client.post(f"{API}/warranties/", headers=self.headers, json=payload)

    def test_1_create(self):
        response = self.create()
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data["mileage_remaining"], 60000)
        self.assertFalse(data["is_expired"])
        self.assertEqual(data["days_until_expiration"], 700)
        self.assertTrue(data["coverage"]["engine"])
        self.assertFalse(data["coverage"]["fuel"])
        TestWarranties.warranty = data

    def test_2_period_and_vehicle_rules(self):
        response = self.create(start_date=days_from_today(10), end_date=days_from_today(10))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "End date must be after start date")

        stranger = create_customer(self.client, self.headers, "Lee Lane", "lee@mail.com")
        self.assertEqual(self.create(customer_id=stranger["id"]).status_code, 400)
        self.assertEqual(self.create(customer_id=9999).status_code, 404)

    def test_3_claims(self):
        url = f"{API}/warranties/{self.warranty['id']}/claim"
        response = self.client.patch(url, headers=self.headers, json={"claim_amount": 1500})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Claim amount exceeds maximum claim amount")

        data = self.client.patch(url, headers=self.headers, json={"claim_amount": 250.75}).json()
        self.assertEqual(data["total_claims"], 1)
        self.assertEqual(data["total_claim_amount"], 250.75)

    def test_4_claims_block_deletion(self):
        response = self.client.delete(f"{API}/warranties/{self.warranty['id']}", headers=self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Cannot delete warranty with existing claims")

    def test_5_stats(self):
        self.create(name="Powertrain", warranty_type="powertrain", end_date=days_from_today(30),
                    mileage_limit=50000, current_mileage=46000)

        stats = self.client.get(f"{API}/warranties/stats/overview", headers=self.headers).json()
        self.assertEqual(stats["total_warranties"], 2)
        self.assertEqual(stats["active_warranties"], 2)
        self.assertEqual(stats["expiring_soon"], 1)
        self.assertEqual(stats["mileage_expiring"], 1)
        self.assertEqual(stats["status_breakdown"][0]["total_claims"], 1)

        by_type = self.client.get(f"{API}/warranties/stats/by-type", headers=self.headers).json()
        self.assertEqual({row["warranty_type"] for row in by_type}, {"extended", "powertrain"})

    def test_6_mileage_past_limit_expires(self):
        url = f"{API}/warranties/{self.warranty['id']}/mileage"
        data = self.client.patch(url, headers=self.headers, json={"current_mileage": 95000}).json()
        self.assertEqual(data["status"], "active")

        data = self.client.patch(url, headers=self.headers, json={"current_mileage": 100001}).json()
        self.assertEqual(data["status"], "expired")
        self.assertEqual(data["mileage_remaining"], 0)

        response = self.client.patch(
            f"{API}/warranties/{self.warranty['id']}/claim", headers=self.headers, json={"claim_amount": 10}
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Warranty is not active")

    def test_7_lookups(self):
        by_customer = self.client.get(f"{API}/warranties/customer/{self.owner['id']}", headers=self.headers).json()
        self.assertEqual(len(by_customer), 2)
        # soonest expiry first
        self.assertEqual(by_customer[0]["name"], "Powertrain")

        by_vehicle = self.client.get(f"{API}/warranties/vehicle/{self.vehicle['id']}", headers=self.headers).json()
        self.assertEqual(len(by_vehicle), 2)

        expired = self.client.get(f"{API}/warranties/?status=expired", headers=self.headers).json()
        self.assertEqual(len(expired), 1)

    def test_8_update_and_delete(self):
        fresh = self.create(name="Short Term").json()
        url = f"{API}/warranties/{fresh['id']}"

        response = self.client.put(url, headers=self.headers, json={"end_date": days_from_today(-31)})
        self.assertEqual(response.status_code, 400)

        response = self.client.put(url, headers=self.headers, json={"provider": "AutoGuard"})
        self.assertEqual(response.json()["provider"], "AutoGuard")

        self.assertEqual(self.client.delete(url, headers=self.headers).status_code, 204)


if __name__ == "__main__":
    unittest.main()
