import unittest

from tests.helpers import API, create_customer, create_vehicle, make_client, register_admin, reset_database


class TestCustomerManagement(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        reset_database()
        cls.client = make_client()
        cls.headers = register_admin(cls.client)
        cls.alice = create_customer(cls.client, cls.headers, "Alice Adams", "alice@mail.com", city="Springfield")
        cls.bob = create_customer(cls.client, cls.headers, "Bob Brown", "bob@mail.com", status="prospect")
        cls.carl = create_customer(
            cls.client, cls.headers, "Carl Cole", "carl@mail.com", business_name="Cole Logistics", status="inactive"
        )

    def test_01_duplicate_email_rejected(self):
        response = self.client.post(f"{API}/customers/", headers=self.headers, json={
            "name": "Alice Again", "email": "ALICE@mail.com", "phone": "5550001111",
        })
        self.assertEqual(response.status_code, 409)

    def test_02_list_is_paginated(self):
        response = self.client.get(f"{API}/customers/?limit=2", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["total"], 3)
        self.assertEqual(data["pages"], 2)
        self.assertTrue(data["has_next"])
        self.assertFalse(data["has_prev"])
        self.assertEqual(len(data["items"]), 2)

        second = self.client.get(f"{API}/customers/?limit=2&page=2", headers=self.headers).json()
        self.assertEqual(len(second["items"]), 1)
        self.assertTrue(second["has_prev"])

    def test_03_search_covers_business_and_address(self):
        found = self.client.get(f"{API}/customers/?search=logistics", headers=self.headers).json()
        self.assertEqual([c["name"] for c in found["items"]], ["Carl Cole"])

        found = self.client.get(f"{API}/customers/?search=springfield", headers=self.headers).json()
        self.assertEqual([c["name"] for c in found["items"]], ["Alice Adams"])

    def test_04_status_filter_and_sorting(self):
        found = self.client.get(f"{API}/customers/?status=prospect", headers=self.headers).json()
        self.assertEqual(found["total"], 1)
        self.assertEqual(found["items"][0]["email"], "bob@mail.com")

        ordered = self.client.get(f"{API}/customers/?sort_by=name&sort_order=asc", headers=self.headers).json()
        self.assertEqual([c["name"] for c in ordered["items"]], ["Alice Adams", "Bob Brown", "Carl Cole"])

    def test_05_stats(self):
        stats = self.client.get(f"{API}/customers/stats/overview", headers=self.headers).json()
        self.assertEqual(stats["total"], 3)
        self.assertEqual(stats["by_status"], {"active": 1, "inactive": 1, "prospect": 1})
        self.assertEqual(stats["new_this_month"], 3)

    def test_06_update(self):
        response = self.client.put(f"{API}/customers/{self.bob['id']}", headers=self.headers, json={
            "status": "active", "street": "1 Main St",
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "active")
        self.assertIn("1 Main St", response.json()["full_address"])

        response = self.client.put(f"{API}/customers/{self.bob['id']}", headers=self.headers, json={
            "email": "alice@mail.com",
        })
        self.assertEqual(response.status_code, 409)

        # required columns ignore an explicit null, optional ones are cleared
        response = self.client.put(f"{API}/customers/{self.bob['id']}", headers=self.headers, json={
            "name": None, "phone": None, "street": None,
        })
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["name"], "Bob Brown")
        self.assertEqual(data["phone"], "5550001111")
        self.assertIsNone(data["street"])

    def test_07_vehicles_and_history(self):
        customer_id = self.alice["id"]
        response = self.client.post(f"{API}/customers/{customer_id}/vehicles", headers=self.headers, json={
            "make": "Honda", "model": "Civic", "year": 2018, "license_plate": "ABC-123",
        })
        self.assertEqual(response.status_code, 201)
        vehicle = response.json()
        self.assertEqual(vehicle["full_name"], "2018 Honda Civic")

        response = self.client.post(f"{API}/customers/{customer_id}/service-history", headers=self.headers, json={
            "vehicle_id": vehicle["id"],
            "service_type": "Oil Change",
            "service_date": "2024-05-01",
            "total_cost": 59.99,
        })
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["vehicle_make"], "Honda")

        history = self.client.get(f"{API}/customers/{customer_id}/service-history", headers=self.headers).json()
        self.assertEqual(len(history), 1)

        other = create_vehicle(self.client, self.headers, self.bob["id"], "BOB-1")
        response = self.client.post(f"{API}/customers/{customer_id}/service-history", headers=self.headers, json={
            "vehicle_id": other["id"], "service_type": "Oil Change", "service_date": "2024-05-01",
        })
        self.assertEqual(response.status_code, 400)

    def test_08_delete_cascades(self):
        customer_id = self.carl["id"]
        create_vehicle(self.client, self.headers, customer_id, "CARL-1")

        response = self.client.delete(f"{API}/customers/{customer_id}", headers=self.headers)
        self.assertEqual(response.status_code, 204)
        self.assertEqual(self.client.get(f"{API}/customers/{customer_id}", headers=self.headers).status_code, 404)

        vehicles = self.client.get(f"{API}/vehicles/?customer_id={customer_id}", headers=self.headers).json()
        self.assertEqual(vehicles, [])


class TestVehicles(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        reset_database()
        cls.client = make_client()
        cls.headers = register_admin(cls.client)
        cls.owner = create_customer(cls.client, cls.headers, "Dana Driver", "dana@mail.com")

    def test_1_plates_are_unique(self):
        create_vehicle(self.client, self.headers, self.owner["id"], "XYZ-999")
        response = self.client.post(f"{API}/vehicles/", headers=self.headers, json={
            "customer_id": self.owner["id"], "make": "Ford", "model": "Focus", "year": 2015,
            "license_plate": "XYZ-999",
        })
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "License plate already registered")

    def test_2_unknown_owner(self):
        response = self.client.post(f"{API}/vehicles/", headers=self.headers, json={
            "customer_id": 9999, "make": "Ford", "model": "Focus", "year": 2015, "license_plate": "NEW-1",
        })
        self.assertEqual(response.status_code, 404)

    def test_3_update_and_delete(self):
        vehicle = create_vehicle(self.client, self.headers, self.owner["id"], "UPD-1")
        response = self.client.put(f"{API}/vehicles/{vehicle['id']}", headers=self.headers, json={"mileage": 50000})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["mileage"], 50000)

        response = self.client.put(f"{API}/vehicles/{vehicle['id']}", headers=self.headers, json={
            "license_plate": "XYZ-999",
        })
        self.assertEqual(response.status_code, 400)

        self.assertEqual(self.client.delete(f"{API}/vehicles/{vehicle['id']}", headers=self.headers).status_code, 204)
        self.assertEqual(self.client.get(f"{API}/vehicles/{vehicle['id']}", headers=self.headers).status_code, 404)

    def test_4_invalid_year(self):
        response = self.client.post(f"{API}/vehicles/", headers=self.headers, json={
            "customer_id": self.owner["id"], "make": "Ford", "model": "T", "year": 1850, "license_plate": "OLD-1",
        })
        self.assertEqual(response.status_code, 422)


class TestWorkOrders(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        reset_database()
        cls.client = make_client()
        cls.headers = register_admin(cls.client)
        cls.owner = create_customer(cls.client, cls.headers, "Evan Evans", "evan@mail.com")
        cls.vehicle = create_vehicle(cls.client, cls.headers, cls.owner["id"], "WO-1")

    def test_1_catalog(self):
        response = self.client.post(f"{API}/services/catalog", headers=self.headers, json={
            "name": "Oil Change", "category": "maintenance", "base_price": 49.99, "estimated_duration": 30,
        })
        self.assertEqual(response.status_code, 201)

        response = self.client.post(f"{API}/services/catalog", headers=self.headers, json={
            "name": "Oil Change", "base_price": 10,
        })
        self.assertEqual(response.status_code, 409)

        catalog = self.client.get(f"{API}/services/catalog?category=maintenance", headers=self.headers).json()
        self.assertEqual(len(catalog), 1)
        self.assertIn("repair", self.client.get(f"{API}/services/categories", headers=self.headers).json())

    def test_2_completion_writes_history_once(self):
        response = self.client.post(f"{API}/services/workorders", headers=self.headers, json={
            "vehicle_id": self.vehicle["id"], "service_type": "Brake Service", "cost": 320.0, "mileage": 43000,
        })
        self.assertEqual(response.status_code, 201)
        order = response.json()
        self.assertEqual(order["status"], "pending")
        self.assertIsNone(order["completed_date"])

        url = f"{API}/services/workorders/{order['id']}"
        response = self.client.put(url, headers=self.headers, json={"status": "completed"})
        self.assertEqual(response.status_code, 200)
        self.assertIsNotNone(response.json()["completed_date"])

        # a second completion update does not duplicate the record
        self.client.put(url, headers=self.headers, json={"status": "completed", "notes": "Checked again"})

        history = self.client.get(
            f"{API}/customers/{self.owner['id']}/service-history", headers=self.headers
        ).json()
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0]["service_type"], "Brake Service")
        self.assertEqual(history[0]["total_cost"], 320.0)
        self.assertEqual(history[0]["work_order_id"], order["id"])

    def test_3_stats(self):
        self.client.post(f"{API}/services/workorders", headers=self.headers, json={
            "vehicle_id": self.vehicle["id"], "service_type": "Inspection", "cost": 80.0,
        })
        stats = self.client.get(f"{API}/services/workorders/stats/overview", headers=self.headers).json()
        self.assertEqual(stats["total"], 2)
        self.assertEqual(stats["by_status"]["completed"], 1)
        self.assertEqual(stats["by_status"]["pending"], 1)
        self.assertEqual(stats["completed_revenue"], 320.0)

    def test_4_unknown_vehicle(self):
        response = self.client.post(f"{API}/services/workorders", headers=self.headers, json={
            "vehicle_id": 4040, "service_type": "Inspection", "cost": 80.0,
        })
        self.assertEqual(response.status_code, 404)
        self.assertEqual(
            self.client.get(f"{API}/services/workorders/4040", headers=self.headers).status_code, 404
        )


if __name__ == "__main__":
    unittest.main()
