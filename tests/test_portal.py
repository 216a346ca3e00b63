import unittest

from tests.helpers import (
    API, create_customer, create_invoice, create_vehicle, days_from_today, make_client, register_admin,
    register_customer, reset_database,
)

PORTAL = f"{API}/portal"


class TestCustomerPortal(unittest.TestCase):
    vehicle = None
    appointment = None
    invoice = None

    @classmethod
    def setUpClass(cls):
        reset_database()
        cls.client = make_client()
        cls.admin = register_admin(cls.client)
        cls.headers, cls.customer_id = register_customer(cls.client, "nora@mail.com", "Nora North")
        cls.neighbour = create_customer(cls.client, cls.admin, "Owen Oak", "owen@mail.com")
        cls.foreign_vehicle = create_vehicle(cls.client, cls.admin, cls.neighbour["id"], "OWEN-1")

    def test_01_profile(self):
        profile = self.client.get(f"{PORTAL}/profile", headers=self.headers).json()
        self.assertEqual(profile["id"], self.customer_id)
        self.assertEqual(profile["email"], "nora@mail.com")

        response = self.client.put(f"{PORTAL}/profile", headers=self.headers, json={
            "name": "Nora Northwood", "city": "Shelbyville",
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["name"], "Nora Northwood")

        me = self.client.get(f"{API}/auth/me", headers=self.headers).json()
        self.assertEqual(me["name"], "Nora Northwood")

        response = self.client.put(f"{PORTAL}/profile", headers=self.headers, json={"email": "owen@mail.com"})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["detail"], "Email already in use")

    def test_02_vehicles(self):
        response = self.client.post(f"{PORTAL}/vehicles", headers=self.headers, json={
            "make": "Mazda", "model": "3", "year": 2020, "license_plate": "NORA-1",
        })
        self.assertEqual(response.status_code, 201)
        TestCustomerPortal.vehicle = response.json()
        self.assertEqual(self.vehicle["customer_id"], self.customer_id)

        response = self.client.post(f"{PORTAL}/vehicles", headers=self.headers, json={
            "make": "Mazda", "model": "6", "year": 2021, "license_plate": "OWEN-1",
        })
        self.assertEqual(response.status_code, 400)

        response = self.client.put(
            f"{PORTAL}/vehicles/{self.vehicle['id']}", headers=self.headers, json={"color": "Red"}
        )
        self.assertEqual(response.json()["color"], "Red")

        response = self.client.put(
            f"{PORTAL}/vehicles/{self.foreign_vehicle['id']}", headers=self.headers, json={"color": "Red"}
        )
        self.assertEqual(response.status_code, 404)

        vehicles = self.client.get(f"{PORTAL}/vehicles", headers=self.headers).json()
        self.assertEqual([v["license_plate"] for v in vehicles], ["NORA-1"])

    def test_03_book_appointment(self):
        response = self.client.post(f"{PORTAL}/appointments", headers=self.headers, json={
            "vehicle_id": self.vehicle["id"],
            "service_type": "Tire Rotation",
            "scheduled_date": days_from_today(2),
            "scheduled_time": "13:00",
            "customer_notes": "Morning drop-off",
        })
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data["status"], "scheduled")
        self.assertEqual(data["booking_source"], "customer_portal")
        TestCustomerPortal.appointment = data

        response = self.client.post(f"{PORTAL}/appointments", headers=self.headers, json={
            "vehicle_id": self.foreign_vehicle["id"],
            "service_type": "Tire Rotation",
            "scheduled_date": days_from_today(2),
            "scheduled_time": "13:00",
        })
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Invalid vehicle")

    def test_04_confirm_then_cancel(self):
        base = f"{PORTAL}/appointments/{self.appointment['id']}"
        data = self.client.put(f"{base}/confirm", headers=self.headers).json()
        self.assertEqual(data["status"], "confirmed")

        response = self.client.put(f"{base}/confirm", headers=self.headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "Appointment not found or already confirmed")

        data = self.client.put(f"{base}/cancel", headers=self.headers).json()
        self.assertEqual(data["status"], "cancelled")

        cancelled = self.client.get(f"{PORTAL}/appointments?status=cancelled", headers=self.headers).json()
        self.assertEqual(len(cancelled), 1)

    def test_05_completed_appointments_are_locked(self):
        booked = self.client.post(f"{PORTAL}/appointments", headers=self.headers, json={
            "vehicle_id": self.vehicle["id"],
            "service_type": "Oil Change",
            "scheduled_date": days_from_today(4),
            "scheduled_time": "09:00",
        }).json()
        self.client.put(
            f"{API}/appointments/{booked['id']}/status", headers=self.admin, json={"status": "completed"}
        )
        response = self.client.put(
            f"{PORTAL}/appointments/{booked['id']}", headers=self.headers, json={"scheduled_time": "10:00"}
        )
        self.assertEqual(response.status_code, 400)

    def test_06_service_history(self):
        order = self.client.post(f"{API}/services/workorders", headers=self.admin, json={
            "vehicle_id": self.vehicle["id"], "service_type": "Oil Change", "cost": 75.0,
        }).json()
        self.client.put(f"{API}/services/workorders/{order['id']}", headers=self.admin, json={"status": "completed"})
        self.client.post(f"{API}/customers/{self.customer_id}/service-history", headers=self.admin, json={
            "vehicle_id": self.vehicle["id"],
            "service_type": "Alignment",
            "service_date": "2023-06-01",
            "total_cost": 125.0,
        })

        history = self.client.get(f"{PORTAL}/service-history", headers=self.headers).json()
        self.assertEqual(len(history["records"]), 2)
        self.assertEqual(history["summary"]["total_services"], 2)
        self.assertEqual(history["summary"]["total_spent"], 200.0)
        self.assertEqual(history["summary"]["average_cost"], 100.0)
        self.assertIn(2023, history["years"])
        self.assertEqual(history["service_types"], ["Alignment", "Oil Change"])

        filtered = self.client.get(f"{PORTAL}/service-history?year=2023", headers=self.headers).json()
        self.assertEqual([r["service_type"] for r in filtered["records"]], ["Alignment"])
        # the summary still covers the whole history
        self.assertEqual(filtered["summary"]["total_services"], 2)

    def test_07_payments_overview(self):
        TestCustomerPortal.invoice = create_invoice(self.client, self.admin, self.customer_id, status="pending")
        create_invoice(
            self.client, self.admin, self.neighbour["id"], status="pending"
        )

        overview = self.client.get(f"{PORTAL}/payments", headers=self.headers).json()
        self.assertEqual(len(overview["invoices"]), 1)
        self.assertEqual(overview["summary"]["total_outstanding"], 100.0)
        self.assertEqual(overview["summary"]["next_payment_due"], days_from_today(30))

        dashboard = self.client.get(f"{PORTAL}/dashboard", headers=self.headers).json()
        self.assertEqual(dashboard["stats"]["outstanding_amount"], 100.0)
        self.assertEqual(len(dashboard["outstanding_invoices"]), 1)

    def test_08_pay_invoice(self):
        url = f"{PORTAL}/invoices/{self.invoice['id']}/pay"
        response = self.client.post(url, headers=self.headers, json={"payment_method": "credit_card"})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["status"], "paid")
        self.assertEqual(data["total_paid"], 100.0)
        self.assertTrue(data["payment_reference"].startswith("PAY-"))

        self.assertEqual(self.client.post(url, headers=self.headers, json={}).status_code, 400)

        summary = self.client.get(f"{PORTAL}/payments", headers=self.headers).json()["summary"]
        self.assertEqual(summary["total_paid"], 100.0)
        self.assertEqual(summary["total_outstanding"], 0.0)
        self.assertIsNotNone(summary["last_payment_date"])

    def test_09_other_customers_invoices_are_hidden(self):
        foreign = self.client.get(
            f"{API}/invoices/?customer_id={self.neighbour['id']}", headers=self.admin
        ).json()["items"][0]
        response = self.client.post(f"{PORTAL}/invoices/{foreign['id']}/pay", headers=self.headers, json={})
        self.assertEqual(response.status_code, 404)

    def test_10_rewards(self):
        plan = self.client.post(f"{API}/memberships/plans", headers=self.admin, json={
            "name": "Plus", "tier": "premium", "price": 20.0, "benefits": {"discount_percentage": 10},
        }).json()
        membership = self.client.post(
            f"{API}/memberships/customer/{self.customer_id}", headers=self.admin, json={"plan_id": plan["id"]}
        ).json()
        self.client.put(f"{API}/memberships/{membership['id']}", headers=self.admin, json={"total_paid": 100.0})

        rewards = self.client.get(f"{PORTAL}/rewards", headers=self.headers).json()
        self.assertEqual(rewards["summary"]["active_memberships"], 1)
        self.assertEqual(rewards["summary"]["total_savings"], 10.0)
        self.assertEqual(rewards["summary"]["available_discounts"], 10)
        self.assertEqual([p["name"] for p in rewards["available_plans"]], ["Plus"])

        memberships = self.client.get(f"{PORTAL}/memberships", headers=self.headers).json()
        self.assertEqual(memberships[0]["plan"]["name"], "Plus")

    def test_11_warranties(self):
        self.client.post(f"{API}/warranties/", headers=self.admin, json={
            "customer_id": self.customer_id,
            "vehicle_id": self.vehicle["id"],
            "warranty_type": "powertrain",
            "name": "Powertrain Plus",
            "start_date": days_from_today(-1),
            "end_date": days_from_today(365),
        })
        warranties = self.client.get(f"{PORTAL}/warranties", headers=self.headers).json()
        self.assertEqual([w["name"] for w in warranties], ["Powertrain Plus"])

    def test_12_notifications(self):
        page = self.client.get(f"{PORTAL}/notifications", headers=self.headers).json()
        # one per booked appointment
        self.assertEqual(page["total"], 2)
        self.assertEqual(page["unread_count"], 2)
        self.assertEqual(page["limit"], 20)

        first = page["items"][0]
        data = self.client.put(f"{PORTAL}/notifications/{first['id']}/read", headers=self.headers).json()
        self.assertEqual(data["status"], "read")
        self.assertIsNotNone(data["read_at"])

        count = self.client.get(f"{PORTAL}/notifications/unread-count", headers=self.headers).json()
        self.assertEqual(count, {"unread_count": 1})

        response = self.client.put(f"{PORTAL}/notifications/read-all", headers=self.headers).json()
        self.assertEqual(response["message"], "1 notification(s) marked as read")

        unread = self.client.get(f"{PORTAL}/notifications?status=sent", headers=self.headers).json()
        self.assertEqual(unread["total"], 0)

    def test_13_dashboard(self):
        dashboard = self.client.get(f"{PORTAL}/dashboard", headers=self.headers).json()
        stats = dashboard["stats"]
        self.assertEqual(stats["vehicles"], 1)
        self.assertEqual(stats["appointments"], 2)
        self.assertEqual(stats["services"], 2)
        self.assertEqual(stats["invoices"], 1)
        self.assertEqual(stats["outstanding_amount"], 0.0)
        # cancelled and completed bookings are not upcoming
        self.assertEqual(dashboard["upcoming_appointments"], [])
        self.assertEqual(len(dashboard["recent_services"]), 2)

    def test_14_delete_vehicle(self):
        url = f"{PORTAL}/vehicles/{self.foreign_vehicle['id']}"
        self.assertEqual(self.client.delete(url, headers=self.headers).status_code, 404)


if __name__ == "__main__":
    unittest.main()
