import unittest
from datetime import date

from autoshop.billing import add_months
from tests.helpers import API, create_customer, make_client, register_admin, reset_database


class TestMemberships(unittest.TestCase):
    gold = None
    membership = None

    @classmethod
    def setUpClass(cls):
        reset_database()
        cls.client = make_client()
        cls.headers = register_admin(cls.client)
        cls.member = create_customer(cls.client, cls.headers, "Mia Moss", "mia@mail.com")

    def create_plan(self, name, **fields):
        payload = {
            "name": name,
            "tier": "premium",
            "price": 29.99,
            "features": ["Free inspections", "10% off labor"],
            "benefits": {"discount_percentage": 10, "free_inspections": 2},
            **fields,
        }
        return self.client.post(f"{API}/memberships/plans", headers=self.headers, json=payload)

    def subscribe(self, **fields):
        return self.client.post(
            f"{API}/memberships/customer/{self.member['id']}", headers=self.headers, json=fields
        )

    def test_1_plans(self):
        response = self.create_plan("Gold")
        self.assertEqual(response.status_code, 201)
        plan = response.json()
        self.assertEqual(plan["billing_cycle"], "monthly")
        self.assertEqual(plan["benefits"]["discount_percentage"], 10)
        TestMemberships.gold = plan

        self.assertEqual(self.create_plan("Gold").status_code, 409)
        self.create_plan("Legacy", price=9.99, is_active=False)

        active = self.client.get(f"{API}/memberships/plans?active_only=true", headers=self.headers).json()
        self.assertEqual([p["name"] for p in active], ["Gold"])

    def test_2_subscribe_sets_billing_dates(self):
        """Billing falls one cycle after the start, clamped to month end"""
        response = self.subscribe(plan_id=self.gold["id"], start_date="2024-01-31")
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data["status"], "active")
        self.assertEqual(data["next_billing_date"], "2024-02-29")
        self.assertEqual(data["end_date"], "2024-02-29")
        self.assertEqual(data["price"], 29.99)
        self.assertEqual(data["plan"]["name"], "Gold")
        self.assertEqual(data["benefits_used"], {"inspections": 0, "roadside_assistance": 0, "priority_bookings": 0})
        TestMemberships.membership = data

    def test_3_subscription_rules(self):
        response = self.subscribe(plan_id=self.gold["id"])
        self.assertEqual(response.status_code, 409)

        legacy = self.client.get(f"{API}/memberships/plans", headers=self.headers).json()[0]
        self.assertEqual(legacy["name"], "Legacy")
        self.assertEqual(self.subscribe(plan_id=legacy["id"]).status_code, 400)
        self.assertEqual(self.subscribe(plan_id=4242).status_code, 404)

    def test_4_cycle_override(self):
        silver = self.create_plan("Silver", tier="basic", price=99.0).json()
        data = self.subscribe(plan_id=silver["id"], start_date="2024-01-15", billing_cycle="quarterly").json()
        self.assertEqual(data["billing_cycle"], "quarterly")
        self.assertEqual(data["next_billing_date"], "2024-04-15")

    def test_5_active_plan_cannot_be_deleted(self):
        response = self.client.delete(f"{API}/memberships/plans/{self.gold['id']}", headers=self.headers)
        self.assertEqual(response.status_code, 409)

    def test_6_cancel(self):
        url = f"{API}/memberships/{self.membership['id']}/cancel"
        data = self.client.post(url, headers=self.headers, json={"cancellation_reason": "Moving away"}).json()
        self.assertEqual(data["status"], "cancelled")
        self.assertEqual(data["cancellation_reason"], "Moving away")
        self.assertFalse(data["auto_renew"])
        self.assertIsNotNone(data["cancellation_date"])

        self.assertEqual(self.client.post(url, headers=self.headers, json={}).status_code, 400)

    def test_7_renew_reactivates(self):
        """A lapsed membership restarts from today"""
        url = f"{API}/memberships/{self.membership['id']}/renew"
        data = self.client.post(url, headers=self.headers).json()
        self.assertEqual(data["status"], "active")
        self.assertEqual(data["end_date"], add_months(date.today(), 1).isoformat())
        self.assertEqual(data["next_billing_date"], add_months(date.today(), 1).isoformat())
        self.assertIsNone(data["cancellation_reason"])

    def test_8_update_and_stats(self):
        url = f"{API}/memberships/{self.membership['id']}"
        data = self.client.put(url, headers=self.headers, json={
            "total_paid": 59.98, "payment_status": "paid", "benefits_used": {"inspections": 1},
        }).json()
        self.assertEqual(data["total_paid"], 59.98)
        self.assertEqual(data["benefits_used"]["inspections"], 1)

        stats = self.client.get(f"{API}/memberships/stats", headers=self.headers).json()
        self.assertEqual(stats["total_memberships"], 2)
        self.assertEqual(stats["active_memberships"], 2)
        self.assertEqual(stats["status_breakdown"][0]["total_revenue"], 59.98)

        listed = self.client.get(f"{API}/memberships/customer/{self.member['id']}", headers=self.headers).json()
        self.assertEqual(len(listed), 2)

    def test_9_plan_without_active_members_is_deleted(self):
        self.client.post(f"{API}/memberships/{self.membership['id']}/cancel", headers=self.headers, json={})
        response = self.client.delete(f"{API}/memberships/plans/{self.gold['id']}", headers=self.headers)
        self.assertEqual(response.status_code, 204)
        self.assertEqual(
            self.client.get(f"{API}/memberships/{self.membership['id']}", headers=self.headers).status_code, 404
        )


class TestMembershipReactivation(unittest.TestCase):
    """Only one active membership per customer and plan, however it gets there."""

    @classmethod
    def setUpClass(cls):
        reset_database()
        cls.client = make_client()
        cls.headers = register_admin(cls.client)
        member = create_customer(cls.client, cls.headers, "Lev Lane", "lev@mail.com")
        plan = cls.client.post(f"{API}/memberships/plans", headers=cls.headers, json={
            "name": "Bronze", "tier": "basic", "price": 9.0,
        }).json()

        subscribe_url = f"{API}/memberships/customer/{member['id']}"
        cls.lapsed = cls.client.post(
            subscribe_url, headers=cls.headers, json={"plan_id": plan["id"], "start_date": "2020-01-01"}
        ).json()
        cls.client.post(f"{API}/memberships/{cls.lapsed['id']}/cancel", headers=cls.headers, json={})
        cls.current = cls.client.post(subscribe_url, headers=cls.headers, json={"plan_id": plan["id"]}).json()

    def test_1_renew_conflicts_with_active_membership(self):
        response = self.client.post(f"{API}/memberships/{self.lapsed['id']}/renew", headers=self.headers)
        self.assertEqual(response.status_code, 409)

    def test_2_update_to_active_conflicts(self):
        response = self.client.put(
            f"{API}/memberships/{self.lapsed['id']}", headers=self.headers, json={"status": "active"}
        )
        self.assertEqual(response.status_code, 409)

        stats = self.client.get(f"{API}/memberships/stats", headers=self.headers).json()
        self.assertEqual(stats["active_memberships"], 1)

    def test_3_renewed_membership_is_current(self):
        self.client.post(f"{API}/memberships/{self.current['id']}/cancel", headers=self.headers, json={})
        data = self.client.post(f"{API}/memberships/{self.lapsed['id']}/renew", headers=self.headers).json()
        self.assertEqual(data["status"], "active")
        self.assertGreater(data["end_date"], date.today().isoformat())


if __name__ == "__main__":
    unittest.main()
