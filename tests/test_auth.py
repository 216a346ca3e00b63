import unittest

from tests.helpers import (
    API, PASSWORD, bearer, create_customer, make_client, register, register_admin, reset_database,
)


class TestAuthentication(unittest.TestCase):
    customer_token = None

    @classmethod
    def setUpClass(cls):
        reset_database()
        cls.client = make_client()

    def test_1_register_customer(self):
        """Customer registration creates a linked CRM record"""
        response = register(self.client, "Jane Doe", "Jane@Mail.com", phone="(555) 123-4567")
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data["user"]["email"], "jane@mail.com")
        self.assertEqual(data["user"]["role"], "customer")
        self.assertEqual(data["user"]["phone"], "5551234567")
        self.assertIsNotNone(data["user"]["customer_id"])
        self.assertEqual(data["redirect_to"], "/customer/dashboard")
        self.assertEqual(data["password_strength"]["score"], 5)
        TestAuthentication.customer_token = data["token"]

    def test_2_duplicate_email(self):
        response = register(self.client, "Jane Again", "jane@mail.com")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["detail"], "Email already registered")

    def test_3_invalid_registration_reports_fields(self):
        """Every failing field is returned in one response"""
        response = self.client.post(f"{API}/auth/register", json={
            "name": "J",
            "email": "nope",
            "password": "123",
            "confirm_password": "321",
            "role": "admin",
        })
        self.assertEqual(response.status_code, 422)
        errors = response.json()["errors"]
        self.assertEqual(
            set(errors), {"name", "email", "password", "confirm_password", "business_name"}
        )

    def test_4_staff_roles_cannot_self_register(self):
        response = register(self.client, "Biz Person", "biz@mail.com", role="business_client")
        self.assertEqual(response.status_code, 422)
        self.assertIn("role", response.json()["errors"])

    def test_5_login(self):
        response = self.client.post(f"{API}/auth/login", json={"email": "JANE@mail.com", "password": PASSWORD})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["token_type"], "bearer")
        self.assertIsNotNone(data["user"]["last_login"])

    def test_6_bad_credentials(self):
        response = self.client.post(f"{API}/auth/login", json={"email": "jane@mail.com", "password": "wrong"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"], "Invalid email or password")

        response = self.client.post(f"{API}/auth/login", json={"email": "ghost@mail.com", "password": "wrong"})
        self.assertEqual(response.status_code, 401)

    def test_7_current_user(self):
        response = self.client.get(f"{API}/auth/me", headers=bearer(self.customer_token))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["name"], "Jane Doe")

        self.assertEqual(self.client.get(f"{API}/auth/me").status_code, 401)
        self.assertEqual(self.client.get(f"{API}/auth/me", headers=bearer("garbage")).status_code, 401)

    def test_8_change_password(self):
        headers = bearer(self.customer_token)
        response = self.client.put(f"{API}/auth/change-password", headers=headers, json={
            "current_password": "not-it",
            "new_password": "Another1!",
        })
        self.assertEqual(response.status_code, 401)

        response = self.client.put(f"{API}/auth/change-password", headers=headers, json={
            "current_password": PASSWORD,
            "new_password": "Another1!",
        })
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["success"])

        response = self.client.post(f"{API}/auth/login", json={"email": "jane@mail.com", "password": "Another1!"})
        self.assertEqual(response.status_code, 200)

    def test_9_password_strength(self):
        response = self.client.post(f"{API}/auth/password-strength", json={"password": "abc"})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["score"], 1)
        self.assertEqual(data["label"], "weak")
        self.assertEqual(len(data["suggestions"]), 4)


class TestRoleGuards(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        reset_database()
        cls.client = make_client()
        cls.admin = register_admin(cls.client)
        response = register(cls.client, "Pat Customer", "pat@mail.com")
        cls.customer = bearer(response.json()["token"])

    def test_1_admin_routes_need_a_token(self):
        self.assertEqual(self.client.get(f"{API}/customers/").status_code, 401)

    def test_2_customers_cannot_use_admin_routes(self):
        response = self.client.get(f"{API}/customers/", headers=self.customer)
        self.assertEqual(response.status_code, 403)
        self.assertTrue(response.json()["detail"].startswith("Access denied"))

    def test_3_admins_cannot_use_the_portal(self):
        self.assertEqual(self.client.get(f"{API}/portal/profile", headers=self.admin).status_code, 403)

    def test_4_admin_login_redirects_to_admin_home(self):
        response = self.client.post(f"{API}/auth/login", json={"email": "admin@autoshop.io", "password": PASSWORD})
        self.assertEqual(response.json()["redirect_to"], "/admin/dashboard")
        self.assertEqual(response.json()["user"]["business_name"], "Main Street Auto")

    def test_5_linked_customer_records_are_not_shared(self):
        """A profile email left behind by another account cannot be claimed"""
        self.client.put(f"{API}/portal/profile", headers=self.customer, json={"email": "pat.new@mail.com"})

        response = register(self.client, "Someone Else", "pat.new@mail.com")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["detail"], "Email already registered")

        profile = self.client.get(f"{API}/portal/profile", headers=self.customer).json()
        self.assertEqual(profile["name"], "Pat Customer")
        self.assertEqual(profile["email"], "pat.new@mail.com")

    def test_6_unlinked_customer_record_is_reused(self):
        created = create_customer(self.client, self.admin, "Walk In", "walkin@mail.com")
        response = register(self.client, "Walk In", "walkin@mail.com")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["user"]["customer_id"], created["id"])


if __name__ == "__main__":
    unittest.main()
