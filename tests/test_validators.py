import unittest

from autoshop.models.user import UserRole
from autoshop.validators import (
    is_valid_email,
    is_valid_phone,
    normalize_phone,
    password_strength,
    strength_label,
    validate_login,
    validate_registration,
)


class TestFieldRules(unittest.TestCase):

    def test_email_pattern(self):
        """Emails need one @ and a dotted domain, with no whitespace"""
        self.assertTrue(is_valid_email("jane@mail.com"))
        self.assertTrue(is_valid_email("j.doe+shop@garage.co.uk"))
        self.assertFalse(is_valid_email("jane@mail"))
        self.assertFalse(is_valid_email("jane mail@x.com"))
        self.assertFalse(is_valid_email("@mail.com"))
        self.assertFalse(is_valid_email(""))

    def test_phone_is_normalized_before_matching(self):
        """Spaces, dashes and parentheses are ignored"""
        self.assertEqual(normalize_phone("(555) 123-4567"), "5551234567")
        self.assertTrue(is_valid_phone("(555) 123-4567"))
        self.assertTrue(is_valid_phone("+1 555 123 4567"))
        self.assertFalse(is_valid_phone("0123456"))
        self.assertFalse(is_valid_phone("call me"))
        self.assertFalse(is_valid_phone("+1234567890123456789"))


class TestPasswordStrength(unittest.TestCase):

    def test_weak_password_suggestions_in_rule_order(self):
        score, suggestions = password_strength("abc")
        self.assertEqual(score, 1)
        self.assertEqual(suggestions, [
            "Use at least 8 characters",
            "Include uppercase letters",
            "Include numbers",
            "Include special characters",
        ])

    def test_strong_password(self):
        score, suggestions = password_strength("Secret123!")
        self.assertEqual(score, 5)
        self.assertEqual(suggestions, [])

    def test_empty_password_scores_zero(self):
        score, suggestions = password_strength("")
        self.assertEqual(score, 0)
        self.assertEqual(len(suggestions), 5)

    def test_labels(self):
        self.assertEqual(strength_label(0), "weak")
        self.assertEqual(strength_label(1), "weak")
        self.assertEqual(strength_label(2), "fair")
        self.assertEqual(strength_label(3), "medium")
        self.assertEqual(strength_label(4), "strong")
        self.assertEqual(strength_label(5), "very strong")


class TestFormValidation(unittest.TestCase):

    def test_valid_customer_registration(self):
        errors = validate_registration(
            "Jane Doe", "jane@mail.com", "secret1", "secret1", UserRole.CUSTOMER, phone="555-123-4567"
        )
        self.assertEqual(errors, {})

    def test_every_failing_field_is_reported(self):
        """All problems come back together, keyed by field"""
        errors = validate_registration("J", "not-an-email", "123", "456", UserRole.ADMIN, phone="abc")
        self.assertEqual(errors["name"], "Name must be at least 2 characters")
        self.assertEqual(errors["email"], "Please enter a valid email address")
        self.assertEqual(errors["phone"], "Please enter a valid phone number")
        self.assertEqual(errors["password"], "Password must be at least 6 characters")
        self.assertEqual(errors["confirm_password"], "Passwords do not match")
        self.assertEqual(errors["business_name"], "Business name is required for admin accounts")

    def test_required_fields(self):
        errors = validate_registration("  ", "", "", "", UserRole.CUSTOMER)
        self.assertEqual(errors["name"], "Name is required")
        self.assertEqual(errors["email"], "Email is required")
        self.assertEqual(errors["password"], "Password is required")
        self.assertNotIn("confirm_password", errors)

    def test_admin_with_business_name_is_valid(self):
        errors = validate_registration(
            "Sam Owner", "sam@garage.com", "secret1", "secret1", UserRole.ADMIN, business_name="Sam's Garage"
        )
        self.assertEqual(errors, {})

    def test_other_roles_cannot_self_register(self):
        errors = validate_registration(
            "Sam Owner", "sam@garage.com", "secret1", "secret1", UserRole.SUPER_ADMIN
        )
        self.assertIn("role", errors)

    def test_login_form(self):
        self.assertEqual(set(validate_login("", "")), {"email", "password"})
        self.assertEqual(validate_login("bad", "x"), {"email": "Please enter a valid email address"})
        self.assertEqual(validate_login("jane@mail.com", "x"), {})


if __name__ == "__main__":
    unittest.main()
