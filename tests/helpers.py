import asyncio
from datetime import date, timedelta

from fastapi.testclient import TestClient

from autoshop.database import drop_db, init_db
from autoshop.main import app

API = "/api/v1"
PASSWORD = "Secret123!"


def reset_database():
    """Recreate every table so each test class starts empty."""
    async def _reset():
        await drop_db()
        await init_db()

    asyncio.run(_reset())


def make_client():
    return TestClient(app)


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def days_from_today(days):
    return (date.today() + timedelta(days=days)).isoformat()


def register(client, name, email, role="customer", password=PASSWORD, **extra):
    payload = {
        "name": name,
        "email": email,
        "password": password,
        "confirm_password": password,
        "role": role,
        **extra,
    }
    return client.post(f"{API}/auth/register", json=payload)


def register_admin(client, email="admin@autoshop.io"):
    response = register(client, "Shop Admin", email, role="admin", business_name="Main Street Auto")
    assert response.status_code == 201, response.text
    return bearer(response.json()["token"])


def register_customer(client, email, name="Casey Customer"):
    """Returns (headers, customer_id) for a new customer account."""
    response = register(client, name, email, phone="(555) 123-4567")
    assert response.status_code == 201, response.text
    data = response.json()
    return bearer(data["token"]), data["user"]["customer_id"]


def create_customer(client, headers, name, email, **fields):
    payload = {"name": name, "email": email, "phone": "5550001111", **fields}
    response = client.post(f"{API}/customers/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def create_vehicle(client, headers, customer_id, plate, make="Toyota", model="Camry", year=2019):
    payload = {
        "customer_id": customer_id,
        "make": make,
        "model": model,
        "year": year,
        "license_plate": plate,
        "mileage": 42000,
    }
    response = client.post(f"{API}/vehicles/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def create_invoice(client, headers, customer_id, items=None, **fields):
    payload = {
        "customer_id": customer_id,
        "service_type": "Brake Service",
        "items": items or [{"description": "Labor", "quantity": 1, "unit_price": 100.0}],
        **fields,
    }
    response = client.post(f"{API}/invoices/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()
