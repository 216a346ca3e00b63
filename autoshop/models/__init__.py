"""
SQLAlchemy database models.
"""
from autoshop.models.customer import Customer
from autoshop.models.vehicle import Vehicle
from autoshop.models.service import ServiceCatalogItem, WorkOrder, ServiceRecord
from autoshop.models.appointment import Appointment
from autoshop.models.invoice import Invoice, InvoiceItem, InvoicePayment
from autoshop.models.inventory import InventoryItem, InventoryTransaction
from autoshop.models.warranty import Warranty
from autoshop.models.membership import MembershipPlan, CustomerMembership
from autoshop.models.notification import Notification
from autoshop.models.contact import ContactMessage
from autoshop.models.user import User

__all__ = [
    "Customer", "Vehicle", "ServiceCatalogItem", "WorkOrder", "ServiceRecord",
    "Appointment", "Invoice", "InvoiceItem", "InvoicePayment",
    "InventoryItem", "InventoryTransaction", "Warranty",
    "MembershipPlan", "CustomerMembership", "Notification", "ContactMessage", "User",
]
