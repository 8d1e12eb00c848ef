"""
Pydantic schemas for the Auto Shop Manager API

All schemas derive from ApiModel: camelCase JSON, snake_case attributes.
"""

from autoshop.schemas.common import (
    ApiModel,
    CustomerSummary,
    PartSummary,
    SuccessResponse,
    TechnicianSummary,
    VehicleSummary,
)
from autoshop.schemas.enums import (
    AppointmentStatus,
    InvoiceStatus,
    PaymentMethod,
    TransactionType,
    WorkOrderStatus,
)
from autoshop.schemas.appointment import (
    AppointmentCreate,
    AppointmentRead,
    AppointmentSummary,
    AppointmentUpdate,
)
from autoshop.schemas.customer import (
    CustomerCreate,
    CustomerDetail,
    CustomerListItem,
    CustomerRead,
    CustomerUpdate,
)
from autoshop.schemas.dashboard import DashboardRead, DashboardWorkOrder, MonthlySales
from autoshop.schemas.inventory import (
    InventoryItemCreate,
    InventoryItemDetail,
    InventoryItemRead,
    InventoryItemUpdate,
    InventoryTransactionCreate,
    InventoryTransactionRead,
)
from autoshop.schemas.invoice import (
    InvoiceCreate,
    InvoiceRead,
    InvoiceSummary,
    InvoiceUpdate,
    PaymentCreate,
    PaymentRead,
)
from autoshop.schemas.technician import TechnicianCreate, TechnicianRead, TechnicianUpdate
from autoshop.schemas.vehicle import (
    VehicleCreate,
    VehicleDetail,
    VehicleListItem,
    VehicleRead,
    VehicleUpdate,
)
from autoshop.schemas.work_order import (
    LineItemInput,
    LineItemRead,
    WorkOrderCreate,
    WorkOrderDetail,
    WorkOrderListItem,
    WorkOrderSummary,
    WorkOrderUpdate,
)

__all__ = [
    "ApiModel",
    "SuccessResponse",
    "CustomerSummary",
    "VehicleSummary",
    "TechnicianSummary",
    "PartSummary",
    "AppointmentStatus",
    "InvoiceStatus",
    "PaymentMethod",
    "TransactionType",
    "WorkOrderStatus",
    "AppointmentCreate",
    "AppointmentRead",
    "AppointmentSummary",
    "AppointmentUpdate",
    "DashboardRead",
    "DashboardWorkOrder",
    "MonthlySales",
    "CustomerCreate",
    "CustomerDetail",
    "CustomerListItem",
    "CustomerRead",
    "CustomerUpdate",
    "InventoryItemCreate",
    "InventoryItemDetail",
    "InventoryItemRead",
    "InventoryItemUpdate",
    "InventoryTransactionCreate",
    "InventoryTransactionRead",
    "InvoiceCreate",
    "InvoiceRead",
    "InvoiceSummary",
    "InvoiceUpdate",
    "PaymentCreate",
    "PaymentRead",
    "TechnicianCreate",
    "TechnicianRead",
    "TechnicianUpdate",
    "VehicleCreate",
    "VehicleDetail",
    "VehicleListItem",
    "VehicleRead",
    "VehicleUpdate",
    "LineItemInput",
    "LineItemRead",
    "WorkOrderCreate",
    "WorkOrderDetail",
    "WorkOrderListItem",
    "WorkOrderSummary",
    "WorkOrderUpdate",
]
