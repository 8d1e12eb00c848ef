"""
API v1 Routes
Project: Auto Shop Manager

Version 1 router of the API.
"""

from fastapi import APIRouter

from autoshop.api.v1 import (
    appointments,
    customers,
    dashboard,
    inventory,
    invoices,
    technicians,
    vehicles,
    work_orders,
)

# Aggregated v1 router
api_v1_router = APIRouter(prefix="/api/v1")

api_v1_router.include_router(customers.router)
api_v1_router.include_router(vehicles.router)
api_v1_router.include_router(work_orders.router)
api_v1_router.include_router(inventory.router)
api_v1_router.include_router(invoices.router)
api_v1_router.include_router(technicians.router)
api_v1_router.include_router(appointments.router)
api_v1_router.include_router(dashboard.router)

__all__ = ["api_v1_router"]
