"""
API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from app.api.endpoints import (attendance, auth, config, dashboard, leaves,
                               payroll, positions, users)

api_router = APIRouter()

# Auth (login, refresh, logout, me)
api_router.include_router(auth.router)

# Master data
api_router.include_router(users.router)
api_router.include_router(positions.router)

# Attendance, clock-in/out
api_router.include_router(attendance.router)

# Leave requests & approval
api_router.include_router(leaves.router)

# Payroll rows, generation, export
api_router.include_router(payroll.router)

# Key/value config
api_router.include_router(config.router)

# Dashboard, health
api_router.include_router(dashboard.router)
