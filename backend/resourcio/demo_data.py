"""
Demo dataset.

Backs the in-memory repository (RESOURCIO_DATA_BACKEND=memory) and is what
`python -m resourcio.seed --demo` writes into an empty database.
"""

from datetime import date

DEMO_RESOURCES = (
    {"id": 1, "name": "Anna de Vries", "email": "anna.devries@example.com", "role": "Solution Architect",
     "department": "IT Architecture & Delivery", "skills": ["architecture", "cloud"], "weekly_capacity": 40},
    {"id": 2, "name": "Bram Janssen", "email": "bram.janssen@example.com", "role": "Change Lead",
     "department": "IT Architecture & Delivery", "skills": ["change management"], "weekly_capacity": 40},
    {"id": 3, "name": "Chloe Peeters", "email": "chloe.peeters@example.com", "role": "Business Analyst",
     "department": "Business Operations", "skills": ["analysis", "sql"], "weekly_capacity": 32},
    {"id": 4, "name": "Daan Maes", "email": "daan.maes@example.com", "role": "Developer",
     "department": "IT Architecture & Delivery", "skills": ["python", "react"], "weekly_capacity": 40},
    {"id": 5, "name": "Eva Claes", "email": "eva.claes@example.com", "role": "Project Manager",
     "department": "Business Operations", "skills": ["planning"], "weekly_capacity": 24},
    {"id": 6, "name": "Finn Willems", "email": "finn.willems@example.com", "role": "Developer",
     "department": "IT Architecture & Delivery", "skills": ["python"], "weekly_capacity": 40,
     "is_active": False},
)

DEMO_PROJECTS = (
    {"id": 1, "name": "Core Banking Migration", "description": "Move ledgers to the new platform",
     "start_date": date(2025, 1, 6), "end_date": date(2025, 12, 19), "status": "active",
     "priority": "high", "type": "change", "director_id": 5, "change_lead_id": 2, "estimated_hours": 4000},
    {"id": 2, "name": "Customer Portal Refresh", "description": "New self-service portal",
     "start_date": date(2025, 3, 3), "end_date": date(2025, 9, 26), "status": "active",
     "priority": "medium", "type": "business", "business_lead_id": 3, "estimated_hours": 1800},
    {"id": 3, "name": "Data Warehouse Sunset", "description": "Decommission legacy reporting",
     "start_date": date(2026, 1, 5), "end_date": date(2026, 6, 26), "status": "draft",
     "priority": "low", "type": "change", "change_lead_id": 2, "estimated_hours": 600},
)

DEMO_ALLOCATIONS = (
    {"id": 1, "project_id": 1, "resource_id": 1, "allocated_hours": 24, "role": "Lead Architect",
     "start_date": date(2025, 1, 6), "end_date": date(2025, 12, 19), "status": "active",
     "weekly_allocations": {"2025-W34": 8}},
    {"id": 2, "project_id": 2, "resource_id": 1, "allocated_hours": 12, "role": "Architect",
     "start_date": date(2025, 3, 3), "end_date": date(2025, 9, 26), "status": "active",
     "weekly_allocations": {}},
    {"id": 3, "project_id": 1, "resource_id": 2, "allocated_hours": 20, "role": "Change Lead",
     "start_date": date(2025, 1, 6), "end_date": date(2025, 12, 19), "status": "active",
     "weekly_allocations": {}},
    {"id": 4, "project_id": 2, "resource_id": 3, "allocated_hours": 20, "role": "Analyst",
     "start_date": date(2025, 3, 3), "end_date": date(2025, 9, 26), "status": "active",
     "weekly_allocations": {"2025-W20": 24}},
    {"id": 5, "project_id": 2, "resource_id": 4, "allocated_hours": 16, "role": "Developer",
     "start_date": date(2025, 3, 3), "end_date": date(2025, 9, 26), "status": "planned",
     "weekly_allocations": {}},
    {"id": 6, "project_id": 3, "resource_id": 4, "allocated_hours": 8, "role": "Developer",
     "start_date": date(2026, 1, 5), "end_date": date(2026, 6, 26), "status": "active",
     "weekly_allocations": {}},
)
