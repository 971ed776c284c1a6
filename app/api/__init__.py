"""
API Blueprints Package

All HTTP route handlers for the application, organized by domain.
Each module defines a Flask Blueprint registered in app/__init__.py.

BLUEPRINT REFERENCE:
====================

Inventory & Sales:
- products.py       : Billboard sites (CRUD, soft delete, bookings per site)
- clients.py        : Client records (CRUD, lookup by email)
- proposals.py      : Proposals (CRUD, status, count)
- cost_estimates.py : Cost estimates (direct, multiple, from proposal, grouped by page)
- quotations.py     : Quotations (CRUD, /calculate, job order and booking creation)

Operations:
- job_orders.py     : Job orders (status, crew assignment)
- bookings.py       : Site bookings (status, completed count)
- teams.py          : Crews and their members
- reports.py        : Field reports and attachment uploads

Documents:
- documents.py      : PDF generation and inline download
- emails.py         : Sending documents to clients over SMTP
- files.py          : Locally stored generated files

Other:
- search.py         : Hosted search index proxy

Health endpoints are registered separately by health_checks.py.
"""

# All blueprints are imported and registered in app/__init__.py
# This file serves as documentation only

__all__ = []
