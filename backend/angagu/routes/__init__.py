# Routes package init
"""
ANGAGU Backend — API Routes Package
====================================

What:  HTTP handlers for the three principals plus the health probe.

Route Inventory:
    - customer.py:  /customer/*   login, catalogue, orders, reviews, board,
                                  SMS signup, addresses
    - company.py:   /company/*    seller login/signup, products, sales,
                                  deliveries, refunds, account recovery, Q&A
    - admin.py:     /admin/*      admin login, product approval queue
    - health.py:    GET /health

Handler shape:
    validate input → call a service → map its ResultStatus to an HTTP status
    and errCode → return the envelope (`ok(...)`) or raise ApiError.
    Every handler is wrapped in `common.guarded`, so nothing escapes as a bare
    500 without an errCode.
"""
