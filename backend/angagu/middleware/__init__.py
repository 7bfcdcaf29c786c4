"""
ANGAGU Backend — Middleware Package
====================================

What:  Cross-cutting concerns applied to every request, plus the bearer-token
       dependencies that guard authenticated routes.

Middleware Chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Access Log] → [GZip] → [CORS] → Router

    1. Rate Limit rejects over-quota clients with a 429 envelope before any work
       (a much smaller bucket guards the SMS send endpoint)
    2. Request ID sets the correlation id read by the access log
    3. Access Log records method, path, status and duration

Authorization is not middleware: `auth.customer_principal` and friends are
FastAPI dependencies declared on the routes that need a principal, so public
routes never decode a token.
"""
