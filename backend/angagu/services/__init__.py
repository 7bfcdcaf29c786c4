# Services package init
"""
ANGAGU Backend — Services Layer
================================

What:  Database access and the SMS provider client, between the route
       handlers (HTTP) and the database (persistence).
How:   One class per principal, each exposed as a module-level singleton.
       Every method takes the request's AsyncSession and returns a
       ServiceResult; database exceptions never reach the handlers.

Service Inventory:
    - CustomerService: accounts, catalogue reads, orders, reviews, board
                       posts, address book
    - CompanyService:  seller accounts, products, sales, fulfilment, Q&A
    - AdminService:    admin lookup and the product approval queue
    - SmsGateway:      verification codes, sent through the SMS provider
                       over httpx and stored until confirmed or expired
"""
