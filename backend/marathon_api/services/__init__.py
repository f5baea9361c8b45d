# Services package init
"""
Marathon Event API — Services Layer
=====================================

What:  Business logic between routes (HTTP) and the document store.
How:   Services receive the StoreClient (and their settings) in the
       constructor. Route dependencies build them per request from
       app.state, so nothing reaches the store through a module global.

Service Inventory:
    - CollectionService: by-id get/update/delete shared by all resources
    - MarathonService: listing, upcoming sample, marathon CRUD
    - RegistrationService: listing, CRUD, counter side effect on create
    - TipService: read-only marathon tips
    - TokenService: session token signing/verification and cookie flags
"""
