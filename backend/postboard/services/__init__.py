# Services package init
"""
Postboard Backend - Services Layer
====================================

Service Inventory:
    - PostService: every post operation, from paginated listing to the
      atomic like toggle and comment append

Services receive the database session per call and hold no state, so the
module-level singletons are shared by all requests.
"""
