"""
Service layer abstraction.

Each service encapsulates the business logic and SQL for one
resource.  Services are plain classes built around an injected
``Database`` so the API handlers stay thin.
"""
