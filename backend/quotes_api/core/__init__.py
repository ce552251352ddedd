"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: default admin creation on startup
- db: Tortoise ORM configuration and connection management
- errors: error taxonomy and JSON error envelope handlers
- logs: logger setup and the in-memory buffer behind /admin/logs
- security: password hashing and JWT tokens
"""
