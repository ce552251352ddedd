# quotes_api/models/__init__.py
"""
Database models module initialization.

Models exported:
- User: account, credentials, role and lockout state
- Quote: rental quote with embedded customer and product lines
- QuoteSequence: per-day counter backing quote numbers
"""
from .user import User
from .quote import Quote, QuoteSequence
