"""
Shared module for common utilities of the REST API and the operator CLI.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: OrderStatus groups, size limits

- shared.infrastructure: Database and request plumbing
  - db.py: Engine, Database, get_db(), transaction(), safe_commit()
  - correlation.py: X-Request-ID middleware and log filter

- shared.security: Rate limiting of the public check-in endpoints

- shared.utils: Utilities
  - exceptions.py: Typed HTTP exceptions with auto-logging
  - schemas.py: Shared Pydantic schemas

IMPORT EXAMPLES:
    from shared.infrastructure.db import get_db, transaction
    from shared.config.settings import settings
    from shared.config.constants import OrderStatus
    from shared.utils.exceptions import NotFoundError, ConflictError
"""

# This module does not provide re-exports.
# All imports should use the canonical paths as documented above.
