"""Error types raised by the engine.

Affordability and eligibility failures are never exceptions: commands
return a reason string instead. Exceptions are reserved for contract
violations, such as ids that do not exist in the static catalogs.
"""

from __future__ import annotations


class NotFoundError(LookupError):
    """An id, resource or specialization is not part of the catalog."""
