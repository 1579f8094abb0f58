"""
Basket — serialized basket mutations.

    from basketry import basket as B

    coordinator = B.MutationCoordinator(gateway, store)
    await coordinator.add_item("42", "course")
    await coordinator.apply_promo_code("SAVE10")
"""

from basketry.basket._coordinator import (
    MutationCoordinator,
    busy,
    invalid_input,
    from_gateway,
    from_exception,
    rejected,
)

__all__ = (
    "MutationCoordinator",
    "busy",
    "invalid_input",
    "from_gateway",
    "from_exception",
    "rejected",
)
