"""Initial catalogue: the CryoChill bowl and its up-sell items."""

import structlog
from protean.utils.globals import current_domain

from checkout.catalogue.product import Product

logger = structlog.get_logger(__name__)

MAIN_PRODUCT_ID = "cryochill-bowl-main"

SEED_PRODUCTS = [
    {
        "product_id": MAIN_PRODUCT_ID,
        "name": "CryoChill Collapsible Silicone Ice Bath Bowl",
        "description": (
            "Spa-quality facial ice therapy at home. Collapsible food-grade silicone bowl "
            "that reduces puffiness, tightens pores and improves circulation."
        ),
        "price": "34.99",
        "original_price": "49.99",
        "stock": 47,
        "colors": ["Ocean Blue", "Blush Pink", "Pearl White"],
    },
    {
        "product_id": "jade-facial-roller",
        "name": "Jade Facial Roller",
        "description": "Enhance your ice therapy routine with this premium jade facial roller",
        "price": "24.99",
        "stock": 32,
        "colors": ["Natural Jade"],
    },
    {
        "product_id": "hydrating-face-serum",
        "name": "Hydrating Face Serum",
        "description": "Perfect post-ice therapy treatment for maximum hydration",
        "price": "39.99",
        "stock": 18,
        "colors": ["Clear"],
    },
]


def seed_catalogue() -> int:
    """Insert any seed product that is not already in the repository."""
    repo = current_domain.repository_for(Product)
    existing = {str(p.id) for p in repo._dao.query.all().items}

    created = 0
    for entry in SEED_PRODUCTS:
        if entry["product_id"] in existing:
            continue
        repo.add(Product.create(**entry))
        created += 1

    logger.info("Catalogue seeded", created=created)
    return created
