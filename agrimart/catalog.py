"""
Product Catalog - read-only marketplace listing.

Generates the agricultural supplies catalog deterministically from a seed.
The cart only ever reads {id, name, price, image, category} from here.
"""

import random
from decimal import Decimal
from functools import cache
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from agrimart.models import ProductSnapshot
from agrimart.services.money import multiply, round_money, subtract, to_decimal

DEFAULT_SEED = 42

CATEGORIES = ("seeds", "fertilizers", "tools", "pesticides", "equipment")

PRODUCT_NAMES: Dict[str, List[str]] = {
    "seeds": ["Hybrid Tomato Seeds", "Organic Wheat Seeds", "Corn Seeds Premium", "Cucumber Seeds", "Carrot Seeds"],
    "fertilizers": ["NPK Fertilizer 20-20-20", "Organic Compost", "Phosphate Fertilizer", "Potash Fertilizer", "Bio Fertilizer"],
    "tools": ["Hand Cultivator", "Pruning Shears", "Garden Spade", "Watering Can", "Garden Hoe"],
    "pesticides": ["Organic Neem Oil", "Fungicide Spray", "Insecticide 500ml", "Weed Killer", "Plant Protection"],
    "equipment": ["Irrigation Pump", "Sprayer Machine", "Soil pH Meter", "Greenhouse Kit", "Drip Irrigation Set"],
}

BRANDS = ("GreenField", "Kisan Agro", "HarvestPro", "AgriCore", "Bharat Krishi")

IMAGE_URL = "https://placehold.co/600x600/{background}/{foreground}?text={text}"
IMAGE_VARIANTS = (("e0e0e0", "333", ""), ("f0f0f0", "555", "+View+2"), ("d0d0d0", "222", "+View+3"), ("fafafa", "777", "+View+4"))


class Product(BaseModel):
    """Marketplace product."""
    id: str = Field(description="Stable id, '{category}-{index}'")
    name: str
    price: Decimal = Field(ge=0, description="Selling price after discount")
    original_price: Decimal = Field(ge=0)
    discount: int = Field(ge=0, le=100, description="Discount percentage")
    rating: float = Field(ge=0, le=5)
    reviews: int = Field(ge=0)
    images: List[str] = Field(default_factory=list)
    category: str
    brand: str
    in_stock: bool = True

    def to_snapshot(self) -> ProductSnapshot:
        """Fields the cart copies at add time."""
        return ProductSnapshot(
            product_id=self.id,
            name=self.name,
            unit_price=self.price,
            image=self.images[0] if self.images else "",
            category=self.category,
        )


def _image_urls(name: str) -> List[str]:
    slug = "+".join(name.split(" "))
    return [
        IMAGE_URL.format(background=bg, foreground=fg, text=slug + suffix)
        for bg, fg, suffix in IMAGE_VARIANTS
    ]


def generate_products(seed: int = DEFAULT_SEED) -> List[Product]:
    """
    Build the catalog: five products per category with seeded prices.

    Price is the original price less a 5-40% discount, rounded to whole units.
    """
    rng = random.Random(seed)
    products: List[Product] = []

    for category in CATEGORIES:
        for index, name in enumerate(PRODUCT_NAMES[category]):
            original_price = rng.randint(50, 2000)
            discount = rng.randint(5, 40)
            multiplier = subtract(Decimal("1"), to_decimal(discount) / Decimal("100"))
            price = round_money(multiply(original_price, multiplier), to_int=True)

            products.append(
                Product(
                    id=f"{category}-{index}",
                    name=name,
                    price=price,
                    original_price=Decimal(original_price),
                    discount=discount,
                    rating=round(rng.uniform(3.5, 5.0), 1),
                    reviews=rng.randint(10, 500),
                    images=_image_urls(name),
                    category=category,
                    brand=rng.choice(BRANDS),
                    in_stock=rng.random() < 0.9,
                )
            )

    return products


class Catalog:
    """Read-only product lookup over a fixed product list."""

    def __init__(self, products: List[Product]):
        self._products = list(products)
        self._by_id = {product.id: product for product in self._products}

    def list_products(self, category: Optional[str] = None, search: Optional[str] = None) -> List[Product]:
        """Products filtered by category and a case-insensitive name/brand search."""
        products = self._products
        if category:
            products = [p for p in products if p.category == category]
        if search:
            needle = search.strip().lower()
            products = [p for p in products if needle in p.name.lower() or needle in p.brand.lower()]
        return list(products)

    def get_product_by_id(self, product_id: str) -> Optional[Product]:
        return self._by_id.get(product_id)

    def lookup_product(self, product_id: str) -> Optional[ProductSnapshot]:
        """Snapshot for the cart, or None if the id is unknown."""
        product = self.get_product_by_id(product_id)
        return product.to_snapshot() if product else None

    def get_related_products(self, category: str, current_product_id: str, limit: int = 4) -> List[Product]:
        return [
            p for p in self._products
            if p.category == category and p.id != current_product_id
        ][:limit]


@cache
def get_catalog(seed: int = DEFAULT_SEED) -> Catalog:
    """Get the generated catalog (cached per seed)."""
    return Catalog(generate_products(seed))


def lookup_product(product_id: str) -> Optional[ProductSnapshot]:
    """Look up a product snapshot in the default catalog."""
    return get_catalog().lookup_product(product_id)
