"""
Manual product entry schemas.

One product with one or more variants, submitted to
POST /admin/products/bulk-create in a single request.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import Field

from models.base import ApiSchema, BaseSchema, ActionResponse


class ImageSharingStrategy(str, Enum):
    """How downloaded images are attached to variants."""
    PRODUCT_WIDE = "PRODUCT_WIDE"
    COLOR_BASED = "COLOR_BASED"


MAIN_CATEGORIES = (
    "FASHION", "ELECTRONICS", "HOME_LIVING", "BEAUTY_PERSONAL_CARE",
    "SPORTS_FITNESS", "BOOKS_STATIONERY", "TOYS_GAMES", "GROCERIES",
    "HEALTH_WELLNESS", "AUTOMOTIVE", "JEWELLERY", "FOOD_BEVERAGES",
    "PET_SUPPLIES", "BABY_PRODUCTS", "OTHER",
)

SUB_CATEGORIES: dict[str, tuple[str, ...]] = {
    "FASHION": ("Mens_Clothing", "Womens_Clothing", "Kids_Clothing", "Footwear", "Accessories"),
    "ELECTRONICS": ("Mobile_Phones", "Laptops", "Cameras", "Audio", "Accessories"),
    "HOME_LIVING": ("Furniture", "Home_Decor", "Kitchen", "Bedding", "Storage"),
    "OTHER": ("General", "Miscellaneous"),
}


class VariantInput(BaseSchema):
    """
    One variant row of the form.

    Price and inventory are not constrained here: the form checks every
    row and reports all failing rows together.
    """
    attributes: dict[str, str] = Field(default_factory=dict)
    sku: Optional[str] = None
    mrp: Optional[float] = None
    selling_price: float = 0
    inventory: int = 0

    def is_valid(self) -> bool:
        return self.selling_price > 0 and self.inventory >= 0


class BulkProductForm(BaseSchema):
    """Manual product form as filled in by the admin."""
    store_id: str = ""
    title: str = Field(..., min_length=1)
    description: str = ""
    brand_name: str = ""
    main_category: str = "FASHION"
    sub_category: str = "Mens_Clothing"
    image_urls: str = Field("", description="One image URL per line")
    image_sharing_strategy: ImageSharingStrategy = ImageSharingStrategy.PRODUCT_WIDE
    is_returnable: bool = False
    is_cod_allowed: bool = True
    is_published: bool = True
    variants: list[VariantInput] = Field(default_factory=lambda: [VariantInput()], min_length=1)


class VariantPayload(ApiSchema):
    attributes: dict[str, str] = Field(default_factory=dict)
    sku: Optional[str] = None
    mrp: Optional[float] = None
    selling_price: float
    inventory: int


class BulkCreateProductRequest(ApiSchema):
    """Body of POST /admin/products/bulk-create."""
    store_id: str
    title: str
    description: str = ""
    brand_name: Optional[str] = None
    main_category: str
    sub_category: str
    image_urls: list[str]
    variants: list[VariantPayload]
    image_sharing_strategy: ImageSharingStrategy
    is_returnable: bool
    is_cod_allowed: bool
    is_published: bool


class BulkCreateProductResponse(ActionResponse):
    """
    Product-level outcome.

    failedImages lists images the backend could not fetch; the product
    itself still counts as created.
    """
    product_id: Optional[str] = None
    image_ids: list[str] = Field(default_factory=list)
    total_variants: int = 0
    failed_images: list[Any] = Field(default_factory=list)
