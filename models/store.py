"""
Store schemas: directory listings, detail, edits, creation and actions.
"""

from enum import Enum
from typing import Optional

from pydantic import Field, EmailStr, model_validator

from models.base import ApiSchema, BaseSchema, ActionResponse


class RouteProductStatus(str, Enum):
    """Payment-routing approval state tracked per store."""
    ACTIVATED = "activated"
    UNDER_REVIEW = "under_review"
    REJECTED = "rejected"
    NOT_REQUESTED = "not_requested"


# Statuses an admin can request; not_requested is only ever reported.
REQUESTABLE_ROUTE_STATUSES = (
    RouteProductStatus.ACTIVATED,
    RouteProductStatus.UNDER_REVIEW,
    RouteProductStatus.REJECTED,
)


class StoreCategory(str, Enum):
    """Primary product category of a store."""
    FASHION = "FASHION"
    FOOTWEAR = "FOOTWEAR"
    ELECTRONICS = "ELECTRONICS"
    COSMETICS = "COSMETICS"
    ACCESSORIES = "ACCESSORIES"


class SellerRegistrationType(str, Enum):
    """Tax registration of a seller."""
    GST_REGISTERED = "GST_REGISTERED"
    ENROLLMENT_BASED = "ENROLLMENT_BASED"


# ===================
# LISTING
# ===================

class StoreListItem(ApiSchema):
    """Row of the store directory / selector."""
    id: str
    store_name: str
    store_username: str
    dxtin: str


class StoreListResponse(ApiSchema):
    """Page of stores from GET /admin/stores."""
    stores: list[StoreListItem] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 20
    has_more: bool = False


# ===================
# DETAIL
# ===================

class StoreDetail(ApiSchema):
    """Full store profile from GET /admin/stores/{id}."""
    id: str
    dxtin: str
    email: str
    phone_number: str
    whatsapp_number: Optional[str] = None
    owner_name: str
    business_name: str
    business_type: Optional[str] = None
    store_name: str
    store_username: str
    store_logo: Optional[str] = None
    store_description: str = ""
    product_category: Optional[str] = None
    store_type: Optional[str] = None
    store_rating: float = 0
    products_count: int = 0
    followers_count: int = 0
    subdomain: Optional[str] = None
    website_url: Optional[str] = None
    is_active: bool
    created_at: Optional[int] = None
    last_updated_at: Optional[int] = None
    linked_account_status: Optional[str] = None
    route_product_status: Optional[RouteProductStatus] = None
    completion_stage: Optional[str] = None

    @property
    def effective_route_status(self) -> RouteProductStatus:
        """Missing status means the store never asked for routing."""
        return self.route_product_status or RouteProductStatus.NOT_REQUESTED


class StoreAnalytics(ApiSchema):
    """Per-store counters from GET /admin/stores/{id}/analytics."""
    store_id: str
    store_name: str
    total_products: int = 0
    published_products: int = 0
    draft_products: int = 0
    total_orders: int = 0
    total_revenue: float = 0
    average_order_value: float = 0
    store_rating: float = 0
    total_reviews: int = 0


# ===================
# MUTATIONS
# ===================

# Fields the edit form exposes, in display order.
EDITABLE_STORE_FIELDS = (
    "store_name",
    "store_description",
    "owner_name",
    "business_name",
    "phone_number",
    "whatsapp_number",
    "email",
    "website_url",
)


class StoreEditForm(BaseSchema):
    """
    Values shown in the edit modal.

    Optional profile fields are shown as empty strings so that an
    untouched empty input compares equal to a missing value.
    """
    store_name: str = Field(..., min_length=1)
    store_description: str = ""
    owner_name: str = Field(..., min_length=1)
    business_name: str = ""
    phone_number: str = ""
    whatsapp_number: str = ""
    email: str = ""
    website_url: str = ""

    @classmethod
    def from_store(cls, store: StoreDetail) -> "StoreEditForm":
        return cls(
            store_name=store.store_name,
            store_description=store.store_description or "",
            owner_name=store.owner_name,
            business_name=store.business_name or "",
            phone_number=store.phone_number or "",
            whatsapp_number=store.whatsapp_number or "",
            email=store.email or "",
            website_url=store.website_url or "",
        )


class UpdateStoreRequest(ApiSchema):
    """Partial update body for PUT /admin/stores/{id}; only changed fields are set."""
    store_name: Optional[str] = None
    store_description: Optional[str] = None
    store_logo: Optional[str] = None
    owner_name: Optional[str] = None
    business_name: Optional[str] = None
    phone_number: Optional[str] = None
    whatsapp_number: Optional[str] = None
    email: Optional[str] = None
    website_url: Optional[str] = None

    def is_empty(self) -> bool:
        return not self.to_payload()


class StoreActionResponse(ActionResponse):
    """Answer to update/suspend/verify/route-product calls."""
    store_id: Optional[str] = None


class CreateStoreForm(BaseSchema):
    """
    Store creation form.

    Empty optional strings are treated as "not provided".
    """
    store_name: str = Field(..., min_length=1)
    owner_name: str = Field(..., min_length=1)
    email: EmailStr
    phone_number: str = Field(..., min_length=5)
    whatsapp_number: str = ""
    business_name: str = ""
    business_type: str = "Retail"
    store_description: str = ""
    store_logo_url: str = ""
    product_category: StoreCategory = StoreCategory.FASHION
    website_url: str = ""
    subdomain: str = ""

    # Address
    address_line1: str = ""
    address_line2: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""

    # Tax
    gst_number: str = ""
    seller_registration_type: SellerRegistrationType = SellerRegistrationType.GST_REGISTERED
    enrollment_number: str = ""

    # Shipping policy defaults
    default_is_cod_allowed: bool = True
    default_is_returnable: bool = True
    default_shipping_local_cost: float = Field(0, ge=0)
    default_shipping_regional_cost: float = Field(0, ge=0)
    default_shipping_national_cost: float = Field(0, ge=0)
    default_delivery_min_days: int = Field(2, ge=0)
    default_delivery_max_days: int = Field(7, ge=0)

    @model_validator(mode="after")
    def delivery_range_ordered(self) -> "CreateStoreForm":
        if self.default_delivery_max_days < self.default_delivery_min_days:
            raise ValueError("Maximum delivery days must not be below minimum delivery days")
        return self

    def to_request(self) -> "CreateStoreRequest":
        """Apply creation defaults; drop blank optionals and zero shipping costs."""
        def blank_to_none(value: str) -> Optional[str]:
            return value or None

        def positive_or_none(value: float) -> Optional[float]:
            return value if value > 0 else None

        return CreateStoreRequest(
            store_name=self.store_name,
            email=self.email,
            phone_number=self.phone_number,
            whatsapp_number=self.whatsapp_number or self.phone_number,
            owner_name=self.owner_name,
            business_name=self.business_name or self.store_name,
            business_type=self.business_type or "Retail",
            store_description=blank_to_none(self.store_description),
            store_logo_url=blank_to_none(self.store_logo_url),
            product_category=self.product_category.value,
            website_url=blank_to_none(self.website_url),
            subdomain=blank_to_none(self.subdomain),
            address_line1=blank_to_none(self.address_line1),
            address_line2=blank_to_none(self.address_line2),
            city=blank_to_none(self.city),
            state=blank_to_none(self.state),
            pincode=blank_to_none(self.pincode),
            gst_number=blank_to_none(self.gst_number),
            seller_registration_type=(
                self.seller_registration_type.value if self.gst_number else None
            ),
            enrollment_number=blank_to_none(self.enrollment_number),
            default_is_cod_allowed=self.default_is_cod_allowed,
            default_is_returnable=self.default_is_returnable,
            default_shipping_local_cost=positive_or_none(self.default_shipping_local_cost),
            default_shipping_regional_cost=positive_or_none(self.default_shipping_regional_cost),
            default_shipping_national_cost=positive_or_none(self.default_shipping_national_cost),
            default_delivery_min_days=self.default_delivery_min_days,
            default_delivery_max_days=self.default_delivery_max_days,
        )


class CreateStoreRequest(ApiSchema):
    """Body of POST /admin/stores/create."""
    store_name: str
    email: str
    phone_number: str
    whatsapp_number: str
    owner_name: str
    business_name: str
    business_type: str
    store_description: Optional[str] = None
    store_logo_url: Optional[str] = None
    product_category: str
    website_url: Optional[str] = None
    subdomain: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    gst_number: Optional[str] = None
    seller_registration_type: Optional[str] = None
    enrollment_number: Optional[str] = None
    default_is_cod_allowed: bool = True
    default_is_returnable: bool = True
    default_shipping_local_cost: Optional[float] = None
    default_shipping_regional_cost: Optional[float] = None
    default_shipping_national_cost: Optional[float] = None
    default_delivery_min_days: Optional[int] = None
    default_delivery_max_days: Optional[int] = None


class CreateStoreResponse(ActionResponse):
    """Server-issued tenant identity and temporary credential."""
    dxtin: Optional[str] = None
    store_username: Optional[str] = None
    temp_password: Optional[str] = None


# ===================
# VIEWS
# ===================

class StoreListView(BaseSchema):
    """Store directory screen."""
    stores: list[dict] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 20
    has_more: bool = False
    total_pages: int = 0
    search: str = ""
    empty_title: Optional[str] = None
    empty_message: Optional[str] = None
    error: Optional[str] = None


# ===================
# ACTION BODIES
# ===================

class GstVerificationRequest(ApiSchema):
    verified: bool


class RouteProductStatusRequest(ApiSchema):
    status: RouteProductStatus


class StoreSelectionRequest(ApiSchema):
    store_id: str = Field(..., min_length=1)
