"""
Manual product entry.

One product with its variants is submitted in a single request to
POST /admin/products/bulk-create. The form is validated completely
before anything is sent.
"""

import structlog

from exceptions import (
    BackendApiError,
    ImageUrlsRequiredError,
    InvalidVariantError,
    ProductCreationError,
    StoreNotSelectedError,
    ValidationError,
)
from models.product import (
    SUB_CATEGORIES,
    BulkCreateProductRequest,
    BulkCreateProductResponse,
    BulkProductForm,
    VariantPayload,
)
from utils.text_utils import split_lines

logger = structlog.get_logger(__name__)

BULK_CREATE_PATH = "/admin/products/bulk-create"
FALLBACK_MESSAGE = "Failed to create product"


class ProductService:
    """
    Manual product creation.

    Args:
        api: ApiClient
        notifier: Notifier for user-visible outcomes (optional)
    """

    def __init__(self, api, notifier=None):
        self.api = api
        self.notifier = notifier

    # ===================
    # VALIDATION
    # ===================

    def build_request(self, form: BulkProductForm) -> BulkCreateProductRequest:
        """
        Validate the form and build the request body.

        Raises:
            StoreNotSelectedError: No target store
            ImageUrlsRequiredError: No non-blank image URL
            InvalidVariantError: A variant has price <= 0 or inventory < 0
            ValidationError: Sub-category does not belong to the main category
        """
        if not form.store_id:
            raise StoreNotSelectedError("Please select a store")

        image_urls = split_lines(form.image_urls)
        if not image_urls:
            raise ImageUrlsRequiredError()

        invalid = [index for index, variant in enumerate(form.variants, start=1) if not variant.is_valid()]
        if invalid:
            raise InvalidVariantError(invalid)

        allowed = SUB_CATEGORIES.get(form.main_category)
        if allowed is not None and form.sub_category not in allowed:
            raise ValidationError(
                f"Sub-category {form.sub_category} does not belong to {form.main_category}",
                code="INVALID_SUB_CATEGORY",
                details={"main_category": form.main_category, "allowed": list(allowed)}
            )

        return BulkCreateProductRequest(
            store_id=form.store_id,
            title=form.title,
            description=form.description,
            brand_name=form.brand_name or None,
            main_category=form.main_category,
            sub_category=form.sub_category,
            image_urls=image_urls,
            variants=[
                VariantPayload(
                    attributes=variant.attributes,
                    sku=variant.sku or None,
                    mrp=variant.mrp or None,
                    selling_price=variant.selling_price,
                    inventory=variant.inventory
                )
                for variant in form.variants
            ],
            image_sharing_strategy=form.image_sharing_strategy,
            is_returnable=form.is_returnable,
            is_cod_allowed=form.is_cod_allowed,
            is_published=form.is_published
        )

    # ===================
    # SUBMISSION
    # ===================

    def submit(self, form: BulkProductForm) -> BulkCreateProductResponse:
        """
        Create the product.

        Images the backend could not fetch are reported in failed_images;
        the product still counts as created.

        Raises:
            ValidationError: Form invalid (no request sent)
            ProductCreationError: Backend answered success=false
            BackendApiError: Transport failure
        """
        request = self.build_request(form)

        logger.info(
            "product_submission_started",
            store_id=request.store_id,
            title=request.title,
            variants=len(request.variants),
            images=len(request.image_urls)
        )

        try:
            payload = self.api.post(BULK_CREATE_PATH, json=request.to_payload())
            response = self.api.parse(BulkCreateProductResponse, payload, BULK_CREATE_PATH)
        except BackendApiError as e:
            self._notify_error(e.display_message(FALLBACK_MESSAGE))
            raise

        if not response.success:
            message = response.message or FALLBACK_MESSAGE
            self._notify_error(message)
            raise ProductCreationError(message, request.store_id)

        if response.failed_images:
            logger.warning(
                "product_images_failed",
                product_id=response.product_id,
                failed=len(response.failed_images)
            )

        logger.info(
            "product_created",
            product_id=response.product_id,
            images=len(response.image_ids),
            variants=response.total_variants
        )
        if self.notifier is not None:
            self.notifier.success(response.message or "Product created successfully")
        return response

    def _notify_error(self, message: str) -> None:
        logger.warning("product_submission_failed", error=message)
        if self.notifier is not None:
            self.notifier.error(message)
