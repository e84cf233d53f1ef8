"""Unit tests for services/product_request.py.

Collaborators are AsyncMocks; ORM objects are built in memory by factories.
"""

import io
import logging
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from app.core.exceptions import (
    ConfigurationError,
    ForbiddenError,
    InvalidImageReferenceError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from app.domain.types import Category, DeliveryStatus
from app.repositories.object_store import UploadInfo
from app.schemas.product_request import ProductRequestStatusUpdate, ProductRequestUpdate
from app.services.product_request import (
    IMAGE_FOLDER,
    FileHeader,
    ProductRequestService,
    image_object_path,
)
from tests.conftest import fake_signed_url
from tests.factories import (
    AdminUserFactory,
    OfferFactory,
    ProductRequestFactory,
    TransactionFactory,
    UserFactory,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def repo() -> AsyncMock:
    store = AsyncMock()
    store.create.side_effect = lambda pr: pr
    store.update.side_effect = lambda pr: pr
    return store


@pytest.fixture
def offer_repo() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def user_repo() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def service(repo, object_store, offer_repo, user_repo, test_settings, notifier) -> ProductRequestService:
    return ProductRequestService(
        repo=repo,
        object_store=object_store,
        offer_repo=offer_repo,
        user_repo=user_repo,
        cfg=test_settings,
        notifier=notifier,
    )


def _files(*names: str) -> tuple[list[FileHeader], list[io.BytesIO]]:
    headers = [FileHeader(filename=n, size=3, content_type="image/png") for n in names]
    readers = [io.BytesIO(b"img") for _ in names]
    return headers, readers


# =============================================================================
# create_product_request
# =============================================================================


class TestCreateProductRequest:
    async def test_uploads_each_file_and_stores_uris_in_order(self, service, repo, object_store):
        pr = ProductRequestFactory.build()
        headers, readers = _files("a.png", "b.png", "c.png")

        result = await service.create_product_request(pr, headers, readers)

        assert pr.images == [
            "hewpao-s3/product-request-images/a.png",
            "hewpao-s3/product-request-images/b.png",
            "hewpao-s3/product-request-images/c.png",
        ]
        assert result.images == [
            fake_signed_url("hewpao-s3", f"product-request-images/{name}", timedelta(minutes=15))
            for name in ("a.png", "b.png", "c.png")
        ]
        assert object_store.upload_file.await_count == 3
        first_call = object_store.upload_file.await_args_list[0]
        assert first_call.args == ("a.png", readers[0], 3, "image/png", IMAGE_FOLDER)
        repo.create.assert_awaited_once_with(pr)

    async def test_overwrites_caller_supplied_images(self, service):
        pr = ProductRequestFactory.build(images=["hewpao-s3/forged/key.png"])
        headers, readers = _files("real.png")

        await service.create_product_request(pr, headers, readers)

        assert pr.images == ["hewpao-s3/product-request-images/real.png"]

    async def test_no_files_persists_empty_image_list(self, service, repo, object_store):
        pr = ProductRequestFactory.build()

        result = await service.create_product_request(pr, [], [])

        assert result.images == []
        object_store.upload_file.assert_not_awaited()
        repo.create.assert_awaited_once()

    async def test_upload_failure_aborts_before_persistence(self, service, repo, object_store):
        boom = RuntimeError("bucket unavailable")
        object_store.upload_file.side_effect = [
            UploadInfo(bucket="hewpao-s3", key="product-request-images/a.png"),
            boom,
            UploadInfo(bucket="hewpao-s3", key="product-request-images/c.png"),
        ]
        headers, readers = _files("a.png", "b.png", "c.png")

        with pytest.raises(RuntimeError) as exc_info:
            await service.create_product_request(ProductRequestFactory.build(), headers, readers)

        assert exc_info.value is boom
        assert object_store.upload_file.await_count == 2
        repo.create.assert_not_awaited()

    async def test_persistence_failure_propagates_unchanged(self, service, repo):
        boom = RuntimeError("db down")
        repo.create.side_effect = boom
        headers, readers = _files("a.png")

        with pytest.raises(RuntimeError) as exc_info:
            await service.create_product_request(ProductRequestFactory.build(), headers, readers)

        assert exc_info.value is boom

    async def test_signing_failure_aborts_before_persistence(self, service, repo, object_store):
        boom = RuntimeError("signing failed")
        object_store.get_signed_url.side_effect = boom
        headers, readers = _files("a.png", "b.png")

        with pytest.raises(RuntimeError) as exc_info:
            await service.create_product_request(ProductRequestFactory.build(), headers, readers)

        assert exc_info.value is boom
        assert object_store.upload_file.await_count == 2
        repo.create.assert_not_awaited()

    async def test_mismatched_headers_and_readers_rejected(self, service, object_store, repo):
        headers, _ = _files("a.png", "b.png")

        with pytest.raises(ValidationError):
            await service.create_product_request(
                ProductRequestFactory.build(), headers, [io.BytesIO(b"x")]
            )

        object_store.upload_file.assert_not_awaited()
        repo.create.assert_not_awaited()


# =============================================================================
# get_detail_by_id
# =============================================================================


class TestGetDetailById:
    async def test_signs_each_image_with_configured_bucket_and_ttl(self, service, repo, object_store):
        pr = ProductRequestFactory.build(id=7, images=["hewpao-s3/images/a.png"])
        repo.find_by_id.return_value = pr
        object_store.get_signed_url.side_effect = None
        object_store.get_signed_url.return_value = "https://minio.test/images/a.png?X-Amz-Signature=abc"

        detail = await service.get_detail_by_id(7)

        object_store.get_signed_url.assert_awaited_once_with(
            "hewpao-s3", "images/a.png", timedelta(minutes=15)
        )
        assert detail.images == ["https://minio.test/images/a.png?X-Amz-Signature=abc"]
        assert detail.id == 7

    async def test_projects_request_fields(self, service, repo):
        offer = OfferFactory.build()
        tx = TransactionFactory.build()
        pr = ProductRequestFactory.build(
            name="Tokyo Banana",
            desc="Two boxes please",
            category=Category.FOOD.value,
            quantity=2,
            offers=[offer],
            transactions=[tx],
        )
        repo.find_by_id.return_value = pr

        detail = await service.get_detail_by_id(pr.id)

        assert detail.name == "Tokyo Banana"
        assert detail.desc == "Two boxes please"
        assert detail.category == "Food"
        assert detail.quantity == 2
        assert detail.user_id == pr.user_id
        assert detail.delivery_status == DeliveryStatus.OPENING.value
        assert [o.id for o in detail.offers] == [offer.id]
        assert [t.id for t in detail.transactions] == [tx.id]
        assert detail.deleted_at is None

    async def test_not_found(self, service, repo):
        repo.find_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await service.get_detail_by_id(404)

    async def test_image_without_bucket_marker_raises(self, service, repo):
        repo.find_by_id.return_value = ProductRequestFactory.build(images=["other-bucket/a.png"])

        with pytest.raises(InvalidImageReferenceError):
            await service.get_detail_by_id(1)

    async def test_malformed_expiration_raises(self, service, repo, test_settings):
        test_settings.s3_expiration = "fifteen minutes"
        repo.find_by_id.return_value = ProductRequestFactory.build(images=["hewpao-s3/a.png"])

        with pytest.raises(ConfigurationError):
            await service.get_detail_by_id(1)

    async def test_signer_failure_propagates(self, service, repo, object_store):
        boom = RuntimeError("signing failed")
        object_store.get_signed_url.side_effect = boom
        repo.find_by_id.return_value = ProductRequestFactory.build(images=["hewpao-s3/a.png"])

        with pytest.raises(RuntimeError) as exc_info:
            await service.get_detail_by_id(1)

        assert exc_info.value is boom


class TestImageObjectPath:
    def test_strips_bucket_prefix(self):
        assert image_object_path("hewpao-s3/product-request-images/a.png") == "product-request-images/a.png"

    def test_splits_on_first_marker_only(self):
        assert image_object_path("hewpao-s3/a/hewpao-s3/b.png") == "a/hewpao-s3/b.png"

    def test_missing_marker_raises(self):
        with pytest.raises(InvalidImageReferenceError):
            image_object_path("product-request-images/a.png")


# =============================================================================
# get_buyer_product_requests_by_user_id
# =============================================================================


class TestGetBuyerProductRequests:
    async def test_keeps_store_order_and_omits_transactions(self, service, repo):
        owner = "buyer-1"
        first = ProductRequestFactory.build(user_id=owner, images=["hewpao-s3/x/1.png"])
        second = ProductRequestFactory.build(
            user_id=owner, transactions=[TransactionFactory.build()]
        )
        repo.find_by_user_id.return_value = [first, second]

        details = await service.get_buyer_product_requests_by_user_id(owner)

        repo.find_by_user_id.assert_awaited_once_with(owner)
        assert [d.id for d in details] == [first.id, second.id]
        assert details[0].images == [fake_signed_url("hewpao-s3", "x/1.png", timedelta(minutes=15))]
        assert all(d.transactions is None for d in details)

    async def test_no_requests_returns_empty_list(self, service, repo):
        repo.find_by_user_id.return_value = []

        assert await service.get_buyer_product_requests_by_user_id("nobody") == []


# =============================================================================
# get_paginated_product_requests
# =============================================================================


class TestGetPaginatedProductRequests:
    async def test_builds_page_envelope(self, service, repo, object_store):
        rows = [
            ProductRequestFactory.build(images=["hewpao-s3/p/1.png", "hewpao-s3/p/2.png"]),
            ProductRequestFactory.build(),
        ]
        repo.find_paginated.return_value = (rows, 21)

        result = await service.get_paginated_product_requests(3, 10)

        repo.find_paginated.assert_awaited_once_with(3, 10)
        assert result.page == 3
        assert result.limit == 10
        assert result.total_rows == 21
        assert result.total_pages == 3
        assert [d.id for d in result.data] == [r.id for r in rows]
        assert object_store.get_signed_url.await_count == 2

    @pytest.mark.parametrize(
        ("total_rows", "limit", "expected_pages"),
        [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (99, 1, 99)],
    )
    async def test_total_pages_is_ceiling(self, service, repo, total_rows, limit, expected_pages):
        repo.find_paginated.return_value = ([], total_rows)

        result = await service.get_paginated_product_requests(1, limit)

        assert result.total_pages == expected_pages

    @pytest.mark.parametrize("limit", [0, -5])
    async def test_non_positive_limit_rejected(self, service, repo, limit):
        with pytest.raises(ValidationError):
            await service.get_paginated_product_requests(1, limit)

        repo.find_paginated.assert_not_awaited()

    async def test_non_positive_page_rejected(self, service, repo):
        with pytest.raises(ValidationError):
            await service.get_paginated_product_requests(0, 10)

        repo.find_paginated.assert_not_awaited()


# =============================================================================
# update_product_request
# =============================================================================


def _update(offer_id: int, **overrides) -> ProductRequestUpdate:
    data = {
        "name": "Nintendo Switch OLED",
        "desc": "White edition",
        "category": Category.ELECTRONICS,
        "budget": "12000.00",
        "quantity": 1,
        "selected_offer_id": offer_id,
    }
    data.update(overrides)
    return ProductRequestUpdate(**data)


class TestUpdateProductRequest:
    async def test_owner_selects_offer_made_on_request(self, service, repo, offer_repo):
        offer = OfferFactory.build()
        pr = ProductRequestFactory.build(user_id="owner-1", offers=[offer])
        repo.find_by_id.return_value = pr
        offer_repo.get_by_id.return_value = offer

        result = await service.update_product_request(
            _update(offer.id, category=Category.TOYS, quantity=3), pr.id, "owner-1"
        )

        repo.find_by_id.assert_awaited_once_with(pr.id, for_update=True)
        repo.update.assert_awaited_once_with(pr)
        assert result.name == "Nintendo Switch OLED"
        assert result.desc == "White edition"
        assert result.category == "Toys"
        assert result.quantity == 3
        assert str(result.budget) == "12000.00"
        assert result.selected_offer_id == offer.id
        assert pr.selected_offer is offer

    async def test_non_owner_is_forbidden_even_with_valid_offer(self, service, repo, offer_repo):
        offer = OfferFactory.build()
        pr = ProductRequestFactory.build(user_id="owner-1", offers=[offer])
        repo.find_by_id.return_value = pr
        offer_repo.get_by_id.return_value = offer

        with pytest.raises(ForbiddenError):
            await service.update_product_request(_update(offer.id), pr.id, "intruder")

        offer_repo.get_by_id.assert_not_awaited()
        repo.update.assert_not_awaited()

    async def test_ownerless_request_is_forbidden(self, service, repo):
        repo.find_by_id.return_value = ProductRequestFactory.build(user_id=None)

        with pytest.raises(ForbiddenError):
            await service.update_product_request(_update(1), 1, "anyone")

    async def test_offer_from_another_request_is_forbidden(self, service, repo, offer_repo):
        own_offer = OfferFactory.build()
        foreign_offer = OfferFactory.build()
        pr = ProductRequestFactory.build(user_id="owner-1", offers=[own_offer])
        repo.find_by_id.return_value = pr
        offer_repo.get_by_id.return_value = foreign_offer

        with pytest.raises(ForbiddenError):
            await service.update_product_request(_update(foreign_offer.id), pr.id, "owner-1")

        repo.update.assert_not_awaited()
        assert pr.selected_offer_id is None

    async def test_missing_offer_is_not_found(self, service, repo, offer_repo):
        repo.find_by_id.return_value = ProductRequestFactory.build(user_id="owner-1")
        offer_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await service.update_product_request(_update(999), 1, "owner-1")

    async def test_signing_failure_leaves_request_untouched(
        self, service, repo, offer_repo, object_store
    ):
        offer = OfferFactory.build()
        pr = ProductRequestFactory.build(
            user_id="owner-1", offers=[offer], images=["hewpao-s3/p/1.png"]
        )
        repo.find_by_id.return_value = pr
        offer_repo.get_by_id.return_value = offer
        object_store.get_signed_url.side_effect = RuntimeError("signing failed")

        with pytest.raises(RuntimeError):
            await service.update_product_request(_update(offer.id), pr.id, "owner-1")

        repo.update.assert_not_awaited()
        assert pr.selected_offer_id is None

    async def test_missing_request_is_not_found(self, service, repo):
        repo.find_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await service.update_product_request(_update(1), 1, "owner-1")


# =============================================================================
# update_product_request_status
# =============================================================================


def _status(value: DeliveryStatus) -> ProductRequestStatusUpdate:
    return ProductRequestStatusUpdate(delivery_status=value)


class TestUpdateProductRequestStatus:
    @pytest.fixture
    def traveler(self):
        return UserFactory.build()

    @pytest.fixture
    def selected(self, repo, offer_repo, traveler):
        offer = OfferFactory.build(user_id=traveler.id)
        pr = ProductRequestFactory.build(
            user_id="buyer-1", offers=[offer], selected_offer_id=offer.id
        )
        repo.find_by_id.return_value = pr
        offer_repo.get_by_id.return_value = offer
        return pr

    async def test_traveler_marks_purchased_and_notifies_once(
        self, service, repo, user_repo, notifier, traveler, selected
    ):
        user_repo.find_by_id.return_value = traveler

        result = await service.update_product_request_status(
            _status(DeliveryStatus.PURCHASED), selected.id, traveler.id
        )

        assert result.delivery_status == "Purchased"
        repo.update.assert_awaited_once_with(selected)
        notifier.notify_product_request.assert_awaited_once_with(selected)

    async def test_traveler_cannot_set_other_statuses(
        self, service, repo, user_repo, notifier, traveler, selected
    ):
        user_repo.find_by_id.return_value = traveler

        with pytest.raises(ForbiddenError):
            await service.update_product_request_status(
                _status(DeliveryStatus.DELIVERED), selected.id, traveler.id
            )

        assert selected.delivery_status == DeliveryStatus.OPENING.value
        repo.update.assert_not_awaited()
        notifier.notify_product_request.assert_not_awaited()

    async def test_request_owner_is_not_the_traveler(self, service, user_repo, selected):
        user_repo.find_by_id.return_value = UserFactory.build(id="buyer-1")

        with pytest.raises(ForbiddenError):
            await service.update_product_request_status(
                _status(DeliveryStatus.PURCHASED), selected.id, "buyer-1"
            )

    @pytest.mark.parametrize("target", list(DeliveryStatus))
    async def test_admin_may_set_any_status(self, service, user_repo, notifier, selected, target):
        admin = AdminUserFactory.build()
        user_repo.find_by_id.return_value = admin

        result = await service.update_product_request_status(_status(target), selected.id, admin.id)

        assert result.delivery_status == target.value
        notifier.notify_product_request.assert_awaited_once()

    @pytest.mark.parametrize("caller_factory", [UserFactory, AdminUserFactory])
    async def test_without_selected_offer_is_invalid_state(
        self, service, repo, user_repo, offer_repo, caller_factory
    ):
        caller = caller_factory.build()
        repo.find_by_id.return_value = ProductRequestFactory.build(selected_offer_id=None)
        user_repo.find_by_id.return_value = caller

        with pytest.raises(InvalidStateError):
            await service.update_product_request_status(
                _status(DeliveryStatus.PURCHASED), 1, caller.id
            )

        user_repo.find_by_id.assert_not_awaited()
        offer_repo.get_by_id.assert_not_awaited()

    async def test_unknown_caller_is_not_found(self, service, user_repo, selected):
        user_repo.find_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await service.update_product_request_status(
                _status(DeliveryStatus.PURCHASED), selected.id, "ghost"
            )

    async def test_missing_selected_offer_is_not_found(
        self, service, user_repo, offer_repo, traveler, selected
    ):
        user_repo.find_by_id.return_value = traveler
        offer_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await service.update_product_request_status(
                _status(DeliveryStatus.PURCHASED), selected.id, traveler.id
            )

    async def test_notifier_failure_propagates_after_write(
        self, service, repo, user_repo, notifier, traveler, selected
    ):
        boom = RuntimeError("webhook down")
        notifier.notify_product_request.side_effect = boom
        user_repo.find_by_id.return_value = traveler

        with pytest.raises(RuntimeError) as exc_info:
            await service.update_product_request_status(
                _status(DeliveryStatus.PURCHASED), selected.id, traveler.id
            )

        assert exc_info.value is boom
        repo.update.assert_awaited_once()

    async def test_returned_detail_carries_new_status_and_signed_images(
        self, service, repo, user_repo, traveler, selected
    ):
        selected.images = ["hewpao-s3/p/1.png"]
        user_repo.find_by_id.return_value = traveler

        detail = await service.update_product_request_status(
            _status(DeliveryStatus.PURCHASED), selected.id, traveler.id
        )

        assert detail.id == selected.id
        assert detail.delivery_status == "Purchased"
        assert detail.images == [fake_signed_url("hewpao-s3", "p/1.png", timedelta(minutes=15))]

    async def test_signing_failure_skips_write_and_notification(
        self, service, repo, user_repo, notifier, object_store, selected
    ):
        selected.images = ["hewpao-s3/p/1.png"]
        user_repo.find_by_id.return_value = AdminUserFactory.build()
        object_store.get_signed_url.side_effect = RuntimeError("signing failed")

        with pytest.raises(RuntimeError):
            await service.update_product_request_status(
                _status(DeliveryStatus.DELIVERED), selected.id, "admin"
            )

        assert selected.delivery_status == DeliveryStatus.OPENING.value
        repo.update.assert_not_awaited()
        notifier.notify_product_request.assert_not_awaited()

    async def test_bad_image_reference_skips_notification(
        self, service, repo, user_repo, notifier, selected
    ):
        selected.images = ["product-request-images/no-bucket.png"]
        user_repo.find_by_id.return_value = AdminUserFactory.build()

        with pytest.raises(InvalidImageReferenceError):
            await service.update_product_request_status(
                _status(DeliveryStatus.DELIVERED), selected.id, "admin"
            )

        repo.update.assert_not_awaited()
        notifier.notify_product_request.assert_not_awaited()

    async def test_notifier_failure_is_logged(
        self, service, user_repo, notifier, traveler, selected, caplog
    ):
        notifier.notify_product_request.side_effect = RuntimeError("webhook down")
        user_repo.find_by_id.return_value = traveler

        with caplog.at_level(logging.ERROR, logger="app.services.product_request"):
            with pytest.raises(RuntimeError):
                await service.update_product_request_status(
                    _status(DeliveryStatus.PURCHASED), selected.id, traveler.id
                )

        failures = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(failures) == 1
        assert failures[0].exc_info is not None
        assert str(selected.id) in failures[0].getMessage()
