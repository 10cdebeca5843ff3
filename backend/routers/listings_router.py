# backend/routers/listings_router.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import ValidationError as PayloadError
from starlette.concurrency import run_in_threadpool

from config import settings
from routers.deps import get_listing_store, respond, require_session
from schemas.common import StoreResult
from schemas.listings import ListingCreate, ListingImage
from services.errors import StoreError
from services.image_storage import get_image_storage
from services.listing_store import ListingStore

router = APIRouter(prefix="/listings", tags=["listings"])


async def _discard(images, saved) -> None:
    for _, stored in saved:
        await images.delete(stored["public_id"])


@router.get("/all")
def all_listings(store: ListingStore = Depends(get_listing_store)):
    return respond(store.get_all_listings())


@router.get("/search")
def search_listings(q: Optional[str] = Query(default=None), store: ListingStore = Depends(get_listing_store)):
    return respond(store.search_listings(q or ""))


@router.get("/provider/{provider_id}")
def provider_listings(provider_id: int, store: ListingStore = Depends(get_listing_store)):
    return respond(store.get_listings_by_provider(provider_id))


@router.get("/{listing_id}")
def get_listing(listing_id: int, store: ListingStore = Depends(get_listing_store)):
    return respond(store.get_listing_by_id(listing_id))


@router.post("/create")
async def create_listing(
    title: str = Form(...),
    description: Optional[str] = Form(None),
    storage_type: str = Form(...),
    capacity: float = Form(...),
    price: float = Form(...),
    price_unit: Optional[str] = Form(None),
    street_name: str = Form(...),
    number: Optional[str] = Form(None),
    city: str = Form(...),
    postal_code: str = Form(...),
    primary_image_name: Optional[str] = Form(None),
    listing_images: List[UploadFile] = File(default=[]),
    provider_id: int = Depends(require_session),
    store: ListingStore = Depends(get_listing_store),
    images=Depends(get_image_storage),
):
    """
    Multipart listing creation: form fields plus up to MAX_LISTING_IMAGES
    files. The image whose original filename equals ``primary_image_name``
    is flagged primary.
    """
    if not listing_images:
        return respond(StoreResult.fail("validation", "At least one image is required."))
    if len(listing_images) > settings.MAX_LISTING_IMAGES:
        return respond(StoreResult.fail("validation", f"At most {settings.MAX_LISTING_IMAGES} images are allowed."))

    try:
        payload = ListingCreate(
            provider_id=provider_id, title=title, description=description,
            storage_type=storage_type, capacity=capacity, price=price, price_unit=price_unit,
            street_name=street_name, number=number, city=city, postal_code=postal_code,
        )
    except PayloadError as e:
        field = e.errors()[0]["loc"][0]
        return respond(StoreResult.fail("validation", f"Invalid value for {field}."))

    saved = []
    try:
        for upload in listing_images:
            stored = await images.save(await upload.read(), upload.filename, "listing", provider_id)
            saved.append((upload.filename, stored))
    except StoreError as e:
        await _discard(images, saved)
        return respond(StoreResult.fail(e.kind, e.message))

    attachments = [
        ListingImage(file_url=stored["url"], is_primary=(filename == primary_image_name))
        for filename, stored in saved
    ]
    try:
        result = await run_in_threadpool(store.create_listing, payload, attachments)
    except Exception:
        await _discard(images, saved)
        raise
    if not result.success:
        await _discard(images, saved)
    return respond(result, success_status=201)
