"""Product pages.

Learn: Two routers. `router` holds the public pages (detail), while
`editor_router` holds the create/edit pages and is mounted behind the
login gate in api/__init__.py. Editor handlers still declare
RequiredIdentity to get the caller for the nav bar.

Form flow for create/update:
validate text fields → validate + read image → store image → write row.
A row is only written once its image has been stored.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from kitchenhand.api.templates import render
from kitchenhand.api.uploads import (
    get_max_upload_bytes,
    get_upload_storage,
    read_image,
    store_image,
)
from kitchenhand.auth.dependencies import OptionalIdentity, RequiredIdentity
from kitchenhand.db.engine import get_db
from kitchenhand.errors import NotFound, ValidationFailed
from kitchenhand.schemas.catalog import ProductForm, parse_form, parse_record_id
from kitchenhand.services.catalog_service import ProductService
from kitchenhand.storage import UploadStorage

router = APIRouter()
editor_router = APIRouter()

_FIELDS = ("supplier_name", "product_name", "location", "description")


def _svc(db: AsyncSession = Depends(get_db)) -> ProductService:
    return ProductService(db)


async def _load(svc: ProductService, product_id: str):
    product = await svc.get_product(parse_record_id(product_id, "Product"))
    if product is None:
        raise NotFound("Product not found")
    return product


# ─── Public ─────────────────────────────────────────────

@router.get("/product/{product_id}")
async def product_detail(
    request: Request,
    product_id: str,
    user: OptionalIdentity,
    svc: ProductService = Depends(_svc),
):
    product = await _load(svc, product_id)
    return render(request, "product_detail.html", {"product": product}, user=user)


# ─── Editor (login required) ────────────────────────────

@editor_router.get("/product/new")
async def new_product_form(request: Request, user: RequiredIdentity):
    return render(request, "product_new.html", {"form": {}}, user=user)


@editor_router.post("/product")
async def create_product(
    request: Request,
    user: RequiredIdentity,
    svc: ProductService = Depends(_svc),
    storage: UploadStorage = Depends(get_upload_storage),
    max_bytes: int = Depends(get_max_upload_bytes),
):
    data = await request.form()
    fields = {name: str(data.get(name, "")) for name in _FIELDS}
    try:
        form = parse_form(ProductForm, fields)
        image = await read_image(data.get("picture"), max_bytes)
    except ValidationFailed as e:
        return render(
            request,
            "product_new.html",
            {"error": e.message, "form": fields},
            user=user,
            status_code=400,
        )

    picture_url = await store_image(storage, image)
    product = await svc.create_product(form, picture_url)
    return RedirectResponse(f"/product/{product.id}", status_code=303)


@editor_router.get("/product/{product_id}/edit")
async def edit_product_form(
    request: Request,
    product_id: str,
    user: RequiredIdentity,
    svc: ProductService = Depends(_svc),
):
    product = await _load(svc, product_id)
    return render(request, "product_edit.html", {"product": product}, user=user)


@editor_router.post("/product/{product_id}/update")
async def update_product(
    request: Request,
    product_id: str,
    user: RequiredIdentity,
    svc: ProductService = Depends(_svc),
    storage: UploadStorage = Depends(get_upload_storage),
    max_bytes: int = Depends(get_max_upload_bytes),
):
    product = await _load(svc, product_id)

    data = await request.form()
    fields = {name: str(data.get(name, "")) for name in _FIELDS}
    try:
        form = parse_form(ProductForm, fields)
        image = await read_image(data.get("picture"), max_bytes)
    except ValidationFailed as e:
        return render(
            request,
            "product_edit.html",
            {"error": e.message, "product": product},
            user=user,
            status_code=400,
        )

    # No new file keeps the current picture; the old blob is left in place.
    picture_url = await store_image(storage, image) if image else product.picture_url
    product = await svc.update_product(product, form, picture_url)
    return RedirectResponse(f"/product/{product.id}", status_code=303)
