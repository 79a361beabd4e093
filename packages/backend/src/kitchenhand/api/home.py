"""Home page and catalog search."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from kitchenhand.api.templates import render
from kitchenhand.auth.dependencies import OptionalIdentity
from kitchenhand.db.engine import get_db
from kitchenhand.services.catalog_service import PreparationService, ProductService

router = APIRouter()


@router.get("/")
async def index(
    request: Request,
    user: OptionalIdentity,
    db: AsyncSession = Depends(get_db),
):
    """All products, newest first."""
    products = await ProductService(db).list_products()
    return render(request, "index.html", {"products": products}, user=user)


@router.get("/search")
async def search(
    request: Request,
    user: OptionalIdentity,
    q: str = "",
    db: AsyncSession = Depends(get_db),
):
    """Case-insensitive substring search over products and preparations.

    Learn: The term is trimmed but never skipped. A blank query becomes
    the pattern "%%", which lists every product and preparation by name.
    """
    term = q.strip()
    products = await ProductService(db).search_products(term)
    preparations = await PreparationService(db).search_preparations(term)

    return render(
        request,
        "search_results.html",
        {"query": term, "products": products, "preparations": preparations},
        user=user,
    )
