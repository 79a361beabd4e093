"""Catalog service — business logic for products, preparations and steps.

Learn: Service layer separates business logic from HTTP routing.
Routes parse forms and upload images, services talk to the database.
Every picture_url a service receives has already been stored
successfully, so no row ever points at a blob that failed to upload.
"""

import uuid

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from kitchenhand.db.models import Preparation, PreparationStep, Product
from kitchenhand.schemas.catalog import PreparationForm, ProductForm, StepInput


def _like(term: str) -> str:
    return f"%{term}%"


class ProductService:
    """Business logic for products."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_products(self) -> list[Product]:
        result = await self.db.execute(
            select(Product).order_by(Product.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_product(self, product_id: uuid.UUID) -> Product | None:
        return await self.db.get(Product, product_id)

    async def create_product(self, form: ProductForm, picture_url: str = "") -> Product:
        product = Product(
            supplier_name=form.supplier_name,
            product_name=form.product_name,
            location=form.location,
            description=form.description,
            picture_url=picture_url,
        )
        self.db.add(product)
        await self.db.commit()
        await self.db.refresh(product)
        return product

    async def update_product(
        self, product: Product, form: ProductForm, picture_url: str
    ) -> Product:
        product.supplier_name = form.supplier_name
        product.product_name = form.product_name
        product.location = form.location
        product.description = form.description
        product.picture_url = picture_url
        await self.db.commit()
        await self.db.refresh(product)
        return product

    async def search_products(self, term: str) -> list[Product]:
        """Case-insensitive substring match over the descriptive columns."""
        pattern = _like(term)
        result = await self.db.execute(
            select(Product)
            .where(
                or_(
                    Product.product_name.ilike(pattern),
                    Product.supplier_name.ilike(pattern),
                    Product.location.ilike(pattern),
                    Product.description.ilike(pattern),
                )
            )
            .order_by(Product.product_name)
        )
        return list(result.scalars().all())


class PreparationService:
    """Business logic for preparations and their numbered steps."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_preparations(self) -> list[Preparation]:
        result = await self.db.execute(
            select(Preparation).order_by(Preparation.prep_type, Preparation.name)
        )
        return list(result.scalars().all())

    async def get_preparation(self, preparation_id: uuid.UUID) -> Preparation | None:
        return await self.db.get(Preparation, preparation_id)

    async def list_steps(self, preparation_id: uuid.UUID) -> list[PreparationStep]:
        result = await self.db.execute(
            select(PreparationStep)
            .where(PreparationStep.preparation_id == preparation_id)
            .order_by(PreparationStep.step_number)
        )
        return list(result.scalars().all())

    async def create_preparation(
        self,
        form: PreparationForm,
        picture_url: str,
        steps: list[StepInput],
    ) -> Preparation:
        """Insert the preparation and its steps in one transaction."""
        preparation = Preparation(
            name=form.name,
            prep_type=form.prep_type,
            shift=form.shift,
            location=form.location,
            steps=form.steps,
            picture_url=picture_url,
        )
        self.db.add(preparation)
        await self.db.flush()

        self._add_steps(preparation.id, steps)
        await self.db.commit()
        await self.db.refresh(preparation)
        return preparation

    async def update_preparation(
        self,
        preparation: Preparation,
        form: PreparationForm,
        picture_url: str,
        steps: list[StepInput],
    ) -> Preparation:
        """Update fields and replace ALL steps.

        Learn: The delete of the old steps and the insert of the new ones
        share one transaction, so a failure in between rolls back to the
        previous steps instead of leaving the preparation with none.
        """
        preparation.name = form.name
        preparation.prep_type = form.prep_type
        preparation.shift = form.shift
        preparation.location = form.location
        preparation.steps = form.steps
        preparation.picture_url = picture_url

        try:
            await self.db.execute(
                delete(PreparationStep).where(
                    PreparationStep.preparation_id == preparation.id
                )
            )
            self._add_steps(preparation.id, steps)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(preparation)
        return preparation

    def _add_steps(self, preparation_id: uuid.UUID, steps: list[StepInput]) -> None:
        # Steps are renumbered 1..n in submission order.
        for number, step in enumerate(steps, start=1):
            self.db.add(
                PreparationStep(
                    preparation_id=preparation_id,
                    step_number=number,
                    description=step.description,
                    picture_url=step.picture_url,
                )
            )

    async def search_preparations(self, term: str) -> list[Preparation]:
        pattern = _like(term)
        result = await self.db.execute(
            select(Preparation)
            .where(
                or_(
                    Preparation.name.ilike(pattern),
                    Preparation.prep_type.ilike(pattern),
                    Preparation.shift.ilike(pattern),
                    Preparation.location.ilike(pattern),
                    Preparation.steps.ilike(pattern),
                )
            )
            .order_by(Preparation.name)
        )
        return list(result.scalars().all())
