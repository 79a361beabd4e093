"""Preparation pages — procedures with numbered, optionally illustrated steps.

Learn: The preparation form is dynamic. Besides the fixed fields it
carries any number of step_description_<n> / step_image_<n> pairs added
client-side. Steps are ordered by <n> and renumbered 1..k on save, so
gaps left by removed rows don't matter.

Every image (main picture and step pictures) is validated before anything
is stored, and everything is stored before the preparation row and its
steps are written in a single transaction.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import FormData

from kitchenhand.api.templates import render
from kitchenhand.api.uploads import (
    ImageUpload,
    get_max_upload_bytes,
    get_upload_storage,
    read_image,
    store_image,
)
from kitchenhand.auth.dependencies import OptionalIdentity, RequiredIdentity
from kitchenhand.db.engine import get_db
from kitchenhand.db.models import PREP_TYPES, SHIFTS
from kitchenhand.errors import NotFound, ValidationFailed
from kitchenhand.schemas.catalog import (
    PreparationForm,
    StepInput,
    parse_form,
    parse_record_id,
)
from kitchenhand.services.catalog_service import PreparationService
from kitchenhand.storage import UploadStorage

router = APIRouter()
editor_router = APIRouter()

_FIELDS = ("name", "prep_type", "shift", "location", "steps")
_STEP_DESCRIPTION = "step_description_"
_STEP_IMAGE = "step_image_"


def _svc(db: AsyncSession = Depends(get_db)) -> PreparationService:
    return PreparationService(db)


async def _load(svc: PreparationService, preparation_id: str):
    preparation = await svc.get_preparation(parse_record_id(preparation_id, "Preparation"))
    if preparation is None:
        raise NotFound("Preparation not found")
    return preparation


def _choices() -> dict:
    return {"prep_types": PREP_TYPES, "shifts": SHIFTS}


def _step_number(field_name: str, prefix: str) -> int | None:
    try:
        return int(field_name[len(prefix):])
    except ValueError:
        return None


class SubmittedPreparation:
    """Everything parsed and validated out of one preparation form post."""

    def __init__(self, fields: dict[str, str]):
        self.fields = fields
        self.form: PreparationForm | None = None
        self.picture: ImageUpload | None = None
        self.steps: list[tuple[str, ImageUpload | None]] = []

    @classmethod
    async def parse(cls, data: FormData, max_bytes: int) -> "SubmittedPreparation":
        """Raises ValidationFailed; nothing is stored until this succeeds."""
        submitted = cls({name: str(data.get(name, "")) for name in _FIELDS})
        submitted.form = parse_form(PreparationForm, submitted.fields)
        submitted.picture = await read_image(data.get("picture"), max_bytes)

        descriptions: dict[int, str] = {}
        images: dict[int, ImageUpload | None] = {}
        for key, value in data.multi_items():
            if key.startswith(_STEP_DESCRIPTION):
                number = _step_number(key, _STEP_DESCRIPTION)
                if number is not None:
                    descriptions[number] = str(value)
            elif key.startswith(_STEP_IMAGE):
                number = _step_number(key, _STEP_IMAGE)
                if number is not None:
                    image = await read_image(value, max_bytes)
                    if image is not None:
                        images[number] = image

        for number in sorted(set(descriptions) | set(images)):
            submitted.steps.append((descriptions.get(number, ""), images.get(number)))
        return submitted

    async def store_step_images(self, storage: UploadStorage) -> list[StepInput]:
        steps = []
        for description, image in self.steps:
            steps.append(
                StepInput(
                    description=description,
                    picture_url=await store_image(storage, image),
                )
            )
        return steps


# ─── Public ─────────────────────────────────────────────

@router.get("/preparations")
async def preparations_index(
    request: Request,
    user: OptionalIdentity,
    svc: PreparationService = Depends(_svc),
):
    preparations = await svc.list_preparations()
    return render(
        request, "preparations_index.html", {"preparations": preparations}, user=user
    )


@router.get("/preparation/{preparation_id}")
async def preparation_detail(
    request: Request,
    preparation_id: str,
    user: OptionalIdentity,
    svc: PreparationService = Depends(_svc),
):
    preparation = await _load(svc, preparation_id)
    steps = await svc.list_steps(preparation.id)
    return render(
        request,
        "preparation_detail.html",
        {"preparation": preparation, "steps": steps},
        user=user,
    )


# ─── Editor (login required) ────────────────────────────

@editor_router.get("/preparation/new")
async def new_preparation_form(request: Request, user: RequiredIdentity):
    return render(request, "preparation_new.html", {"form": {}, **_choices()}, user=user)


@editor_router.post("/preparation")
async def create_preparation(
    request: Request,
    user: RequiredIdentity,
    svc: PreparationService = Depends(_svc),
    storage: UploadStorage = Depends(get_upload_storage),
    max_bytes: int = Depends(get_max_upload_bytes),
):
    data = await request.form()
    try:
        submitted = await SubmittedPreparation.parse(data, max_bytes)
    except ValidationFailed as e:
        fields = {name: str(data.get(name, "")) for name in _FIELDS}
        return render(
            request,
            "preparation_new.html",
            {"error": e.message, "form": fields, **_choices()},
            user=user,
            status_code=400,
        )

    picture_url = await store_image(storage, submitted.picture)
    steps = await submitted.store_step_images(storage)
    preparation = await svc.create_preparation(submitted.form, picture_url, steps)
    return RedirectResponse(f"/preparation/{preparation.id}", status_code=303)


@editor_router.get("/preparation/{preparation_id}/edit")
async def edit_preparation_form(
    request: Request,
    preparation_id: str,
    user: RequiredIdentity,
    svc: PreparationService = Depends(_svc),
):
    preparation = await _load(svc, preparation_id)
    steps = await svc.list_steps(preparation.id)
    return render(
        request,
        "preparation_edit.html",
        {"preparation": preparation, "steps": steps, **_choices()},
        user=user,
    )


@editor_router.post("/preparation/{preparation_id}/update")
async def update_preparation(
    request: Request,
    preparation_id: str,
    user: RequiredIdentity,
    svc: PreparationService = Depends(_svc),
    storage: UploadStorage = Depends(get_upload_storage),
    max_bytes: int = Depends(get_max_upload_bytes),
):
    preparation = await _load(svc, preparation_id)

    data = await request.form()
    try:
        submitted = await SubmittedPreparation.parse(data, max_bytes)
    except ValidationFailed as e:
        steps = await svc.list_steps(preparation.id)
        return render(
            request,
            "preparation_edit.html",
            {"error": e.message, "preparation": preparation, "steps": steps, **_choices()},
            user=user,
            status_code=400,
        )

    # No new main picture keeps the current one. Step pictures are not
    # carried over: the submitted steps replace the old ones entirely.
    if submitted.picture is not None:
        picture_url = await store_image(storage, submitted.picture)
    else:
        picture_url = preparation.picture_url
    steps = await submitted.store_step_images(storage)
    await svc.update_preparation(preparation, submitted.form, picture_url, steps)
    return RedirectResponse(f"/preparation/{preparation.id}", status_code=303)
