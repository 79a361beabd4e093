"""Route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. require_login runs before every handler in the
editor routers without touching the handlers themselves. Everything
else is public and only personalizes with OptionalIdentity.

Editor routers are included first so literal paths like /product/new
match before /product/{product_id}.
"""

from fastapi import APIRouter, Depends

from kitchenhand.api.auth import router as auth_router
from kitchenhand.api.health import router as health_router
from kitchenhand.api.home import router as home_router
from kitchenhand.api.preparations import editor_router as preparation_editor_router
from kitchenhand.api.preparations import router as preparations_router
from kitchenhand.api.products import editor_router as product_editor_router
from kitchenhand.api.products import router as products_router
from kitchenhand.auth.dependencies import require_login

# All protected routers require a valid token
_auth = [Depends(require_login)]

web_router = APIRouter()

# Protected routes: valid JWT in Authorization header or auth_token cookie
web_router.include_router(product_editor_router, tags=["products"], dependencies=_auth)
web_router.include_router(preparation_editor_router, tags=["preparations"], dependencies=_auth)

# Open routes
web_router.include_router(health_router, tags=["health"])
web_router.include_router(auth_router, tags=["auth"])
web_router.include_router(home_router, tags=["home"])
web_router.include_router(products_router, tags=["products"])
web_router.include_router(preparations_router, tags=["preparations"])
