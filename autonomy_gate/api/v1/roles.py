from fastapi import APIRouter

from autonomy_gate.core.config.autonomy import get_role_catalog
from autonomy_gate.schemas.candidate import RoleCatalogEntry, RoleCatalogResponse

router = APIRouter()


@router.get("/roles", response_model=RoleCatalogResponse)
async def list_roles():
    catalog = get_role_catalog()
    return RoleCatalogResponse(
        roles=[RoleCatalogEntry(name=name, keywords=list(keywords)) for name, keywords in catalog.roles],
        fallback_role=catalog.fallback_role,
    )
