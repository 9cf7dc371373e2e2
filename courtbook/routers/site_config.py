# courtbook/routers/site_config.py

from fastapi import APIRouter, Depends

from ..dependencies import get_site_config
from ..schemas.site_config import SiteConfigRead
from ..services.slots import SiteConfig

router = APIRouter(prefix="/api/config", tags=["config"])


@router.get("", response_model=SiteConfigRead)
def get_public_config(config: SiteConfig = Depends(get_site_config)):
    return SiteConfigRead(**config.public_dict())
