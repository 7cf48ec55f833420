from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from . import crud
from .db import get_db
from .settings import load_settings

ADMIN_KEY = load_settings().admin_key


def require_admin(request: Request):
    # 1) Si no hay ADMIN_KEY configurada, NO protegemos (modo dev)
    if not ADMIN_KEY:
        return

    # 2) Cookie del login o cabecera (cron / scripts)
    if request.cookies.get("admin_key") == ADMIN_KEY:
        return
    if request.headers.get("X-Admin-Key") == ADMIN_KEY:
        return

    raise HTTPException(status_code=401, detail="Admin auth required")


def get_organization(slug: str, db: Session = Depends(get_db)):
    org = crud.get_organization_by_slug(db, slug)
    if not org:
        raise HTTPException(status_code=404, detail="Organization not found")
    return org
