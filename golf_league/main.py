import logging
from typing import List

from fastapi import FastAPI, Depends, Form, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import crud, deps, schemas
from .db import Base, engine, get_db
from .deps import require_admin
from .routers import admin, public

logger = logging.getLogger(__name__)


Base.metadata.create_all(bind=engine)


app = FastAPI(title="Golf League")


# ================================================================================
# =============================== PASSWORD ADMIN =================================
# ================================================================================

@app.post("/admin/login")
def admin_login_submit(key: str = Form(...)):
    if not deps.ADMIN_KEY:
        return {"ok": True, "protected": False}

    if key != deps.ADMIN_KEY:
        logger.warning("Rejected admin login attempt")
        raise HTTPException(status_code=401, detail="Invalid admin key")

    resp = JSONResponse({"ok": True, "protected": True})
    resp.set_cookie(
        "admin_key",
        key,
        httponly=True,
        samesite="lax",
        max_age=60 * 60 * 12,  # 12 horas
    )
    return resp


@app.get("/admin/logout")
def admin_logout():
    resp = JSONResponse({"ok": True})
    resp.delete_cookie("admin_key")
    return resp


# ---------------------------------------------------------------------------------

@app.get("/health")
def health():
    return {"status": "ok"}


#--------------------------------------------------------------------------------
#------------------------------ ORGANIZATIONS -----------------------------------
#--------------------------------------------------------------------------------

@app.get("/api/orgs", response_model=List[schemas.OrganizationOut])
def organizations_list(db: Session = Depends(get_db)):
    return crud.get_organizations(db)


@app.post(
    "/api/orgs",
    response_model=schemas.OrganizationOut,
    status_code=201,
    dependencies=[Depends(require_admin)],
)
def organization_create(data: schemas.OrganizationCreate, db: Session = Depends(get_db)):
    if crud.get_organization_by_slug(db, data.slug):
        raise HTTPException(status_code=409, detail="Organization slug already exists")
    try:
        org = crud.create_organization(db, data)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Organization slug already exists")

    logger.info("Created organization %s", org.slug)
    return org


app.include_router(public.router)
app.include_router(admin.router)
