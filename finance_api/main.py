# finance_api/main.py
import logging
import re
from contextlib import asynccontextmanager, contextmanager
from typing import Optional

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import crud
from .auth import PasswordHashError, hash_password
from .config import Settings, load_settings
from .db import init_db, make_engine, make_session_factory
from .schemas import (
    INT_MAX,
    INT_MIN,
    CategoryIn,
    CategoryOut,
    TransactionIn,
    TransactionOut,
    UserCreate,
    UserOut,
    UserUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_ID_RE = re.compile(r"-?\d+", re.ASCII)


# ---------- DB ----------
def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def statement(db: Session, message: str):
    """Turn a failing statement into a 500 carrying ``message``."""
    try:
        yield
    except SQLAlchemyError:
        db.rollback()
        logger.exception(message)
        raise HTTPException(status_code=500, detail=message)


# ---------- Helpers ----------
def parse_id(raw: str, label: str) -> int:
    # decimal integers only, no whitespace or underscores, within the INTEGER column
    if not _ID_RE.fullmatch(raw):
        raise HTTPException(status_code=400, detail=f"Invalid {label} ID")
    value = int(raw)
    if not INT_MIN <= value <= INT_MAX:
        raise HTTPException(status_code=400, detail=f"Invalid {label} ID")
    return value


# ---------- Health ----------
@router.get("/health")
def health():
    return {"ok": True}


# ---------- Users ----------
@router.post("/users", status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    if not (payload.username and payload.email and payload.password and payload.password_confirmation):
        raise HTTPException(
            status_code=400,
            detail="Username, email, password, and password confirmation are required",
        )
    if payload.password != payload.password_confirmation:
        raise HTTPException(status_code=400, detail="Passwords do not match")

    try:
        password_hash = hash_password(payload.password)
    except PasswordHashError:
        logger.exception("Failed to hash password")
        raise HTTPException(status_code=500, detail="Failed to hash password")

    with statement(db, "Database error"):
        taken = crud.email_exists(db, payload.email)
    if taken:
        raise HTTPException(status_code=409, detail="Email address already in use")

    try:
        user = crud.create_user(db, payload.username, payload.email, password_hash)
    except IntegrityError:
        # lost a race with a concurrent create on the unique email index
        db.rollback()
        raise HTTPException(status_code=409, detail="Email address already in use")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to create user")
        raise HTTPException(status_code=500, detail="Failed to create user")

    return {"message": "User created successfully", "user": UserOut.model_validate(user)}


@router.get("/users")
def list_users(db: Session = Depends(get_db)):
    with statement(db, "Database error"):
        rows = crud.list_users(db)
    return {
        "message": "success",
        "data": {"users": [UserOut.model_validate(r) for r in rows]},
    }


@router.get("/users/{user_id}")
def get_user(user_id: str, db: Session = Depends(get_db)):
    uid = parse_id(user_id, "user")
    with statement(db, "Database error"):
        row = crud.get_user(db, uid)
    if row is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {"data": {"user": UserOut.model_validate(row)}}


@router.put("/users/{user_id}")
def update_user(user_id: str, payload: UserUpdate, db: Session = Depends(get_db)):
    uid = parse_id(user_id, "user")
    if not (payload.username and payload.email):
        raise HTTPException(status_code=400, detail="Username and email are required")

    with statement(db, "Failed to update user"):
        crud.update_user(db, uid, payload.username, payload.email)

    # echoed as submitted, whether or not a row matched
    user = UserOut(id=uid, username=payload.username, email=payload.email)
    return {"message": "User updated successfully", "user": user}


@router.delete("/users/{user_id}")
def delete_user(user_id: str, db: Session = Depends(get_db)):
    uid = parse_id(user_id, "user")
    with statement(db, "Failed to delete user"):
        crud.delete_user(db, uid)
    return {"message": "User deleted successfully"}


# ---------- Categories ----------
@router.post("/categories", status_code=201)
def create_category(payload: CategoryIn, db: Session = Depends(get_db)):
    if not payload.name:
        raise HTTPException(status_code=400, detail="Category name is required")

    with statement(db, "Failed to create category"):
        category = crud.create_category(db, payload.name)

    return {
        "message": "Category created successfully",
        "category": CategoryOut.model_validate(category),
    }


@router.get("/categories")
def list_categories(db: Session = Depends(get_db)):
    with statement(db, "Database error"):
        rows = crud.list_categories(db)
    return {
        "message": "success",
        "data": {"categories": [CategoryOut.model_validate(r) for r in rows]},
    }


@router.get("/categories/{category_id}")
def get_category(category_id: str, db: Session = Depends(get_db)):
    cid = parse_id(category_id, "category")
    with statement(db, "Database error"):
        category = crud.get_category(db, cid)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return {"data": {"category": CategoryOut.model_validate(category)}}


@router.put("/categories/{category_id}")
def update_category(category_id: str, payload: CategoryIn, db: Session = Depends(get_db)):
    cid = parse_id(category_id, "category")
    if not payload.name:
        raise HTTPException(status_code=400, detail="Category name is required")

    with statement(db, "Failed to update category"):
        crud.update_category(db, cid, payload.name)

    return {
        "message": "Category updated successfully",
        "category": CategoryOut(id=cid, name=payload.name),
    }


@router.delete("/categories/{category_id}")
def delete_category(category_id: str, db: Session = Depends(get_db)):
    cid = parse_id(category_id, "category")
    with statement(db, "Failed to delete category"):
        crud.delete_category(db, cid)
    return {"message": "Category deleted successfully"}


# ---------- Transactions ----------
TRANSACTION_FIELDS_REQUIRED = "Amount, category ID, user ID, and type are required"


@router.post("/transactions", status_code=201)
def create_transaction(payload: TransactionIn, db: Session = Depends(get_db)):
    if not payload.is_complete():
        raise HTTPException(status_code=400, detail=TRANSACTION_FIELDS_REQUIRED)

    with statement(db, "Failed to create transaction"):
        tx = crud.create_transaction(
            db, payload.user_id, payload.amount, payload.category_id, payload.type
        )

    return {
        "message": "Transaction created successfully",
        "transaction": TransactionOut.model_validate(tx),
    }


@router.get("/transactions")
def list_transactions(db: Session = Depends(get_db)):
    with statement(db, "Database error"):
        rows = crud.list_transactions(db)
    return {
        "message": "success",
        "data": {"transactions": [TransactionOut.model_validate(r) for r in rows]},
    }


@router.get("/transactions/{transaction_id}")
def get_transaction(transaction_id: str, db: Session = Depends(get_db)):
    tid = parse_id(transaction_id, "transaction")
    with statement(db, "Database error"):
        tx = crud.get_transaction(db, tid)
    if tx is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return {"data": {"transaction": TransactionOut.model_validate(tx)}}


@router.put("/transactions/{transaction_id}")
def update_transaction(transaction_id: str, payload: TransactionIn, db: Session = Depends(get_db)):
    tid = parse_id(transaction_id, "transaction")
    if not payload.is_complete():
        raise HTTPException(status_code=400, detail=TRANSACTION_FIELDS_REQUIRED)

    with statement(db, "Failed to update transaction"):
        crud.update_transaction(
            db, tid, payload.user_id, payload.amount, payload.category_id, payload.type
        )

    return {
        "message": "Transaction updated successfully",
        "transaction": TransactionOut(id=tid, **payload.model_dump()),
    }


@router.delete("/transactions/{transaction_id}")
def delete_transaction(transaction_id: str, db: Session = Depends(get_db)):
    tid = parse_id(transaction_id, "transaction")
    with statement(db, "Failed to delete transaction"):
        crud.delete_transaction(db, tid)
    return {"message": "Transaction deleted successfully"}


# ---------- Errors ----------
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # bad JSON, wrong field types or a missing body all read the same to the caller
    return JSONResponse(status_code=400, content={"error": "Invalid request payload"})


async def global_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


# ---------- App ----------
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    if settings is None:
        settings = load_settings()

    engine = make_engine(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # no database, no service
        try:
            init_db(engine)
        except SQLAlchemyError:
            logger.critical("Could not open the database, aborting startup", exc_info=True)
            raise
        logger.info("Database ready")
        try:
            yield
        finally:
            engine.dispose()

    app = FastAPI(title="finance-api", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    app.include_router(router)
    return app


def run() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
