from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete, exists, select, update
from sqlalchemy.engine import Row
from sqlalchemy.orm import Session

from finance_api import models


# One function per statement. Each write commits on its own; callers roll the
# session back when a statement raises.


# ---------- Users ----------
_PUBLIC_USER_COLUMNS = (models.User.id, models.User.username, models.User.email)


def list_users(db: Session) -> List[Row]:
    # the password column is never read back
    return list(db.execute(select(*_PUBLIC_USER_COLUMNS).order_by(models.User.id)).all())


def get_user(db: Session, user_id: int) -> Optional[Row]:
    return db.execute(select(*_PUBLIC_USER_COLUMNS).where(models.User.id == user_id)).first()


def email_exists(db: Session, email: str) -> bool:
    return bool(db.execute(select(exists().where(models.User.email == email))).scalar())


def create_user(db: Session, username: str, email: str, password_hash: str) -> models.User:
    user = models.User(username=username, email=email, password=password_hash)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_user(db: Session, user_id: int, username: str, email: str) -> None:
    # no existence check: updating a missing id simply touches zero rows
    db.execute(
        update(models.User)
        .where(models.User.id == user_id)
        .values(username=username, email=email)
    )
    db.commit()


def delete_user(db: Session, user_id: int) -> None:
    db.execute(delete(models.User).where(models.User.id == user_id))
    db.commit()


# ---------- Categories ----------
def list_categories(db: Session) -> List[models.Category]:
    return list(db.execute(select(models.Category).order_by(models.Category.id)).scalars().all())


def get_category(db: Session, category_id: int) -> Optional[models.Category]:
    return db.get(models.Category, category_id)


def create_category(db: Session, name: str) -> models.Category:
    category = models.Category(name=name)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def update_category(db: Session, category_id: int, name: str) -> None:
    db.execute(
        update(models.Category)
        .where(models.Category.id == category_id)
        .values(name=name)
    )
    db.commit()


def delete_category(db: Session, category_id: int) -> None:
    db.execute(delete(models.Category).where(models.Category.id == category_id))
    db.commit()


# ---------- Transactions ----------
def list_transactions(db: Session) -> List[models.Transaction]:
    return list(
        db.execute(select(models.Transaction).order_by(models.Transaction.id)).scalars().all()
    )


def get_transaction(db: Session, transaction_id: int) -> Optional[models.Transaction]:
    return db.get(models.Transaction, transaction_id)


def create_transaction(
    db: Session,
    user_id: int,
    amount: float,
    category_id: int,
    t_type: str,
) -> models.Transaction:
    tx = models.Transaction(
        user_id=user_id,
        amount=amount,
        category_id=category_id,
        type=t_type,
    )
    db.add(tx)
    db.commit()
    db.refresh(tx)
    return tx


def update_transaction(
    db: Session,
    transaction_id: int,
    user_id: int,
    amount: float,
    category_id: int,
    t_type: str,
) -> None:
    db.execute(
        update(models.Transaction)
        .where(models.Transaction.id == transaction_id)
        .values(user_id=user_id, amount=amount, category_id=category_id, type=t_type)
    )
    db.commit()


def delete_transaction(db: Session, transaction_id: int) -> None:
    db.execute(delete(models.Transaction).where(models.Transaction.id == transaction_id))
    db.commit()
