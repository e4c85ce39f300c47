from typing import List, Type

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from dependencies import current_identity, get_current_user_id
from errors import ServerError
from logging_config import get_logger
from models import Expense, Income, TransactionMixin
from schemas import TransactionIn, TransactionOut

logger = get_logger(__name__)


def transaction_router(model: Type[TransactionMixin], prefix: str, tag: str) -> APIRouter:
    """
    Build the create/list endpoints for one transaction collection.

    Every route on the router runs get_current_user_id first; the handlers
    only ever read or write rows owned by that id.
    """
    router = APIRouter(prefix=prefix, tags=[tag], dependencies=[Depends(get_current_user_id)])

    @router.post("", response_model=TransactionOut, status_code=status.HTTP_201_CREATED)
    def create_transaction(
        payload: TransactionIn,
        db: Session = Depends(get_db),
        user_id: int = Depends(current_identity),
    ):
        record = model(
            user_id=user_id,
            description=payload.description,
            amount=payload.amount,
            category=payload.category,
            date=payload.date,
        )
        db.add(record)
        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise ServerError() from exc
        db.refresh(record)

        logger.info("transaction_created", kind=tag, user_id=user_id, transaction_id=record.id)
        return record

    @router.get("", response_model=List[TransactionOut])
    def list_transactions(
        db: Session = Depends(get_db),
        user_id: int = Depends(current_identity),
    ):
        return (
            db.query(model)
            .filter(model.user_id == user_id)
            .order_by(model.date.desc(), model.id.desc())
            .all()
        )

    return router


expenses_router = transaction_router(Expense, "/api/expenses", "expenses")
incomes_router = transaction_router(Income, "/api/incomes", "incomes")
