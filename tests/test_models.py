import datetime

import pytest
from sqlalchemy.exc import IntegrityError

from models import Expense, Income, User


def make_user(db, email="carol@example.com"):
    user = User(name="Carol", email=email, hashed_password="x")
    db.add(user)
    db.flush()  # so that user.id is set
    return user


def test_user_crud(db):
    make_user(db)
    db.commit()

    retrieved = db.query(User).filter_by(email="carol@example.com").one()
    assert retrieved.name == "Carol"
    assert retrieved.created_at is not None


def test_email_is_unique(db):
    make_user(db)
    db.commit()

    db.add(User(name="Other", email="carol@example.com", hashed_password="y"))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


@pytest.mark.parametrize("model", [Expense, Income])
def test_transaction_crud(db, model):
    user = make_user(db)

    tx = model(
        user_id=user.id,
        description="Taxi ride",
        amount=123.45,
        category="Transport",
        date=datetime.date(2025, 5, 10),
    )
    db.add(tx)
    db.commit()

    stored = db.query(model).filter_by(user_id=user.id).one()
    assert stored.amount == 123.45
    assert stored.date == datetime.date(2025, 5, 10)
    assert stored.created_at is not None
    assert stored.updated_at is not None


@pytest.mark.parametrize("model", [Expense, Income])
def test_transaction_requires_owner(db, model):
    db.add(model(description="Orphan", amount=1.0, category="Misc", date=datetime.date(2025, 1, 1)))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_user_relationships(db):
    user = make_user(db)
    db.add(Expense(user_id=user.id, description="Lunch", amount=12.0, category="Food", date=datetime.date(2025, 1, 2)))
    db.add(Income(user_id=user.id, description="Pay", amount=3000.0, category="Salary", date=datetime.date(2025, 1, 1)))
    db.commit()

    db.refresh(user)
    assert [e.description for e in user.expenses] == ["Lunch"]
    assert [i.description for i in user.incomes] == ["Pay"]
