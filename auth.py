from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from dependencies import get_hasher, get_tokens
from errors import EmailInUse, InvalidCredentials, ServerError
from logging_config import get_logger
from models import User
from schemas import AuthOut, LoginIn, RegisterIn, UserOut
from security import PasswordHasher, TokenService

logger = get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

# messages for body validation failures, looked up by main.py
MISSING_FIELD_MESSAGES = {
    "/api/auth/register": "Please provide all required fields",
    "/api/auth/login": "Please provide email and password",
}


def normalize_email(email: str) -> str:
    return email.strip().lower()


def auth_response(user: User, tokens: TokenService) -> AuthOut:
    return AuthOut(user=UserOut.model_validate(user), token=tokens.issue(user.id))


@router.post("/register", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterIn,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_hasher),
    tokens: TokenService = Depends(get_tokens),
):
    email = normalize_email(payload.email)

    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise EmailInUse()

    user = User(name=payload.name, email=email, hashed_password=hasher.hash(payload.password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # lost a race with a concurrent register for the same email
        db.rollback()
        raise EmailInUse() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise ServerError() from exc
    db.refresh(user)

    logger.info("user_registered", user_id=user.id)
    return auth_response(user, tokens)


@router.post("/login", response_model=AuthOut)
def login(
    payload: LoginIn,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_hasher),
    tokens: TokenService = Depends(get_tokens),
):
    user = db.query(User).filter(User.email == normalize_email(payload.email)).first()

    # unknown email and wrong password are reported identically
    if (not user) or (not hasher.verify(payload.password, user.hashed_password)):
        logger.info("login_failed", known_email=user is not None)
        raise InvalidCredentials()

    logger.info("user_logged_in", user_id=user.id)
    return auth_response(user, tokens)
