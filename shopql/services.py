import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models, schemas
from .auth import PasswordHasher, TokenIssuer
from .context import Identity, require_identity, require_role
from .errors import DuplicateEmail, InvalidCredentials

logger = logging.getLogger(__name__)

# Business rule: money is stored rounded to 2 decimals


def round_amount(value: Decimal) -> Decimal:
    try:
        return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        # Too many digits for the decimal context, e.g. 1e30
        raise ValueError("amount is out of range") from e


def to_decimal(value: float | Decimal) -> Decimal:
    # str() first so 9.99 becomes Decimal("9.99"), not its binary expansion
    return value if isinstance(value, Decimal) else Decimal(str(value))


class AuthService:
    def __init__(self, db: Session, hasher: PasswordHasher, tokens: TokenIssuer):
        self.db = db
        self.hasher = hasher
        self.tokens = tokens

    def sign_up(self, email: str, password: str) -> str:
        user = self._create_user(email, password, models.Role.USER)
        return self.tokens.issue(user.id, user.role)

    def login(self, email: str, password: str) -> str:
        user = self.db.query(models.User).filter(models.User.email == email).first()
        if user is None:
            self.hasher.dummy_verify()
            logger.warning("login failed: unknown email")
            raise InvalidCredentials()
        if not self.hasher.verify(password, user.password_hash):
            logger.warning("login failed: wrong password for user id=%s", user.id)
            raise InvalidCredentials()
        return self.tokens.issue(user.id, user.role)

    def create_admin(self, email: str, password: str) -> models.User:
        return self._create_user(email, password, models.Role.ADMIN)

    def _create_user(self, email: str, password: str, role: models.Role) -> models.User:
        db_user = models.User(email=email, password_hash=self.hasher.hash(password), role=role)
        self.db.add(db_user)
        try:
            self.db.commit()
        except IntegrityError as e:
            # The unique constraint on users.email is the only arbiter, so
            # concurrent signups with the same email end up here too
            self.db.rollback()
            logger.warning("signup rejected: email already registered")
            raise DuplicateEmail() from e
        self.db.refresh(db_user)
        logger.info("created user id=%s role=%s", db_user.id, db_user.role.value)
        return db_user


class ProductService:
    def __init__(self, db: Session):
        self.db = db

    def get_all_products(self) -> List[models.Product]:
        return self.db.query(models.Product).order_by(models.Product.id).all()

    def add_product(self, name: str, price: float | Decimal, context: Identity) -> models.Product:
        admin = require_role(context, models.Role.ADMIN)
        product = schemas.ProductCreate(name=name, price=round_amount(to_decimal(price)))

        db_product = models.Product(name=product.name, price=product.price)
        self.db.add(db_product)
        self.db.commit()
        self.db.refresh(db_product)
        logger.info("product id=%s added by user id=%s", db_product.id, admin.user_id)
        return db_product


class OrderService:
    def __init__(self, db: Session):
        self.db = db

    def get_order_history(self, context: Identity) -> List[models.Order]:
        identity = require_identity(context)
        return (
            self.db.query(models.Order)
            .filter(models.Order.user_id == identity.user_id)
            .order_by(models.Order.id)
            .all()
        )

    def add_to_cart(self, products: List[str], total_price: float | Decimal, context: Identity) -> models.Order:
        identity = require_identity(context)
        order = schemas.OrderCreate(
            user_id=identity.user_id,
            products=products,
            total_price=round_amount(to_decimal(total_price)),
        )

        db_order = models.Order(
            user_id=order.user_id,
            products=list(order.products),
            total_price=order.total_price,
        )
        self.db.add(db_order)
        try:
            self.db.commit()
        except IntegrityError as e:
            # Token was valid but its user id has no row in this store
            self.db.rollback()
            raise ValueError("foreign key violation: user does not exist") from e
        self.db.refresh(db_order)
        logger.info("order id=%s placed by user id=%s", db_order.id, identity.user_id)
        return db_order
