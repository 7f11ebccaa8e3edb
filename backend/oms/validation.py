"""
Request DTOs and their boundary parsers.

Every handler parses its JSON body (or an upload row) into a frozen
dataclass before any service runs. Parsers never raise: they return
Ok(dto) or Invalid(errors) so the caller decides how to surface the
problem (a 400 for a request, an accumulated row error for an upload).
unwrap() is the common "raise ValidationError on Invalid" shortcut.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from .errors import ValidationError
from .time_utils import parse_date

T = TypeVar("T")

ROLES = ("admin", "manager", "employee", "pickup")
ADMIN_ORDER_STATUSES = ("pending", "assigned", "confirmed", "processing", "shipped", "delivered", "cancelled")
EMPLOYEE_ORDER_STATUSES = ("pending", "confirmed", "shipped", "delivered", "cancelled")
PAYMENT_STATUSES = ("pending", "paid", "failed", "refunded")
PAYMENT_METHODS = ("cash", "card", "upi", "net_banking", "wallet")
ORDER_SOURCES = ("POS", "WhatsApp", "CSV", "Manual", "Website")

MIN_PASSWORD_LENGTH = 8
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20

# Maximum money value accepted from clients (fits Numeric(12, 2))
MAX_MONEY = Decimal("9999999999.99")

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
SKU_RE = re.compile(r"^[A-Z0-9][A-Z0-9\-_]{2,99}$", re.IGNORECASE)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Invalid:
    errors: tuple[str, ...]


ParseResult = Union[Ok[T], Invalid]


def unwrap(result: ParseResult, message: str = "Validation failed") -> T:
    if isinstance(result, Invalid):
        errors = list(result.errors)
        raise ValidationError(errors[0] if len(errors) == 1 else message, errors)
    return result.value


# ---------------------------------------------------------------------------
# Field readers. Each appends to `errors` and returns None on failure.
# ---------------------------------------------------------------------------


def _text(payload: dict, key: str, errors: list[str], *, required: bool = False,
          label: str | None = None, max_len: int = 255) -> Optional[str]:
    label = label or key
    raw = payload.get(key)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        if required:
            errors.append(f"{label} is required")
        return None
    if not isinstance(raw, (str, int, float)) or isinstance(raw, bool):
        errors.append(f"{label} must be a string")
        return None
    value = str(raw).strip()
    if len(value) > max_len:
        errors.append(f"{label} must be at most {max_len} characters")
        return None
    return value


def _int(payload: dict, key: str, errors: list[str], *, required: bool = False,
         label: str | None = None, minimum: int | None = None) -> Optional[int]:
    label = label or key
    raw = payload.get(key)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        if required:
            errors.append(f"{label} is required")
        return None
    value = coerce_int(raw)
    if value is None:
        errors.append(f"{label} must be an integer")
        return None
    if minimum is not None and value < minimum:
        errors.append(f"{label} must be at least {minimum}")
        return None
    return value


def _money(payload: dict, key: str, errors: list[str], *, required: bool = False,
           label: str | None = None) -> Optional[Decimal]:
    label = label or key
    raw = payload.get(key)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        if required:
            errors.append(f"{label} is required")
        return None
    value = coerce_decimal(raw)
    if value is None:
        errors.append(f"{label} must be a number")
        return None
    if value < 0:
        errors.append(f"{label} must not be negative")
        return None
    if value > MAX_MONEY:
        errors.append(f"{label} is too large")
        return None
    return value


def _choice(payload: dict, key: str, allowed: tuple[str, ...], errors: list[str], *,
            required: bool = False, message: str | None = None) -> Optional[str]:
    raw = payload.get(key)
    if raw is None or raw == "":
        if required:
            errors.append(message or f"{key} is required")
        return None
    if raw not in allowed:
        errors.append(message or f"{key} must be one of: {', '.join(allowed)}")
        return None
    return raw


def coerce_int(raw: Any) -> Optional[int]:
    """Strict integer parse: rejects bools, decimals and scientific notation."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if raw.is_integer() else None
    if isinstance(raw, str):
        stripped = raw.strip()
        if not re.fullmatch(r"-?\d+", stripped):
            return None
        return int(stripped)
    return None


def coerce_decimal(raw: Any) -> Optional[Decimal]:
    if isinstance(raw, bool):
        return None
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    return value.quantize(Decimal("0.01"))


def _result(errors: list[str], build: Callable[[], T]) -> ParseResult:
    if errors:
        return Invalid(tuple(errors))
    return Ok(build())


def _require_object(payload: Any) -> Optional[Invalid]:
    if not isinstance(payload, dict):
        return Invalid(("Invalid JSON payload",))
    return None


# ---------------------------------------------------------------------------
# Auth / users
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RegisterRequest:
    username: str
    email: str
    password: str
    phone_number: str
    business_name: str


def parse_register(payload: Any) -> ParseResult:
    bad = _require_object(payload)
    if bad:
        return bad
    errors: list[str] = []
    username = _text(payload, "username", errors, required=True, max_len=64)
    email = _text(payload, "email", errors, required=True)
    password = payload.get("password")
    phone = _text(payload, "phoneNumber", errors, required=True, max_len=32)
    business = _text(payload, "businessName", errors, required=True)
    if email and not EMAIL_RE.match(email):
        errors.append("email must be a valid email address")
    if not isinstance(password, str) or not password:
        errors.append("password is required")
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"password must be at least {MIN_PASSWORD_LENGTH} characters long")
    return _result(errors, lambda: RegisterRequest(
        username=username,
        email=email.lower(),
        password=password,
        phone_number=phone,
        business_name=business,
    ))


@dataclass(frozen=True)
class LoginRequest:
    email: str
    password: str


def parse_login(payload: Any) -> ParseResult:
    bad = _require_object(payload)
    if bad:
        return bad
    errors: list[str] = []
    email = _text(payload, "email", errors, required=True)
    password = payload.get("password")
    if not isinstance(password, str) or not password:
        errors.append("password is required")
    return _result(errors, lambda: LoginRequest(email=email.lower(), password=password))


@dataclass(frozen=True)
class CreateUserRequest:
    username: str
    email: str
    password: str
    role: str
    phone_number: Optional[str] = None


def parse_create_user(payload: Any) -> ParseResult:
    bad = _require_object(payload)
    if bad:
        return bad
    errors: list[str] = []
    username = _text(payload, "username", errors, required=True, max_len=64)
    email = _text(payload, "email", errors, required=True)
    phone = _text(payload, "phoneNumber", errors, max_len=32)
    role = _choice(payload, "role", ROLES, errors, required=True,
                   message=f"Invalid role. Must be one of: {', '.join(ROLES)}")
    password = payload.get("password")
    if email and not EMAIL_RE.match(email):
        errors.append("email must be a valid email address")
    if not isinstance(password, str) or not password:
        errors.append("password is required")
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"password must be at least {MIN_PASSWORD_LENGTH} characters long")
    return _result(errors, lambda: CreateUserRequest(
        username=username, email=email.lower(), password=password, role=role, phone_number=phone,
    ))


def parse_role_update(payload: Any) -> ParseResult:
    bad = _require_object(payload)
    if bad:
        return bad
    errors: list[str] = []
    role = _choice(payload, "role", ROLES, errors, required=True,
                   message=f"Invalid role. Must be one of: {', '.join(ROLES)}")
    return _result(errors, lambda: role)


@dataclass(frozen=True)
class ProfileUpdate:
    username: Optional[str]
    email: Optional[str]
    phone_number: Optional[str]


def parse_profile_update(payload: Any) -> ParseResult:
    bad = _require_object(payload)
    if bad:
        return bad
    errors: list[str] = []
    # The dashboard sends name/phone; the API documents username/phoneNumber
    name_key = "username" if "username" in payload else "name"
    phone_key = "phoneNumber" if "phoneNumber" in payload else "phone"
    username = _text(payload, name_key, errors, max_len=64)
    email = _text(payload, "email", errors)
    phone = _text(payload, phone_key, errors, max_len=32)
    if email and not EMAIL_RE.match(email):
        errors.append("email must be a valid email address")
    return _result(errors, lambda: ProfileUpdate(
        username=username, email=email.lower() if email else None, phone_number=phone,
    ))


@dataclass(frozen=True)
class PasswordChange:
    current_password: str
    new_password: str


def parse_password_change(payload: Any) -> ParseResult:
    bad = _require_object(payload)
    if bad:
        return bad
    errors: list[str] = []
    current = payload.get("currentPassword")
    new = payload.get("newPassword")
    if not isinstance(current, str) or not current:
        errors.append("currentPassword is required")
    if not isinstance(new, str) or not new:
        errors.append("newPassword is required")
    elif len(new) < MIN_PASSWORD_LENGTH:
        errors.append(f"newPassword must be at least {MIN_PASSWORD_LENGTH} characters long")
    return _result(errors, lambda: PasswordChange(current_password=current, new_password=new))


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CustomerInput:
    name: str
    phone: Optional[str]
    email: Optional[str] = None
    address: Optional[str] = None


@dataclass(frozen=True)
class ManualOrderRequest:
    customer: CustomerInput
    product_name: str
    quantity: int
    unit_price: Optional[Decimal]
    order_source: str = "Manual"


def parse_manual_order(payload: Any) -> ParseResult:
    bad = _require_object(payload)
    if bad:
        return bad
    errors: list[str] = []
    name = _text(payload, "customerName", errors, required=True)
    phone = _text(payload, "customerPhone", errors, required=True, max_len=32)
    email = _text(payload, "customerEmail", errors)
    address = _text(payload, "customerAddress", errors, max_len=1000)
    product_name = _text(payload, "productName", errors, required=True)
    quantity = _int(payload, "quantity", errors, required=True, minimum=1)
    unit_price = _money(payload, "unitPrice", errors)
    source = _text(payload, "orderSource", errors, max_len=32) or "Manual"
    return _result(errors, lambda: ManualOrderRequest(
        customer=CustomerInput(name=name, phone=phone, email=email, address=address),
        product_name=product_name,
        quantity=quantity,
        unit_price=unit_price,
        order_source=source,
    ))


@dataclass(frozen=True)
class OrderLine:
    product_id: int
    quantity: int
    unit_price: Optional[Decimal] = None


@dataclass(frozen=True)
class CreateOrderRequest:
    channel: str
    items: tuple[OrderLine, ...]
    customer: Optional[CustomerInput] = None


def parse_create_order(payload: Any) -> ParseResult:
    bad = _require_object(payload)
    if bad:
        return bad
    errors: list[str] = []
    channel = _text(payload, "channel", errors, max_len=32) or "Website"
    raw_items = payload.get("items")
    lines: list[OrderLine] = []
    if not isinstance(raw_items, list) or not raw_items:
        errors.append("items must be a non-empty list")
    else:
        for idx, raw in enumerate(raw_items):
            if not isinstance(raw, dict):
                errors.append(f"items[{idx}] must be an object")
                continue
            item_errors: list[str] = []
            product_id = _int(raw, "productId", item_errors, required=True, minimum=1,
                              label=f"items[{idx}].productId")
            quantity = _int(raw, "quantity", item_errors, required=True, minimum=1,
                            label=f"items[{idx}].quantity")
            unit_price = _money(raw, "unitPrice", item_errors, label=f"items[{idx}].unitPrice")
            if item_errors:
                errors.extend(item_errors)
            else:
                lines.append(OrderLine(product_id=product_id, quantity=quantity, unit_price=unit_price))

    customer = None
    raw_customer = payload.get("customer")
    if raw_customer is not None:
        if not isinstance(raw_customer, dict):
            errors.append("customer must be an object")
        else:
            c_name = _text(raw_customer, "name", errors, required=True, label="customer.name")
            c_phone = _text(raw_customer, "phone", errors, required=True, max_len=32, label="customer.phone")
            c_email = _text(raw_customer, "email", errors, label="customer.email")
            c_address = _text(raw_customer, "address", errors, max_len=1000, label="customer.address")
            if c_name and c_phone:
                customer = CustomerInput(name=c_name, phone=c_phone, email=c_email, address=c_address)
    return _result(errors, lambda: CreateOrderRequest(channel=channel, items=tuple(lines), customer=customer))


def parse_status_update(payload: Any, allowed: tuple[str, ...]) -> ParseResult:
    bad = _require_object(payload)
    if bad:
        return bad
    errors: list[str] = []
    status = _choice(payload, "status", allowed, errors, required=True,
                     message=f"Invalid status. Must be one of: {', '.join(allowed)}")
    return _result(errors, lambda: status)


@dataclass(frozen=True)
class AssignRequest:
    order_id: int
    user_id: int
    delivery_notes: Optional[str] = None


def parse_assign(payload: Any) -> ParseResult:
    bad = _require_object(payload)
    if bad:
        return bad
    errors: list[str] = []
    order_id = _int(payload, "orderId", errors, required=True, minimum=1)
    user_id = _int(payload, "userId", errors, required=True, minimum=1)
    notes = _text(payload, "deliveryNotes", errors, max_len=2000)
    return _result(errors, lambda: AssignRequest(order_id=order_id, user_id=user_id, delivery_notes=notes))


@dataclass(frozen=True)
class PaymentUpdate:
    status: str
    payment_method: str = "cash"
    amount: Optional[Decimal] = None


def parse_payment_update(payload: Any) -> ParseResult:
    bad = _require_object(payload)
    if bad:
        return bad
    errors: list[str] = []
    status = _choice(payload, "status", PAYMENT_STATUSES, errors, required=True,
                     message=f"Invalid payment status. Must be one of: {', '.join(PAYMENT_STATUSES)}")
    method = _choice(payload, "paymentMethod", PAYMENT_METHODS, errors,
                     message=f"Invalid payment method. Must be one of: {', '.join(PAYMENT_METHODS)}")
    amount = _money(payload, "amount", errors)
    return _result(errors, lambda: PaymentUpdate(status=status, payment_method=method or "cash", amount=amount))


@dataclass(frozen=True)
class OrderListQuery:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    status: Optional[str] = None
    channel: Optional[str] = None
    search: Optional[str] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def cache_key(self) -> str:
        return f"{self.page}:{self.limit}:{self.status or ''}:{self.channel or ''}:{self.search or ''}"


def parse_pagination(args) -> tuple[int, int]:
    """Out-of-range values are clamped, never rejected."""
    page = coerce_int(args.get("page")) if args.get("page") is not None else None
    limit = coerce_int(args.get("limit")) if args.get("limit") is not None else None
    if page is None or page < 1:
        page = 1
    if limit is None or limit < 1 or limit > MAX_PAGE_SIZE:
        limit = DEFAULT_PAGE_SIZE
    return page, limit


def parse_order_list_query(args) -> OrderListQuery:
    page, limit = parse_pagination(args)

    def _filter(name: str) -> Optional[str]:
        value = (args.get(name) or "").strip()
        return None if not value or value == "all" else value

    return OrderListQuery(
        page=page,
        limit=limit,
        status=_filter("status"),
        channel=_filter("channel"),
        search=(args.get("search") or "").strip() or None,
    )


# ---------------------------------------------------------------------------
# Upload rows (header-flexible: snake_case or Title Case)
# ---------------------------------------------------------------------------


def normalize_row(row: dict) -> dict:
    """Map "Customer Name" / "customer_name" / "CUSTOMER-NAME" to customer_name."""
    normalized = {}
    for key, value in row.items():
        if key is None:
            continue
        norm = re.sub(r"[\s\-]+", "_", str(key).strip().lower())
        if isinstance(value, str):
            value = value.strip()
        normalized[norm] = value
    return normalized


def parse_order_row(row: dict) -> ParseResult:
    """
    Upload rows are lenient: quantity defaults to 1, unit price to 0 and
    source to CSV. Only customer name and product name are mandatory; text
    longer than its column is rejected with the row.
    """
    data = normalize_row(row)
    if not data.get("customer_name") or not data.get("product_name"):
        return Invalid((f"Missing required fields in row: {_row_repr(row)}",))
    errors: list[str] = []
    name = _text(data, "customer_name", errors)
    product = _text(data, "product_name", errors)
    phone = _text(data, "customer_phone", errors, max_len=32)
    email = _text(data, "customer_email", errors)
    address = _text(data, "customer_address", errors, max_len=1000)
    source = _text(data, "order_source", errors, max_len=32)
    if errors:
        return Invalid(tuple(f"{error} in row: {_row_repr(row)}" for error in errors))
    quantity = coerce_int(data.get("quantity"))
    if quantity is None or quantity < 1:
        quantity = 1
    unit_price = coerce_decimal(data.get("unit_price"))
    if unit_price is None or unit_price < 0:
        unit_price = Decimal("0.00")
    return Ok(ManualOrderRequest(
        customer=CustomerInput(name=name, phone=phone, email=email, address=address),
        product_name=product,
        quantity=quantity,
        unit_price=unit_price,
        order_source=source or "CSV",
    ))


@dataclass(frozen=True)
class ProductInput:
    name: str
    category: Optional[str] = None
    sku: Optional[str] = None
    description: Optional[str] = None
    stock: int = 0
    reorder_level: int = 0
    unit_price: Decimal = Decimal("0.00")


def parse_add_product(payload: Any) -> ParseResult:
    bad = _require_object(payload)
    if bad:
        return bad
    errors: list[str] = []
    name = _text(payload, "name", errors, required=True, label="Product name")
    category = _text(payload, "category", errors, max_len=100)
    sku = _text(payload, "sku", errors, max_len=100)
    description = _text(payload, "description", errors, max_len=2000)
    stock = _int(payload, "stock", errors, minimum=0)
    reorder = _int(payload, "reorderLevel", errors, minimum=0)
    price = _money(payload, "unitPrice", errors)
    if sku and not SKU_RE.match(sku):
        errors.append("SKU must be 3-100 characters of letters, digits, '-' or '_' and start with a letter or digit")
    return _result(errors, lambda: ProductInput(
        name=name,
        category=category,
        sku=sku.upper() if sku else None,
        description=description,
        stock=stock or 0,
        reorder_level=reorder or 0,
        unit_price=price if price is not None else Decimal("0.00"),
    ))


@dataclass(frozen=True)
class ProductUpdate:
    name: Optional[str] = None
    category: Optional[str] = None
    sku: Optional[str] = None
    description: Optional[str] = None
    fields: frozenset = field(default_factory=frozenset)


def parse_product_update(payload: Any) -> ParseResult:
    bad = _require_object(payload)
    if bad:
        return bad
    errors: list[str] = []
    name = _text(payload, "name", errors)
    category = _text(payload, "category", errors, max_len=100)
    sku = _text(payload, "sku", errors, max_len=100)
    description = _text(payload, "description", errors, max_len=2000)
    if "name" in payload and not name:
        errors.append("Product name cannot be empty")
    if sku and not SKU_RE.match(sku):
        errors.append("SKU must be 3-100 characters of letters, digits, '-' or '_' and start with a letter or digit")
    present = frozenset(k for k in ("name", "category", "sku", "description") if k in payload)
    if not present:
        errors.append("No updatable fields supplied")
    return _result(errors, lambda: ProductUpdate(
        name=name, category=category, sku=sku.upper() if sku else None,
        description=description, fields=present,
    ))


def parse_inventory_row(row: dict) -> ParseResult:
    data = normalize_row(row)
    name = data.get("product_name") or data.get("name")
    if not name:
        return Invalid((f"Missing product name in row: {_row_repr(row)}",))
    stock = coerce_int(data.get("stock_quantity") if data.get("stock_quantity") not in (None, "") else data.get("quantity"))
    reorder = coerce_int(data.get("reorder_level"))
    price = coerce_decimal(data.get("unit_price"))
    errors = []
    if len(str(name)) > 255:
        errors.append(f"product_name must be at most 255 characters in row: {_row_repr(row)}")
    if data.get("category") and len(str(data["category"])) > 100:
        errors.append(f"category must be at most 100 characters for \"{name}\"")
    if stock is not None and stock < 0:
        errors.append(f"Negative stock quantity for \"{name}\"")
    if price is not None and price < 0:
        errors.append(f"Negative unit price for \"{name}\"")
    sku = data.get("sku")
    if sku and not SKU_RE.match(str(sku)):
        errors.append(f"Invalid SKU \"{sku}\" for \"{name}\"")
    if errors:
        return Invalid(tuple(errors))
    return Ok(ProductInput(
        name=str(name),
        category=data.get("category") or None,
        sku=str(sku).upper() if sku else None,
        stock=stock or 0,
        reorder_level=reorder if reorder is not None and reorder >= 0 else 0,
        unit_price=price if price is not None else Decimal("0.00"),
    ))


@dataclass(frozen=True)
class StockUpdate:
    sku: str
    quantity: int


def parse_bulk_update(payload: Any) -> ParseResult:
    bad = _require_object(payload)
    if bad:
        return bad
    errors: list[str] = []
    raw_updates = payload.get("updates")
    updates: list[StockUpdate] = []
    if not isinstance(raw_updates, list) or not raw_updates:
        return Invalid(("updates must be a non-empty list",))
    for idx, raw in enumerate(raw_updates):
        if not isinstance(raw, dict):
            errors.append(f"updates[{idx}] must be an object")
            continue
        item_errors: list[str] = []
        sku = _text(raw, "sku", item_errors, required=True, label=f"updates[{idx}].sku", max_len=100)
        qty = _int(raw, "stockQuantity", item_errors, required=True, minimum=0,
                   label=f"updates[{idx}].stockQuantity")
        if item_errors:
            errors.extend(item_errors)
        else:
            updates.append(StockUpdate(sku=sku.upper(), quantity=qty))
    return _result(errors, lambda: tuple(updates))


def parse_price_update(payload: Any) -> ParseResult:
    bad = _require_object(payload)
    if bad:
        return bad
    errors: list[str] = []
    price = _money(payload, "unitPrice", errors, required=True)
    if errors:
        return Invalid(("Valid unit price is required",))
    return Ok(price)


# ---------------------------------------------------------------------------
# Invoices / reports
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InvoiceInput:
    order_id: int
    due_date: Any
    status: str = "pending"


def parse_invoice(payload: Any) -> ParseResult:
    bad = _require_object(payload)
    if bad:
        return bad
    errors: list[str] = []
    order_id = _int(payload, "orderId", errors, required=True, minimum=1)
    due_raw = _text(payload, "dueDate", errors, required=True)
    status = _choice(payload, "status", PAYMENT_STATUSES, errors,
                     message=f"Invalid payment status. Must be one of: {', '.join(PAYMENT_STATUSES)}")
    due = None
    if due_raw:
        try:
            due = parse_date(due_raw)
        except ValueError:
            errors.append("dueDate must be a date (YYYY-MM-DD)")
    return _result(errors, lambda: InvoiceInput(order_id=order_id, due_date=due, status=status or "pending"))


def parse_invoice_row(row: dict) -> ParseResult:
    data = normalize_row(row)
    return parse_invoice({
        "orderId": data.get("order_id"),
        "dueDate": data.get("due_date"),
        "status": data.get("status") or None,
    })


@dataclass(frozen=True)
class DateRange:
    start: Any = None
    end: Any = None


def parse_date_range(args) -> ParseResult:
    errors: list[str] = []
    values = {}
    for key in ("startDate", "endDate"):
        raw = args.get(key)
        try:
            values[key] = parse_date(raw) if raw else None
        except ValueError:
            errors.append(f"{key} must be a date (YYYY-MM-DD)")
    if not errors and values["startDate"] and values["endDate"] and values["startDate"] > values["endDate"]:
        errors.append("startDate must not be after endDate")
    return _result(errors, lambda: DateRange(start=values["startDate"], end=values["endDate"]))


def _row_repr(row: dict) -> str:
    return ", ".join(f"{k}={v}" for k, v in row.items() if k is not None)
