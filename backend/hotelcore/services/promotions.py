"""
Promotion pricing

Discount precedence for a line item: an item-level override from any active
promotion, then the selected promotion (scoped to the item's service type
first, then hotel-wide) with its product override if one is set for the line's
product. Pricing never blocks ordering: a failure prices at zero discount.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hotelcore.core import clock, exceptions
from hotelcore.models.promotion import (
    Promotion, PromotionItemDiscount, PromotionProductDiscount, DISCOUNT_PERCENTAGE, DISCOUNT_FIXED_AMOUNT,
)
from hotelcore.services.rooms import get_hotel, hotel_timezone

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
DISCOUNT_TYPES = (DISCOUNT_PERCENTAGE, DISCOUNT_FIXED_AMOUNT)


@dataclass
class DiscountResult:
    discount_amount: Decimal = ZERO
    promotion_id: Optional[int] = None
    discount_type: Optional[str] = None


@dataclass
class MinimumOrderCheck:
    meets_minimum: bool
    promotion_id: Optional[int] = None
    min_order_amount: Optional[Decimal] = None
    service_type: Optional[str] = None


@dataclass
class CartLine:
    product_id: str
    quantity: int
    original_price: Decimal
    discount_amount: Decimal
    final_price: Decimal
    total_discount: Decimal
    promotion_id: Optional[int] = None
    discount_type: Optional[str] = None


@dataclass
class CartPricing:
    items: List[CartLine] = field(default_factory=list)
    total_original: Decimal = ZERO
    total_discount: Decimal = ZERO
    total_after_discount: Decimal = ZERO
    min_order_requirement: Optional[MinimumOrderCheck] = None


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def normalize_service_type(service_type: Optional[str]) -> str:
    return (service_type or "").strip().lower()


def normalize_item_name(name: Optional[str]) -> str:
    return (name or "").strip().lower()


def _js_weekday(day) -> int:
    # Stored days use 0=Sunday
    return (day.weekday() + 1) % 7


def is_promotion_active(promotion: Promotion, now_local: datetime) -> bool:
    """Whether the promotion applies at the given hotel-local moment"""
    if not promotion.is_active or promotion.is_deleted:
        return False
    if promotion.show_always:
        return True

    today = now_local.date()
    if promotion.start_date and today < promotion.start_date:
        return False
    if promotion.end_date and today > promotion.end_date:
        return False

    if promotion.days_of_week and _js_weekday(today) not in promotion.days_of_week:
        return False

    if promotion.start_time and promotion.end_time:
        current = now_local.time().replace(second=0, microsecond=0)
        start = promotion.start_time.replace(second=0, microsecond=0)
        end = promotion.end_time.replace(second=0, microsecond=0)
        # Inclusive, same-day; a start after the end never matches
        return start <= current <= end

    return True


def active_promotions(db: Session, hotel_id: int, now_local: Optional[datetime] = None) -> List[Promotion]:
    """Active promotions, newest first"""
    if now_local is None:
        now_local = clock.hotel_now(hotel_timezone(db, hotel_id))
    candidates = Promotion.live(db).filter(
        Promotion.hotel_id == hotel_id,
        Promotion.is_active.is_(True),
    ).order_by(Promotion.created_at.desc(), Promotion.id.desc()).all()
    return [p for p in candidates if is_promotion_active(p, now_local)]


def promotion_service_types(promotion: Promotion) -> List[str]:
    return [normalize_service_type(s) for s in (promotion.applies_to_service_types or []) if s]


def select_promotion(promotions: Sequence[Promotion], service_type: Optional[str]) -> Optional[Promotion]:
    """Service-type-scoped promotion first, then hotel-wide"""
    service_type = normalize_service_type(service_type)
    if service_type:
        for promotion in promotions:
            if service_type in promotion_service_types(promotion):
                return promotion
    for promotion in promotions:
        if promotion.applies_to_all_products:
            return promotion
    return None


def compute_discount(price, discount_type: str, value, max_discount=None) -> Decimal:
    """Per-unit discount, never more than the price"""
    price = Decimal(str(price))
    value = Decimal(str(value or 0))
    if discount_type == DISCOUNT_PERCENTAGE:
        amount = price * value / Decimal(100)
        if max_discount and amount > Decimal(str(max_discount)):
            amount = Decimal(str(max_discount))
    elif discount_type == DISCOUNT_FIXED_AMOUNT:
        amount = min(value, price)
    else:
        logger.warning("Unknown discount type %r, no discount applied", discount_type)
        amount = ZERO
    return _money(max(amount, ZERO))


def find_item_override(db: Session, promotions: Sequence[Promotion], service_id,
                       item_name: Optional[str]) -> Optional[PromotionItemDiscount]:
    name = normalize_item_name(item_name)
    if service_id is None or not name or not promotions:
        return None
    ranks = {p.id: rank for rank, p in enumerate(promotions)}
    overrides = PromotionItemDiscount.live(db).filter(
        PromotionItemDiscount.promotion_id.in_(list(ranks)),
        PromotionItemDiscount.service_id == str(service_id),
        PromotionItemDiscount.item_name == name,
    ).all()
    if not overrides:
        return None
    return min(overrides, key=lambda o: (ranks[o.promotion_id], o.id))


def find_product_override(db: Session, promotion: Promotion, product_id) -> Optional[PromotionProductDiscount]:
    if product_id is None or str(product_id) == "":
        return None
    return PromotionProductDiscount.live(db).filter(
        PromotionProductDiscount.promotion_id == promotion.id,
        PromotionProductDiscount.product_id == str(product_id),
    ).order_by(PromotionProductDiscount.id.desc()).first()


def calculate_discount(db: Session, hotel_id: int, item, now_local: Optional[datetime] = None,
                       promotions: Optional[Sequence[Promotion]] = None) -> DiscountResult:
    if promotions is None:
        promotions = active_promotions(db, hotel_id, now_local)
    if not promotions:
        return DiscountResult()

    override = find_item_override(db, promotions, getattr(item, "service_id", None),
                                  getattr(item, "menu_item_name", None))
    if override:
        return DiscountResult(
            discount_amount=compute_discount(item.price, override.discount_type,
                                             override.discount_value, override.max_discount_amount),
            promotion_id=override.promotion_id,
            discount_type=override.discount_type,
        )

    promotion = select_promotion(promotions, getattr(item, "service_type", None))
    if not promotion:
        return DiscountResult()

    product_override = find_product_override(db, promotion, getattr(item, "product_id", None))
    if product_override:
        return DiscountResult(
            discount_amount=compute_discount(item.price, product_override.discount_type,
                                             product_override.discount_value,
                                             product_override.max_discount_amount),
            promotion_id=promotion.id,
            discount_type=product_override.discount_type,
        )
    return DiscountResult(
        discount_amount=compute_discount(item.price, promotion.discount_type,
                                         promotion.discount_value, promotion.max_discount_amount),
        promotion_id=promotion.id,
        discount_type=promotion.discount_type,
    )


def check_minimum_order(db: Session, hotel_id: int, subtotal, service_type: Optional[str] = None,
                        promotions: Optional[Sequence[Promotion]] = None) -> MinimumOrderCheck:
    """A service type with no applicable promotion has no minimum to meet"""
    if promotions is None:
        promotions = active_promotions(db, hotel_id)
    promotion = select_promotion(promotions, service_type)
    if not promotion:
        return MinimumOrderCheck(meets_minimum=True, service_type=service_type)

    minimum = Decimal(str(promotion.min_order_amount or 0))
    return MinimumOrderCheck(
        meets_minimum=Decimal(str(subtotal)) >= minimum,
        promotion_id=promotion.id,
        min_order_amount=minimum,
        service_type=service_type,
    )


def _blocks(check: MinimumOrderCheck) -> bool:
    return not check.meets_minimum and bool(check.min_order_amount) and check.min_order_amount > 0


def _cart_promotions(db: Session, hotel_id: int):
    """Active promotions for pricing a cart; empty when they cannot be loaded"""
    try:
        now_local = clock.hotel_now(hotel_timezone(db, hotel_id))
        return now_local, active_promotions(db, hotel_id, now_local)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to load promotions for hotel %s, pricing without discounts", hotel_id)
        return None, []


def _safe_minimum_check(db: Session, hotel_id: int, subtotal, service_type: str,
                        promotions: Sequence[Promotion]) -> Optional[MinimumOrderCheck]:
    try:
        return check_minimum_order(db, hotel_id, subtotal, service_type, promotions)
    except Exception as e:
        if isinstance(e, SQLAlchemyError):
            db.rollback()
        logger.exception("Minimum order check failed for %s, not enforced", service_type)
        return None


def calculate_cart(db: Session, hotel_id: int, items: Sequence) -> CartPricing:
    now_local, promotions = _cart_promotions(db, hotel_id)

    lines = []
    for item in items:
        price = _money(item.price)
        quantity = int(item.quantity or 1)
        try:
            result = calculate_discount(db, hotel_id, item, now_local, promotions)
        except Exception as e:
            if isinstance(e, SQLAlchemyError):
                db.rollback()
            logger.exception("Discount calculation failed for product %s, pricing without discount", item.product_id)
            result = DiscountResult()
        unit_discount = result.discount_amount
        lines.append(CartLine(
            product_id=str(item.product_id),
            quantity=quantity,
            original_price=price,
            discount_amount=unit_discount,
            final_price=price - unit_discount,
            total_discount=_money(unit_discount * quantity),
            promotion_id=result.promotion_id,
            discount_type=result.discount_type,
        ))

    total_original = _money(sum((_money(i.price) * int(i.quantity or 1) for i in items), ZERO))

    # Minimum order spend, per service type when the cart mixes services
    subtotals: Dict[str, Decimal] = {}
    for item in items:
        service_type = normalize_service_type(getattr(item, "service_type", None))
        if service_type:
            subtotals[service_type] = subtotals.get(service_type, ZERO) + _money(item.price) * int(item.quantity or 1)

    blocking = None
    if len(subtotals) == 1:
        check = _safe_minimum_check(db, hotel_id, total_original, next(iter(subtotals)), promotions)
        if check and _blocks(check):
            blocking = check
    elif len(subtotals) > 1:
        for service_type, subtotal in subtotals.items():
            check = _safe_minimum_check(db, hotel_id, subtotal, service_type, promotions)
            if check and _blocks(check):
                blocking = check
                break

    if blocking:
        logger.info(
            "Cart below minimum order %s for %s, discounts withheld",
            blocking.min_order_amount, blocking.service_type,
        )
        for line in lines:
            line.discount_amount = ZERO
            line.final_price = line.original_price
            line.total_discount = ZERO
            line.promotion_id = None
            line.discount_type = None

    total_discount = sum((line.total_discount for line in lines), ZERO)
    return CartPricing(
        items=lines,
        total_original=total_original,
        total_discount=_money(total_discount),
        total_after_discount=_money(total_original - total_discount),
        min_order_requirement=blocking,
    )


# Administration

def list_promotions(db: Session, hotel_id: int) -> List[Promotion]:
    return Promotion.live(db).filter(Promotion.hotel_id == hotel_id).order_by(
        Promotion.created_at.desc(), Promotion.id.desc()
    ).all()


def get_promotion(db: Session, promotion_id: int) -> Promotion:
    promotion = Promotion.live(db).filter(Promotion.id == promotion_id).first()
    if not promotion:
        raise exceptions.PromotionNotFound()
    return promotion


def _validate_promotion_fields(fields: dict):
    discount_type = fields.get("discount_type")
    if discount_type is not None and discount_type not in DISCOUNT_TYPES:
        raise exceptions.ValidationFailed(f"discount_type must be one of: {', '.join(DISCOUNT_TYPES)}")
    value = fields.get("discount_value")
    if value is not None:
        if value < 0:
            raise exceptions.ValidationFailed("discount_value must not be negative")
        if discount_type == DISCOUNT_PERCENTAGE and value > 100:
            raise exceptions.ValidationFailed("Percentage discount cannot exceed 100")
    days = fields.get("days_of_week")
    if days and any(d not in range(7) for d in days):
        raise exceptions.ValidationFailed("days_of_week values must be between 0 (Sunday) and 6 (Saturday)")
    start, end = fields.get("start_date"), fields.get("end_date")
    if start and end and end < start:
        raise exceptions.ValidationFailed("end_date must not be before start_date")
    if fields.get("applies_to_service_types") is not None:
        fields["applies_to_service_types"] = [
            normalize_service_type(s) for s in fields["applies_to_service_types"] if normalize_service_type(s)
        ]


def create_promotion(db: Session, hotel_id: int, created_by: Optional[int] = None, **fields) -> Promotion:
    get_hotel(db, hotel_id)
    _validate_promotion_fields(fields)
    promotion = Promotion(hotel_id=hotel_id, created_by=created_by, **fields)
    db.add(promotion)
    db.commit()
    db.refresh(promotion)
    logger.info("Created promotion %s (%s) for hotel %s", promotion.id, promotion.title, hotel_id)
    return promotion


def update_promotion(db: Session, promotion_id: int, **fields) -> Promotion:
    promotion = get_promotion(db, promotion_id)
    merged = {"discount_type": promotion.discount_type, **fields}
    _validate_promotion_fields(merged)
    for key in fields:
        setattr(promotion, key, merged[key])
    db.commit()
    db.refresh(promotion)
    return promotion


def delete_promotion(db: Session, promotion_id: int) -> Promotion:
    promotion = get_promotion(db, promotion_id)
    promotion.soft_delete()
    for override in list(promotion.item_discounts) + list(promotion.product_discounts):
        if not override.is_deleted:
            override.soft_delete()
    db.commit()
    logger.info("Deleted promotion %s", promotion_id)
    return promotion


def add_item_discount(db: Session, promotion_id: int, service_id, item_name: str, discount_type: str,
                      discount_value, max_discount_amount=None) -> PromotionItemDiscount:
    get_promotion(db, promotion_id)
    name = normalize_item_name(item_name)
    if not name or service_id is None or str(service_id) == "":
        raise exceptions.ValidationFailed("service_id and item_name are required")
    _validate_promotion_fields({"discount_type": discount_type, "discount_value": discount_value})

    existing = PromotionItemDiscount.live(db).filter(
        PromotionItemDiscount.promotion_id == promotion_id,
        PromotionItemDiscount.service_id == str(service_id),
        PromotionItemDiscount.item_name == name,
    ).first()
    if existing:
        override = existing
        override.discount_type = discount_type
        override.discount_value = discount_value
        override.max_discount_amount = max_discount_amount
    else:
        override = PromotionItemDiscount(
            promotion_id=promotion_id,
            service_id=str(service_id),
            item_name=name,
            discount_type=discount_type,
            discount_value=discount_value,
            max_discount_amount=max_discount_amount,
        )
        db.add(override)
    db.commit()
    db.refresh(override)
    return override


def remove_item_discount(db: Session, item_discount_id: int) -> PromotionItemDiscount:
    override = PromotionItemDiscount.live(db).filter(PromotionItemDiscount.id == item_discount_id).first()
    if not override:
        raise exceptions.PromotionNotFound("Item discount not found")
    override.soft_delete()
    db.commit()
    return override


def add_product_discount(db: Session, promotion_id: int, product_id, discount_type: str,
                         discount_value, max_discount_amount=None) -> PromotionProductDiscount:
    get_promotion(db, promotion_id)
    if product_id is None or str(product_id).strip() == "":
        raise exceptions.ValidationFailed("product_id is required")
    _validate_promotion_fields({"discount_type": discount_type, "discount_value": discount_value})

    product_id = str(product_id).strip()
    override = PromotionProductDiscount.live(db).filter(
        PromotionProductDiscount.promotion_id == promotion_id,
        PromotionProductDiscount.product_id == product_id,
    ).first()
    if override:
        override.discount_type = discount_type
        override.discount_value = discount_value
        override.max_discount_amount = max_discount_amount
    else:
        override = PromotionProductDiscount(
            promotion_id=promotion_id,
            product_id=product_id,
            discount_type=discount_type,
            discount_value=discount_value,
            max_discount_amount=max_discount_amount,
        )
        db.add(override)
    db.commit()
    db.refresh(override)
    return override


def remove_product_discount(db: Session, product_discount_id: int) -> PromotionProductDiscount:
    override = PromotionProductDiscount.live(db).filter(
        PromotionProductDiscount.id == product_discount_id,
    ).first()
    if not override:
        raise exceptions.PromotionNotFound("Product discount not found")
    override.soft_delete()
    db.commit()
    return override
