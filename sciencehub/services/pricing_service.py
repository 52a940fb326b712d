"""
Ticket pricing for event registrations.

Pricing is a pure function of the event's pricing configuration and the
requested ticket counts. Bounds on the counts are checked by the caller.
"""

from decimal import ROUND_CEILING, Decimal
from typing import Optional, Union

from ..models.event import Event
from ..schemas.pricing import LineItem, PaymentMode, PriceQuote

Number = Union[Decimal, int, float, str]

HUNDRED = Decimal("100")
ZERO = Decimal("0")


def _to_decimal(value: Optional[Number]) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_up_to_hundred(amount: Decimal) -> Decimal:
    """Ceiling to the next multiple of 100; exact multiples are unchanged."""
    return (amount / HUNDRED).to_integral_value(rounding=ROUND_CEILING) * HUNDRED


def calculate_price(
    unit_price: Optional[Number],
    adult_count: int,
    child_count: int = 0,
    *,
    currency: Optional[str] = None,
    couple_discount: Optional[Number] = None,
    child_half_price: bool = False,
    adults_only: bool = False,
    payment_mode: Union[PaymentMode, str] = PaymentMode.PAID,
) -> PriceQuote:
    """
    Compute the total charge and breakdown for a ticket request.

    Adults are paired when a couple discount is configured and at least two
    adults are requested; each pair is charged the discounted double price
    rounded up to a multiple of 100 and a leftover adult pays full price.
    Children pay half price with ``child_half_price`` and nothing at all for
    adults-only events.

    Args:
        unit_price: Price of one ticket
        adult_count: Adult tickets, at least 1
        child_count: Child tickets, at least 0
        currency: Currency code copied onto the quote
        couple_discount: Percentage off each pair of adult tickets
        child_half_price: Charge children half the unit price
        adults_only: Ignore children entirely
        payment_mode: free, donation or cost/paid

    Returns:
        PriceQuote with the total and one line item per charged group
    """
    mode = PaymentMode(payment_mode)
    if not mode.is_chargeable:
        return PriceQuote(total=ZERO, currency=currency)

    price = _to_decimal(unit_price)
    discount = _to_decimal(couple_discount)
    line_items = []

    if discount and adult_count >= 2:
        pairs, single = divmod(adult_count, 2)
        pair_price = round_up_to_hundred(price * 2 * (1 - discount / HUNDRED))
        adult_total = pairs * pair_price + single * price
        line_items.append(LineItem(
            kind="adults",
            quantity=adult_count,
            unit_price=price,
            amount=adult_total,
            discounted_pairs=pairs,
            undiscounted_amount=price * 2 * pairs,
        ))
    else:
        adult_total = adult_count * price
        line_items.append(LineItem(
            kind="adults",
            quantity=adult_count,
            unit_price=price,
            amount=adult_total,
        ))

    child_total = ZERO
    if not adults_only:
        child_price = price / 2 if child_half_price else price
        child_total = child_count * child_price
        if child_count > 0:
            line_items.append(LineItem(
                kind="children",
                quantity=child_count,
                unit_price=child_price,
                amount=child_total,
                half_price=child_half_price,
            ))

    return PriceQuote(
        total=adult_total + child_total,
        currency=currency,
        line_items=line_items,
    )


def quote_for_event(event: Event, adult_count: int, child_count: int = 0) -> PriceQuote:
    """Price a ticket request against an event's stored pricing configuration."""
    return calculate_price(
        event.price,
        adult_count,
        child_count,
        currency=event.currency,
        couple_discount=event.couple_discount,
        child_half_price=bool(event.child_half_price),
        adults_only=bool(event.adults_only),
        payment_mode=event.payment_type or PaymentMode.FREE,
    )
