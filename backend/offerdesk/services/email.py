import logging
import smtplib
from email.message import EmailMessage

from offerdesk.core.config import settings
from offerdesk.schemas.offer import OfferRead
from offerdesk.services.catalog import ProductSnapshot
from offerdesk.services.margin import quantize_percentage

logger = logging.getLogger(__name__)


def _build_message(to_email: str, subject: str, text_body: str) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = settings.smtp_from_email or "no-reply@offerdesk.local"
    msg["To"] = to_email
    msg.set_content(text_body)
    return msg


async def send_email(to_email: str, subject: str, text_body: str) -> bool:
    if not settings.smtp_enabled:
        logger.info("Email disabled, skipping send", extra={"to_email": to_email, "subject": subject})
        return False
    msg = _build_message(to_email, subject, text_body)
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as smtp:
        if settings.smtp_use_tls:
            smtp.starttls()
        if settings.smtp_username and settings.smtp_password:
            smtp.login(settings.smtp_username, settings.smtp_password)
        smtp.send_message(msg)
    return True


def _product_label(product: ProductSnapshot) -> str:
    return product.title or product.reference or str(product.id)


def _price_lines(offer: OfferRead) -> list[str]:
    return [
        f"Original price: {offer.product_price}",
        f"Your offer: {offer.offered_price}",
        f"Discount: {quantize_percentage(offer.discount_percentage)}%",
    ]


async def send_offer_accepted(offer: OfferRead, product: ProductSnapshot) -> bool:
    subject = "Your offer has been accepted!"
    lines = [
        f"Congratulations {offer.customer_name or 'Customer'}!",
        f"Your offer for {_product_label(product)} has been accepted.",
        *_price_lines(offer),
        f"Your discount code: {offer.coupon_code}",
        "The code is valid for this product only and can be used once.",
        f"{settings.shop_name}",
    ]
    return await send_email(offer.customer_email, subject, "\n".join(lines))


async def send_offer_received(offer: OfferRead, product: ProductSnapshot) -> bool:
    subject = "We have received your offer"
    lines = [
        f"Hello {offer.customer_name or 'Customer'},",
        f"We have received your offer for {_product_label(product)}.",
        *_price_lines(offer),
        "We will review it and get back to you soon.",
        f"{settings.shop_name}",
    ]
    return await send_email(offer.customer_email, subject, "\n".join(lines))


async def send_offer_rejected(offer: OfferRead, product: ProductSnapshot) -> bool:
    subject = "About your offer"
    lines = [
        f"Hello {offer.customer_name or 'Customer'},",
        f"Unfortunately we cannot accept your offer for {_product_label(product)}.",
    ]
    if offer.review_notes:
        lines.append(f"Notes: {offer.review_notes}")
    lines.append(f"{settings.shop_name}")
    return await send_email(offer.customer_email, subject, "\n".join(lines))


async def send_admin_offer_notice(offer: OfferRead, product: ProductSnapshot, *, headline: str) -> bool:
    if not settings.admin_email:
        logger.info("Admin email not configured, skipping notice", extra={"offer_id": str(offer.id)})
        return False
    subject = f"[{settings.shop_name}] {headline}"
    lines = [
        headline,
        f"Offer: {offer.id}",
        f"Product: {_product_label(product)}",
        *_price_lines(offer),
        f"Margin: {offer.max_discount_allowed}%",
        f"Customer: {offer.customer_name or '-'} <{offer.customer_email}> {offer.customer_phone}",
        f"Guest: {'yes' if offer.is_guest else 'no'}",
    ]
    if offer.coupon_code:
        lines.append(f"Coupon: {offer.coupon_code}")
    if offer.comments:
        lines.append(f"Comments: {offer.comments}")
    return await send_email(settings.admin_email, subject, "\n".join(lines))
