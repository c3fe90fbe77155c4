import smtplib
from email.message import EmailMessage

from storefront.config import settings

STATUS_MESSAGES = {
    "pending": "is awaiting payment confirmation",
    "confirmed": "has been confirmed",
    "shipped": "has shipped",
    "delivered": "has been delivered",
    "cancelled": "has been cancelled",
}


def smtp_configured() -> bool:
    return bool(settings.SMTP_HOST and settings.SMTP_FROM_EMAIL)


def _send_email(to_email: str, subject: str, text_body: str, html_body: str | None = None) -> None:
    if not smtp_configured():
        raise RuntimeError("SMTP is not configured (SMTP_HOST and SMTP_FROM_EMAIL are required).")

    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = f"{settings.SMTP_FROM_NAME} <{settings.SMTP_FROM_EMAIL}>"
    message["To"] = to_email
    message.set_content(text_body)
    if html_body:
        message.add_alternative(html_body, subtype="html")

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as smtp:
        smtp.ehlo()
        if settings.SMTP_USE_TLS:
            smtp.starttls()
            smtp.ehlo()
        if settings.SMTP_USER:
            smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
        smtp.send_message(message)


def _format_money(amount, currency: str) -> str:
    return f"{amount:.2f} {currency.upper()}"


def send_order_confirmation_email(
    to_email: str,
    order_id: int,
    total,
    currency: str,
    lines: list[tuple[str, int]],
) -> None:
    items_text = "\n".join(f"  - {product_id} x {quantity}" for product_id, quantity in lines)
    items_html = "".join(f"<li>{product_id} &times; {quantity}</li>" for product_id, quantity in lines)
    total_text = _format_money(total, currency)
    text = (
        f"Thank you for your order #{order_id}.\n\n"
        f"Items:\n{items_text}\n\n"
        f"Total: {total_text}\n\n"
        "We will let you know when it ships."
    )
    html = (
        f"<p>Thank you for your order #{order_id}.</p>"
        f"<ul>{items_html}</ul>"
        f"<p>Total: <strong>{total_text}</strong></p>"
        "<p>We will let you know when it ships.</p>"
    )
    _send_email(to_email=to_email, subject=f"Order #{order_id} confirmed", text_body=text, html_body=html)


def send_order_status_email(
    to_email: str,
    order_id: int,
    status: str,
    tracking_number: str | None = None,
) -> None:
    phrase = STATUS_MESSAGES.get(status, f"is now {status}")
    text = f"Your order #{order_id} {phrase}."
    html = f"<p>Your order #{order_id} {phrase}.</p>"
    if tracking_number:
        text += f"\n\nTracking number: {tracking_number}"
        html += f"<p>Tracking number: <code>{tracking_number}</code></p>"
    _send_email(to_email=to_email, subject=f"Order #{order_id} update", text_body=text, html_body=html)
