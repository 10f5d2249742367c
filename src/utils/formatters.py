# src/utils/formatters.py
from datetime import datetime
import pytz
from decimal import Decimal
from ..config import Config

def format_price(amount: Decimal) -> str:
    """Price with currency symbol; whole amounts drop the cents"""
    amount = Decimal(amount)
    if amount == amount.to_integral_value():
        return f"{Config.CURRENCY_SYMBOL}{amount:,.0f}"
    return f"{Config.CURRENCY_SYMBOL}{amount:,.2f}"

def format_datetime(dt: datetime) -> str:
    """Date and time in the store's timezone"""
    store_tz = pytz.timezone(Config.TIMEZONE)
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    local_time = dt.astimezone(store_tz)
    return local_time.strftime("%Y-%m-%d %H:%M:%S")

def whatsapp_digits(phone: str) -> str:
    """wa.me wants the bare international number"""
    return "".join(ch for ch in str(phone or "") if ch.isdigit())
