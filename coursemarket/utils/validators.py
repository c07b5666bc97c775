import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

def validate_username(username: str) -> bool:
    """Проверяет валидность имени пользователя"""
    # Буквы, цифры, точка, дефис и подчеркивание, от 3 до 30 символов
    pattern = r'^[a-zA-Z0-9_.-]{3,30}$'
    return bool(re.match(pattern, username))

def validate_password(password: str) -> bool:
    """Проверяет минимальную длину пароля"""
    return len(password) >= 6

def to_minor_units(amount: Decimal) -> int:
    """59.99 -> 5999"""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

def from_minor_units(amount: int) -> Decimal:
    """5999 -> 59.99"""
    return (Decimal(amount) / 100).quantize(Decimal("0.01"))

def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

def parse_int(value) -> Optional[int]:
    """Неотрицательное целое из строки ASCII-цифр, иначе None"""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, str) and re.fullmatch(r'[0-9]+', value):
        return int(value)
    return None
