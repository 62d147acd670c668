import hashlib
import math
import re
from enum import Enum
from typing import Optional, Sequence, Tuple

from imobi.schemas.listing import PropertyCategory

ID_HASH_LENGTH = 12

AMOUNT_CHARS_PATTERN = re.compile(r"[^\d,.]")
LEADING_DECIMAL_PATTERN = re.compile(r"\d+(?:\.\d+)?|\.\d+")
CURRENCY_DIGITS_PATTERN = re.compile(r"R?\$?\s*([\d.,]+)")
DIGITS_PATTERN = re.compile(r"\d+")
STREET_PREFIX_PATTERN = re.compile(r"^(?:rua|avenida|av\.|travessa|alameda)(?=\s)", re.IGNORECASE)

# Ordered: the first rule with a keyword contained in the text decides the category.
CATEGORY_RULES: Tuple[Tuple[Tuple[str, ...], PropertyCategory], ...] = (
    (("casa", "sobrado", "house"), PropertyCategory.HOUSE),
    (("apartamento", "apto", "cobertura", "apartment"), PropertyCategory.APARTMENT),
    (("terreno", "lote", "land"), PropertyCategory.LAND),
    (("comercial", "loja", "sala", "galpão", "commercial"), PropertyCategory.COMMERCIAL),
)


class AmountProfile(str, Enum):
    """How a source writes numbers.

    DECIMAL_POINT reads the first comma as the decimal separator and keeps periods,
    so "850.000" parses as 850.0. THOUSANDS_POINT drops periods first, so
    "R$ 1.200.000,50" parses as 1200000.5. DIGITS_ONLY drops every separator and
    reads an integer amount.
    """

    DECIMAL_POINT = "decimal_point"
    THOUSANDS_POINT = "thousands_point"
    DIGITS_ONLY = "digits_only"


def _finite(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def _leading_float(text: str) -> float:
    match = LEADING_DECIMAL_PATTERN.match(text)
    if not match:
        return 0.0
    return _finite(float(match.group(0)))


def parse_amount(text: Optional[str], profile: AmountProfile = AmountProfile.DECIMAL_POINT) -> float:
    if not text:
        return 0.0
    if profile is AmountProfile.DIGITS_ONLY:
        match = CURRENCY_DIGITS_PATTERN.search(text)
        if not match:
            return 0.0
        digits = re.sub(r"[.,]", "", match.group(1))
        return _finite(float(digits)) if digits else 0.0

    cleaned = AMOUNT_CHARS_PATTERN.sub("", text)
    if profile is AmountProfile.THOUSANDS_POINT:
        cleaned = cleaned.replace(".", "").replace(",", ".", 1)
    else:
        cleaned = cleaned.replace(",", ".", 1)
    return _leading_float(cleaned)


def parse_area(text: Optional[str], profile: AmountProfile = AmountProfile.DECIMAL_POINT) -> float:
    return parse_amount(text, profile)


def parse_count(text: Optional[str]) -> int:
    if not text:
        return 0
    match = DIGITS_PATTERN.search(text)
    return int(match.group(0)) if match else 0


def infer_category(text: Optional[str]) -> PropertyCategory:
    lowered = (text or "").lower()
    for keywords, category in CATEGORY_RULES:
        if any(keyword in lowered for keyword in keywords):
            return category
    return PropertyCategory.OTHER


def infer_category_from(parts: Sequence[str]) -> PropertyCategory:
    return infer_category(" ".join(part for part in parts if part))


def derive_neighborhood(address: Optional[str]) -> str:
    """Pull the neighborhood out of a Brazilian listing address.

    "Rua XV de Novembro, 100 - Centro, Curitiba - PR" gives "Centro";
    "Atuba, Curitiba - PR" gives "Atuba"; "Bacacheri - Curitiba" gives "Bacacheri".
    """
    address = (address or "").strip()
    if not address:
        return ""
    if STREET_PREFIX_PATTERN.match(address):
        hyphen = address.find("-")
        if hyphen == -1:
            return ""
        comma = address.find(",", hyphen)
        if comma == -1:
            return ""
        return address[hyphen + 1 : comma].strip()
    comma = address.find(",")
    if comma != -1:
        return address[:comma].strip()
    hyphen = address.find("-")
    return address[:hyphen].strip() if hyphen != -1 else ""


def format_brl(amount: float) -> str:
    if float(amount).is_integer():
        body = f"{int(amount):,}".replace(",", ".")
    else:
        body = f"{amount:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {body}"


def source_prefix(source_name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", source_name.lower()) or "source"


def stable_listing_id(prefix: str, source_url: str) -> str:
    digest = hashlib.sha1(source_url.encode("utf-8")).hexdigest()
    return f"{prefix}_{digest[:ID_HASH_LENGTH]}"
