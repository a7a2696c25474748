"""Currency -- the currencies offers are quoted in, and their display precision."""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    """One quotable currency."""

    code: str
    decimal_places: int
    name: str

    @property
    def quantum(self) -> Decimal:
        """Smallest displayable unit, for ``Decimal.quantize``."""
        return Decimal(1).scaleb(-self.decimal_places)


def _table(*rows: tuple[str, int, str]) -> dict[str, CurrencyInfo]:
    return {code: CurrencyInfo(code, places, name) for code, places, name in rows}


class CurrencyRegistry:
    """
    Lookup of supported ISO 4217 codes.

    Event organizers quote in European currencies; USD and GBP cover
    international acts, JPY and ISK the zero-decimal rounding path.
    """

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = _table(
        ("EUR", 2, "Euro"),
        ("USD", 2, "US Dollar"),
        ("GBP", 2, "Pound Sterling"),
        ("CHF", 2, "Swiss Franc"),
        ("DKK", 2, "Danish Krone"),
        ("SEK", 2, "Swedish Krona"),
        ("NOK", 2, "Norwegian Krone"),
        ("PLN", 2, "Polish Zloty"),
        ("CZK", 2, "Czech Koruna"),
        ("HUF", 2, "Hungarian Forint"),
        ("JPY", 0, "Japanese Yen"),
        ("ISK", 0, "Icelandic Krona"),
    )

    DEFAULT_DECIMAL_PLACES: ClassVar[int] = 2

    @staticmethod
    def normalize(code: object) -> str:
        """Uppercased, stripped code; empty string for non-strings."""
        return code.strip().upper() if isinstance(code, str) else ""

    @classmethod
    def get_info(cls, code: object) -> CurrencyInfo | None:
        return cls._CURRENCIES.get(cls.normalize(code))

    @classmethod
    def is_valid(cls, code: object) -> bool:
        return cls.get_info(code) is not None

    @classmethod
    def get_decimal_places(cls, code: object) -> int:
        info = cls.get_info(code)
        return cls.DEFAULT_DECIMAL_PLACES if info is None else info.decimal_places

    @classmethod
    def validate(cls, code: object) -> str:
        """
        Return the normalized code.

        Raises:
            ValueError: for non-strings, codes that are not three letters
                long and unsupported codes.
        """
        normalized = cls.normalize(code)
        if len(normalized) != 3:
            raise ValueError(f"Currency code must be 3 characters: {code!r}")
        if normalized not in cls._CURRENCIES:
            raise ValueError(f"Invalid ISO 4217 currency code: {code!r}")
        return normalized

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._CURRENCIES)
