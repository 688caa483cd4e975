"""Currency metadata models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CurrencyInfo(BaseModel):
    """A currency offered for conversion."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., description="ISO 4217 code", pattern=r"^[A-Z]{3}$")
    display_name: str = Field(..., description="Full currency name")
    country: str = Field(default="", description="Country or region")
    flag_glyph: str = Field(default="", description="Flag emoji")

    def __str__(self) -> str:
        return f"{self.code} - {self.display_name}"


KNOWN_CURRENCIES: dict[str, CurrencyInfo] = {
    info.code: info
    for info in (
        CurrencyInfo(
            code="USD",
            display_name="US Dollar",
            country="United States",
            flag_glyph="\U0001F1FA\U0001F1F8",
        ),
        CurrencyInfo(
            code="EUR",
            display_name="Euro",
            country="European Union",
            flag_glyph="\U0001F1EA\U0001F1FA",
        ),
        CurrencyInfo(
            code="GBP",
            display_name="British Pound",
            country="United Kingdom",
            flag_glyph="\U0001F1EC\U0001F1E7",
        ),
        CurrencyInfo(
            code="JPY",
            display_name="Japanese Yen",
            country="Japan",
            flag_glyph="\U0001F1EF\U0001F1F5",
        ),
        CurrencyInfo(
            code="CAD",
            display_name="Canadian Dollar",
            country="Canada",
            flag_glyph="\U0001F1E8\U0001F1E6",
        ),
        CurrencyInfo(
            code="AUD",
            display_name="Australian Dollar",
            country="Australia",
            flag_glyph="\U0001F1E6\U0001F1FA",
        ),
        CurrencyInfo(
            code="CHF",
            display_name="Swiss Franc",
            country="Switzerland",
            flag_glyph="\U0001F1E8\U0001F1ED",
        ),
        CurrencyInfo(
            code="CNY",
            display_name="Chinese Yuan",
            country="China",
            flag_glyph="\U0001F1E8\U0001F1F3",
        ),
        CurrencyInfo(
            code="INR",
            display_name="Indian Rupee",
            country="India",
            flag_glyph="\U0001F1EE\U0001F1F3",
        ),
        CurrencyInfo(
            code="RUB",
            display_name="Russian Ruble",
            country="Russia",
            flag_glyph="\U0001F1F7\U0001F1FA",
        ),
        CurrencyInfo(
            code="IDR",
            display_name="Indonesian Rupiah",
            country="Indonesia",
            flag_glyph="\U0001F1EE\U0001F1E9",
        ),
    )
}


def build_catalog(codes: list[str]) -> list[CurrencyInfo]:
    """Build the ordered currency catalog for the given codes.

    Codes without known metadata get a minimal entry named after the code.
    """
    catalog: list[CurrencyInfo] = []
    for code in codes:
        info = KNOWN_CURRENCIES.get(code)
        if info is None:
            info = CurrencyInfo(code=code, display_name=code)
        catalog.append(info)
    return catalog
