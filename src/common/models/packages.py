from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional
from common.utils.constants import CURRENCY_SYMBOLS


@dataclass(frozen=True)
class Money:
    amount: Decimal
    currency: str

    def format(self) -> str:
        symbol = next(
            (s for s, code in CURRENCY_SYMBOLS.items() if code == self.currency),
            None,
        )
        if self.amount == self.amount.to_integral_value():
            number = f"{int(self.amount):,}"
        else:
            number = f"{self.amount:,.2f}"
        if symbol:
            return f"{symbol}{number}"
        return f"{self.currency} {number}"


@dataclass
class PackageSummary:
    package_id: str
    title: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    duration: Optional[str] = None
    rating: Optional[float] = None
    image: Optional[str] = None
    includes: List[str] = field(default_factory=list)


@dataclass
class Package:
    package_id: str
    title: str
    price: Money
    category: Optional[str] = None
    location: Optional[str] = None
    duration: Optional[str] = None
    rating: Optional[float] = None
    image: Optional[str] = None
    includes: List[str] = field(default_factory=list)

    def summary(self) -> PackageSummary:
        return PackageSummary(
            package_id=self.package_id,
            title=self.title,
            category=self.category,
            location=self.location,
            duration=self.duration,
            rating=self.rating,
            image=self.image,
            includes=list(self.includes),
        )
