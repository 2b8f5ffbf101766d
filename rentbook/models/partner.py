"""
Partner Models

Partners are configuration, not stored records. The partner list is loaded
at startup and passed to the components that need it, so a different
partner set only requires a different configuration.

Balances and cumulative withdrawals are always derived, never stored.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Partner(BaseModel):
    """A business partner entitled to a share of net operating profit."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(..., min_length=1, description="Stable partner id")
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Display name, matched against Withdrawal.recipient",
    )
    share_percentage: Decimal = Field(
        ...,
        ge=0,
        le=100,
        description="Share of net operating profit (0-100)",
    )


class PartnerConfig(BaseModel):
    """
    The configured partner set.

    Shares must add up to exactly 100 and names must be unique, since
    withdrawals refer to partners by name.
    """
    model_config = ConfigDict(frozen=True)

    partners: list[Partner] = Field(..., min_length=1)
    manager_label: str = Field(
        default="Manager",
        description="Label for the non-partner commission recipient",
    )

    @model_validator(mode="after")
    def validate_shares(self) -> "PartnerConfig":
        """Shares must sum to 100 and names must not repeat."""
        total = sum((p.share_percentage for p in self.partners), Decimal("0"))
        if total != Decimal("100"):
            raise ValueError(f"Partner shares must sum to 100, got {total}")

        names = [p.name for p in self.partners]
        if len(set(names)) != len(names):
            raise ValueError("Partner names must be unique")

        return self

    @property
    def names(self) -> list[str]:
        """Partner names in configuration order."""
        return [p.name for p in self.partners]

    def get(self, name: str) -> Optional[Partner]:
        """Find a partner by exact name."""
        for partner in self.partners:
            if partner.name == name:
                return partner
        return None


DEFAULT_PARTNERS = PartnerConfig(
    partners=[
        Partner(id="1", name="Desmond", share_percentage=Decimal("50")),
        Partner(id="2", name="Bethel", share_percentage=Decimal("50")),
    ],
)


class PartnerBalance(BaseModel):
    """
    Derived balance for one partner.

    balance = max(0, share - withdrawals)
    """

    partner: Partner
    share: Decimal = Field(..., description="Partner's portion of net operating profit")
    withdrawals: Decimal = Field(..., description="Cumulative withdrawals by this partner")
    balance: Decimal = Field(..., ge=0, description="Remaining balance, never negative")
