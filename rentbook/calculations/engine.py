"""
Ledger Calculator

Composes the pure aggregation functions with the configured partner set.
The partner configuration is injected at construction time, so the same
code serves any partner list whose shares add up to 100.
"""

from collections.abc import Mapping
from decimal import Decimal

from rentbook.calculations.aggregation import (
    ZERO,
    manager_commission,
    net_operating_profit,
    partner_balance,
    partner_share,
    sum_withdrawals,
    total_available_balance,
    total_caution_fees,
    total_commission,
    total_expenses,
    total_income,
    total_net_income,
)
from rentbook.models.partner import PartnerBalance, PartnerConfig
from rentbook.models.records import Expense, Income, Withdrawal
from rentbook.models.summary import (
    MonthlySummary,
    PartnerOverview,
    WithdrawalSummary,
)


class LedgerCalculator:
    """
    Derives every screen figure from fetched records.

    Stateless apart from the partner configuration; never touches storage.
    """

    def __init__(self, partners: PartnerConfig):
        self._partners = partners

    @property
    def partners(self) -> PartnerConfig:
        return self._partners

    def monthly_summary(
        self,
        month_key: str,
        incomes: list[Income],
        expenses: list[Expense],
    ) -> MonthlySummary:
        """Dashboard figures for the records of one month."""
        profit = net_operating_profit(incomes, expenses)
        return MonthlySummary(
            month_key=month_key,
            income_count=len(incomes),
            expense_count=len(expenses),
            total_income=total_income(incomes),
            total_commission=total_commission(incomes),
            total_caution_fees=total_caution_fees(incomes),
            total_net_income=total_net_income(incomes),
            total_expenses=total_expenses(expenses),
            net_operating_profit=profit,
            partner_shares={
                partner.name: partner_share(profit, partner.share_percentage)
                for partner in self._partners.partners
            },
        )

    def partner_balances(
        self,
        profit: Decimal,
        withdrawals_by_partner: Mapping[str, Decimal],
    ) -> list[PartnerBalance]:
        """
        Balance of every configured partner.

        Partners missing from withdrawals_by_partner have withdrawn nothing.
        """
        balances = []
        for partner in self._partners.partners:
            withdrawn = withdrawals_by_partner.get(partner.name, ZERO)
            balances.append(
                PartnerBalance(
                    partner=partner,
                    share=partner_share(profit, partner.share_percentage),
                    withdrawals=withdrawn,
                    balance=partner_balance(
                        profit,
                        partner.share_percentage,
                        withdrawn,
                    ),
                )
            )
        return balances

    def partner_overview(
        self,
        month_key: str,
        incomes: list[Income],
        expenses: list[Expense],
        withdrawals: list[Withdrawal],
    ) -> PartnerOverview:
        """
        Partner balances screen.

        incomes, expenses and withdrawals are the all-time lists; the
        manager commission is narrowed to month_key.
        """
        profit = net_operating_profit(incomes, expenses)
        all_withdrawals = sum_withdrawals(withdrawals)
        by_partner = {
            name: sum_withdrawals(withdrawals, recipient=name)
            for name in self._partners.names
        }
        return PartnerOverview(
            month_key=month_key,
            net_operating_profit=profit,
            total_withdrawals=all_withdrawals,
            available_balance=total_available_balance(profit, all_withdrawals),
            manager_commission=manager_commission(incomes, month_key),
            partners=self.partner_balances(profit, by_partner),
        )

    def withdrawal_summary(
        self,
        month_key: str,
        profit: Decimal,
        all_withdrawals: Decimal,
        month_withdrawals: list[Withdrawal],
    ) -> WithdrawalSummary:
        """Withdrawals screen header figures."""
        return WithdrawalSummary(
            month_key=month_key,
            total_available_balance=total_available_balance(profit, all_withdrawals),
            withdrawals_this_month=sum_withdrawals(month_withdrawals),
            withdrawal_count=len(month_withdrawals),
        )
