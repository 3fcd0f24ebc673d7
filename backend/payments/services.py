"""
Split-bill settlement for a Dine-in checkout.

A SplitSession tracks which cart lines have been paid for before the order
is confirmed. It belongs to exactly one checkout session and is not safe to
share between devices; it is never persisted.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Set, Tuple
import logging

from django.db import models
from django.utils.translation import gettext_lazy as _

from core_backend.exceptions import ValidationError
from orders.calculators import line_total, order_total
from .money import format_money, quantize, split_evenly, to_minor, validate_minor_sum

logger = logging.getLogger(__name__)


class SplitMode(models.TextChoices):
    BY_ITEM = "item", _("By Item")
    EQUALLY = "equally", _("Equally")


@dataclass(frozen=True)
class SettlementRecord:
    amount: Decimal
    keys: Tuple[str, ...]
    mode: str


class SplitSession:
    """
    Incremental payment of a cart's lines.

    ByItem: each payer settles a chosen subset of unpaid lines.
    Equally: settle() marks every remaining line as paid at once and reports
    one payer's share (remaining / party_count). Partial-party settlement is
    not supported; use equal_shares() for the exact per-payer amounts.
    """

    MIN_PARTY_COUNT = 2

    def __init__(self, lines: Iterable, mode: str = SplitMode.BY_ITEM, party_count: Optional[int] = None):
        self._lines = {}
        for line in lines:
            if line.key in self._lines:
                raise ValidationError(f"Duplicate cart line {line.key}.")
            self._lines[line.key] = line
        if not self._lines:
            raise ValidationError("Cannot split an empty bill.")

        self._settled: Set[str] = set()
        self.payments: List[SettlementRecord] = []
        self.mode = SplitMode.BY_ITEM
        self.party_count: Optional[int] = None
        self.set_mode(mode, party_count)

    def set_mode(self, mode: str, party_count: Optional[int] = None) -> None:
        if mode not in SplitMode.values:
            raise ValidationError(f"'{mode}' is not a valid split mode.")
        if mode == SplitMode.EQUALLY:
            party_count = self.MIN_PARTY_COUNT if party_count is None else party_count
            if party_count < self.MIN_PARTY_COUNT:
                raise ValidationError(
                    f"Splitting equally needs at least {self.MIN_PARTY_COUNT} people, got {party_count}."
                )
        else:
            party_count = None
        self.mode = SplitMode(mode)
        self.party_count = party_count

    # --- state ---

    @property
    def lines(self) -> Tuple:
        return tuple(self._lines.values())

    @property
    def settled_keys(self) -> frozenset:
        return frozenset(self._settled)

    @property
    def unpaid_lines(self) -> Tuple:
        return tuple(line for key, line in self._lines.items() if key not in self._settled)

    @property
    def total(self) -> Decimal:
        return order_total(self._lines.values())

    @property
    def remaining_total(self) -> Decimal:
        return order_total(self.unpaid_lines)

    @property
    def paid_total(self) -> Decimal:
        return quantize(sum((record.amount for record in self.payments), Decimal("0")))

    @property
    def all_settled(self) -> bool:
        return not self.unpaid_lines

    def equal_shares(self) -> List[Decimal]:
        """Exact per-payer amounts of the remaining total (Equally mode)."""
        if self.mode != SplitMode.EQUALLY:
            raise ValidationError("Equal shares are only available when splitting equally.")
        remaining = self.remaining_total
        shares = split_evenly(remaining, self.party_count)
        validate_minor_sum([to_minor(share) for share in shares], to_minor(remaining), context="equal split")
        return shares

    # --- settlement ---

    def settle(self, keys: Optional[Sequence[str]] = None) -> Decimal:
        """
        Record one payer's payment and return the amount paid.

        `keys` is a sequence of line keys; a single key string is accepted too.
        """
        if isinstance(keys, str):
            keys = [keys]
        if self.mode == SplitMode.EQUALLY:
            return self._settle_equally(keys)
        return self._settle_items(keys)

    def _settle_items(self, keys: Optional[Sequence[str]]) -> Decimal:
        selected = list(dict.fromkeys(keys or []))
        if not selected:
            raise ValidationError("Select at least one item to pay for.")

        unknown = [key for key in selected if key not in self._lines]
        if unknown:
            raise ValidationError(f"Items {unknown} are not on this bill.")
        already_paid = [key for key in selected if key in self._settled]
        if already_paid:
            raise ValidationError(f"Items {already_paid} have already been paid.")

        amount = quantize(sum((line_total(self._lines[key]) for key in selected), Decimal("0")))
        self._settled.update(selected)
        self.payments.append(SettlementRecord(amount=amount, keys=tuple(selected), mode=self.mode))
        logger.info(
            f"Split payment of {format_money(amount)} for {len(selected)} item(s); "
            f"remaining {format_money(self.remaining_total)}"
        )
        return amount

    def _settle_equally(self, keys: Optional[Sequence[str]]) -> Decimal:
        if keys:
            raise ValidationError("Item selection is not used when splitting equally.")

        unpaid = [line.key for line in self.unpaid_lines]
        if not unpaid:
            return quantize(Decimal("0"))

        share = quantize(self.remaining_total / self.party_count)
        self._settled.update(unpaid)
        self.payments.append(SettlementRecord(amount=share, keys=tuple(unpaid), mode=self.mode))
        logger.info(f"Equal split across {self.party_count}: {format_money(share)} each; all items marked paid")
        return share
