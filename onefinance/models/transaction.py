from enum import Enum


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def sign(self) -> int:
        """Direction this type moves a balance: +1 for income, -1 for expense."""
        return 1 if self is TransactionType.INCOME else -1
