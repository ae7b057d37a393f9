"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """A structural rule was violated while building or editing an entity"""

    def __init__(self, rule: str, message: str):
        super().__init__(message)
        self.rule = rule
        self.message = message


class MemberReferenceError(ValidationError):
    """An expense, split or settlement names a member who is not in the pot

    Subclasses ValidationError so settlement callers catching the validation
    kind also see unknown-member failures, with the rule still named.
    """

    def __init__(self, member_id: str, message: str | None = None, rule: str = "known_member"):
        super().__init__(rule, message or f"Unknown member: {member_id}")
        self.member_id = member_id


class LedgerReferenceError(DomainException):
    """A pot or expense id does not exist"""

    pass


class InvariantViolation(DomainException):
    """Internal consistency check failed (e.g. balances do not sum to zero)"""

    pass
