class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFound(DomainError):
    """Raised when a referenced time record or payroll does not exist."""


class RecordLocked(DomainError):
    """Raised on an attempt to mutate a time record that has been paid."""

    def __init__(self, record_id: int):
        super().__init__(f"Time record #{record_id} is paid and can no longer be changed")
        self.record_id = record_id


class PayrollLocked(DomainError):
    """Raised on an attempt to change a payroll that is no longer pending."""


class UnknownEmployee(DomainError):
    """Raised when payroll is requested for an employee that does not exist."""

    def __init__(self, employee_id: int):
        super().__init__(f"Employee #{employee_id} does not exist")
        self.employee_id = employee_id


class StorageError(DomainError):
    """Raised when the storage layer fails; state is left unchanged and the call may be retried."""


class ConcurrentSettlement(StorageError):
    """Raised when covered records changed between selection and settlement."""
