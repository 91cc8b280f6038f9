"""Typed errors raised by the billing services.

Every error carries a machine-readable ``code`` so the API layer can map it to
a response without parsing messages. All of them are scoped to the single
operation that raised them.

    BillingError
    +-- ValidationError        input rejected, nothing written
    +-- NotFoundError          referenced record does not exist
    +-- ConflictError          retryable (invoice code collision, concurrent write)
    +-- DataError              referenced data unusable and no safe default
"""


class BillingError(Exception):
    code: str = "BILLING_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(BillingError):
    code = "VALIDATION_ERROR"


class NotFoundError(BillingError):
    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class ConflictError(BillingError):
    code = "CONFLICT"


class InvoiceCodeConflictError(ConflictError):
    code = "INVOICE_CODE_CONFLICT"

    def __init__(self, invoice_code: str):
        self.invoice_code = invoice_code
        super().__init__(f"Settlement invoice code {invoice_code} already exists")


class DataError(BillingError):
    code = "DATA_ERROR"


class ImmutableRecordError(BillingError):
    code = "IMMUTABLE_RECORD"
