from backend.app.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all in tests
from backend.app.models.class_group import ClassGroup  # noqa: F401
from backend.app.models.student import Student  # noqa: F401
from backend.app.models.discount import Discount  # noqa: F401
from backend.app.models.contract import Contract, ContractItem  # noqa: F401
from backend.app.models.settlement_invoice import SettlementInvoice  # noqa: F401
from backend.app.models.audit_log import AuditLog  # noqa: F401
