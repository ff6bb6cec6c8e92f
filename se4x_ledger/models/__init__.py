from se4x_ledger.models.base import Base  # noqa: F401
from se4x_ledger.models.campaign import Campaign  # noqa: F401
