from app.services.account_service import (
    AccountProvisioningService,
    ProvisionedAccount,
    get_account_service,
)

__all__ = [
    "AccountProvisioningService",
    "ProvisionedAccount",
    "get_account_service",
]
