"""Tenant provisioning use cases"""
from .provision_tenant import ProvisionTenant, signup_reference
from .plans import PLANS, get_plan
from .dtos import ProvisionTenantCommandDTO, TenantRecordDTO

__all__ = [
    "ProvisionTenant",
    "signup_reference",
    "PLANS",
    "get_plan",
    "ProvisionTenantCommandDTO",
    "TenantRecordDTO",
]
