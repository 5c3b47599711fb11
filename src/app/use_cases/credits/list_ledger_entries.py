"""ListLedgerEntries Use Case

Paginated read of a tenant's ledger, newest entries first.
"""

from libs.result import Result, Return, Error
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.domain.ledger_entry import LedgerEntryKind
from .dtos import LedgerEntryDTO, ListLedgerEntriesResponseDTO

MAX_PAGE_SIZE = 100


class ListLedgerEntries:

    def __init__(self, entry_repo: LedgerEntryRepository):
        self.entry_repo = entry_repo

    async def execute(self, tenant_id: str, limit: int = 20, offset: int = 0) -> Result[ListLedgerEntriesResponseDTO]:
        if limit < 1 or limit > MAX_PAGE_SIZE or offset < 0:
            return Return.err(
                Error(
                    code="INVALID_PAGINATION",
                    message=f"limit must be between 1 and {MAX_PAGE_SIZE}, offset must be >= 0",
                    reason=f"limit={limit}, offset={offset}",
                )
            )

        entries, total = await self.entry_repo.get_by_tenant_id(tenant_id, limit=limit, offset=offset)

        return Return.ok(
            ListLedgerEntriesResponseDTO(
                tenant_id=tenant_id,
                entries=[
                    LedgerEntryDTO(
                        id=entry.id,
                        amount=entry.amount,
                        balance_after=entry.balance_after,
                        kind=LedgerEntryKind(entry.kind).value,
                        action_key=entry.action_key,
                        description=entry.description,
                        reference_id=entry.reference_id,
                        metadata=entry.entry_metadata,
                        created_at=entry.created_at,
                    )
                    for entry in entries
                ],
                total=total,
                limit=limit,
                offset=offset,
            )
        )
