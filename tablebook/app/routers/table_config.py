from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.app.db.session import get_session
from tablebook.app.domain.capacity import bookable_party_sizes, validate_table_configurations
from tablebook.app.domain.errors import InvalidTableConfiguration
from tablebook.app.routers.deps import require_admin
from tablebook.app.routers.schemas import TableConfigOut, TableConfigPayload
from tablebook.app.services.table_config import (
    fetch_global_settings,
    fetch_table_configurations,
    save_table_configuration,
)


admin_router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])


@admin_router.get("/table-config", response_model=TableConfigOut)
async def get_table_config(session: AsyncSession = Depends(get_session)) -> TableConfigOut:
    configs = await fetch_table_configurations(session)
    return TableConfigOut(
        table_configs=configs,
        global_settings=await fetch_global_settings(session),
        bookable_party_sizes=bookable_party_sizes(configs),
    )


@admin_router.put("/table-config", response_model=TableConfigOut)
async def put_table_config(
    payload: TableConfigPayload,
    session: AsyncSession = Depends(get_session),
) -> TableConfigOut:
    try:
        validate_table_configurations(payload.table_configs)
    except InvalidTableConfiguration as exc:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            detail={"message": "Invalid configuration", "errors": exc.errors},
        ) from exc

    await save_table_configuration(session, payload.table_configs, payload.global_settings)
    return TableConfigOut(
        table_configs=sorted(payload.table_configs, key=lambda config: config.party_size),
        global_settings=payload.global_settings,
        bookable_party_sizes=bookable_party_sizes(payload.table_configs),
    )
